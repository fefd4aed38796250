"""
Tests for staff accounts and authentication
"""
import pytest

from app.modules.users.services import UserService, DEFAULT_USERS
from app.modules.users.models import UserRole
from app.modules.users.schemas import UserCreate, UserUpdate


class TestAuthentication:
    """Tests for login lookups"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_authenticate_case_insensitive_username(self, db_session, admin_user):
        user = await UserService.authenticate(db_session, "ADMIN", "admin123")
        assert user is not None
        assert user.id == admin_user.id

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, db_session, admin_user):
        assert await UserService.authenticate(db_session, "admin", "Admin123") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, db_session):
        assert await UserService.authenticate(db_session, "ghost", "whatever1") is None


class TestUserManagement:
    """Tests for admin user management rules"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_user_hashes_password(self, db_session):
        user = await UserService.create_user(
            db_session,
            UserCreate(name="Joven", username="joven", email="joven@loanbuddy.com",
                       password="joven123", role="admin")
        )

        assert user.role == UserRole.ADMIN
        assert user.hashed_password != "joven123"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_create_user_duplicate_username(self, db_session, admin_user):
        with pytest.raises(ValueError, match="already taken"):
            await UserService.create_user(
                db_session,
                UserCreate(name="Other Admin", username="Admin", email="other@loanbuddy.com",
                           password="password1")
            )

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_update_user_password(self, db_session, staff_user):
        await UserService.update_user(db_session, staff_user.id, UserUpdate(password="newpassword"))

        assert await UserService.authenticate(db_session, "jhoy", "newpassword") is not None
        assert await UserService.authenticate(db_session, "jhoy", "jhoy1234") is None

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_only_admin_cannot_demote_self(self, db_session, admin_user):
        with pytest.raises(PermissionError, match="only administrator"):
            await UserService.change_role(db_session, admin_user, admin_user.id, UserRole.USER)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_admin_can_demote_self_when_another_admin_exists(self, db_session, admin_user, staff_user):
        await UserService.change_role(db_session, admin_user, staff_user.id, UserRole.ADMIN)

        user = await UserService.change_role(db_session, admin_user, admin_user.id, UserRole.USER)

        assert user.role == UserRole.USER

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, db_session, admin_user):
        with pytest.raises(PermissionError, match="your own account"):
            await UserService.delete_user(db_session, admin_user, admin_user.id)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cannot_delete_only_admin(self, db_session, admin_user, staff_user):
        # A second admin acting, while the target is the only other admin
        await UserService.change_role(db_session, admin_user, staff_user.id, UserRole.ADMIN)
        await UserService.change_role(db_session, staff_user, admin_user.id, UserRole.USER)

        with pytest.raises(PermissionError, match="only administrator"):
            await UserService.delete_user(db_session, admin_user, staff_user.id)

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_user(self, db_session, admin_user, staff_user):
        deleted = await UserService.delete_user(db_session, admin_user, staff_user.id)

        assert deleted.username == "jhoy"
        assert await UserService.get_user(db_session, staff_user.id) is None


class TestSeeding:
    """Tests for default account seeding"""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_seed_default_users(self, db_session):
        created = await UserService.seed_default_users(db_session)

        assert created == len(DEFAULT_USERS)
        users = await UserService.list_users(db_session)
        assert {u.username for u in users} == {"admin", "joven", "user", "jhoy"}
        assert await UserService.count_admins(db_session) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_seed_skipped_when_users_exist(self, db_session, staff_user):
        assert await UserService.seed_default_users(db_session) == 0
        assert len(await UserService.list_users(db_session)) == 1


class TestUserSchemas:
    """Tests for account field validation"""

    @pytest.mark.unit
    def test_password_length_follows_settings(self, monkeypatch):
        from app.core.config import settings
        monkeypatch.setattr(settings, "MIN_PASSWORD_LENGTH", 12)

        with pytest.raises(ValueError, match="at least 12"):
            UserCreate(name="Clerk", username="clerk", email="clerk@loanbuddy.com", password="ninechars")
        with pytest.raises(ValueError, match="at least 12"):
            UserUpdate(password="ninechars")

        assert UserUpdate(password="twelve-chars").password == "twelve-chars"

    @pytest.mark.unit
    def test_update_username_is_trimmed(self):
        assert UserUpdate(username="  clerk ").username == "clerk"

    @pytest.mark.unit
    @pytest.mark.parametrize("username", ["a b", " x "])
    def test_update_username_rejects_spaces_and_short(self, username):
        with pytest.raises(ValueError):
            UserUpdate(username=username)
