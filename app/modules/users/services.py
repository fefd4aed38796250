from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import timedelta
from typing import Optional, List, Tuple
import logging

from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_token,
    token_ttl_seconds
)
from app.core.config import settings
from app.modules.users.models import User, UserRole
from app.modules.users import schemas

logger = logging.getLogger(__name__)


# Accounts created on first start so the dashboard is usable out of the box
DEFAULT_USERS = [
    {"name": "Admin Account", "username": "admin", "email": "admin@loanbuddy.com",
     "password": "admin123", "role": UserRole.ADMIN},
    {"name": "Joven", "username": "joven", "email": "joven@loanbuddy.com",
     "password": "joven123", "role": UserRole.ADMIN},
    {"name": "User Account", "username": "user", "email": "user@loanbuddy.com",
     "password": "user1234", "role": UserRole.USER},
    {"name": "Jhoy", "username": "jhoy", "email": "jhoy@loanbuddy.com",
     "password": "jhoy1234", "role": UserRole.USER},
]


class UserService:
    """Service layer for staff accounts and authentication"""

    @staticmethod
    async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_username(db: AsyncSession, username: str) -> Optional[User]:
        """Look up a user by username, ignoring case"""
        result = await db.execute(
            select(User).where(func.lower(User.username) == username.strip().lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_users(db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    @staticmethod
    async def count_admins(db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(User.id)).where(User.role == UserRole.ADMIN)
        )
        return result.scalar() or 0

    # ============================================================
    # Authentication
    # ============================================================

    @staticmethod
    async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[User]:
        """Return the user when username and password match, otherwise None"""
        user = await UserService.get_by_username(db, username)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login attempt for username %r", username)
            return None

        logger.info("User %s logged in", user.username)
        return user

    @staticmethod
    def create_token(user: User) -> Tuple[str, int]:
        """Create an access token for the user, returns (token, expires_in seconds)"""
        expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(
            data={"sub": str(user.id), "role": user.role.value},
            expires_delta=expires
        )
        return token, int(expires.total_seconds())

    @staticmethod
    async def logout(redis, token: str) -> None:
        """Deny-list the token until it would have expired anyway"""
        payload = decode_token(token)
        await redis.setex(f"blacklist:{token}", token_ttl_seconds(payload), "1")
        logger.info("User %s logged out", payload.get("sub"))

    # ============================================================
    # User Management
    # ============================================================

    @staticmethod
    async def create_user(db: AsyncSession, data: schemas.UserCreate) -> User:
        """Create a new staff account"""
        if await UserService.get_by_username(db, data.username):
            raise ValueError("Username already taken")

        user = User(
            name=data.name,
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=UserRole(data.role.value)
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info("Created user %s with role %s", user.username, user.role.value)
        return user

    @staticmethod
    async def update_user(
        db: AsyncSession,
        user_id: int,
        data: schemas.UserUpdate
    ) -> Optional[User]:
        """Update profile fields and optionally reset the password"""
        user = await UserService.get_user(db, user_id)
        if not user:
            return None

        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        if "username" in updates:
            existing = await UserService.get_by_username(db, updates["username"])
            if existing and existing.id != user.id:
                raise ValueError("Username already taken")

        password = updates.pop("password", None)
        if password:
            user.hashed_password = get_password_hash(password)

        for field, value in updates.items():
            setattr(user, field, value)

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def change_role(
        db: AsyncSession,
        actor: User,
        user_id: int,
        new_role: UserRole
    ) -> Optional[User]:
        """
        Change a user's role.
        The only remaining administrator cannot demote themself.
        """
        user = await UserService.get_user(db, user_id)
        if not user:
            return None

        if (
            actor.id == user.id
            and new_role == UserRole.USER
            and await UserService.count_admins(db) <= 1
        ):
            logger.warning("User %s tried to demote the only administrator", actor.username)
            raise PermissionError("You cannot demote the only administrator.")

        user.role = new_role
        await db.commit()
        await db.refresh(user)

        logger.info("Role of %s changed to %s by %s", user.username, new_role.value, actor.username)
        return user

    @staticmethod
    async def delete_user(db: AsyncSession, actor: User, user_id: int) -> Optional[User]:
        """Delete a user, refusing self-deletion and removal of the last admin"""
        user = await UserService.get_user(db, user_id)
        if not user:
            return None

        if actor.id == user.id:
            raise PermissionError("You cannot delete your own account.")

        if user.role == UserRole.ADMIN and await UserService.count_admins(db) <= 1:
            raise PermissionError("You cannot delete the only administrator.")

        await db.delete(user)
        await db.commit()

        logger.info("User %s deleted by %s", user.username, actor.username)
        return user

    @staticmethod
    async def seed_default_users(db: AsyncSession) -> int:
        """
        Create the default accounts when no user exists yet.
        Returns the number of users created.
        """
        result = await db.execute(select(func.count(User.id)))
        if result.scalar():
            return 0

        for entry in DEFAULT_USERS:
            db.add(User(
                name=entry["name"],
                username=entry["username"],
                email=entry["email"],
                hashed_password=get_password_hash(entry["password"]),
                role=entry["role"]
            ))
        await db.commit()

        logger.info("Seeded %d default users", len(DEFAULT_USERS))
        return len(DEFAULT_USERS)
