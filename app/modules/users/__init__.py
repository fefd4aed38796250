# Users module
from app.modules.users.models import User, UserRole
from app.modules.users.services import UserService

__all__ = ["User", "UserRole", "UserService"]
