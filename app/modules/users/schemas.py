from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
from enum import Enum

from app.core.config import settings


class UserRoleEnum(str, Enum):
    ADMIN = "admin"
    USER = "user"


# Authentication
class LoginRequest(BaseModel):
    """Username/password login. Username matching is case-insensitive."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """User profile as returned by the API, never includes the password"""
    id: int
    name: str
    username: str
    email: str
    role: UserRoleEnum
    created_at: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


# User management
def _clean_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if len(v) < 2:
        raise ValueError('Username must be at least 2 characters')
    if ' ' in v:
        raise ValueError('Username must not contain spaces')
    return v


def _check_password_length(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {settings.MIN_PASSWORD_LENGTH} characters')
    return v


class UserCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    username: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str
    role: UserRoleEnum = UserRoleEnum.USER

    @validator('username')
    def username_no_spaces(cls, v):
        return _clean_username(v)

    @validator('password')
    def password_length(cls, v):
        return _check_password_length(v)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    username: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @validator('username')
    def username_no_spaces(cls, v):
        return _clean_username(v)

    @validator('password')
    def password_length(cls, v):
        return _check_password_length(v)


class RoleChangeRequest(BaseModel):
    role: UserRoleEnum


class RoleChangeResponse(BaseModel):
    user: UserResponse
    message: str
    requires_reauth: bool = False


class MessageResponse(BaseModel):
    message: str
