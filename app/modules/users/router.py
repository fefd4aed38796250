from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from redis import asyncio as aioredis
from typing import List

from app.core.database import get_db, get_redis
from app.core.dependencies import get_current_user, require_admin, oauth2_scheme
from app.modules.users.models import User, UserRole
from app.modules.users import schemas
from app.modules.users.services import UserService

auth_router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
router = APIRouter(prefix="/api/v1/users", tags=["users"])


async def _login(db: AsyncSession, username: str, password: str) -> schemas.TokenResponse:
    user = await UserService.authenticate(db, username, password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    token, expires_in = UserService.create_token(user)
    return schemas.TokenResponse(
        access_token=token,
        expires_in=expires_in,
        user=schemas.UserResponse.model_validate(user)
    )


@auth_router.post("/login", response_model=schemas.TokenResponse)
async def login(
    login_data: schemas.LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Login with username and password.

    - Username matching is case-insensitive
    - Returns a bearer token and the user profile without the password
    """
    return await _login(db, login_data.username, login_data.password)


@auth_router.post("/token", response_model=schemas.TokenResponse)
async def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """OAuth2 password-flow login used by the interactive docs"""
    return await _login(db, form_data.username, form_data.password)


@auth_router.post("/logout", response_model=schemas.MessageResponse)
async def logout(
    token: str = Depends(oauth2_scheme),
    current_user: User = Depends(get_current_user),
    redis: aioredis.Redis = Depends(get_redis)
):
    """Logout current user by revoking the token"""
    await UserService.logout(redis, token)
    return {"message": "Successfully logged out"}


@auth_router.get("/me", response_model=schemas.UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Get the logged-in user's profile"""
    return current_user


@router.get("", response_model=List[schemas.UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """List all staff accounts"""
    return await UserService.list_users(db)


@router.post("", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: schemas.UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Create a new staff account"""
    try:
        return await UserService.create_user(db, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{user_id}", response_model=schemas.UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    user = await UserService.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/{user_id}", response_model=schemas.UserResponse)
async def update_user(
    user_id: int,
    data: schemas.UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Update a user's details"""
    try:
        user = await UserService.update_user(db, user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}/role", response_model=schemas.RoleChangeResponse)
async def change_user_role(
    user_id: int,
    data: schemas.RoleChangeRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Promote or demote a user.

    When an admin demotes themself the response asks the client to
    re-authenticate with the new role.
    """
    new_role = UserRole(data.role.value)
    try:
        user = await UserService.change_role(db, admin, user_id, new_role)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return schemas.RoleChangeResponse(
        user=schemas.UserResponse.model_validate(user),
        message=f"{user.name}'s role has been changed to {new_role.value}.",
        requires_reauth=(user.id == admin.id and new_role == UserRole.USER)
    )


@router.delete("/{user_id}", response_model=schemas.MessageResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Permanently remove a user"""
    try:
        user = await UserService.delete_user(db, admin, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": f"User {user.name} has been permanently removed."}
