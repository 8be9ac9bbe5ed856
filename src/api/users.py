"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_blob_store, get_current_identity, get_user_service
from src.config import get_settings
from src.database import get_db
from src.models.user import User
from src.schemas.user import (
    LoginResponse,
    RegisterResponse,
    UserEdit,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.services.auth import Identity, login, register_user
from src.services.blob_store import BlobStore, read_upload
from src.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])

settings = get_settings()


def to_user_response(user: User, blob_store: BlobStore) -> UserResponse:
    """Build the public profile with a resolved avatar URL."""
    user_response = UserResponse.model_validate(user)
    user_response.avatar_url = blob_store.resolve(user.avatar)
    return user_response


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
):
    """Register a new user."""
    user = register_user(
        db, user_data.name, user_data.email, user_data.password, user_data.password2
    )
    return RegisterResponse(
        id=user.id,
        email=user.email,
        message=f"New user {user.email} registered.",
    )


@router.post("/login", response_model=LoginResponse)
def login_user(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    token, user = login(db, credentials.email, credentials.password)
    return LoginResponse(token=token, id=user.id, name=user.name)


@router.get("/authors", response_model=list[UserResponse])
def get_authors(
    user_service: Annotated[UserService, Depends(get_user_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get all authors."""
    return [to_user_response(user, blob_store) for user in user_service.get_authors()]


@router.post("/change-avatar", response_model=UserResponse)
async def change_avatar(
    identity: Annotated[Identity, Depends(get_current_identity)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    avatar: Annotated[UploadFile | None, File()] = None,
):
    """Replace the current user's avatar."""
    file = await read_upload(avatar, settings.avatar_max_bytes)
    user = await user_service.change_avatar(identity, file)
    return to_user_response(user, blob_store)


@router.patch("/edit-user", response_model=UserResponse)
def edit_user(
    user_data: UserEdit,
    identity: Annotated[Identity, Depends(get_current_identity)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Update the current user's name, email and password."""
    user = user_service.edit_user(
        identity,
        user_data.name,
        user_data.email,
        user_data.current_password,
        user_data.new_password,
        user_data.new_confirm_password,
    )
    return to_user_response(user, blob_store)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    user_service: Annotated[UserService, Depends(get_user_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get a user's public profile."""
    return to_user_response(user_service.get_user(user_id), blob_store)
