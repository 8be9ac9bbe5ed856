"""Pydantic schemas for API requests and responses."""

from src.schemas.post import MessageResponse, PostResponse
from src.schemas.user import (
    LoginResponse,
    RegisterResponse,
    UserEdit,
    UserLogin,
    UserRegister,
    UserResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserEdit",
    "RegisterResponse",
    "LoginResponse",
    "UserResponse",
    "PostResponse",
    "MessageResponse",
]
