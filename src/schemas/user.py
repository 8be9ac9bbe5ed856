"""User and authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserRegister(BaseModel):
    """User registration request. Presence and matching are checked by the service."""

    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(None, max_length=128)
    password2: str | None = Field(None, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    email: str | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)


class UserEdit(BaseModel):
    """Profile edit request. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    current_password: str | None = Field(None, max_length=128)
    new_password: str | None = Field(None, max_length=128)
    new_confirm_password: str | None = Field(None, max_length=128)


class RegisterResponse(BaseModel):
    """Confirmation returned after registration."""

    id: int
    email: str
    message: str


class LoginResponse(BaseModel):
    """Session token with the identity it encodes."""

    token: str
    id: int
    name: str


class UserResponse(BaseModel):
    """Public user profile. The password hash is never part of it."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    email: str
    avatar: str | None
    avatar_url: str | None = None
    posts: int
    created_at: datetime
    updated_at: datetime
