"""FastAPI dependencies for authentication, storage and services."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import get_db
from src.services.auth import Identity, verify_token
from src.services.blob_store import BlobStore
from src.services.errors import AuthError
from src.services.post_service import PostService
from src.services.user_service import UserService

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Identity:
    """Resolve the acting identity from the bearer token.

    Stateless: only the token's signature and expiry are checked.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Unauthorized. No token")
    return verify_token(credentials.credentials)


@lru_cache
def get_blob_store() -> BlobStore:
    """Get the shared blob store for the configured upload directory."""
    settings = get_settings()
    return BlobStore(
        settings.upload_dir,
        base_url=settings.asset_base_url,
        url_prefix=settings.uploads_url_prefix,
    )


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db, blob_store)


def get_post_service(
    db: Annotated[Session, Depends(get_db)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
) -> PostService:
    """Get post service with dependencies."""
    return PostService(db, blob_store)
