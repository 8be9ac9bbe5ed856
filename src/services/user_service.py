"""User directory: profiles, avatars and post counters."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.services.auth import (
    MIN_PASSWORD_LENGTH,
    Identity,
    get_password_hash,
    normalize_email,
    verify_password,
)
from src.services.blob_store import BlobStore, UploadedImage
from src.services.errors import AuthError, ConflictError, NotFoundError, ValidationError
from src.services.saga import Saga

logger = logging.getLogger(__name__)

settings = get_settings()


class UserService:
    """Service for user-related operations."""

    def __init__(self, db: Session, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store

    def get_user(self, user_id: int) -> User:
        """Get a user or raise NotFoundError."""
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("No user found.")
        return user

    def get_authors(self) -> list[User]:
        """All users, unfiltered and unpaginated."""
        return self.db.query(User).order_by(User.id).all()

    async def change_avatar(self, identity: Identity, file: UploadedImage | None) -> User:
        """Replace the acting user's avatar.

        The new blob is stored and the record updated before the old blob is
        removed; removal is best-effort.
        """
        if file is None:
            raise ValidationError("Please choose an image.")
        if file.size > settings.avatar_max_bytes:
            raise ValidationError(
                f"Profile picture too big. File should be less than "
                f"{settings.avatar_max_bytes // 1000}kb."
            )

        user = self.get_user(identity.id)
        old_avatar = user.avatar

        with Saga("change avatar") as saga:
            new_avatar = await self.blob_store.store(file)
            saga.add_compensation("delete new avatar", lambda: self.blob_store.delete(new_avatar))

            user.avatar = new_avatar
            self._commit()
            self.db.refresh(user)

        if old_avatar:
            self.blob_store.delete(old_avatar)

        logger.info(f"User {user.id} changed avatar to {new_avatar}")
        return user

    def edit_user(
        self,
        identity: Identity,
        name: str | None,
        email: str | None,
        current_password: str | None,
        new_password: str | None,
        new_confirm_password: str | None,
    ) -> User:
        """Update name, email and password after checking the current password."""
        if not all([name, email, current_password, new_password, new_confirm_password]):
            raise ValidationError("All fields are required.")

        user = self.get_user(identity.id)

        email = normalize_email(email)
        email_owner = self.db.query(User).filter(User.email == email).first()
        if email_owner and email_owner.id != user.id:
            raise ConflictError("Email already exists.")

        if not verify_password(current_password, user.password_hash):
            raise AuthError("Invalid current password.")

        if len(new_password.strip()) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

        if new_password != new_confirm_password:
            raise ValidationError("New passwords do not match.")

        user.name = name
        user.email = email
        user.password_hash = get_password_hash(new_password)
        try:
            self._commit()
        except IntegrityError as e:
            raise ConflictError("Email already exists.") from e
        self.db.refresh(user)

        logger.info(f"User {user.id} updated profile")
        return user

    def increment_post_count(self, user_id: int) -> None:
        """Add one to the user's post counter in a single statement."""
        self.db.query(User).filter(User.id == user_id).update(
            {User.posts: User.posts + 1}, synchronize_session=False
        )
        self._commit()

    def decrement_post_count(self, user_id: int) -> None:
        """Subtract one from the user's post counter, never going below zero."""
        updated = (
            self.db.query(User)
            .filter(User.id == user_id, User.posts > 0)
            .update({User.posts: User.posts - 1}, synchronize_session=False)
        )
        self._commit()
        if not updated:
            logger.warning(f"Post counter for user {user_id} already at zero")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
