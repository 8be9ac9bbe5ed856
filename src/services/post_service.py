"""Post repository: CRUD with thumbnail and post-counter bookkeeping."""

import logging

from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.enums import PostCategory
from src.models.post import Post
from src.models.user import User
from src.services.auth import Identity
from src.services.blob_store import BlobStore, UploadedImage
from src.services.errors import AuthError, ForbiddenError, NotFoundError, ValidationError
from src.services.saga import Saga
from src.services.user_service import UserService

logger = logging.getLogger(__name__)

settings = get_settings()

MIN_DESCRIPTION_LENGTH = 12


class PostService:
    """Service for post-related operations."""

    def __init__(self, db: Session, blob_store: BlobStore, user_service: UserService | None = None):
        self.db = db
        self.blob_store = blob_store
        self.user_service = user_service or UserService(db, blob_store)

    @staticmethod
    def list_categories() -> list[str]:
        """Category names offered to post authors."""
        return [category.value for category in PostCategory]

    def get_posts(self) -> list[Post]:
        """All posts, most recently updated first."""
        return self.db.query(Post).order_by(Post.updated_at.desc(), Post.id.desc()).all()

    def get_post(self, post_id: int) -> Post:
        """Get a post or raise NotFoundError."""
        post = self.db.query(Post).filter(Post.id == post_id).first()
        if not post:
            raise NotFoundError("Post not found.")
        return post

    def get_category_posts(self, category: str) -> list[Post]:
        """Posts in a category, newest first."""
        return (
            self.db.query(Post)
            .filter(Post.category == category)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def get_user_posts(self, author_id: int) -> list[Post]:
        """Posts by one creator, newest first."""
        return (
            self.db.query(Post)
            .filter(Post.creator_id == author_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    async def create_post(
        self,
        identity: Identity,
        title: str | None,
        category: str | None,
        description: str | None,
        thumbnail: UploadedImage | None,
    ) -> Post:
        """Store the thumbnail, insert the post and bump the creator's counter.

        Each step is a separate write; a failing step undoes the earlier ones.
        """
        if not title or not category or not description or thumbnail is None:
            raise ValidationError("Fill in all fields and choose thumbnail.")
        self._check_thumbnail_size(thumbnail)

        creator = self.db.query(User).filter(User.id == identity.id).first()
        if not creator:
            raise AuthError("User not found")

        with Saga("create post") as saga:
            filename = await self.blob_store.store(thumbnail)
            saga.add_compensation("delete thumbnail", lambda: self.blob_store.delete(filename))

            post = Post(
                title=title,
                category=category,
                description=description,
                thumbnail=filename,
                creator_id=creator.id,
            )
            self.db.add(post)
            self._commit()
            self.db.refresh(post)
            post_id = post.id
            saga.add_compensation("delete post", lambda: self._delete_record(post_id))

            self.user_service.increment_post_count(creator.id)

        logger.info(f"User {creator.id} created post {post_id}")
        return post

    async def edit_post(
        self,
        identity: Identity,
        post_id: int,
        title: str | None,
        category: str | None,
        description: str | None,
        thumbnail: UploadedImage | None = None,
    ) -> Post:
        """Update a post owned by the acting user, optionally replacing its thumbnail."""
        if not title or not category or len(description or "") < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"All fields are required. Description must be at least "
                f"{MIN_DESCRIPTION_LENGTH} characters."
            )

        post = self.get_post(post_id)
        self._check_creator(identity, post, "edit")

        if thumbnail is None:
            post.title = title
            post.category = category
            post.description = description
            self._commit()
            self.db.refresh(post)
            logger.info(f"User {identity.id} edited post {post.id}")
            return post

        self._check_thumbnail_size(thumbnail)
        old_thumbnail = post.thumbnail

        with Saga("edit post") as saga:
            filename = await self.blob_store.store(thumbnail)
            saga.add_compensation("delete new thumbnail", lambda: self.blob_store.delete(filename))

            post.title = title
            post.category = category
            post.description = description
            post.thumbnail = filename
            self._commit()
            self.db.refresh(post)

        self.blob_store.delete(old_thumbnail)

        logger.info(f"User {identity.id} edited post {post.id} with new thumbnail {filename}")
        return post

    def delete_post(self, identity: Identity, post_id: int) -> dict:
        """Delete a post owned by the acting user and its thumbnail."""
        post = self.get_post(post_id)
        self._check_creator(identity, post, "delete")

        creator_id = post.creator_id
        self.blob_store.delete(post.thumbnail)
        self._delete_record(post.id)
        self.user_service.decrement_post_count(creator_id)

        logger.info(f"User {identity.id} deleted post {post_id}")
        return {"message": f"Post {post_id} deleted successfully."}

    def _check_creator(self, identity: Identity, post: Post, action: str) -> None:
        if post.creator_id != identity.id:
            logger.warning(
                f"User {identity.id} tried to {action} post {post.id} owned by {post.creator_id}"
            )
            raise ForbiddenError(f"You are not allowed to {action} this post.")

    def _check_thumbnail_size(self, thumbnail: UploadedImage) -> None:
        if thumbnail.size > settings.thumbnail_max_bytes:
            raise ValidationError(
                f"Thumbnail too big. File should be less than "
                f"{settings.thumbnail_max_bytes // 1_000_000}mb."
            )

    def _delete_record(self, post_id: int) -> None:
        self.db.query(Post).filter(Post.id == post_id).delete(synchronize_session=False)
        self._commit()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
