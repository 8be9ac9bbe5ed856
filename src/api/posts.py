"""Post API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from src.api.dependencies import get_blob_store, get_current_identity, get_post_service
from src.config import get_settings
from src.models.post import Post
from src.schemas.post import MessageResponse, PostResponse
from src.services.auth import Identity
from src.services.blob_store import BlobStore, read_upload
from src.services.post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])

settings = get_settings()


def to_post_response(post: Post, blob_store: BlobStore) -> PostResponse:
    """Build a post response with a resolved thumbnail URL."""
    post_response = PostResponse.model_validate(post)
    post_response.thumbnail_url = blob_store.resolve(post.thumbnail)
    return post_response


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    identity: Annotated[Identity, Depends(get_current_identity)],
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    title: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
):
    """Create a post with a thumbnail."""
    file = await read_upload(thumbnail, settings.thumbnail_max_bytes)
    post = await post_service.create_post(identity, title, category, description, file)
    return to_post_response(post, blob_store)


@router.get("", response_model=list[PostResponse])
def get_posts(
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get all posts, most recently updated first."""
    return [to_post_response(post, blob_store) for post in post_service.get_posts()]


@router.get("/categories", response_model=list[str])
def get_categories():
    """Get the category names offered to authors."""
    return PostService.list_categories()


@router.get("/categories/{category}", response_model=list[PostResponse])
def get_category_posts(
    category: str,
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get posts in a category, newest first."""
    return [
        to_post_response(post, blob_store) for post in post_service.get_category_posts(category)
    ]


@router.get("/users/{user_id}", response_model=list[PostResponse])
def get_user_posts(
    user_id: int,
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get posts by an author, newest first."""
    return [to_post_response(post, blob_store) for post in post_service.get_user_posts(user_id)]


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
):
    """Get a single post."""
    return to_post_response(post_service.get_post(post_id), blob_store)


@router.patch("/{post_id}", response_model=PostResponse)
async def edit_post(
    post_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    post_service: Annotated[PostService, Depends(get_post_service)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    title: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    thumbnail: Annotated[UploadFile | None, File()] = None,
):
    """Edit a post (creator only). The thumbnail is replaced only when a file is sent."""
    file = await read_upload(thumbnail, settings.thumbnail_max_bytes)
    post = await post_service.edit_post(identity, post_id, title, category, description, file)
    return to_post_response(post, blob_store)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    identity: Annotated[Identity, Depends(get_current_identity)],
    post_service: Annotated[PostService, Depends(get_post_service)],
):
    """Delete a post and its thumbnail (creator only)."""
    return post_service.delete_post(identity, post_id)
