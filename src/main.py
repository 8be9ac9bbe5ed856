"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api import posts, users
from src.api.dependencies import get_blob_store
from src.config import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Tables are managed by Alembic; nothing to initialize here
    yield


app = FastAPI(
    title="Blog API",
    description="Blog posts and authors with image uploads",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.client_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router)
app.include_router(posts.router)

# Uploaded avatars and thumbnails, read-only
app.mount(
    settings.uploads_url_prefix,
    StaticFiles(directory=get_blob_store().upload_dir),
    name="uploads",
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
