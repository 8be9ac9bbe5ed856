"""Local filesystem storage for uploaded images."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePath

import aiofiles
from fastapi import UploadFile

logger = logging.getLogger(__name__)

# Generated names stay under the 255-byte filesystem limit
MAX_STEM_BYTES = 100
MAX_SUFFIX_LENGTH = 16


@dataclass(frozen=True)
class UploadedImage:
    """An uploaded file read into memory."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


async def read_upload(
    upload: UploadFile | None, max_bytes: int | None = None
) -> UploadedImage | None:
    """Read a multipart upload; an empty file field counts as no file.

    With `max_bytes`, at most one byte past the limit is read, so an oversized
    upload is never fully buffered but still fails the caller's size check.
    """
    if upload is None or not upload.filename:
        return None
    if max_bytes is None:
        content = await upload.read()
    else:
        content = await upload.read(max_bytes + 1)
    return UploadedImage(filename=upload.filename, content=content)


class BlobStore:
    """Stores blobs under generated names inside one upload directory."""

    def __init__(self, upload_dir: str | Path, base_url: str = "", url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")
        self.url_prefix = "/" + url_prefix.strip("/")

    @staticmethod
    def generate_filename(original: str) -> str:
        """Build `<stem><uuid><suffix>` from the original name's base name.

        Two calls never return the same name.
        """
        # Browsers on Windows may send full paths
        base = PurePath(original.replace("\\", "/")).name
        path = PurePath(base or "upload")
        stem = path.stem.encode()[:MAX_STEM_BYTES].decode(errors="ignore")
        suffix = path.suffix[:MAX_SUFFIX_LENGTH]
        return f"{stem}{uuid.uuid4().hex}{suffix}"

    def path_for(self, filename: str) -> Path:
        """Resolve a stored filename to its path inside the upload directory."""
        path = (self.upload_dir / filename).resolve()
        if path.parent != self.upload_dir.resolve():
            raise ValueError(f"Invalid blob filename: {filename!r}")
        return path

    async def store(self, file: UploadedImage) -> str:
        """Write the file under a fresh generated name and return the name."""
        filename = self.generate_filename(file.filename)
        async with aiofiles.open(self.path_for(filename), "wb") as buffer:
            await buffer.write(file.content)
        logger.debug(f"Stored blob {filename} ({file.size} bytes)")
        return filename

    def delete(self, filename: str | None) -> bool:
        """Remove a stored file.

        Best-effort: failures are logged and reported as False, never raised.
        """
        if not filename:
            return False
        try:
            self.path_for(filename).unlink()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to delete blob {filename}: {e}")
            return False
        logger.debug(f"Deleted blob {filename}")
        return True

    def exists(self, filename: str) -> bool:
        """Check whether a stored file is present."""
        try:
            return self.path_for(filename).is_file()
        except ValueError:
            return False

    def resolve(self, filename: str | None) -> str | None:
        """Public URL for a stored file, served by the static mount."""
        if not filename:
            return None
        return f"{self.base_url}{self.url_prefix}/{filename}"
