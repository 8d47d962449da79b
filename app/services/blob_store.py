"""Storage for uploaded file bytes, addressed by the reference returned from put()."""
import logging
import os
import uuid
from abc import ABC, abstractmethod

from app.config import settings
from app.utils.exceptions import NotFound

logger = logging.getLogger(__name__)

FILES_PREFIX = "/api/files/"

CONTENT_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

_EXTENSIONS: dict[str, str] = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES.get(os.path.splitext(filename)[1].lower(), "application/octet-stream")


def filename_from_reference(reference: str) -> str:
    name = reference[len(FILES_PREFIX):] if reference.startswith(FILES_PREFIX) else reference
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise NotFound("File not found")
    return name


class BlobStore(ABC):
    @abstractmethod
    async def put(self, content: bytes, filename: str, content_type: str) -> str:
        """Store bytes and return a stable reference."""

    @abstractmethod
    async def get(self, reference: str) -> bytes:
        """Return stored bytes; raise NotFound if absent."""

    @abstractmethod
    async def delete(self, reference: str) -> None: ...


class LocalBlobStore(BlobStore):
    def __init__(self, root: str):
        self.root = root

    def _path(self, reference: str) -> str:
        return os.path.join(self.root, filename_from_reference(reference))

    async def put(self, content: bytes, filename: str, content_type: str) -> str:
        os.makedirs(self.root, exist_ok=True)
        ext = os.path.splitext(filename)[1].lower()
        if ext not in CONTENT_TYPES:
            ext = _EXTENSIONS.get(content_type, "")
        name = f"{uuid.uuid4().hex}{ext}"
        with open(os.path.join(self.root, name), "wb") as f:
            f.write(content)
        logger.info("Stored blob %s (%d bytes)", name, len(content))
        return f"{FILES_PREFIX}{name}"

    async def get(self, reference: str) -> bytes:
        path = self._path(reference)
        if not os.path.isfile(path):
            raise NotFound("File not found")
        with open(path, "rb") as f:
            return f.read()

    async def delete(self, reference: str) -> None:
        path = self._path(reference)
        if os.path.isfile(path):
            os.remove(path)


blob_store: BlobStore = LocalBlobStore(os.path.join(settings.data_dir, "uploads"))


def get_blob_store() -> BlobStore:
    return blob_store
