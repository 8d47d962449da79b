"""Read multipart uploads into memory, enforcing type and size limits."""
import logging
from dataclasses import dataclass

from fastapi import UploadFile

from app.config import settings
from app.utils.exceptions import FileTooLarge, UnsupportedFileType, ValidationError

logger = logging.getLogger(__name__)

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}

_CHUNK_SIZE = 64 * 1024


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    content: bytes


async def _read_limited(file: UploadFile, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise FileTooLarge(
                f"File '{file.filename}' exceeds the {max_bytes // (1024 * 1024)}MB limit",
                data={"filename": file.filename, "max_bytes": max_bytes},
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def read_upload(
    file: UploadFile,
    allowed_types: frozenset[str],
    max_bytes: int,
) -> UploadedFile:
    content_type = (file.content_type or "").lower()
    if content_type not in allowed_types:
        logger.info("Rejected upload %s with type %s", file.filename, content_type)
        raise UnsupportedFileType(
            f"Invalid file type '{content_type}'. Allowed: {', '.join(sorted(allowed_types))}",
            data={"filename": file.filename, "content_type": content_type},
        )

    content = await _read_limited(file, max_bytes)
    return UploadedFile(filename=file.filename or "upload", content_type=content_type, content=content)


async def read_uploads(
    files: list[UploadFile],
    allowed_types: frozenset[str],
    max_bytes: int,
) -> list[UploadedFile]:
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > settings.max_files_per_upload:
        raise ValidationError(
            f"Too many files: at most {settings.max_files_per_upload} per upload",
            data={"count": len(files)},
        )
    return [await read_upload(f, allowed_types, max_bytes) for f in files]
