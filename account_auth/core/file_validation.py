"""File validation utilities for image uploads.

Security: Validates file content (magic bytes) rather than the client's
filename or Content-Type, and enforces a size limit while reading.
"""

from typing import TYPE_CHECKING

import magic
import structlog

if TYPE_CHECKING:
    from fastapi import UploadFile

from account_auth.core.config import settings
from account_auth.core.errors import ValidationError, field_error

logger = structlog.get_logger()

# Chunk size for reading files (64 KB)
CHUNK_SIZE_BYTES = 64 * 1024

# Allowed MIME types and their corresponding image formats
ALLOWED_IMAGE_MIMES: dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


async def read_file_with_size_limit(
    file: "UploadFile",
    max_size: int | None = None,
    *,
    field: str = "image",
) -> bytes:
    """Read file content with size limit to prevent DoS.

    Args:
        file: UploadFile from FastAPI.
        max_size: Maximum allowed file size in bytes. Defaults to
            settings.profile_image_max_bytes.
        field: Request field name used in the error details.

    Returns:
        File content as bytes.

    Raises:
        ValidationError: If the file is empty or exceeds the size limit.
    """
    limit = max_size or settings.profile_image_max_bytes
    chunks: list[bytes] = []
    total_size = 0

    while True:
        chunk = await file.read(CHUNK_SIZE_BYTES)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > limit:
            raise ValidationError(
                message=f"The {field} may not be greater than {limit // 1024} kilobytes.",
                details=field_error(field, "FILE_TOO_LARGE"),
            )
        chunks.append(chunk)

    if total_size == 0:
        raise ValidationError(
            message=f"The {field} field is required.",
            details=field_error(field, "FILE_EMPTY"),
        )

    return b"".join(chunks)


def validate_image_content(
    content: bytes, filename: str | None, *, field: str = "image"
) -> str:
    """Validate image content using magic bytes (not just extension).

    Args:
        content: File binary content.
        filename: Original filename (server-side logging only).
        field: Request field name used in the error details.

    Returns:
        Detected image format ("JPEG", "PNG", "GIF" or "WEBP").

    Raises:
        ValidationError: If content is not one of the allowed image types.
    """
    detected_mime = magic.from_buffer(content, mime=True)

    if detected_mime not in ALLOWED_IMAGE_MIMES:
        # Log detected MIME for server-side debugging; do NOT expose to client
        logger.warning(
            "Image content validation failed",
            detected_mime=detected_mime,
            filename=filename,
        )
        raise ValidationError(
            message=f"The {field} must be a file of type: jpeg, png, gif, webp.",
            details=field_error(field, "INVALID_FILE_CONTENT"),
        )

    return ALLOWED_IMAGE_MIMES[detected_mime]
