"""File validation utilities for secure file uploads.

Security: Validates file content (magic bytes), enforces size limits,
and sanitizes filenames to prevent header injection.
"""

import re
from typing import TYPE_CHECKING

import magic
import structlog

if TYPE_CHECKING:
    from fastapi import UploadFile

from grh.core.errors import ValidationError

logger = structlog.get_logger()

# Chunk size for reading files (64 KB)
CHUNK_SIZE_BYTES = 64 * 1024

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Allowed MIME types per upload kind
CV_MIMES: frozenset[str] = frozenset({PDF_MIME, DOC_MIME, DOCX_MIME})
REPORT_MIMES: frozenset[str] = frozenset({PDF_MIME})
MATERIAL_MIMES: frozenset[str] = frozenset(
    {
        PDF_MIME,
        DOC_MIME,
        DOCX_MIME,
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.ms-powerpoint",
        "image/png",
        "image/jpeg",
        "video/mp4",
        "text/plain",
    }
)


def megabytes(size_mb: int) -> int:
    return size_mb * 1024 * 1024


async def read_file_with_size_limit(file: "UploadFile", max_size: int) -> bytes:
    """Read file content with size limit to prevent DoS.

    Args:
        file: UploadFile from FastAPI.
        max_size: Maximum allowed file size in bytes.

    Returns:
        File content as bytes.

    Raises:
        ValidationError: If file exceeds size limit or is empty.
    """
    chunks: list[bytes] = []
    total_size = 0

    while True:
        chunk = await file.read(CHUNK_SIZE_BYTES)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_size:
            raise ValidationError(
                message=f"File too large. Maximum size: {max_size // (1024 * 1024)}MB",
                details=[{"field": "file", "message": "FILE_TOO_LARGE"}],
            )
        chunks.append(chunk)

    if total_size == 0:
        raise ValidationError(
            message="Uploaded file is empty",
            details=[{"field": "file", "message": "FILE_EMPTY"}],
        )
    return b"".join(chunks)


def validate_file_content(
    content: bytes,
    filename: str,
    allowed_mimes: frozenset[str],
) -> str:
    """Validate file content using magic bytes (not just extension).

    Args:
        content: File binary content.
        filename: Original filename (for logging).
        allowed_mimes: MIME types accepted for this upload.

    Returns:
        Detected MIME type.

    Raises:
        ValidationError: If file content doesn't match allowed MIME types.
    """
    detected_mime = magic.from_buffer(content, mime=True)

    if detected_mime not in allowed_mimes:
        # Log detected MIME for server-side debugging; do NOT expose to client
        logger.warning(
            "File content validation failed",
            detected_mime=detected_mime,
            filename=filename,
        )
        raise ValidationError(
            message="Invalid file type",
            details=[{"field": "file", "message": "INVALID_FILE_CONTENT"}],
        )

    return detected_mime


def sanitize_filename_for_header(filename: str, max_length: int = 200) -> str:
    """Sanitize filename for Content-Disposition header.

    Args:
        filename: Original filename.
        max_length: Maximum allowed filename length.

    Returns:
        Sanitized filename safe for HTTP headers.
    """
    # Remove characters that could cause header injection
    safe = re.sub(r'["\r\n\\;]', "", filename)

    # Remove any control characters
    safe = re.sub(r"[\x00-\x1f\x7f]", "", safe)

    if len(safe) > max_length:
        # Preserve extension if present
        if "." in safe:
            name, ext = safe.rsplit(".", 1)
            ext = f".{ext}"
            safe = name[: max_length - len(ext)] + ext
        else:
            safe = safe[:max_length]

    if not safe:
        safe = "download"

    return safe


def require_pdf_signature(content: bytes) -> None:
    """Reject content that does not start with the ``%PDF`` magic bytes.

    Raises:
        ValidationError: If the signature is missing.
    """
    if not content.startswith(b"%PDF"):
        raise ValidationError(
            message="Report must be a PDF file",
            details=[{"field": "file", "message": "INVALID_PDF_SIGNATURE"}],
        )
