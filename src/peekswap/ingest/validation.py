"""
Module: ingest.validation

Purpose:
    Metadata checks on an upload before any decoding happens.

Key Functions:
    - validate_upload(): Reject non-images and oversized files

Key Classes:
    - ValidationError: Base class for rejected uploads
    - NotAnImageError: Content type is not image/*
    - TooLargeError: Byte size above the limit

Used By:
    - ingest.decoder: Validates before decoding
    - controller: Surfaces errors to the CLI
"""

from __future__ import annotations

import logging

from .models import UploadedFile

logger = logging.getLogger(__name__)

# 20 MiB upload limit
MAX_UPLOAD_BYTES = 20 * 1024 * 1024


class ValidationError(Exception):
    """Upload rejected before decoding."""
    pass


class NotAnImageError(ValidationError):
    """Declared content type is not an image type."""
    pass


class TooLargeError(ValidationError):
    """Upload exceeds the byte size limit."""
    pass


def validate_upload(file: UploadedFile, *, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """
    Check an upload's declared type and size.

    Pure metadata check: the bytes are never decoded here.

    Args:
        file: Upload to check
        max_bytes: Maximum accepted size in bytes

    Raises:
        NotAnImageError: If the content type does not start with ``image/``
        TooLargeError: If the file is larger than ``max_bytes``

    Example:
        >>> validate_upload(UploadedFile("a.png", data, "image/png"))
    """
    media_type = file.media_type
    if not media_type.startswith("image/"):
        raise NotAnImageError(
            f"{file.name!r} is not an image file ({media_type}); please choose a photo"
        )

    if file.size > max_bytes:
        raise TooLargeError(
            f"{file.name!r} is {file.size / (1024 * 1024):.1f} MiB; "
            f"the limit is {max_bytes / (1024 * 1024):.0f} MiB, please shrink it"
        )

    logger.debug(f"Validated {file.name} ({media_type}, {file.size} bytes)")
