"""
Module: ingest.decoder

Purpose:
    Decode validated uploads into SourceImage records.

Key Functions:
    - decode_image(): Bytes → SourceImage
    - decode_path(): File on disk → SourceImage
    - read_upload(): File on disk → UploadedFile

Key Classes:
    - DecodeError: Bitmap could not be loaded

Dependencies:
    - PIL: Decoding, EXIF orientation

Used By:
    - controller: Pipeline entry
    - state.ImageState: Upload handling
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .models import SourceImage, UploadedFile
from .validation import MAX_UPLOAD_BYTES, validate_upload

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Image bytes could not be decoded into a bitmap."""
    pass


def read_upload(path: Path, content_type: Optional[str] = None) -> UploadedFile:
    """
    Read a file from disk into an UploadedFile.

    Raises:
        DecodeError: If the file cannot be read
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Could not read {path}: {e}") from e
    return UploadedFile(name=path.name, data=data, content_type=content_type)


def decode_image(file: UploadedFile, *, max_bytes: int = MAX_UPLOAD_BYTES) -> SourceImage:
    """
    Validate and decode an upload.

    The image is fully loaded, rotated according to its EXIF orientation
    tag and converted to RGB, so every later stage sees upright 8-bit
    pixels.

    Args:
        file: Upload to decode
        max_bytes: Size limit passed to validation

    Returns:
        SourceImage with native dimensions recorded

    Raises:
        ValidationError: If the upload fails metadata checks
        DecodeError: If the bytes are corrupt or in an unsupported format

    Example:
        >>> image = decode_image(UploadedFile("cover.jpg", data))
        >>> image.width, image.height
        (1080, 1920)
    """
    validate_upload(file, max_bytes=max_bytes)

    try:
        with Image.open(io.BytesIO(file.data)) as raw:
            raw.load()
            upright = ImageOps.exif_transpose(raw)
            bitmap = upright.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise DecodeError(f"{file.name!r} is not a readable image: {e}") from e
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to load {file.name!r}: {e}") from e

    logger.info(f"Decoded {file.name}: {bitmap.width}x{bitmap.height} ({file.size} bytes)")

    return SourceImage(
        name=file.name,
        width=bitmap.width,
        height=bitmap.height,
        size_bytes=file.size,
        bitmap=bitmap,
    )


def decode_path(path: Path, *, max_bytes: int = MAX_UPLOAD_BYTES) -> SourceImage:
    """Decode an image file from disk."""
    return decode_image(read_upload(path), max_bytes=max_bytes)
