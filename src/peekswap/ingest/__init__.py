"""
Module: ingest

Purpose:
    Turn raw uploads into SourceImage records: validate metadata, decode,
    and optionally trim white borders and normalise to 9:16.

Key Functions:
    - validate_upload(): Type and size checks
    - decode_image(), decode_path(): Decode to SourceImage
    - trim_whitespace(): Optional white border crop
    - normalize_aspect(): Optional 9:16 center crop

Dependencies:
    - PIL: Decoding and cropping
    - numpy: Whiteness scanning

Used By:
    - controller: Compose pipeline
    - state.ImageState: Session uploads
"""

from .models import ImageSize, SourceImage, UploadedFile
from .validation import (
    MAX_UPLOAD_BYTES,
    NotAnImageError,
    TooLargeError,
    ValidationError,
    validate_upload,
)
from .decoder import DecodeError, decode_image, decode_path, read_upload
from .trimmer import trim_whitespace
from .normalizer import UnsupportedCanvasError, aspect_status, normalize_aspect

__all__ = [
    # Models
    "ImageSize",
    "SourceImage",
    "UploadedFile",
    # Validation
    "MAX_UPLOAD_BYTES",
    "ValidationError",
    "NotAnImageError",
    "TooLargeError",
    "validate_upload",
    # Decoding
    "DecodeError",
    "decode_image",
    "decode_path",
    "read_upload",
    # Processing
    "trim_whitespace",
    "normalize_aspect",
    "aspect_status",
    "UnsupportedCanvasError",
]
