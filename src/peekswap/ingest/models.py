"""
Module: ingest.models

Purpose:
    Records passed between ingestion, the layout engine and the compositor.

Key Classes:
    - UploadedFile: Raw bytes plus declared metadata, before decoding
    - SourceImage: Decoded bitmap with native and processed dimensions
    - ImageSize: Bare dimensions for layout-only callers

Dependencies:
    - PIL: Bitmap type
    - dataclasses (std)

Used By:
    - ingest.validation, ingest.decoder: Build records
    - ingest.trimmer, ingest.normalizer: Derive new records
    - layout.engine: Reads effective dimensions
    - output.compositor: Reads bitmaps
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from PIL import Image


@dataclass(frozen=True)
class UploadedFile:
    """
    Raw image upload (immutable).

    Attributes:
        name: Original filename, used for type guessing and display
        data: File bytes
        content_type: Declared MIME type, or None to guess from the name

    Example:
        >>> f = UploadedFile("cat.jpg", b"...")
        >>> f.media_type
        'image/jpeg'
    """

    name: str
    data: bytes = field(repr=False)
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        """Byte size of the upload."""
        return len(self.data)

    @property
    def media_type(self) -> str:
        """Declared content type, falling back to a guess from the filename."""
        if self.content_type:
            return self.content_type.lower()
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class ImageSize:
    """Width and height without a bitmap, for layout-only callers."""

    width: int
    height: int
    processed_width: Optional[int] = None
    processed_height: Optional[int] = None


@dataclass(frozen=True)
class SourceImage:
    """
    Decoded source photo (immutable).

    ``width``/``height`` are the native size after EXIF orientation.
    ``processed_width``/``processed_height`` describe ``bitmap`` once it has
    been trimmed or aspect-normalised; they default to the native size.

    A replace operation produces a new record via ``with_bitmap``; the
    original is never mutated.

    Attributes:
        name: Display name (usually the upload filename)
        width: Native pixel width
        height: Native pixel height
        size_bytes: Byte size of the encoded upload
        bitmap: RGB PIL image holding the (possibly processed) pixels
        processed_width: Width of ``bitmap``
        processed_height: Height of ``bitmap``
    """

    name: str
    width: int
    height: int
    size_bytes: int
    bitmap: Image.Image = field(repr=False, compare=False)
    processed_width: Optional[int] = None
    processed_height: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive: {self.width}x{self.height}")
        if self.processed_width is None:
            object.__setattr__(self, "processed_width", self.bitmap.width)
        if self.processed_height is None:
            object.__setattr__(self, "processed_height", self.bitmap.height)

    @property
    def effective_size(self) -> Tuple[int, int]:
        """(width, height) the layout engine should use."""
        return self.processed_width, self.processed_height

    @property
    def is_processed(self) -> bool:
        """True when the bitmap differs in size from the native image."""
        return (self.processed_width, self.processed_height) != (self.width, self.height)

    def with_bitmap(self, bitmap: Image.Image) -> "SourceImage":
        """Return a copy carrying ``bitmap`` as its processed pixels."""
        return replace(
            self,
            bitmap=bitmap,
            processed_width=bitmap.width,
            processed_height=bitmap.height,
        )

    def close(self) -> None:
        """Release the bitmap's pixel buffer."""
        self.bitmap.close()
