"""
Tests for ingest.decoder

Test Coverage:
- decode_image(): dimensions, RGB conversion, EXIF orientation
- DecodeError on corrupt data and missing files
"""
import io

import pytest
from PIL import Image

from peekswap.ingest import (
    DecodeError,
    NotAnImageError,
    UploadedFile,
    decode_image,
    decode_path,
    read_upload,
)


def test_decode_when_valid_png_then_records_dimensions(png_upload):
    """Native size and byte size are recorded."""
    # Arrange
    upload = png_upload(320, 480)

    # Act
    image = decode_image(upload)

    # Assert
    assert (image.width, image.height) == (320, 480)
    assert image.effective_size == (320, 480)
    assert image.size_bytes == upload.size
    assert image.name == "photo.png"
    assert not image.is_processed


def test_decode_when_palette_image_then_converted_to_rgb():
    """Every decoded bitmap is RGB."""
    # Arrange
    buffer = io.BytesIO()
    Image.new("P", (50, 60)).save(buffer, format="PNG")
    upload = UploadedFile("palette.png", buffer.getvalue(), "image/png")

    # Act
    image = decode_image(upload)

    # Assert
    assert image.bitmap.mode == "RGB"


def test_decode_when_rgba_then_converted_to_rgb():
    """Alpha is dropped during decoding."""
    buffer = io.BytesIO()
    Image.new("RGBA", (40, 40), (10, 20, 30, 128)).save(buffer, format="PNG")

    image = decode_image(UploadedFile("alpha.png", buffer.getvalue(), "image/png"))

    assert image.bitmap.mode == "RGB"


def test_decode_when_exif_rotated_then_dimensions_are_upright():
    """EXIF orientation 6 (rotate 90°) swaps width and height."""
    # Arrange
    img = Image.new("RGB", (200, 100), (0, 0, 255))
    exif = Image.Exif()
    exif[0x0112] = 6
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", exif=exif.tobytes())

    # Act
    image = decode_image(UploadedFile("rotated.jpg", buffer.getvalue(), "image/jpeg"))

    # Assert
    assert (image.width, image.height) == (100, 200)


def test_decode_when_corrupt_bytes_then_raises_decode_error():
    """Garbage with an image content type fails to decode."""
    with pytest.raises(DecodeError):
        decode_image(UploadedFile("broken.png", b"not really a png", "image/png"))


def test_decode_when_truncated_jpeg_then_raises_decode_error(png_upload):
    """Truncated data fails during load."""
    buffer = io.BytesIO()
    Image.new("RGB", (300, 300), (90, 90, 90)).save(buffer, format="JPEG")
    truncated = buffer.getvalue()[:200]

    with pytest.raises(DecodeError):
        decode_image(UploadedFile("cut.jpg", truncated, "image/jpeg"))


def test_decode_when_not_image_type_then_validation_runs_first():
    """Validation errors surface before any decode attempt."""
    with pytest.raises(NotAnImageError):
        decode_image(UploadedFile("a.txt", b"abc", "text/plain"))


def test_decode_path_when_file_exists_then_decodes(tmp_path):
    """decode_path reads and decodes a file from disk."""
    path = tmp_path / "disk.png"
    Image.new("RGB", (64, 32)).save(path)

    image = decode_path(path)

    assert (image.width, image.height) == (64, 32)


def test_read_upload_when_missing_then_raises_decode_error(tmp_path):
    """Missing files are reported as DecodeError."""
    with pytest.raises(DecodeError, match="Could not read"):
        read_upload(tmp_path / "missing.png")
