import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import peekswap
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from peekswap.ingest import SourceImage, UploadedFile  # noqa: E402


def encode(image: Image.Image, fmt: str = "PNG") -> bytes:
    """Encode a PIL image to bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_source(width: int, height: int, color=(200, 40, 40), name: str = "img.png") -> SourceImage:
    """Build a SourceImage around a solid-color bitmap."""
    bitmap = Image.new("RGB", (width, height), color=color)
    return SourceImage(name=name, width=width, height=height, size_bytes=0, bitmap=bitmap)


# Common test fixtures
@pytest.fixture
def png_upload():
    """Factory for PNG uploads of a given size and color."""
    def _create(width: int = 300, height: int = 400, color=(30, 120, 200), name: str = "photo.png"):
        data = encode(Image.new("RGB", (width, height), color=color))
        return UploadedFile(name=name, data=data, content_type="image/png")
    return _create


@pytest.fixture
def source_factory():
    """Factory for in-memory SourceImages."""
    return make_source


@pytest.fixture
def sample_files(tmp_path: Path):
    """Cover and hidden photos written to disk."""
    cover = tmp_path / "cover.png"
    hidden = tmp_path / "hidden.jpg"
    Image.new("RGB", (900, 1600), color=(220, 60, 60)).save(cover)
    Image.new("RGB", (1200, 900), color=(40, 160, 90)).save(hidden, quality=90)
    return cover, hidden
