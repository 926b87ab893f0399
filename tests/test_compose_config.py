"""
Tests for config.ComposeConfig

Test Coverage:
- Defaults
- Validation on construction
"""
import pytest

from peekswap.config import ComposeConfig
from peekswap.ingest import MAX_UPLOAD_BYTES


def test_config_when_default_then_plain_compose():
    """Defaults: ratio 0.4, no processing, quality 95, no watermark."""
    config = ComposeConfig()

    assert config.reveal_ratio == 0.4
    assert config.target_width is None
    assert not config.trim_whitespace
    assert not config.normalize_aspect
    assert config.jpeg_quality == 95
    assert config.max_upload_bytes == MAX_UPLOAD_BYTES
    assert config.watermark_candidates == ()


@pytest.mark.parametrize(
    "kwargs,match",
    [
        ({"target_width": 0}, "target_width"),
        ({"jpeg_quality": 0}, "jpeg_quality"),
        ({"jpeg_quality": 100}, "jpeg_quality"),
        ({"max_upload_bytes": 0}, "max_upload_bytes"),
    ],
)
def test_config_when_invalid_then_raises(kwargs, match):
    """Out-of-range values are rejected."""
    with pytest.raises(ValueError, match=match):
        ComposeConfig(**kwargs)
