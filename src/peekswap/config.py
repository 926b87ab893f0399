"""
Module: config

Purpose:
    Configuration dataclass for a compose run. Immutable configuration
    with validation on construction.

Key Classes:
    - ComposeConfig: Settings for the compose pipeline

Dependencies:
    - dataclasses (std)
    - layout.config, output.watermark: Nested configs

Used By:
    - controller: compose_files()
    - state.ImageState
    - cli: Built from command line arguments
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from peekswap.ingest.validation import MAX_UPLOAD_BYTES
from peekswap.layout.config import REVEAL_RATIO_DEFAULT, LayoutConfig
from peekswap.output.compositor import DEFAULT_JPEG_QUALITY
from peekswap.output.watermark import WatermarkConfig


@dataclass(frozen=True)
class ComposeConfig:
    """
    Configuration for composing an image pair (immutable).

    Attributes:
        reveal_ratio: Reveal ratio (clamped by the layout engine)
        target_width: Fixed canvas width, or None for the candidate list
        trim_whitespace: Crop white borders after decoding
        normalize_aspect: Center-crop uploads to 9:16
        max_upload_bytes: Upload size limit
        jpeg_quality: Output JPEG quality
        watermark_candidates: Logo paths tried in order; empty disables it
        layout: Layout constants
        watermark: Watermark sizing and captions

    Example:
        >>> config = ComposeConfig(reveal_ratio=0.5, trim_whitespace=True)
    """

    reveal_ratio: float = REVEAL_RATIO_DEFAULT
    target_width: Optional[int] = None
    trim_whitespace: bool = False
    normalize_aspect: bool = False
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    watermark_candidates: Tuple[Path, ...] = ()
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    watermark: WatermarkConfig = field(default_factory=WatermarkConfig)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.target_width is not None and self.target_width <= 0:
            raise ValueError(f"target_width must be positive: {self.target_width}")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be within 1..95: {self.jpeg_quality}")
        if self.max_upload_bytes <= 0:
            raise ValueError(f"max_upload_bytes must be positive: {self.max_upload_bytes}")
