"""Centralized threshold and magic number configuration.

The whitespace trimmer was tuned by eye against phone screenshots and
chat exports. Output only matches earlier composites pixel for pixel if
these values stay unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrimThresholds:
    """Thresholds for uniform-white border trimming."""

    white_level: int = 245  # R, G and B must all exceed this to count as white
    white_row_ratio: float = 0.95  # Fraction of white pixels for a row/column to be "blank"
    min_band_px: int = 80  # Bands thinner than this are left alone
    safety_margin_px: int = 30  # Kept from each trimmed band
    min_dimension_px: int = 256  # Crops smaller than this on either axis are rejected
    max_removed_area_ratio: float = 0.30  # Crops removing more than this are rejected

    def __post_init__(self) -> None:
        if not 0 <= self.white_level <= 255:
            raise ValueError(f"white_level must be within 0..255: {self.white_level}")
        if not 0 < self.white_row_ratio <= 1:
            raise ValueError(f"white_row_ratio must be within (0, 1]: {self.white_row_ratio}")
        if self.safety_margin_px < 0:
            raise ValueError(f"safety_margin_px must be non-negative: {self.safety_margin_px}")
        if self.min_band_px < self.safety_margin_px:
            raise ValueError("min_band_px must be at least safety_margin_px")


@dataclass(frozen=True)
class AspectThresholds:
    """Thresholds for 9:16 normalisation."""

    target_ratio: float = 9 / 16  # width / height
    tolerance: float = 0.01


# Global instances
TRIM_THRESHOLDS = TrimThresholds()
ASPECT_THRESHOLDS = AspectThresholds()
