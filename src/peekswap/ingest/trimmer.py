"""
Module: ingest.trimmer

Purpose:
    Optional pre-pass that crops uniform white borders from a photo
    (screenshots, scanned posters, chat exports) so the layout engine
    works with the actual picture.

Key Functions:
    - trim_whitespace(): Crop white bands, or return the input unchanged
    - measure_white_bands(): Thickness of the white band on each edge

Dependencies:
    - numpy: Vectorised whiteness masks
    - PIL: Cropping
    - common.thresholds: TRIM_THRESHOLDS

Used By:
    - controller: When trimming is enabled
    - state.ImageState: When trimming is enabled
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from peekswap.common.thresholds import TRIM_THRESHOLDS, TrimThresholds

from .models import SourceImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WhiteBands:
    """Thickness in pixels of the near-white band on each edge."""

    top: int
    bottom: int
    left: int
    right: int


def _leading_blank(fractions: np.ndarray, ratio: float) -> int:
    """Count leading entries whose white fraction is at least ``ratio``."""
    below = np.flatnonzero(fractions < ratio)
    if below.size == 0:
        return int(fractions.size)
    return int(below[0])


def measure_white_bands(
    rgb: np.ndarray,
    thresholds: TrimThresholds = TRIM_THRESHOLDS,
) -> WhiteBands:
    """
    Measure white borders of an RGB pixel array.

    Each edge is scanned inward one row (or column) at a time and stops at
    the first line whose share of near-white pixels drops below
    ``white_row_ratio``. Columns are measured only across the rows that
    remain between the top and bottom bands.

    Args:
        rgb: Array of shape (height, width, 3), dtype uint8
        thresholds: Trim thresholds

    Returns:
        WhiteBands with per-edge thickness
    """
    white = (rgb > thresholds.white_level).all(axis=2)
    height, width = white.shape

    row_fraction = white.mean(axis=1)
    top = _leading_blank(row_fraction, thresholds.white_row_ratio)
    if top >= height:
        # Entirely white image
        return WhiteBands(top=height, bottom=height, left=width, right=width)
    bottom = _leading_blank(row_fraction[::-1], thresholds.white_row_ratio)

    col_fraction = white[top:height - bottom].mean(axis=0)
    left = _leading_blank(col_fraction, thresholds.white_row_ratio)
    right = _leading_blank(col_fraction[::-1], thresholds.white_row_ratio)

    return WhiteBands(top=top, bottom=bottom, left=left, right=right)


def _trim_amount(band: int, thresholds: TrimThresholds) -> int:
    if band < thresholds.min_band_px:
        return 0
    return band - thresholds.safety_margin_px


def plan_trim(
    size: Tuple[int, int],
    bands: WhiteBands,
    thresholds: TrimThresholds = TRIM_THRESHOLDS,
) -> Optional[Tuple[int, int, int, int]]:
    """
    Turn measured bands into a crop box, applying the rejection rules.

    Returns:
        (left, top, right, bottom) crop box, or None when the crop is
        empty or rejected
    """
    width, height = size
    left = _trim_amount(bands.left, thresholds)
    top = _trim_amount(bands.top, thresholds)
    right = width - _trim_amount(bands.right, thresholds)
    bottom = height - _trim_amount(bands.bottom, thresholds)

    if (left, top, right, bottom) == (0, 0, width, height):
        return None

    new_width = right - left
    new_height = bottom - top
    if new_width < thresholds.min_dimension_px or new_height < thresholds.min_dimension_px:
        logger.debug(f"Trim rejected: crop {new_width}x{new_height} below minimum dimension")
        return None

    removed = 1 - (new_width * new_height) / (width * height)
    if removed > thresholds.max_removed_area_ratio:
        logger.debug(f"Trim rejected: would remove {removed:.0%} of the image")
        return None

    return left, top, right, bottom


def trim_whitespace(
    image: SourceImage,
    thresholds: TrimThresholds = TRIM_THRESHOLDS,
) -> SourceImage:
    """
    Crop uniform white borders from an image.

    The native ``width``/``height`` are kept; the returned record's
    bitmap and processed dimensions describe the crop.

    Args:
        image: Decoded source image
        thresholds: Trim thresholds

    Returns:
        A new SourceImage with the cropped bitmap, or ``image`` itself
        when nothing qualifies for trimming or the crop is rejected

    Example:
        >>> trimmed = trim_whitespace(screenshot)
        >>> trimmed.processed_height < screenshot.processed_height
        True
    """
    rgb = np.asarray(image.bitmap.convert("RGB"))
    bands = measure_white_bands(rgb, thresholds)
    box = plan_trim(image.bitmap.size, bands, thresholds)
    if box is None:
        return image

    cropped = image.bitmap.crop(box)
    logger.info(
        f"Trimmed {image.name}: {image.bitmap.width}x{image.bitmap.height} -> "
        f"{cropped.width}x{cropped.height} (bands t={bands.top} b={bands.bottom} "
        f"l={bands.left} r={bands.right})"
    )
    return image.with_bitmap(cropped)
