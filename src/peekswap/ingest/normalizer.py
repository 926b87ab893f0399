"""
Module: ingest.normalizer

Purpose:
    Center-crop photos to a fixed aspect ratio (9:16 portrait by default),
    the shape chat apps preview without letterboxing.

Key Functions:
    - normalize_aspect(): Pure center crop to the target ratio
    - aspect_status(): Classify an image as ok / wide / tall

Key Classes:
    - UnsupportedCanvasError: Raster could not be cropped

Dependencies:
    - PIL: Cropping
    - common.thresholds: ASPECT_THRESHOLDS

Used By:
    - controller: When normalisation is enabled
    - state.ImageState: When normalisation is enabled
"""

from __future__ import annotations

import logging
import math

from peekswap.common.thresholds import ASPECT_THRESHOLDS

from .models import SourceImage

logger = logging.getLogger(__name__)


class UnsupportedCanvasError(Exception):
    """The raster surface needed for cropping could not be produced."""
    pass


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aspect_status(
    width: int,
    height: int,
    target_ratio: float = ASPECT_THRESHOLDS.target_ratio,
    tolerance: float = ASPECT_THRESHOLDS.tolerance,
) -> str:
    """
    Classify an aspect ratio against the target.

    Returns:
        "ok" when within tolerance, otherwise "wide" or "tall"
    """
    ratio = width / height
    if abs(ratio - target_ratio) <= tolerance:
        return "ok"
    return "wide" if ratio > target_ratio else "tall"


def normalize_aspect(
    image: SourceImage,
    target_ratio: float = ASPECT_THRESHOLDS.target_ratio,
    tolerance: float = ASPECT_THRESHOLDS.tolerance,
) -> SourceImage:
    """
    Center-crop an image to ``target_ratio`` (width / height).

    Only the longer axis relative to the target is cropped; no pixels are
    added and nothing is upscaled.

    Args:
        image: Source image (its processed bitmap is cropped)
        target_ratio: Desired width / height
        tolerance: Ratios within this distance are returned unchanged

    Returns:
        ``image`` itself when already within tolerance, else a new
        SourceImage with the cropped bitmap

    Raises:
        UnsupportedCanvasError: If the bitmap cannot be cropped

    Example:
        >>> square = decode_image(UploadedFile("sq.png", data))  # 1000x1000
        >>> normalize_aspect(square).effective_size
        (563, 1000)
    """
    width, height = image.bitmap.size
    status = aspect_status(width, height, target_ratio, tolerance)
    if status == "ok":
        return image

    if status == "wide":
        new_width = max(1, min(width, _round_half_up(height * target_ratio)))
        left = (width - new_width) // 2
        box = (left, 0, left + new_width, height)
    else:
        new_height = max(1, min(height, _round_half_up(width / target_ratio)))
        top = (height - new_height) // 2
        box = (0, top, width, top + new_height)

    try:
        cropped = image.bitmap.crop(box)
        cropped.load()
    except (OSError, ValueError, MemoryError) as e:
        raise UnsupportedCanvasError(f"Could not crop {image.name!r} to {target_ratio:.4f}: {e}") from e

    logger.info(
        f"Normalized {image.name} ({status}): {width}x{height} -> {cropped.width}x{cropped.height}"
    )
    return image.with_bitmap(cropped)
