"""
Module: layout.engine

Purpose:
    Pure band layout for the reveal composite. Maps two image sizes, a
    reveal ratio and a canvas width to integer-exact band heights:

        top padding | cover | gap | hidden | bottom padding

    No rendering, no I/O, no ambient state.

Key Functions:
    - compute_layout(): Try width candidates, return the first fitting layout
    - build_plan_for_width(): Layout for one fixed canvas width
    - clamp_reveal_ratio(): Force a ratio into the configured domain
    - assign_bands(): Decide which image occupies the cover band

Dependencies:
    - layout.config: LayoutConfig
    - layout.models: ResolvedLayout

Used By:
    - layout.projector: Preview layouts
    - output.compositor: Band placement
    - state.ImageState, controller
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Protocol, Tuple, TypeVar

from .config import LayoutConfig
from .models import ResolvedLayout

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = LayoutConfig()


class SizedImage(Protocol):
    """Anything with pixel dimensions (SourceImage, ImageSize)."""

    width: int
    height: int


T = TypeVar("T")


def _round(value: float) -> int:
    """Round half up; every derivation step rounds immediately."""
    return int(math.floor(value + 0.5))


def _normalize(image: Optional[SizedImage]) -> Optional[Tuple[int, int]]:
    """Effective (width, height) of an image, or None if unusable."""
    if image is None:
        return None
    width = getattr(image, "processed_width", None) or image.width
    height = getattr(image, "processed_height", None) or image.height
    if width <= 0 or height <= 0:
        return None
    return width, height


def _scaled_height(size: Tuple[int, int], target_width: int) -> int:
    width, height = size
    return max(1, _round(height * target_width / width))


def clamp_reveal_ratio(ratio: Optional[float], config: LayoutConfig = DEFAULT_CONFIG) -> float:
    """
    Clamp a reveal ratio into ``[reveal_ratio_min, reveal_ratio_max]``.

    None and NaN resolve to the configured default.
    """
    if ratio is None or math.isnan(ratio):
        return config.reveal_ratio_default
    return min(max(ratio, config.reveal_ratio_min), config.reveal_ratio_max)


def assign_bands(cover: Optional[T], hidden: Optional[T]) -> Tuple[Optional[T], Optional[T]]:
    """
    Decide band occupancy.

    A lone image always becomes the cover, so the single-image layout
    shows it in the cover band regardless of which slot it came from.
    """
    if cover is None and hidden is not None:
        return hidden, None
    return cover, hidden


def cover_floor(target_width: int, config: LayoutConfig = DEFAULT_CONFIG) -> int:
    """Minimum cover band height for a canvas width."""
    return max(_round(target_width * config.cover_floor_ratio), config.cover_floor_px)


def _padding(target_width: int, ratio: float, config: LayoutConfig) -> int:
    return max(_round(target_width * ratio), config.padding_floor_px)


def gap_for_ratio(ratio: float, config: LayoutConfig = DEFAULT_CONFIG) -> int:
    """Gap height between cover and hidden bands for a clamped ratio."""
    return max(0, _round(config.gap_base * (0.5 + (ratio - 0.4) * 1.5)))


def empty_layout(target_width: int, config: LayoutConfig = DEFAULT_CONFIG) -> ResolvedLayout:
    """Zero-band layout used when no image is present."""
    return ResolvedLayout(
        target_width=target_width,
        target_height=config.target_height(target_width),
        total_height=0,
        top_padding=0,
        cover_height=0,
        gap_height=0,
        hidden_height=0,
        bottom_padding=0,
        cover_start=0,
        gap_start=0,
        hidden_start=0,
        bottom_start=0,
        content_width=target_width,
        side_padding=0,
    )


def build_plan_for_width(
    cover: Optional[SizedImage],
    hidden: Optional[SizedImage],
    reveal_ratio: Optional[float],
    target_width: int,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Optional[ResolvedLayout]:
    """
    Resolve the band layout for one canvas width.

    Steps:
        1. Scale each present image to ``target_width``.
        2. Size the cover band as the largest of the ratio share of the
           hidden image, the cover floor, and the cover's own height.
        3. Add the ratio-derived gap (two images only) and padding floors.
        4. Over the target height: shrink the gap, then scale the content
           bands uniformly (never below ``min_scale``).
        5. Under the target height: hand the surplus to the paddings,
           ``top_bias`` of it on top.

    Args:
        cover: Cover image dimensions, or None
        hidden: Hidden image dimensions, or None
        reveal_ratio: Reveal ratio (clamped before use)
        target_width: Canvas width in pixels
        config: Layout constants

    Returns:
        ResolvedLayout, or None when both images are absent

    Example:
        >>> layout = build_plan_for_width(ImageSize(1080, 1920), None, 0.4, 1080)
        >>> layout.hidden_height, layout.gap_height
        (0, 0)
    """
    cover_size, hidden_size = assign_bands(_normalize(cover), _normalize(hidden))
    if cover_size is None:
        return None

    ratio = clamp_reveal_ratio(reveal_ratio, config)
    target_height = config.target_height(target_width)
    has_hidden = hidden_size is not None
    floor = cover_floor(target_width, config)

    cover_natural = _scaled_height(cover_size, target_width)
    if has_hidden:
        hidden_height = _scaled_height(hidden_size, target_width)
        cover_height = max(_round(hidden_height * ratio), floor, cover_natural)
        gap_height = gap_for_ratio(ratio, config)
        top = _padding(target_width, config.top_padding_ratio, config)
        bottom = _padding(target_width, config.bottom_padding_ratio, config)
    else:
        hidden_height = 0
        cover_height = max(cover_natural, floor)
        gap_height = 0
        top = bottom = _padding(target_width, config.single_padding_ratio, config)

    scale_factor = 1.0
    overflowing = False
    content_width = target_width

    def total() -> int:
        return top + cover_height + gap_height + hidden_height + bottom

    # Gap gives way first, never below zero
    excess = total() - target_height
    if excess > 0 and gap_height > 0:
        gap_height -= min(excess, gap_height)

    if total() > target_height:
        available = target_height - top - bottom - gap_height
        content = cover_height + hidden_height
        raw_scale = available / content if available > 0 else 0.0
        overflowing = raw_scale < config.min_scale
        scale_factor = max(raw_scale, config.min_scale)

        cover_height = max(1, _round(cover_height * scale_factor), floor)
        if has_hidden:
            hidden_height = max(1, _round(hidden_height * scale_factor))

        # Absorb rounding overshoot so a fitting layout never exceeds its target
        overshoot = total() - target_height
        if overshoot > 0 and not overflowing:
            if has_hidden and (cover_height - overshoot < floor or hidden_height > cover_height):
                hidden_height = max(1, hidden_height - overshoot)
            else:
                cover_height = max(floor, cover_height - overshoot)

        content_width = max(1, _round(target_width * scale_factor))

        logger.debug(
            f"width={target_width}: content {content}px over {available}px available, "
            f"scale={scale_factor:.4f}{' (clamped)' if overflowing else ''}"
        )

    deficit = target_height - total()
    if deficit > 0:
        top_extra = _round(deficit * config.top_bias)
        top += top_extra
        bottom += deficit - top_extra

    cover_start = top
    gap_start = cover_start + cover_height
    hidden_start = gap_start + gap_height
    bottom_start = hidden_start + hidden_height

    return ResolvedLayout(
        target_width=target_width,
        target_height=target_height,
        total_height=bottom_start + bottom,
        top_padding=top,
        cover_height=cover_height,
        gap_height=gap_height,
        hidden_height=hidden_height,
        bottom_padding=bottom,
        cover_start=cover_start,
        gap_start=gap_start,
        hidden_start=hidden_start,
        bottom_start=bottom_start,
        content_width=content_width,
        side_padding=(target_width - content_width) // 2,
        scale_factor=scale_factor,
        has_cover=True,
        has_hidden=has_hidden,
        overflowing=overflowing,
    )


def compute_layout(
    cover: Optional[SizedImage],
    hidden: Optional[SizedImage],
    reveal_ratio: Optional[float] = None,
    target_width: Optional[int] = None,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> Optional[ResolvedLayout]:
    """
    Resolve the composite layout.

    Tries each width in ``config.width_candidates`` (or only
    ``target_width`` when given) and returns the first layout whose content
    fits without hitting the scale floor. If none fits, the last
    candidate's layout is accepted as is.

    Args:
        cover: Cover image (shown in the preview window), or None
        hidden: Hidden image (revealed in full view), or None
        reveal_ratio: Reveal ratio; None uses the configured default
        target_width: Fixed canvas width, bypassing the candidate list
        config: Layout constants

    Returns:
        ResolvedLayout, or None only when both images are absent

    Example:
        >>> layout = compute_layout(ImageSize(1000, 10000), ImageSize(1000, 200), 0.4)
        >>> layout.total_height <= layout.target_height
        True
    """
    widths = (target_width,) if target_width is not None else config.width_candidates

    layout: Optional[ResolvedLayout] = None
    for width in widths:
        layout = build_plan_for_width(cover, hidden, reveal_ratio, width, config)
        if layout is None:
            return None
        if not layout.overflowing:
            break
        logger.debug(f"Layout at width {width} overflows; trying next candidate")

    if layout is not None and layout.overflowing:
        logger.warning(
            f"Content overflows even at width {layout.target_width}; "
            f"canvas grows to {layout.total_height}px (target {layout.target_height}px)"
        )
    return layout
