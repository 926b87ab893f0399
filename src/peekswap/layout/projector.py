"""
Module: layout.projector

Purpose:
    Rescale resolved layouts for on-screen preview without touching the
    export path. Projected layouts keep float precision; only export
    layouts are integer-snapped.

Key Functions:
    - project_for_width(): Uniformly rescale a layout to a preview width
    - preview_layout(): Compute and project in one step
    - center_window(): Slice a center-cropping thumbnail shows
    - cover_visibility(): Share of that slice covered by the cover band

Dependencies:
    - layout.engine: compute_layout, empty_layout
    - layout.models: ResolvedLayout

Used By:
    - state.ImageState: Preview for UI collaborators
    - cli: --preview-width reporting
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Tuple

from .config import LayoutConfig
from .engine import DEFAULT_CONFIG, SizedImage, compute_layout, empty_layout
from .models import ResolvedLayout

logger = logging.getLogger(__name__)

_SCALED_FIELDS = (
    "target_height",
    "total_height",
    "top_padding",
    "cover_height",
    "gap_height",
    "hidden_height",
    "bottom_padding",
    "cover_start",
    "gap_start",
    "hidden_start",
    "bottom_start",
    "content_width",
    "side_padding",
)


def project_for_width(layout: ResolvedLayout, preview_width: float) -> ResolvedLayout:
    """
    Project a layout onto a different width.

    Every height, offset and horizontal measure is multiplied by
    ``preview_width / layout.target_width``. ``scale_factor`` and the
    presence flags are unchanged.

    Args:
        layout: Source layout (integer or already projected)
        preview_width: Width of the preview surface

    Returns:
        Geometrically similar layout with ``target_width == preview_width``

    Raises:
        ValueError: If either width is not positive

    Example:
        >>> preview = project_for_width(layout, 288)
        >>> preview.total_height == layout.total_height * 288 / layout.target_width
        True
    """
    if preview_width <= 0:
        raise ValueError(f"preview_width must be positive: {preview_width}")
    if layout.target_width <= 0:
        raise ValueError(f"layout target_width must be positive: {layout.target_width}")

    scale = preview_width / layout.target_width
    scaled = {name: getattr(layout, name) * scale for name in _SCALED_FIELDS}
    return replace(layout, target_width=preview_width, **scaled)


def preview_layout(
    cover: Optional[SizedImage],
    hidden: Optional[SizedImage],
    reveal_ratio: Optional[float],
    preview_width: float,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> ResolvedLayout:
    """
    Compute the export layout and project it to ``preview_width``.

    With no images, returns the zero-band layout at the preview width so a
    UI can always render a placeholder.
    """
    layout = compute_layout(cover, hidden, reveal_ratio, config=config)
    if layout is None:
        layout = empty_layout(config.width_candidates[0], config)
    return project_for_width(layout, preview_width)


def center_window(layout: ResolvedLayout, window_height: float) -> Tuple[float, float]:
    """
    Vertical range a center-cropping preview of ``window_height`` shows.

    Chat apps crop tall images around their middle; this is the slice a
    viewer sees before opening the full image.

    Returns:
        (top, bottom) in the layout's coordinates
    """
    if window_height <= 0:
        raise ValueError(f"window_height must be positive: {window_height}")
    top = max(layout.total_height / 2 - window_height / 2, 0)
    bottom = min(top + window_height, layout.total_height)
    return top, bottom


def cover_visibility(layout: ResolvedLayout, window_height: float) -> float:
    """
    Fraction of the center window occupied by the cover band.

    1.0 means the thumbnail shows nothing but the cover; anything from the
    hidden band peeking in lowers it.
    """
    top, bottom = center_window(layout, window_height)
    visible = bottom - top
    if visible <= 0 or not layout.has_cover:
        return 0.0
    cover_top = layout.cover_start
    cover_bottom = layout.cover_start + layout.cover_height
    overlap = max(0, min(bottom, cover_bottom) - max(top, cover_top))
    return overlap / visible
