"""
Module: layout.models

Purpose:
    The resolved composite layout: band heights, their absolute offsets,
    and canvas geometry. Computed fresh on every input change.

Key Classes:
    - ResolvedLayout: Immutable band layout with sum invariant
    - Band: One named band of the layout

Dependencies:
    - dataclasses (std)

Used By:
    - layout.engine: Builds integer layouts
    - layout.projector: Builds float preview layouts
    - output.compositor: Draws from integer layouts
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import NamedTuple, Union

Px = Union[int, float]

BAND_NAMES = ("top_padding", "cover", "gap", "hidden", "bottom_padding")


class Band(NamedTuple):
    """A horizontal strip of the canvas."""

    name: str
    start: Px
    height: Px

    @property
    def end(self) -> Px:
        return self.start + self.height


@dataclass(frozen=True)
class ResolvedLayout:
    """
    Fully resolved vertical layout (immutable).

    Bands from top to bottom: top padding, cover, gap, hidden, bottom
    padding. Export layouts hold integers; projected preview layouts may
    hold floats.

    Attributes:
        target_width: Canvas width in pixels
        target_height: Canvas height goal for ``target_width``
        total_height: Actual canvas height (sum of all bands)
        top_padding: White band above the cover
        cover_height: Cover band height
        gap_height: White band between cover and hidden
        hidden_height: Hidden band height
        bottom_padding: White band below the hidden image
        cover_start: Y offset of the cover band
        gap_start: Y offset of the gap band
        hidden_start: Y offset of the hidden band
        bottom_start: Y offset of the bottom padding band
        content_width: Width images are drawn at (≤ target_width)
        side_padding: Left offset of the content column
        scale_factor: Uniform content scale applied for overflow (1 = none)
        has_cover: Whether a cover image occupies the cover band
        has_hidden: Whether a hidden image occupies the hidden band
        overflowing: True when content did not fit even at ``min_scale``

    Invariants:
        - every band height >= 0
        - top_padding + cover + gap + hidden + bottom_padding == total_height
          (exact for integer layouts)

    Example:
        >>> layout = compute_layout(cover, hidden, 0.4)
        >>> sum(band.height for band in layout.bands) == layout.total_height
        True
    """

    target_width: Px
    target_height: Px
    total_height: Px
    top_padding: Px
    cover_height: Px
    gap_height: Px
    hidden_height: Px
    bottom_padding: Px
    cover_start: Px
    gap_start: Px
    hidden_start: Px
    bottom_start: Px
    content_width: Px
    side_padding: Px
    scale_factor: float = 1.0
    has_cover: bool = False
    has_hidden: bool = False
    overflowing: bool = False

    def __post_init__(self) -> None:
        """Validate band invariants on construction."""
        heights = self.band_heights
        for name, height in zip(BAND_NAMES, heights):
            if height < 0:
                raise ValueError(f"{name} height must be >= 0: {height}")

        total = sum(heights)
        if self.is_integral:
            if total != self.total_height:
                raise ValueError(f"Bands sum to {total}, expected total_height {self.total_height}")
        elif not math.isclose(total, self.total_height, rel_tol=1e-9, abs_tol=1e-6):
            raise ValueError(f"Bands sum to {total}, expected total_height {self.total_height}")

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def band_heights(self) -> tuple[Px, ...]:
        """Band heights in drawing order, top to bottom."""
        return (
            self.top_padding,
            self.cover_height,
            self.gap_height,
            self.hidden_height,
            self.bottom_padding,
        )

    @property
    def bands(self) -> tuple[Band, ...]:
        """Named bands with absolute start offsets."""
        starts = (0, self.cover_start, self.gap_start, self.hidden_start, self.bottom_start)
        return tuple(
            Band(name, start, height)
            for name, start, height in zip(BAND_NAMES, starts, self.band_heights)
        )

    @property
    def is_integral(self) -> bool:
        """True when every band and offset is an integer (export-ready)."""
        values = self.band_heights + (
            self.total_height,
            self.cover_start,
            self.gap_start,
            self.hidden_start,
            self.bottom_start,
        )
        return all(isinstance(v, int) for v in values)

    @property
    def is_empty(self) -> bool:
        """True when no image occupies any band."""
        return not (self.has_cover or self.has_hidden)

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return asdict(self)
