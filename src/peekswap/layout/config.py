"""
Module: layout.config

Purpose:
    Configuration for the composite layout engine.
    Every empirically tuned constant of the band layout lives here.

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - layout.engine: Band computation
    - layout.projector: Preview layouts
"""

from __future__ import annotations

from dataclasses import dataclass

# Portrait canvas, 16 units tall for every 9 wide
DEFAULT_TARGET_RATIO = 16 / 9
DEFAULT_WIDTH_CANDIDATES = (1080, 1242, 1440)

REVEAL_RATIO_MIN = 0.25
REVEAL_RATIO_MAX = 0.55
REVEAL_RATIO_DEFAULT = 0.4


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for composite layout (immutable).

    Attributes:
        target_ratio: Canvas height / width goal
        width_candidates: Canvas widths tried in order when content overflows
        reveal_ratio_min: Lowest accepted reveal ratio
        reveal_ratio_max: Highest accepted reveal ratio
        reveal_ratio_default: Used when no ratio (or NaN) is given
        top_padding_ratio: Top padding floor as a fraction of width
        bottom_padding_ratio: Bottom padding floor as a fraction of width
        single_padding_ratio: Padding floor with only one image
        padding_floor_px: Absolute padding floor
        cover_floor_ratio: Cover band floor as a fraction of width
        cover_floor_px: Absolute cover band floor
        gap_base: Gap height at the default reveal ratio is half of this
        top_bias: Share of surplus canvas height added to the top padding
        min_scale: Lowest uniform scale applied to overflowing content

    Example:
        >>> config = LayoutConfig()
        >>> config.target_height(1080)
        1920
    """

    target_ratio: float = DEFAULT_TARGET_RATIO
    width_candidates: tuple[int, ...] = DEFAULT_WIDTH_CANDIDATES

    # Reveal ratio domain
    reveal_ratio_min: float = REVEAL_RATIO_MIN
    reveal_ratio_max: float = REVEAL_RATIO_MAX
    reveal_ratio_default: float = REVEAL_RATIO_DEFAULT

    # Padding
    top_padding_ratio: float = 0.10
    bottom_padding_ratio: float = 0.10
    single_padding_ratio: float = 0.10
    padding_floor_px: int = 48

    # Cover band
    cover_floor_ratio: float = 0.03
    cover_floor_px: int = 40

    # Gap and distribution
    gap_base: int = 40
    top_bias: float = 0.7

    # Overflow
    min_scale: float = 0.05

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.target_ratio <= 0:
            raise ValueError(f"target_ratio must be positive: {self.target_ratio}")
        if not self.width_candidates:
            raise ValueError("width_candidates must not be empty")
        if any(w <= 0 for w in self.width_candidates):
            raise ValueError(f"width_candidates must be positive: {self.width_candidates}")
        if not self.reveal_ratio_min <= self.reveal_ratio_default <= self.reveal_ratio_max:
            raise ValueError(
                "reveal_ratio_default must lie within "
                f"[{self.reveal_ratio_min}, {self.reveal_ratio_max}]: {self.reveal_ratio_default}"
            )
        if not 0 <= self.top_bias <= 1:
            raise ValueError(f"top_bias must be within [0, 1]: {self.top_bias}")
        if not 0 < self.min_scale <= 1:
            raise ValueError(f"min_scale must be within (0, 1]: {self.min_scale}")
        if self.padding_floor_px < 0 or self.cover_floor_px < 0 or self.gap_base < 0:
            raise ValueError("Pixel floors must be non-negative")

    def target_height(self, width: int) -> int:
        """Canvas height goal for a given width."""
        return int(width * self.target_ratio + 0.5)
