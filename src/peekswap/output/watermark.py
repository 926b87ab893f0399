"""
Module: output.watermark

Purpose:
    Optional watermark block (logo + two caption lines) placed inside the
    bottom padding band of a composite. Sizing shrinks logo and font
    together until the block fits the band.

Key Functions:
    - load_watermark(): First loadable logo from candidate paths
    - default_watermark_candidates(): Packaged lookup order
    - plan_watermark(): Fit the block into an available area
    - draw_watermark(): Render the block onto a canvas

Key Classes:
    - WatermarkConfig: Sizing and caption settings
    - WatermarkPlan: Resolved block geometry
    - WatermarkLoadError: Logo could not be loaded (recovered locally)

Dependencies:
    - PIL: Image loading, drawing
    - output.fonts: FontMetrics, wrap_text

Used By:
    - output.compositor: After the image bands are drawn
    - controller: Loads the logo once per run
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw

from peekswap.layout.models import ResolvedLayout

from .fonts import FontMetrics, wrap_text

logger = logging.getLogger(__name__)

WATERMARK_ENV_VAR = "PEEKSWAP_WATERMARK"
DEFAULT_CAPTIONS = ("PeekSwap", "Scroll all the way down")


class WatermarkLoadError(Exception):
    """Watermark logo could not be loaded from any candidate."""
    pass


@dataclass(frozen=True)
class WatermarkConfig:
    """
    Watermark sizing configuration (immutable).

    Attributes:
        captions: Caption lines drawn beside the logo
        max_width_ratio: Block width limit as a fraction of content width
        logo_size: Starting logo edge length in pixels
        font_size: Starting caption font size
        min_logo_size: Logo never shrinks below this
        min_font_size: Font never shrinks below this
        shrink_factor: Multiplier applied per shrinking round
        max_iterations: Upper bound on shrinking rounds
        spacing: Gap between logo and text column
        margin: Vertical clearance kept above and below the block
        text_color: Caption color
    """

    captions: Tuple[str, ...] = DEFAULT_CAPTIONS
    max_width_ratio: float = 0.6
    logo_size: int = 96
    font_size: int = 28
    min_logo_size: int = 36
    min_font_size: int = 12
    shrink_factor: float = 0.85
    max_iterations: int = 12
    spacing: int = 12
    margin: int = 16
    text_color: Tuple[int, int, int] = (136, 136, 136)

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not 0 < self.max_width_ratio <= 1:
            raise ValueError(f"max_width_ratio must be within (0, 1]: {self.max_width_ratio}")
        if not 0 < self.shrink_factor < 1:
            raise ValueError(f"shrink_factor must be within (0, 1): {self.shrink_factor}")
        if self.min_logo_size > self.logo_size or self.min_font_size > self.font_size:
            raise ValueError("Minimum sizes must not exceed starting sizes")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive: {self.max_iterations}")


@dataclass(frozen=True)
class WatermarkPlan:
    """
    Resolved watermark block geometry, relative to the block origin.

    Attributes:
        logo_size: Logo edge length
        font_size: Caption font size
        lines: Wrapped caption lines
        line_height: Advance per caption line
        width: Block width
        height: Block height
    """

    logo_size: int
    font_size: int
    lines: Tuple[str, ...]
    line_height: int
    width: int
    height: int

    @property
    def text_height(self) -> int:
        return self.line_height * len(self.lines)


def default_watermark_candidates() -> List[Path]:
    """
    Logo lookup order: environment override, user directory, working dir.
    """
    candidates: List[Path] = []
    override = os.environ.get(WATERMARK_ENV_VAR)
    if override:
        candidates.append(Path(override))
    candidates.append(Path.home() / ".peekswap" / "watermark.png")
    candidates.append(Path.cwd() / "watermark.png")
    return candidates


def _open_logo(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (OSError, ValueError) as e:
        raise WatermarkLoadError(f"Could not load watermark {path}: {e}") from e


def load_watermark(candidates: Iterable[Union[str, Path]]) -> Optional[Image.Image]:
    """
    Load the first readable logo from ``candidates``.

    Failures are logged at DEBUG and never raised; callers treat None as
    "no watermark".

    Args:
        candidates: Paths tried in order

    Returns:
        RGBA logo image, or None
    """
    for candidate in candidates:
        path = Path(candidate)
        try:
            logo = _open_logo(path)
        except WatermarkLoadError as e:
            logger.debug(str(e))
            continue
        logger.debug(f"Loaded watermark from {path} ({logo.width}x{logo.height})")
        return logo
    logger.debug("No watermark candidate could be loaded")
    return None


def _measure(
    logo_size: int,
    font_size: int,
    max_width: int,
    captions: Sequence[str],
    metrics: FontMetrics,
    spacing: int,
) -> WatermarkPlan:
    text_budget = max(1, max_width - logo_size - spacing)
    lines: List[str] = []
    for caption in captions:
        lines.extend(wrap_text(caption, text_budget, font_size, metrics))
    line_height = metrics.line_height(font_size)
    text_width = max((metrics.text_width(line, font_size) for line in lines), default=0)
    width = logo_size + (spacing + text_width if lines else 0)
    height = max(logo_size, line_height * len(lines))
    return WatermarkPlan(
        logo_size=logo_size,
        font_size=font_size,
        lines=tuple(lines),
        line_height=line_height,
        width=width,
        height=height,
    )


def plan_watermark(
    available_width: int,
    available_height: int,
    metrics: FontMetrics,
    config: WatermarkConfig = WatermarkConfig(),
) -> Optional[WatermarkPlan]:
    """
    Fit the watermark block into an area.

    Starts at the configured logo/font sizes and shrinks both by
    ``shrink_factor`` each round until the block fits the height left after
    margins, both sizes reach their minimums, or ``max_iterations`` rounds
    have run.

    Args:
        available_width: Content width of the canvas
        available_height: Height of the bottom padding band
        metrics: Text measurement provider
        config: Watermark settings

    Returns:
        WatermarkPlan, or None when the block cannot fit
    """
    max_width = int(available_width * config.max_width_ratio)
    max_height = available_height - 2 * config.margin
    if max_width <= config.min_logo_size or max_height < config.min_logo_size:
        return None

    logo_size = min(config.logo_size, max_width)
    font_size = config.font_size
    plan = _measure(logo_size, font_size, max_width, config.captions, metrics, config.spacing)

    for _ in range(config.max_iterations):
        if plan.height <= max_height and plan.width <= max_width:
            return plan
        if logo_size == config.min_logo_size and font_size == config.min_font_size:
            break
        logo_size = max(config.min_logo_size, int(logo_size * config.shrink_factor))
        font_size = max(config.min_font_size, int(font_size * config.shrink_factor))
        plan = _measure(logo_size, font_size, max_width, config.captions, metrics, config.spacing)

    if plan.height <= max_height and plan.width <= max_width:
        return plan
    logger.debug(
        f"Watermark does not fit {max_width}x{max_height} even at "
        f"logo={logo_size} font={font_size}"
    )
    return None


def draw_watermark(
    canvas: Image.Image,
    layout: ResolvedLayout,
    logo: Image.Image,
    metrics: FontMetrics,
    config: WatermarkConfig = WatermarkConfig(),
) -> Optional[WatermarkPlan]:
    """
    Draw the watermark block inside the bottom padding band.

    The block is centered horizontally within the content column and
    vertically within the band. Nothing is drawn outside the band.

    Returns:
        The plan used, or None when the block did not fit
    """
    plan = plan_watermark(layout.content_width, layout.bottom_padding, metrics, config)
    if plan is None:
        return None

    x = layout.side_padding + (layout.content_width - plan.width) // 2
    y = layout.bottom_start + (layout.bottom_padding - plan.height) // 2

    # Fit the logo inside its square slot, keeping its aspect ratio
    fit = min(plan.logo_size / logo.width, plan.logo_size / logo.height)
    logo_w = max(1, round(logo.width * fit))
    logo_h = max(1, round(logo.height * fit))
    scaled_logo = logo.convert("RGBA").resize((logo_w, logo_h), Image.Resampling.LANCZOS)
    logo_x = x + (plan.logo_size - logo_w) // 2
    logo_y = y + (plan.height - logo_h) // 2
    canvas.paste(scaled_logo, (logo_x, logo_y), scaled_logo)

    if plan.lines:
        draw = ImageDraw.Draw(canvas)
        font = metrics.get_font(plan.font_size)
        text_x = x + plan.logo_size + config.spacing
        text_y = y + (plan.height - plan.text_height) // 2
        for index, line in enumerate(plan.lines):
            draw.text(
                (text_x, text_y + index * plan.line_height),
                line,
                fill=config.text_color,
                font=font,
            )

    logger.debug(
        f"Drew watermark {plan.width}x{plan.height} at ({x}, {y}) "
        f"logo={plan.logo_size} font={plan.font_size}"
    )
    return plan
