"""
Module: output.fonts

Purpose:
    Text measurement as an injectable capability. The watermark planner
    only needs widths and line heights, so it can be driven by a stub in
    tests and by Pillow fonts in production.

Key Classes:
    - FontMetrics: Protocol consumed by output.watermark
    - PillowFontMetrics: TrueType-backed implementation with fallbacks

Key Functions:
    - wrap_text(): Greedy line wrapping against a width budget

Dependencies:
    - PIL: Font loading and measurement

Used By:
    - output.watermark: Block sizing and drawing
    - output.compositor: Default metrics provider
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Protocol, Sequence

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Regular faces first; CJK-capable faces so Chinese captions render
FONT_CANDIDATES = (
    "DejaVuSans.ttf",
    "arial.ttf",
    "Arial.ttf",
    "NotoSansCJK-Regular.ttc",
    "NotoSansSC-Regular.otf",
    "msyh.ttc",
    "PingFang.ttc",
)


class FontMetrics(Protocol):
    """Text measurement provider."""

    def get_font(self, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        """Font object usable with ``ImageDraw.text``."""
        ...

    def text_width(self, text: str, size: int) -> int:
        """Rendered width of ``text`` in pixels."""
        ...

    def line_height(self, size: int) -> int:
        """Vertical advance of one line in pixels."""
        ...


@lru_cache(maxsize=64)
def _load_font(size: int, candidates: tuple[str, ...]) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """
    Load the first available TrueType font at ``size``.

    Falls back to Pillow's bundled default font if none is installed.
    """
    for font_name in candidates:
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    return ImageFont.load_default(size)


class PillowFontMetrics:
    """
    FontMetrics backed by Pillow fonts.

    Example:
        >>> metrics = PillowFontMetrics()
        >>> metrics.text_width("peekswap", 28) > 0
        True
    """

    def __init__(self, candidates: Sequence[str] = FONT_CANDIDATES, line_spacing: float = 1.25) -> None:
        self._candidates = tuple(candidates)
        self._line_spacing = line_spacing

    def get_font(self, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        return _load_font(size, self._candidates)

    def text_width(self, text: str, size: int) -> int:
        if not text:
            return 0
        return int(round(self.get_font(size).getlength(text)))

    def line_height(self, size: int) -> int:
        return max(1, int(round(size * self._line_spacing)))


def _tokens(text: str) -> List[str]:
    """Split into wrap units: words with their trailing space, or single characters."""
    if " " not in text.strip():
        return list(text)
    tokens: List[str] = []
    for word in text.split(" "):
        if word:
            tokens.append(word + " ")
    return tokens


def wrap_text(text: str, max_width: int, size: int, metrics: FontMetrics) -> List[str]:
    """
    Greedily wrap ``text`` so each line fits within ``max_width``.

    Text containing spaces breaks at word boundaries; text without spaces
    (CJK captions) breaks between characters. A single unit wider than
    the budget gets a line of its own.

    Args:
        text: Text to wrap
        max_width: Width budget in pixels
        size: Font size
        metrics: Measurement provider

    Returns:
        Wrapped lines (empty list for empty text)
    """
    lines: List[str] = []
    current = ""
    for token in _tokens(text):
        candidate = current + token
        if current and metrics.text_width(candidate.rstrip(), size) > max_width:
            lines.append(current.rstrip())
            current = token
        else:
            current = candidate
    if current.strip():
        lines.append(current.rstrip())
    return lines
