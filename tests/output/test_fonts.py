"""
Tests for output.fonts

Test Coverage:
- wrap_text(): word and character wrapping
- PillowFontMetrics: measurement and default-font fallback
"""
from PIL import ImageFont

from peekswap.output import PillowFontMetrics, wrap_text


class FixedWidthMetrics:
    """Every character is 10px wide."""

    def get_font(self, size):
        return ImageFont.load_default()

    def text_width(self, text, size):
        return len(text) * 10

    def line_height(self, size):
        return size + 4


def test_wrap_when_text_fits_then_single_line():
    """Short text stays on one line."""
    assert wrap_text("PeekSwap", 200, 20, FixedWidthMetrics()) == ["PeekSwap"]


def test_wrap_when_words_overflow_then_breaks_at_spaces():
    """Lines break between words."""
    lines = wrap_text("hello big world", 100, 20, FixedWidthMetrics())

    assert lines == ["hello big", "world"]


def test_wrap_when_no_spaces_then_breaks_between_characters():
    """CJK-style captions wrap per character."""
    lines = wrap_text("向下滚动查看", 30, 20, FixedWidthMetrics())

    assert lines == ["向下滚", "动查看"]


def test_wrap_when_word_longer_than_budget_then_own_line():
    """An oversized word is not split."""
    lines = wrap_text("a supercalifragilistic", 50, 20, FixedWidthMetrics())

    assert lines == ["a", "supercalifragilistic"]


def test_wrap_when_empty_then_no_lines():
    """Empty text produces nothing."""
    assert wrap_text("", 100, 20, FixedWidthMetrics()) == []


def test_pillow_metrics_when_measuring_then_positive_sizes():
    """Real fonts report non-zero widths and spaced line heights."""
    metrics = PillowFontMetrics()

    assert metrics.text_width("", 20) == 0
    assert metrics.text_width("PeekSwap", 20) > 0
    assert metrics.line_height(20) == 25


def test_pillow_metrics_when_no_font_installed_then_default_font():
    """Missing TrueType fonts fall back to Pillow's default."""
    metrics = PillowFontMetrics(candidates=("no-such-font-peekswap.ttf",))

    font = metrics.get_font(17)

    assert font is not None
    assert metrics.text_width("abc", 17) > 0
