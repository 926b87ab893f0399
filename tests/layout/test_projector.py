"""
Tests for layout.projector

Test Coverage:
- project_for_width(): linear scaling, round trip, validation
- preview_layout(): empty placeholder
- center_window(), cover_visibility()
"""
import pytest

from peekswap.ingest import ImageSize
from peekswap.layout import (
    center_window,
    compute_layout,
    cover_visibility,
    preview_layout,
    project_for_width,
)

NUMERIC_FIELDS = (
    "target_width", "target_height", "total_height", "top_padding", "cover_height",
    "gap_height", "hidden_height", "bottom_padding", "cover_start", "gap_start",
    "hidden_start", "bottom_start", "content_width", "side_padding",
)


@pytest.fixture
def layout():
    """Landscape pair at 1080 wide."""
    return compute_layout(ImageSize(1600, 900), ImageSize(1600, 900), 0.4)


def test_project_when_half_width_then_every_measure_halves(layout):
    """Projection multiplies every measure by the width ratio."""
    preview = project_for_width(layout, 540)

    for name in NUMERIC_FIELDS:
        assert getattr(preview, name) == pytest.approx(getattr(layout, name) / 2)
    assert preview.scale_factor == layout.scale_factor
    assert preview.has_hidden == layout.has_hidden


def test_project_when_odd_width_then_keeps_float_precision(layout):
    """Preview layouts are not snapped to integers."""
    preview = project_for_width(layout, 288)

    assert not preview.is_integral
    assert preview.total_height == pytest.approx(512.0)
    assert sum(preview.band_heights) == pytest.approx(preview.total_height)


def test_project_when_round_trip_then_original_recovered(layout):
    """Projecting there and back restores the layout."""
    back = project_for_width(project_for_width(layout, 333.3), layout.target_width)

    for name in NUMERIC_FIELDS:
        assert getattr(back, name) == pytest.approx(getattr(layout, name))


@pytest.mark.parametrize("width", [0, -10])
def test_project_when_width_not_positive_then_raises(layout, width):
    """Preview width must be positive."""
    with pytest.raises(ValueError, match="preview_width"):
        project_for_width(layout, width)


def test_preview_when_no_images_then_zero_bands():
    """Empty state still yields a renderable placeholder."""
    preview = preview_layout(None, None, 0.4, 360)

    assert preview.is_empty
    assert preview.target_width == 360
    assert preview.total_height == 0
    assert preview.target_height == pytest.approx(640.0)


def test_preview_when_images_then_projection_of_export_layout(layout):
    """preview_layout equals projecting compute_layout."""
    preview = preview_layout(ImageSize(1600, 900), ImageSize(1600, 900), 0.4, 360)

    assert preview == project_for_width(layout, 360)


def test_center_window_when_shorter_than_canvas_then_centered(layout):
    """The window sits around the vertical middle."""
    assert center_window(layout, 1080) == (420, 1500)


def test_center_window_when_taller_than_canvas_then_clipped(layout):
    """The window never extends past the canvas."""
    assert center_window(layout, 5000) == (0, 1920)


def test_cover_visibility_when_window_overlaps_cover_then_fraction(layout):
    """Share of the window filled by the cover band."""
    # Cover spans 436..1044, window spans 420..1500
    assert cover_visibility(layout, 1080) == pytest.approx(608 / 1080)


def test_cover_visibility_when_projected_then_unchanged(layout):
    """Visibility is scale independent."""
    preview = project_for_width(layout, 360)

    assert cover_visibility(preview, 360) == pytest.approx(cover_visibility(layout, 1080))
