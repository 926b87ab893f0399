"""
Tests for state.ImageState

Test Coverage:
- Upload, replace and remove with bitmap release
- Processing per configuration
- Derived layout, preview and export
"""
from unittest.mock import MagicMock

import pytest

from peekswap.config import ComposeConfig
from peekswap.ingest import DecodeError, SourceImage, UnsupportedCanvasError, UploadedFile
from peekswap.output import MissingContentError
from peekswap.state import ImageState


def _tracked(name="tracked.png", width=400, height=300):
    """SourceImage whose bitmap records close() calls."""
    bitmap = MagicMock(width=width, height=height, size=(width, height))
    return SourceImage(name, width, height, 0, bitmap)


class TestImageStateMutation:
    """Tests for upload/replace/remove."""

    def test_upload_when_both_slots_filled_then_ready(self, png_upload):
        """Two uploads make the state ready."""
        state = ImageState()

        state.upload("cover", png_upload(300, 400))
        assert not state.is_ready
        state.upload("hidden", png_upload(640, 480))

        assert state.is_ready
        assert state.cover.effective_size == (300, 400)
        assert state.hidden.effective_size == (640, 480)

    def test_set_image_when_replaced_then_previous_released(self):
        """Replacing an image closes the old bitmap."""
        # Arrange
        state = ImageState()
        first, second = _tracked("first.png"), _tracked("second.png")
        state.set_image("cover", first)

        # Act
        state.set_image("cover", second)

        # Assert
        first.bitmap.close.assert_called_once()
        second.bitmap.close.assert_not_called()
        assert state.cover is second

    def test_upload_when_decode_fails_then_previous_kept(self):
        """A failed upload leaves the slot untouched."""
        state = ImageState()
        previous = _tracked()
        state.set_image("hidden", previous)

        with pytest.raises(DecodeError):
            state.upload("hidden", UploadedFile("broken.png", b"garbage", "image/png"))

        assert state.hidden is previous
        previous.bitmap.close.assert_not_called()

    def test_remove_when_image_present_then_released(self):
        """Removing an image clears the slot and releases it."""
        state = ImageState()
        image = _tracked()
        state.set_image("cover", image)

        state.remove("cover")

        assert state.cover is None
        image.bitmap.close.assert_called_once()

    def test_context_manager_when_exited_then_everything_released(self):
        """Leaving the context closes both images."""
        cover, hidden = _tracked("c.png"), _tracked("h.png")

        with ImageState() as state:
            state.set_image("cover", cover)
            state.set_image("hidden", hidden)

        cover.bitmap.close.assert_called_once()
        hidden.bitmap.close.assert_called_once()

    def test_set_image_when_unknown_slot_then_raises(self):
        """Only cover and hidden slots exist."""
        with pytest.raises(ValueError, match="slot"):
            ImageState().set_image("background", _tracked())

    def test_set_reveal_ratio_when_out_of_range_then_clamped(self):
        """Stored ratios are always inside the domain."""
        state = ImageState(ComposeConfig(reveal_ratio=0.9))

        assert state.reveal_ratio == 0.55
        assert state.set_reveal_ratio(0.1) == 0.25
        assert state.set_reveal_ratio(None) == 0.4


class TestImageStateProcessing:
    """Tests for configured processing."""

    def test_upload_when_normalize_enabled_then_cropped_to_portrait(self, png_upload):
        """Aspect normalization runs on upload."""
        state = ImageState(ComposeConfig(normalize_aspect=True))

        image = state.upload("cover", png_upload(1000, 1000))

        assert image.effective_size == (563, 1000)
        assert (image.width, image.height) == (1000, 1000)

    def test_upload_when_processing_disabled_then_untouched(self, png_upload):
        """By default uploads are kept as decoded."""
        state = ImageState()

        image = state.upload("cover", png_upload(1000, 1000))

        assert not image.is_processed


class TestImageStateDerived:
    """Tests for layout, preview and export."""

    def test_layout_when_empty_then_none(self):
        """No images, no layout."""
        assert ImageState().layout() is None

    def test_preview_when_empty_then_zero_bands(self):
        """Preview always returns a placeholder layout."""
        preview = ImageState().preview(360)

        assert preview.is_empty
        assert preview.target_width == 360

    def test_layout_when_ratio_changes_then_recomputed(self, source_factory):
        """Layouts follow the stored ratio."""
        state = ImageState()
        state.set_image("cover", source_factory(1000, 10))
        state.set_image("hidden", source_factory(1000, 1000))

        low = state.layout()
        state.set_reveal_ratio(0.55)
        high = state.layout()

        assert high.cover_height > low.cover_height

    def test_export_when_empty_then_missing_content(self):
        """Exporting nothing is an error."""
        with pytest.raises(MissingContentError):
            ImageState().export()

    def test_export_when_pair_then_jpeg(self, png_upload):
        """A ready state exports a JPEG composite."""
        with ImageState(ComposeConfig(jpeg_quality=80)) as state:
            state.upload("cover", png_upload(900, 1600))
            state.upload("hidden", png_upload(1200, 900, color=(10, 200, 10)))

            output = state.export(now=1.0)

        assert output.filename == "peekswap-1000.jpg"
        assert output.data[:2] == b"\xff\xd8"
        assert (output.width, output.height) == (1080, 1920)


class TestImageStateRelease:
    """Tests for bitmap release on processing paths."""

    def test_upload_when_normalization_fails_then_decoded_bitmap_released(
        self, monkeypatch, png_upload
    ):
        """A decoded image that cannot be normalized is closed before the error surfaces."""
        # Arrange
        decoded = _tracked("decoded.png", 1000, 1000)
        monkeypatch.setattr("peekswap.state.decode_image", lambda file, max_bytes: decoded)

        def failing_normalize(image):
            raise UnsupportedCanvasError("no raster")

        monkeypatch.setattr("peekswap.state.normalize_aspect", failing_normalize)
        state = ImageState(ComposeConfig(normalize_aspect=True))

        # Act
        with pytest.raises(UnsupportedCanvasError):
            state.upload("cover", png_upload(1000, 1000))

        # Assert
        decoded.bitmap.close.assert_called_once()
        assert state.cover is None

    def test_upload_when_normalization_fails_after_trim_then_both_released(
        self, monkeypatch, png_upload
    ):
        """The intermediate trimmed bitmap is released as well."""
        # Arrange
        decoded = _tracked("decoded.png", 1000, 1000)
        trimmed = _tracked("decoded.png", 900, 900)
        monkeypatch.setattr("peekswap.state.decode_image", lambda file, max_bytes: decoded)
        monkeypatch.setattr("peekswap.state.trim_whitespace", lambda image: trimmed)

        def failing_normalize(image):
            raise UnsupportedCanvasError("no raster")

        monkeypatch.setattr("peekswap.state.normalize_aspect", failing_normalize)
        state = ImageState(ComposeConfig(trim_whitespace=True, normalize_aspect=True))

        # Act
        with pytest.raises(UnsupportedCanvasError):
            state.upload("hidden", png_upload(1000, 1000))

        # Assert
        decoded.bitmap.close.assert_called_once()
        trimmed.bitmap.close.assert_called_once()

    def test_upload_when_processed_then_decoded_bitmap_released(self, monkeypatch, png_upload):
        """The uncropped decode is closed once its crop is stored."""
        decoded = _tracked("decoded.png", 1000, 1000)
        trimmed = _tracked("decoded.png", 900, 900)
        monkeypatch.setattr("peekswap.state.decode_image", lambda file, max_bytes: decoded)
        monkeypatch.setattr("peekswap.state.trim_whitespace", lambda image: trimmed)
        state = ImageState(ComposeConfig(trim_whitespace=True))

        image = state.upload("cover", png_upload())

        assert image is trimmed
        decoded.bitmap.close.assert_called_once()
        trimmed.bitmap.close.assert_not_called()

    def test_process_when_cropped_then_input_left_open(self, monkeypatch):
        """process() never closes the image it was given."""
        original = _tracked("in.png", 1000, 1000)
        trimmed = _tracked("in.png", 900, 900)
        monkeypatch.setattr("peekswap.state.trim_whitespace", lambda image: trimmed)
        state = ImageState(ComposeConfig(trim_whitespace=True))

        result = state.process(original)

        assert result is trimmed
        original.bitmap.close.assert_not_called()


class TestImageStateNormalize:
    """Tests for normalizing an image already in a slot."""

    def test_normalize_when_square_then_slot_replaced_and_old_released(
        self, monkeypatch, source_factory
    ):
        """The slot holds the 9:16 crop and the square bitmap is closed."""
        # Arrange
        state = ImageState()
        square = source_factory(1000, 1000)
        monkeypatch.setattr(square.bitmap, "close", MagicMock())
        state.set_image("hidden", square)

        # Act
        result = state.normalize("hidden")

        # Assert
        assert state.hidden is result
        assert result.effective_size == (563, 1000)
        square.bitmap.close.assert_called_once()

    def test_normalize_when_already_portrait_then_unchanged(self):
        """Images within tolerance keep their bitmap."""
        state = ImageState()
        image = _tracked("portrait.png", 1080, 1920)
        state.set_image("cover", image)

        result = state.normalize("cover")

        assert result is image
        image.bitmap.close.assert_not_called()

    def test_normalize_when_slot_empty_then_none(self):
        """Nothing to normalize."""
        assert ImageState().normalize("cover") is None

    def test_normalize_when_crop_fails_then_slot_unchanged(self):
        """A failed crop leaves the current image in place."""
        # Arrange
        bitmap = MagicMock()
        bitmap.size = (1000, 1000)
        bitmap.crop.side_effect = OSError("no raster")
        image = SourceImage("bad.png", 1000, 1000, 0, bitmap, 1000, 1000)
        state = ImageState()
        state.set_image("cover", image)

        # Act & Assert
        with pytest.raises(UnsupportedCanvasError):
            state.normalize("cover")
        assert state.cover is image
        bitmap.close.assert_not_called()
