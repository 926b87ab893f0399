"""
Module: output.compositor

Purpose:
    Rasterise a ResolvedLayout with its two source bitmaps onto a white
    canvas and encode the result as JPEG. A tall composite shows the cover
    in a center-cropped preview and reveals the hidden image in full view.

Key Functions:
    - render_composite(): Main entry point (layout + bitmaps → JPEG)
    - draw_composite(): Draw onto a canvas without encoding
    - encode_jpeg(): Canvas → bytes
    - export_filename(): Timestamped download name

Key Classes:
    - CompositeOutput: Encoded bytes plus dimensions
    - CompositeError: Base for draw/encode failures
    - DrawError, EncodeError, MissingContentError

Dependencies:
    - PIL: Canvas, resampling, JPEG encoding
    - layout.models: ResolvedLayout
    - output.watermark: Optional watermark block

Used By:
    - controller: Compose pipeline
    - state.ImageState: Export
"""

from __future__ import annotations

import io
import logging
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from PIL import Image

from peekswap.ingest.models import SourceImage
from peekswap.layout.engine import assign_bands
from peekswap.layout.models import ResolvedLayout

from .fonts import FontMetrics, PillowFontMetrics
from .watermark import WatermarkConfig, draw_watermark

logger = logging.getLogger(__name__)

# Constants
DEFAULT_JPEG_QUALITY = 95
BACKGROUND_COLOR = (255, 255, 255)
JPEG_MEDIA_TYPE = "image/jpeg"


class MissingContentError(Exception):
    """Neither a cover nor a hidden image was supplied."""
    pass


class CompositeError(Exception):
    """Composite could not be produced; safe to retry."""
    pass


class DrawError(CompositeError):
    """Canvas could not be allocated or drawn."""
    pass


class EncodeError(CompositeError):
    """Canvas could not be encoded."""
    pass


def export_filename(now: Optional[float] = None) -> str:
    """Download name stamped with epoch milliseconds."""
    timestamp = time.time() if now is None else now
    return f"peekswap-{int(timestamp * 1000)}.jpg"


@dataclass(frozen=True)
class CompositeOutput:
    """
    Encoded composite (immutable).

    Attributes:
        data: Encoded image bytes
        width: Pixel width
        height: Pixel height
        filename: Suggested download name
        media_type: MIME type of ``data``
    """

    data: bytes = field(repr=False)
    width: int
    height: int
    filename: str
    media_type: str = JPEG_MEDIA_TYPE

    @property
    def size(self) -> int:
        """Encoded size in bytes."""
        return len(self.data)

    def save(self, path: Path) -> Path:
        """Write the encoded bytes to ``path`` (directories are created)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        logger.info(f"Saved composite {self.width}x{self.height} ({self.size} bytes) to {path}")
        return path


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _draw_hidden(canvas: Image.Image, layout: ResolvedLayout, image: SourceImage) -> None:
    """Draw the hidden bitmap stretched to the hidden band."""
    if layout.hidden_height <= 0:
        return
    resized = image.bitmap.resize(
        (layout.content_width, layout.hidden_height),
        Image.Resampling.LANCZOS,
    )
    canvas.paste(resized, (layout.side_padding, layout.hidden_start))


def _draw_cover(canvas: Image.Image, layout: ResolvedLayout, image: SourceImage) -> None:
    """
    Draw the cover bitmap into the cover band.

    A cover shorter than its band is centered vertically at its natural
    height; a taller one is center-cropped to fill the band exactly.
    """
    band = layout.cover_height
    if band <= 0:
        return

    bitmap = image.bitmap
    natural = max(1, _round(bitmap.height * layout.content_width / bitmap.width))

    if natural <= band:
        resized = bitmap.resize((layout.content_width, natural), Image.Resampling.LANCZOS)
        dest_y = layout.cover_start + (band - natural) // 2
    else:
        crop_height = max(1, _round(bitmap.height * band / natural))
        source_y = (bitmap.height - crop_height) // 2
        cropped = bitmap.crop((0, source_y, bitmap.width, source_y + crop_height))
        resized = cropped.resize((layout.content_width, band), Image.Resampling.LANCZOS)
        dest_y = layout.cover_start

    canvas.paste(resized, (layout.side_padding, dest_y))


def draw_composite(
    layout: ResolvedLayout,
    cover: Optional[SourceImage],
    hidden: Optional[SourceImage],
    watermark: Optional[Image.Image] = None,
    *,
    metrics: Optional[FontMetrics] = None,
    watermark_config: Optional[WatermarkConfig] = None,
) -> Image.Image:
    """
    Draw all bands onto a fresh white canvas.

    Draw order is hidden band, cover band, then watermark; bands never
    overlap, so the order only matters for the watermark.

    Raises:
        MissingContentError: If both images are absent
        DrawError: If the canvas cannot be allocated or drawn
    """
    cover, hidden = assign_bands(cover, hidden)
    if cover is None or layout is None or layout.is_empty:
        raise MissingContentError("Upload both photos before composing")
    if not layout.is_integral:
        raise DrawError("Layout must be integer-exact for export; do not render projected layouts")

    try:
        canvas = Image.new("RGB", (layout.target_width, layout.total_height), BACKGROUND_COLOR)
    except (ValueError, MemoryError) as e:
        raise DrawError(
            f"Could not allocate {layout.target_width}x{layout.total_height} canvas: {e}"
        ) from e

    try:
        if hidden is not None:
            _draw_hidden(canvas, layout, hidden)
        _draw_cover(canvas, layout, cover)
    except (OSError, ValueError, MemoryError) as e:
        raise DrawError(f"Failed to draw composite: {e}") from e

    if watermark is not None:
        try:
            draw_watermark(
                canvas,
                layout,
                watermark,
                metrics or PillowFontMetrics(),
                watermark_config or WatermarkConfig(),
            )
        except Exception as e:
            # Watermark is decoration; the composite stands without it
            logger.warning(f"Watermark skipped: {e}")

    return canvas


def encode_jpeg(canvas: Image.Image, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode a canvas as baseline JPEG.

    Raises:
        EncodeError: If encoding fails
    """
    buffer = io.BytesIO()
    try:
        canvas.convert("RGB").save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        raise EncodeError(f"Failed to encode composite: {e}") from e
    return buffer.getvalue()


def render_composite(
    layout: Optional[ResolvedLayout],
    cover: Optional[SourceImage],
    hidden: Optional[SourceImage],
    watermark: Optional[Image.Image] = None,
    *,
    metrics: Optional[FontMetrics] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
    watermark_config: Optional[WatermarkConfig] = None,
    now: Optional[float] = None,
) -> CompositeOutput:
    """
    Render and encode a composite.

    Args:
        layout: Integer layout from layout.compute_layout()
        cover: Cover image (a lone hidden image is promoted to cover)
        hidden: Hidden image
        watermark: Optional RGBA logo for the bottom band
        metrics: Font metrics for watermark captions
        quality: JPEG quality (1-95)
        watermark_config: Watermark sizing
        now: Epoch seconds for the filename (defaults to current time)

    Returns:
        CompositeOutput with JPEG bytes

    Raises:
        MissingContentError: If both images are absent
        DrawError: If drawing fails
        EncodeError: If encoding fails

    Example:
        >>> layout = compute_layout(cover, hidden, 0.4)
        >>> output = render_composite(layout, cover, hidden)
        >>> output.save(Path("out") / output.filename)
    """
    if layout is None:
        raise MissingContentError("Upload both photos before composing")

    canvas = draw_composite(
        layout,
        cover,
        hidden,
        watermark,
        metrics=metrics,
        watermark_config=watermark_config,
    )
    data = encode_jpeg(canvas, quality=quality)
    canvas.close()

    logger.info(
        f"Rendered composite {layout.target_width}x{layout.total_height} "
        f"({len(data)} bytes, quality {quality})"
    )
    return CompositeOutput(
        data=data,
        width=layout.target_width,
        height=layout.total_height,
        filename=export_filename(now),
    )
