"""
Module: controller

Purpose:
    Orchestrate a complete compose run from files on disk.
    Read → Validate → Decode → Trim → Normalize → Layout → Render → Write

Key Functions:
    - compose_files(): Main entry point for composing two image files

Key Classes:
    - ComposeResult: Complete run result
    - ComposeError: Exception for run failures

Dependencies:
    - state.ImageState: Holds and releases the two images
    - output.watermark: Logo lookup

Used By:
    - cli: Command line front end
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from peekswap.config import ComposeConfig
from peekswap.ingest import DecodeError, UnsupportedCanvasError, ValidationError, read_upload
from peekswap.layout import ResolvedLayout
from peekswap.output import (
    CompositeError,
    CompositeOutput,
    FontMetrics,
    MissingContentError,
    load_watermark,
)

from .state import ImageState

logger = logging.getLogger(__name__)


class ComposeError(Exception):
    """Error during the compose pipeline."""

    def __init__(self, message: str, *, user_error: bool = False) -> None:
        super().__init__(message)
        self.user_error = user_error


@dataclass(frozen=True)
class ComposeResult:
    """
    Complete compose result (immutable).

    Attributes:
        output: Encoded composite
        output_path: Where the composite was written (None if not saved)
        layout: Layout the composite was drawn from
        cover_size: Effective (width, height) of the cover after processing
        hidden_size: Effective (width, height) of the hidden image, if any
        watermarked: Whether a watermark logo was available
        elapsed_seconds: Wall time of the run
    """

    output: CompositeOutput
    output_path: Optional[Path]
    layout: ResolvedLayout
    cover_size: tuple[int, int]
    hidden_size: Optional[tuple[int, int]]
    watermarked: bool
    elapsed_seconds: float


def compose_files(
    cover_path: Path,
    hidden_path: Optional[Path],
    output_path: Optional[Path] = None,
    config: Optional[ComposeConfig] = None,
    *,
    metrics: Optional[FontMetrics] = None,
) -> ComposeResult:
    """
    Compose two image files into a reveal composite.

    Pipeline:
    1. Read and validate both uploads
    2. Decode (cover first, then hidden)
    3. Optionally trim white borders and normalise to 9:16
    4. Resolve the layout
    5. Render with the optional watermark and encode JPEG
    6. Write to ``output_path`` (a directory gets the timestamped name)

    Args:
        cover_path: Image shown in the preview window
        hidden_path: Image revealed in full view, or None for a single image
        output_path: File or directory to write to; None keeps it in memory
        config: Compose configuration
        metrics: Font metrics override for watermark captions

    Returns:
        ComposeResult with the encoded output and its layout

    Raises:
        ComposeError: If any step fails (``user_error`` is True for bad
            input files)

    Example:
        >>> result = compose_files(Path("cover.jpg"), Path("hidden.jpg"), Path("out"))
        >>> result.output_path.name
        'peekswap-1760000000000.jpg'
    """
    config = config or ComposeConfig()
    start_time = time.perf_counter()

    logger.info(
        f"Composing {cover_path.name} + {hidden_path.name if hidden_path else '(none)'} "
        f"at reveal ratio {config.reveal_ratio}"
    )

    with ImageState(config) as state:
        # 1-3. Ingest in draw order
        try:
            state.upload("cover", read_upload(cover_path))
            if hidden_path is not None:
                state.upload("hidden", read_upload(hidden_path))
        except (ValidationError, DecodeError) as e:
            raise ComposeError(str(e), user_error=True) from e
        except UnsupportedCanvasError as e:
            raise ComposeError(f"Failed to normalize image: {e}") from e

        # 4. Layout
        layout = state.layout()
        if layout is None:
            raise ComposeError("No usable image to compose", user_error=True)
        logger.info(
            f"Layout {layout.target_width}x{layout.total_height}: "
            f"top={layout.top_padding} cover={layout.cover_height} gap={layout.gap_height} "
            f"hidden={layout.hidden_height} bottom={layout.bottom_padding} "
            f"scale={layout.scale_factor:.3f}"
        )

        # 5. Render
        watermark = load_watermark(config.watermark_candidates) if config.watermark_candidates else None
        try:
            output = state.export(watermark, metrics=metrics)
        except MissingContentError as e:
            raise ComposeError(str(e), user_error=True) from e
        except CompositeError as e:
            raise ComposeError(f"Failed to compose images: {e}") from e
        finally:
            if watermark is not None:
                watermark.close()

        cover_size = state.cover.effective_size
        hidden_size = state.hidden.effective_size if state.hidden else None

    # 6. Write
    saved_path = None
    if output_path is not None:
        target = output_path / output.filename if output_path.is_dir() else output_path
        try:
            saved_path = output.save(target)
        except OSError as e:
            raise ComposeError(f"Failed to write {target}: {e}") from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"Compose finished in {elapsed:.2f}s")

    return ComposeResult(
        output=output,
        output_path=saved_path,
        layout=layout,
        cover_size=cover_size,
        hidden_size=hidden_size,
        watermarked=watermark is not None,
        elapsed_seconds=elapsed,
    )
