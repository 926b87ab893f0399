"""
Module: state

Purpose:
    Explicit session state for a front end: the current cover and hidden
    images and the reveal ratio. Layout is recomputed from this state on
    demand; the engine itself never reads it.

Key Classes:
    - ImageState: Injectable state container with upload/replace/remove
      and in-place 9:16 normalisation

Dependencies:
    - ingest: Decoding and optional processing
    - layout: compute_layout, preview_layout
    - output: render_composite

Used By:
    - cli: Holds the two images of a run
    - External UI collaborators
"""

from __future__ import annotations

import logging
from typing import Literal, Optional

from PIL import Image

from peekswap.config import ComposeConfig
from peekswap.ingest import (
    SourceImage,
    UploadedFile,
    decode_image,
    normalize_aspect,
    trim_whitespace,
)
from peekswap.layout import (
    ResolvedLayout,
    clamp_reveal_ratio,
    compute_layout,
    preview_layout,
)
from peekswap.output import CompositeOutput, FontMetrics, render_composite

logger = logging.getLogger(__name__)

Slot = Literal["cover", "hidden"]


class ImageState:
    """
    Current images and reveal ratio for one session.

    Replacing or removing an image releases the previous bitmap. Use as a
    context manager to release everything on exit.

    Example:
        >>> with ImageState(ComposeConfig()) as state:
        ...     state.upload("cover", UploadedFile("a.jpg", a_bytes))
        ...     state.upload("hidden", UploadedFile("b.jpg", b_bytes))
        ...     output = state.export()
    """

    def __init__(self, config: Optional[ComposeConfig] = None) -> None:
        self._config = config or ComposeConfig()
        self._cover: Optional[SourceImage] = None
        self._hidden: Optional[SourceImage] = None
        self._reveal_ratio = clamp_reveal_ratio(self._config.reveal_ratio, self._config.layout)

    # ─────────────────────────────────────────────────────────────────────────
    # Accessors
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def config(self) -> ComposeConfig:
        return self._config

    @property
    def cover(self) -> Optional[SourceImage]:
        return self._cover

    @property
    def hidden(self) -> Optional[SourceImage]:
        return self._hidden

    @property
    def reveal_ratio(self) -> float:
        return self._reveal_ratio

    @property
    def is_ready(self) -> bool:
        """True when both images are present."""
        return self._cover is not None and self._hidden is not None

    # ─────────────────────────────────────────────────────────────────────────
    # Mutation
    # ─────────────────────────────────────────────────────────────────────────

    def set_reveal_ratio(self, ratio: Optional[float]) -> float:
        """Store a clamped ratio and return the stored value."""
        self._reveal_ratio = clamp_reveal_ratio(ratio, self._config.layout)
        return self._reveal_ratio

    def process(self, image: SourceImage) -> SourceImage:
        """
        Apply the configured trim and aspect normalisation.

        ``image`` itself is never closed. Intermediate crops created here
        are released, including when a later step raises.
        """
        steps = []
        if self._config.trim_whitespace:
            steps.append(trim_whitespace)
        if self._config.normalize_aspect:
            steps.append(normalize_aspect)

        current = image
        try:
            for step in steps:
                processed = step(current)
                if processed is not current and current is not image:
                    current.close()
                current = processed
        except Exception:
            if current is not image:
                current.close()
            raise
        return current

    def upload(self, slot: Slot, file: UploadedFile) -> SourceImage:
        """
        Decode, process and store an upload in ``slot``.

        The previous image in that slot is released only after the new one
        decoded successfully. A decoded bitmap that fails processing is
        released before the error propagates.

        Raises:
            ValidationError, DecodeError, UnsupportedCanvasError
        """
        decoded = decode_image(file, max_bytes=self._config.max_upload_bytes)
        try:
            image = self.process(decoded)
        except Exception:
            decoded.close()
            raise
        if image is not decoded:
            # Crops are independent copies
            decoded.close()
        self.set_image(slot, image)
        return image

    def normalize(self, slot: Slot) -> Optional[SourceImage]:
        """
        Center-crop the image already in ``slot`` to the 9:16 target.

        The slot keeps its current image when it is already within
        tolerance; otherwise the old bitmap is released.

        Returns:
            The image now in ``slot`` (None if the slot is empty)

        Raises:
            UnsupportedCanvasError: If the crop fails (slot unchanged)
        """
        current = self._slot_image(slot)
        if current is None:
            return None
        normalized = normalize_aspect(current)
        self.set_image(slot, normalized)
        return normalized

    def _slot_image(self, slot: Slot) -> Optional[SourceImage]:
        if slot not in ("cover", "hidden"):
            raise ValueError(f"Unknown slot: {slot!r}")
        return self._cover if slot == "cover" else self._hidden

    def set_image(self, slot: Slot, image: Optional[SourceImage]) -> None:
        """Store ``image`` in ``slot``, releasing whatever it replaces."""
        previous = self._slot_image(slot)
        if slot == "cover":
            self._cover = image
        else:
            self._hidden = image
        if previous is not None and previous is not image:
            previous.close()
            logger.debug(f"Released previous {slot} image {previous.name}")

    def remove(self, slot: Slot) -> None:
        """Remove and release the image in ``slot``."""
        self.set_image(slot, None)

    def close(self) -> None:
        """Release both images."""
        self.remove("cover")
        self.remove("hidden")

    def __enter__(self) -> "ImageState":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ─────────────────────────────────────────────────────────────────────────
    # Derived values
    # ─────────────────────────────────────────────────────────────────────────

    def layout(self) -> Optional[ResolvedLayout]:
        """Resolve the export layout from the current state."""
        return compute_layout(
            self._cover,
            self._hidden,
            self._reveal_ratio,
            target_width=self._config.target_width,
            config=self._config.layout,
        )

    def preview(self, preview_width: float) -> ResolvedLayout:
        """Layout projected to an on-screen width (zero bands when empty)."""
        return preview_layout(
            self._cover,
            self._hidden,
            self._reveal_ratio,
            preview_width,
            config=self._config.layout,
        )

    def export(
        self,
        watermark: Optional[Image.Image] = None,
        *,
        metrics: Optional[FontMetrics] = None,
        now: Optional[float] = None,
    ) -> CompositeOutput:
        """
        Render the current state to a JPEG composite.

        Raises:
            MissingContentError: If no image is present
            CompositeError: If drawing or encoding fails
        """
        return render_composite(
            self.layout(),
            self._cover,
            self._hidden,
            watermark,
            metrics=metrics,
            quality=self._config.jpeg_quality,
            watermark_config=self._config.watermark,
            now=now,
        )
