"""
Module: output

Purpose:
    Rasterise resolved layouts into encoded composites, with an optional
    watermark block in the bottom padding band.

Key Functions:
    - render_composite(): Layout + bitmaps → JPEG
    - load_watermark(): Logo from candidate paths

Key Classes:
    - CompositeOutput: Encoded result
    - FontMetrics, PillowFontMetrics: Text measurement
    - WatermarkConfig: Watermark sizing

Dependencies:
    - PIL: Drawing and encoding

Used By:
    - controller, state.ImageState
"""

from .compositor import (
    CompositeError,
    CompositeOutput,
    DrawError,
    EncodeError,
    MissingContentError,
    draw_composite,
    encode_jpeg,
    export_filename,
    render_composite,
)
from .fonts import FontMetrics, PillowFontMetrics, wrap_text
from .watermark import (
    WatermarkConfig,
    WatermarkLoadError,
    WatermarkPlan,
    default_watermark_candidates,
    draw_watermark,
    load_watermark,
    plan_watermark,
)

__all__ = [
    # Compositor
    "CompositeError",
    "CompositeOutput",
    "DrawError",
    "EncodeError",
    "MissingContentError",
    "draw_composite",
    "encode_jpeg",
    "export_filename",
    "render_composite",
    # Fonts
    "FontMetrics",
    "PillowFontMetrics",
    "wrap_text",
    # Watermark
    "WatermarkConfig",
    "WatermarkLoadError",
    "WatermarkPlan",
    "default_watermark_candidates",
    "draw_watermark",
    "load_watermark",
    "plan_watermark",
]
