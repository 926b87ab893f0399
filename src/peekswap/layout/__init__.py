"""
Module: layout

Purpose:
    Pure composite layout: band heights and offsets for a cover/hidden
    image pair, plus preview projection.

Key Functions:
    - compute_layout(): Main entry point for layout
    - project_for_width(): Rescale for preview

Key Classes:
    - LayoutConfig: Tunable layout constants
    - ResolvedLayout: Resolved band layout

Used By:
    - output.compositor: Export rendering
    - state.ImageState, controller, cli
"""

from .config import LayoutConfig
from .models import Band, ResolvedLayout
from .engine import (
    assign_bands,
    build_plan_for_width,
    clamp_reveal_ratio,
    compute_layout,
    cover_floor,
    empty_layout,
)
from .projector import center_window, cover_visibility, preview_layout, project_for_width

__all__ = [
    # Config
    "LayoutConfig",
    # Models
    "Band",
    "ResolvedLayout",
    # Engine
    "assign_bands",
    "build_plan_for_width",
    "clamp_reveal_ratio",
    "compute_layout",
    "cover_floor",
    "empty_layout",
    # Projection
    "center_window",
    "cover_visibility",
    "preview_layout",
    "project_for_width",
]
