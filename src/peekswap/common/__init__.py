"""Shared constants and thresholds."""

from .thresholds import ASPECT_THRESHOLDS, TRIM_THRESHOLDS, AspectThresholds, TrimThresholds

__all__ = ["ASPECT_THRESHOLDS", "TRIM_THRESHOLDS", "AspectThresholds", "TrimThresholds"]
