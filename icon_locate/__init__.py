"""Top-level package interface for icon_locate.

Expose the main API: locate_icons, suppress and the aggregation/annotation steps.
"""
from .core import locate_icons, detect_icons, write_results  # re-export
from .nms import suppress
from .aggregate import aggregate_results
from .postprocess import build_annotations

__all__ = [
    "locate_icons",
    "detect_icons",
    "write_results",
    "suppress",
    "aggregate_results",
    "build_annotations",
]
