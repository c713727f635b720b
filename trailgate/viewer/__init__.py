"""
TrailGate Viewer - Rendering components for the learner view.

This module provides:
- Step list with lock indicators and skip prices
- Watch progress display
- Skip and tip prompt text
"""

from .progress import (
    get_progress_css,
    format_amount,
    watch_color,
    gate_fill,
    minutes_left,
    get_status_indicator,
    render_watch_progress,
    render_step_list,
    describe_skip,
    describe_tip,
    STATUS_INDICATORS,
    CURRENT_INDICATOR,
)

__all__ = [
    "get_progress_css",
    "format_amount",
    "watch_color",
    "gate_fill",
    "minutes_left",
    "get_status_indicator",
    "render_watch_progress",
    "render_step_list",
    "describe_skip",
    "describe_tip",
    "STATUS_INDICATORS",
    "CURRENT_INDICATOR",
]
