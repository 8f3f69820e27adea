"""
engine/
-------
Playback layer.

    from spviz.engine import TimelineController, PlaybackState, ViewState
"""

from spviz.engine.timeline import (
    PlaybackState,
    TimelineController,
    ViewState,
    apply_step,
    confirmed_edges_before,
    initial_view,
    is_significant,
    next_significant_index,
    view_at,
)

__all__ = [
    "TimelineController",
    "PlaybackState",
    "ViewState",
    "initial_view",
    "apply_step",
    "confirmed_edges_before",
    "view_at",
    "is_significant",
    "next_significant_index",
]
