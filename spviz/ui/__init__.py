"""
ui/
---
Presentation layer.

    from spviz.ui import render_canvas
"""

from spviz.ui.canvas import CONFIG, CanvasConfig, render_canvas

__all__ = [
    "render_canvas",
    "CanvasConfig",
    "CONFIG",
]
