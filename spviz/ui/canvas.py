"""
canvas.py — SVG Graph Renderer
================================
Pure rendering function: Graph + ViewState → SVG string.

The renderer consumes:
  • graph      – the Graph object (node positions, edges, weights)
  • view       – the ViewState on screen (edge statuses, distances, visited)
  • config     – visual config (canvas size, colors, fonts, …)

And produces an SVG string ready to inject into the DOM.

Design decisions:
  - NO mutation.  The caller passes in everything it needs and gets back
    a string.
  - Edge coloring is a dict lookup: EdgeStatus value → hex color.  Without
    a view the edge's own `status` is used.
  - Negative-cycle edges are dashed; negative weights get their own label
    color so they stand out before any run.
  - Distance labels sit above each node; ∞ for unreached.
"""

import math
from html import escape
from typing import Dict, Optional

from spviz.algorithms.step import format_distance
from spviz.engine.timeline import ViewState
from spviz.graph import Edge, EdgeStatus, Graph, Node


# ---------------------------------------------------------------------------
# Visual Config: color palette, dimensions, fonts
# ---------------------------------------------------------------------------
class CanvasConfig:
    # canvas
    width:  int = 800
    height: int = 500
    bg:     str = "#0d1117"

    # node colors
    node_colors: Dict[str, str] = {
        "unvisited": "#1c2128",   # dark grey
        "visited":   "#10b981",   # emerald green
        "source":    "#0ea5e9",   # cyan
    }

    # edge colors (EdgeStatus value → stroke)
    edge_colors: Dict[str, str] = {
        "unvisited":     "#30363d",   # medium grey
        "candidate":     "#f59e0b",   # amber, under inspection
        "relaxed":       "#06b6d4",   # teal pulse
        "included":      "#a855f7",   # purple, on the tree
        "excluded":      "#21262d",   # faded grey
        "negativecycle": "#ef4444",   # red
    }

    # node
    node_radius:        int = 20
    node_stroke:        str = "#30363d"
    node_stroke_width:  int = 2
    node_label_color:   str = "#e6edf3"
    node_label_size:    int = 13
    node_label_weight:  str = "600"

    # distance label above the node
    distance_color:         str = "#7d8590"
    distance_color_updated: str = "#f59e0b"
    distance_size:          int = 11

    # edge
    edge_width:          int = 2
    edge_width_included: int = 4
    edge_arrow_size:     int = 10
    edge_dash:           str = "6,4"
    edge_weight_color:   str = "#7d8590"
    edge_weight_negative: str = "#ef4444"
    edge_weight_size:    int = 12
    edge_weight_bg:      str = "#161b22"


CONFIG = CanvasConfig()


# ---------------------------------------------------------------------------
# Main Render Function
# ---------------------------------------------------------------------------
def render_canvas(
    graph: Graph,
    view: Optional[ViewState] = None,
    config: CanvasConfig = CONFIG,
    source_id: Optional[int] = None,
) -> str:
    """
    Returns an SVG string.

    Args:
        graph     : The graph to render.
        view      : ViewState on screen (or None for the static graph).
        config    : Visual config.
        source_id : Node drawn in the source color.
    """

    svg_parts = [
        f'<svg width="{config.width}" height="{config.height}" '
        f'viewBox="0 0 {config.width} {config.height}" '
        f'xmlns="http://www.w3.org/2000/svg" style="background: {config.bg};">'
    ]
    svg_parts.append(
        f'<rect width="{config.width}" height="{config.height}" fill="{config.bg}"/>'
    )

    # -- edges (draw first so nodes sit on top) --
    for edge in graph.edges:
        svg_parts.append(_render_edge(graph, edge, view, config))

    # -- nodes --
    for node in graph.nodes:
        svg_parts.append(_render_node(node, view, config, source_id))

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


# ---------------------------------------------------------------------------
# Node Rendering
# ---------------------------------------------------------------------------
def _render_node(
    node: Node,
    view: Optional[ViewState],
    config: CanvasConfig,
    source_id: Optional[int],
) -> str:
    if node.id == source_id:
        fill = config.node_colors["source"]
    elif view and node.id in view.visited_nodes:
        fill = config.node_colors["visited"]
    else:
        fill = config.node_colors["unvisited"]

    cx, cy = node.x, node.y
    r = config.node_radius

    parts = [
        f'<g class="node" data-id="{node.id}">',
        f'  <circle cx="{cx}" cy="{cy}" r="{r}" '
        f'fill="{fill}" stroke="{config.node_stroke}" stroke-width="{config.node_stroke_width}"/>',
        f'  <text x="{cx}" y="{cy + 5}" text-anchor="middle" '
        f'font-size="{config.node_label_size}" font-family="\'DM Sans\', sans-serif" '
        f'fill="{config.node_label_color}" font-weight="{config.node_label_weight}">{escape(node.label)}</text>',
    ]

    if view and node.id in view.distances:
        color = config.distance_color
        if node.id in view.updated_distances:
            color = config.distance_color_updated
        parts.append(
            f'  <text class="distance" x="{cx}" y="{cy - r - 6}" text-anchor="middle" '
            f'font-size="{config.distance_size}" font-family="\'JetBrains Mono\', monospace" '
            f'fill="{color}">{format_distance(view.distances[node.id])}</text>'
        )

    parts.append('</g>')
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Edge Rendering
# ---------------------------------------------------------------------------
def _render_edge(graph: Graph, edge: Edge, view: Optional[ViewState], config: CanvasConfig) -> str:
    src_node = graph.get_node(edge.source)
    tgt_node = graph.get_node(edge.target)
    if not src_node or not tgt_node:
        return ""

    status = edge.status
    if view is not None:
        status = view.edge_statuses.get(edge.id, EdgeStatus.UNVISITED)

    stroke = config.edge_colors.get(status.value, config.edge_colors["unvisited"])
    stroke_width = config.edge_width
    if status is EdgeStatus.INCLUDED:
        stroke_width = config.edge_width_included
    dash = ""
    if status is EdgeStatus.NEGATIVE_CYCLE:
        dash = f' stroke-dasharray="{config.edge_dash}"'

    # shorten the line by node_radius on both ends
    x1, y1 = src_node.x, src_node.y
    x2, y2 = tgt_node.x, tgt_node.y
    dx, dy = x2 - x1, y2 - y1
    dist = math.sqrt(dx * dx + dy * dy)
    if dist < 0.001:
        return ""  # coincident nodes

    ux, uy = dx / dist, dy / dist
    r = config.node_radius

    x1_adj = x1 + ux * r
    y1_adj = y1 + uy * r
    x2_adj = x2 - ux * r
    y2_adj = y2 - uy * r

    parts = [f'<g class="edge {status.value}" data-id="{edge.id}">']
    parts.append(
        f'  <line x1="{x1_adj}" y1="{y1_adj}" x2="{x2_adj}" y2="{y2_adj}" '
        f'stroke="{stroke}" stroke-width="{stroke_width}"{dash}/>'
    )
    parts.append(_render_arrow(x2_adj, y2_adj, ux, uy, stroke, config))

    # weight label, offset perpendicular so opposite edges don't collide
    mx = (x1 + x2) / 2
    my = (y1 + y2) / 2
    perp_x = -uy * 12
    perp_y = ux * 12
    weight_color = config.edge_weight_negative if edge.is_negative else config.edge_weight_color
    parts.append(
        f'  <circle cx="{mx + perp_x}" cy="{my + perp_y}" r="12" '
        f'fill="{config.edge_weight_bg}" opacity="0.9"/>'
    )
    parts.append(
        f'  <text x="{mx + perp_x}" y="{my + perp_y + 4}" text-anchor="middle" '
        f'font-size="{config.edge_weight_size}" font-family="\'DM Sans\', sans-serif" '
        f'fill="{weight_color}" font-weight="600">{format_distance(edge.weight)}</text>'
    )

    parts.append('</g>')
    return "\n".join(parts)


def _render_arrow(x: float, y: float, ux: float, uy: float, color: str, config: CanvasConfig) -> str:
    """Draw an arrowhead at (x, y) pointing in direction (ux, uy)."""
    size = config.edge_arrow_size
    px, py = -uy, ux
    p1_x = x - ux * size + px * (size * 0.5)
    p1_y = y - uy * size + py * (size * 0.5)
    p2_x = x - ux * size - px * (size * 0.5)
    p2_y = y - uy * size - py * (size * 0.5)
    return f'<polygon points="{x},{y} {p1_x},{p1_y} {p2_x},{p2_y}" fill="{color}"/>'
