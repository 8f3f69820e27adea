from spviz.engine import TimelineController
from spviz.ui import CONFIG, render_canvas


def test_static_render(triangle):
    svg = render_canvas(triangle)
    assert svg.startswith("<svg")
    assert svg.endswith("</svg>")
    assert svg.count('class="node"') == 3
    assert svg.count('class="edge unvisited"') == 3
    assert 'class="distance"' not in svg


def test_render_uses_view_statuses(triangle):
    ctl = TimelineController(triangle, 0, "dijkstra")
    view = ctl.final_view()
    svg = render_canvas(triangle, view, source_id=0)
    assert svg.count('class="edge included"') == 2
    assert svg.count('class="edge excluded"') == 1
    assert CONFIG.node_colors["source"] in svg
    assert ">3</text>" in svg


def test_unreached_distance_is_infinity(disconnected):
    ctl = TimelineController(disconnected, 0, "dijkstra")
    ctl.step_forward()
    svg = render_canvas(disconnected, ctl.view)
    assert "∞" in svg


def test_negative_cycle_is_dashed(negative_cycle):
    ctl = TimelineController(negative_cycle, 0, "bellmanford")
    svg = render_canvas(negative_cycle, ctl.final_view())
    assert 'class="edge negativecycle"' in svg
    assert f'stroke-dasharray="{CONFIG.edge_dash}"' in svg
    assert CONFIG.edge_weight_negative in svg


def test_label_is_escaped(make_graph):
    g = make_graph(1, [])
    g.nodes[0].label = "<b>"
    assert "&lt;b&gt;" in render_canvas(g)
