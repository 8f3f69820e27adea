import math

import pytest

from spviz.engine import (
    PlaybackState,
    TimelineController,
    ViewState,
    apply_step,
    confirmed_edges_before,
    initial_view,
    next_significant_index,
    view_at,
)
from spviz.graph import EdgeStatus, GraphError

GRAPHS = ["triangle", "negative_cycle", "diamond", "disconnected", "negative_edge"]
ALGORITHMS = ["dijkstra", "bellmanford"]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_controller(request, clock):
    def _make(graph_name="triangle", algorithm="dijkstra", interval=1.0):
        graph = request.getfixturevalue(graph_name)
        return TimelineController(graph, 0, algorithm, interval=interval, clock=clock)

    return _make


def _edge_ids(ctl):
    return [e.id for e in ctl.graph.edges]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------
def test_initial_view_all_unvisited(triangle):
    view = initial_view([e.id for e in triangle.edges])
    assert view.index == 0
    assert set(view.edge_statuses.values()) == {EdgeStatus.UNVISITED}
    assert view.confirmed_path_edges == frozenset()
    assert view.distances == {}


def test_apply_step_keeps_confirmed_edges(make_controller):
    ctl = make_controller("triangle", "bellmanford")
    steps = ctl.ensure_steps()
    ids = _edge_ids(ctl)
    view = initial_view(ids)
    for step in steps[:5]:
        view = apply_step(view, step, ids)
    # step 3 confirmed A->B; step 4 is "Check edge B->C"
    assert view.confirmed_path_edges == frozenset({"0-1"})
    assert view.edge_statuses["0-1"] is EdgeStatus.INCLUDED
    assert view.edge_statuses["1-2"] is EdgeStatus.CANDIDATE
    assert view.edge_statuses["0-2"] is EdgeStatus.UNVISITED
    assert view.current_edge == "1-2"


def test_apply_step_derives_updated_distances(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    steps = ctl.ensure_steps()
    ids = _edge_ids(ctl)
    before = view_at(steps, 4, ids)
    after = apply_step(before, steps[4], ids)
    assert after.updated_distances == (1,)
    assert before.updated_distances == ()


def test_confirmed_edges_before(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    steps = ctl.ensure_steps()
    assert confirmed_edges_before(steps, 0) == frozenset()
    assert confirmed_edges_before(steps, len(steps)) == frozenset({"0-1", "1-2"})


def test_view_at_clamps(make_controller):
    ctl = make_controller()
    steps = ctl.ensure_steps()
    ids = _edge_ids(ctl)
    assert view_at(steps, -3, ids) == initial_view(ids)
    assert view_at(steps, 99, ids) == view_at(steps, len(steps), ids)


def test_next_significant_index(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    steps = ctl.ensure_steps()
    # init and push steps are quiet; extracting A grows the visited set
    assert next_significant_index(steps, 0, 0) == 2
    assert next_significant_index(steps, len(steps), 0) == len(steps)


# ---------------------------------------------------------------------------
# Replay idempotence
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("graph_name", GRAPHS)
@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_forward_then_back_returns_to_reset(make_controller, graph_name, algorithm):
    ctl = make_controller(graph_name, algorithm)
    n = len(ctl.ensure_steps())
    for _ in range(n):
        assert ctl.step_forward()
    assert not ctl.step_forward()
    for _ in range(n):
        assert ctl.step_backward()
    assert not ctl.step_backward()
    assert ctl.view == initial_view(_edge_ids(ctl))
    assert all(e.status is EdgeStatus.UNVISITED for e in ctl.graph.edges)


@pytest.mark.parametrize("graph_name", GRAPHS)
@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_same_index_same_view(make_controller, graph_name, algorithm):
    ctl = make_controller(graph_name, algorithm)
    steps = ctl.ensure_steps()
    ids = _edge_ids(ctl)

    forward = [ctl.view]
    while ctl.step_forward():
        forward.append(ctl.view)
    assert len(forward) == len(steps) + 1

    backward = [ctl.view]
    while ctl.step_backward():
        backward.append(ctl.view)
    backward.reverse()

    for k in range(len(steps) + 1):
        assert forward[k] == backward[k] == view_at(steps, k, ids)


def test_confirmed_set_grows_forward(make_controller):
    ctl = make_controller("diamond", "bellmanford")
    previous = frozenset()
    while ctl.step_forward():
        assert previous <= ctl.view.confirmed_path_edges
        previous = ctl.view.confirmed_path_edges
        for eid in previous:
            assert ctl.view.edge_statuses[eid] is EdgeStatus.INCLUDED


def test_statuses_published_to_graph(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    for _ in range(4):
        ctl.step_forward()
    assert {e.id: e.status for e in ctl.graph.edges} == ctl.view.edge_statuses


# ---------------------------------------------------------------------------
# Skip to next significant event
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("graph_name", GRAPHS)
@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_skip_matches_manual_stepping(make_controller, graph_name, algorithm):
    skipper = make_controller(graph_name, algorithm)
    stepper = make_controller(graph_name, algorithm)

    while True:
        applied = skipper.skip_to_next_event()
        if applied == 0:
            break
        for _ in range(applied):
            stepper.step_forward()
        assert skipper.view == stepper.view
    assert skipper.index == len(skipper.steps)


def test_skip_lands_on_extraction(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    assert ctl.skip_to_next_event() == 3
    assert ctl.view.visited_nodes == (0,)
    assert ctl.view.explanation.startswith("Extracted node A")


def test_skip_lands_on_negative_cycle(make_controller):
    ctl = make_controller("negative_cycle", "bellmanford")
    steps = ctl.ensure_steps()
    witness = next(i for i, s in enumerate(steps) if s.explanation.startswith("Negative cycle"))
    ctl.jump_to(witness)
    assert ctl.skip_to_next_event() == 1
    assert ctl.view.negative_cycle_detected
    assert ctl.view.edge_statuses["1-2"] is EdgeStatus.NEGATIVE_CYCLE


def test_skip_runs_to_end_without_events(make_controller):
    ctl = make_controller("disconnected", "bellmanford")
    steps = ctl.ensure_steps()
    assert ctl.skip_to_next_event() == len(steps)
    assert ctl.state is PlaybackState.FINISHED
    assert ctl.message == "Reached the end of the algorithm execution."


# ---------------------------------------------------------------------------
# State machine & ticks
# ---------------------------------------------------------------------------
def test_lazy_generation(make_controller):
    ctl = make_controller()
    assert ctl.steps == []
    assert ctl.result is None
    ctl.step_forward()
    assert len(ctl.steps) == 13
    assert ctl.result.distances == {0: 0, 1: 1, 2: 3}


def test_run_pause_resume_finish(make_controller, clock):
    ctl = make_controller("triangle", "dijkstra", interval=1.0)
    assert ctl.state is PlaybackState.NOT_STARTED

    ctl.start()
    assert ctl.state is PlaybackState.RUNNING
    assert ctl.index == 0

    clock.now = 0.5
    assert not ctl.tick()
    clock.now = 1.0
    assert ctl.tick()
    assert ctl.index == 1

    ctl.pause()
    assert ctl.state is PlaybackState.PAUSED
    clock.now = 5.0
    assert not ctl.tick()

    ctl.resume()
    assert ctl.state is PlaybackState.RUNNING
    assert ctl.index == 1

    while ctl.state is PlaybackState.RUNNING:
        clock.now += 1.0
        ctl.tick()
    assert ctl.state is PlaybackState.FINISHED
    assert ctl.index == len(ctl.steps)

    ctl.step_backward()
    assert ctl.state is PlaybackState.PAUSED

    ctl.reset()
    assert ctl.state is PlaybackState.NOT_STARTED
    assert ctl.steps == []
    assert ctl.view == initial_view(_edge_ids(ctl))


def test_stale_tick_token_is_ignored(make_controller, clock):
    ctl = make_controller()
    ctl.start()
    token = ctl.tick_token
    ctl.pause()
    ctl.resume()
    clock.now = 10.0
    assert not ctl.tick(token=token)
    assert ctl.index == 0
    assert ctl.tick(token=ctl.tick_token)
    assert ctl.index == 1


def test_reset_cancels_pending_tick(make_controller, clock):
    ctl = make_controller()
    ctl.start()
    token = ctl.tick_token
    ctl.reset()
    clock.now = 10.0
    assert not ctl.tick(token=token)
    assert not ctl.tick()
    assert ctl.index == 0


def test_manual_step_from_not_started_pauses(make_controller):
    ctl = make_controller()
    ctl.step_forward()
    assert ctl.state is PlaybackState.PAUSED


def test_toggle_play(make_controller):
    ctl = make_controller()
    ctl.toggle_play()
    assert ctl.state is PlaybackState.RUNNING
    ctl.toggle_play()
    assert ctl.state is PlaybackState.PAUSED
    ctl.toggle_play()
    assert ctl.state is PlaybackState.RUNNING


def test_jump_to(make_controller):
    ctl = make_controller("diamond", "dijkstra")
    steps = ctl.ensure_steps()
    assert ctl.jump_to(5)
    assert ctl.view == view_at(steps, 5, _edge_ids(ctl))
    assert not ctl.jump_to(len(steps) + 1)
    assert not ctl.jump_to(-1)
    assert ctl.index == 5
    assert ctl.jump_to(len(steps))
    assert ctl.state is PlaybackState.FINISHED


def test_speed(make_controller):
    ctl = make_controller()
    ctl.set_speed("turbo")
    assert ctl.interval == 0.2
    ctl.set_speed("no-such-preset")
    assert ctl.interval == 1.0
    ctl.set_interval(0)
    assert ctl.interval > 0


# ---------------------------------------------------------------------------
# Configuration changes
# ---------------------------------------------------------------------------
def test_set_algorithm_discards_run(make_controller):
    ctl = make_controller()
    ctl.start()
    ctl.step_forward()
    ctl.set_algorithm("bellmanford")
    assert ctl.algorithm == "bellmanford"
    assert ctl.steps == []
    assert ctl.index == 0
    assert ctl.state is PlaybackState.NOT_STARTED


def test_unknown_algorithm(make_controller, triangle):
    ctl = make_controller()
    with pytest.raises(ValueError):
        ctl.set_algorithm("astar")
    assert ctl.algorithm == "dijkstra"
    with pytest.raises(ValueError):
        TimelineController(triangle, 0, "floyd")


def test_set_source(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    ctl.set_source(1)
    ctl.ensure_steps()
    assert ctl.result.distances == {0: math.inf, 1: 0, 2: 2}
    with pytest.raises(GraphError):
        ctl.set_source(3)


def test_load_new_graph(make_controller, diamond):
    ctl = make_controller("triangle", "dijkstra")
    ctl.skip_to_next_event()
    ctl.load(diamond, 0, "bellmanford")
    assert ctl.graph is diamond
    assert ctl.algorithm == "bellmanford"
    assert ctl.index == 0
    assert set(ctl.view.edge_statuses) == {e.id for e in diamond.edges}


# ---------------------------------------------------------------------------
# View mode
# ---------------------------------------------------------------------------
def test_final_view_triangle(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    view = ctl.final_view()
    assert view.edge_statuses == {
        "0-1": EdgeStatus.INCLUDED,
        "1-2": EdgeStatus.INCLUDED,
        "0-2": EdgeStatus.EXCLUDED,
    }
    assert view.distances == {0: 0, 1: 1, 2: 3}
    assert ctl.index == 0
    assert ctl.state is PlaybackState.NOT_STARTED


def test_final_view_destination(make_controller):
    ctl = make_controller("diamond", "bellmanford")
    view = ctl.final_view(destination=1)
    included = {k for k, v in view.edge_statuses.items() if v is EdgeStatus.INCLUDED}
    assert included == {"0-2", "2-1"}


def test_final_view_negative_cycle(make_controller):
    ctl = make_controller("negative_cycle", "bellmanford")
    view = ctl.final_view()
    assert view.negative_cycle_detected
    assert view.edge_statuses == {
        "0-1": EdgeStatus.UNVISITED,
        "1-2": EdgeStatus.NEGATIVE_CYCLE,
        "2-1": EdgeStatus.UNVISITED,
    }
    assert view.explanation == "Bellman–Ford detected a negative cycle. No shortest paths exist."


def test_final_view_does_not_move_index(make_controller):
    ctl = make_controller()
    ctl.step_forward()
    ctl.step_forward()
    before = ctl.view
    ctl.final_view()
    assert ctl.view is before


# ---------------------------------------------------------------------------
# Empty graph
# ---------------------------------------------------------------------------
def test_empty_graph(make_controller):
    ctl = make_controller("empty_graph")
    ctl.start()
    assert ctl.steps == []
    assert ctl.state is PlaybackState.FINISHED
    assert ctl.message.startswith("Graph is empty")
    assert not ctl.step_forward()
    assert not ctl.step_backward()
    assert ctl.skip_to_next_event() == 0
    view = ctl.final_view()
    assert view.edge_statuses == {}
    assert view.explanation == ctl.message


def test_view_to_dict(make_controller):
    ctl = make_controller("disconnected", "dijkstra")
    ctl.step_forward()
    d = ctl.view.to_dict()
    assert d["distanceArray"] == {"0": 0, "1": None}
    assert d["index"] == 1
    assert isinstance(ViewState().to_dict()["edgeStatuses"], dict)
    snap = ctl.snapshot()
    assert snap["state"] == "paused"
    assert snap["totalSteps"] == len(ctl.steps)


def test_snapshot_reports_progress(make_controller, clock):
    ctl = make_controller("triangle", "dijkstra")
    snap = ctl.snapshot()
    assert snap["currentStep"] is None
    assert snap["running"] is False
    assert snap["finished"] is False

    ctl.start()
    clock.now = 1.0
    ctl.tick()
    snap = ctl.snapshot()
    assert snap["running"] is True
    assert snap["currentStep"] == ctl.steps[0].to_dict()
    assert snap["currentStep"]["explanation"] == ctl.view.explanation

    ctl.jump_to(ctl.total_steps)
    snap = ctl.snapshot()
    assert snap["finished"] is True
    assert snap["running"] is False
    assert snap["currentStep"] == ctl.steps[-1].to_dict()


# ---------------------------------------------------------------------------
# Graph editing
# ---------------------------------------------------------------------------
def test_edits_discard_run(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    ctl.skip_to_next_event()
    node = ctl.add_node(40, 60)
    assert node.id == 3
    assert ctl.state is PlaybackState.NOT_STARTED
    assert ctl.steps == []

    ctl.step_forward()
    edge = ctl.add_edge(2, 3, 4)
    assert edge.id == "2-3"
    assert ctl.index == 0
    assert ctl.view.edge_statuses["2-3"] is EdgeStatus.UNVISITED
    ctl.ensure_steps()
    assert ctl.result.distances[3] == 7

    ctl.remove_edge("2-3")
    assert ctl.graph.get_edge("2-3") is None
    assert "2-3" not in ctl.view.edge_statuses


def test_remove_node_keeps_source_valid(make_controller):
    ctl = make_controller("diamond", "bellmanford")
    ctl.set_source(2)
    ctl.remove_node(0)
    assert ctl.source_id == 1
    ctl.remove_node(3)
    assert ctl.source_id == 1
    ctl.remove_node(1)
    assert ctl.source_id == 0
    assert ctl.steps == []
    ctl.ensure_steps()
    assert ctl.result.distances == {0: 0, 1: 1}


def test_edit_rejections(make_controller):
    ctl = make_controller("triangle", "dijkstra")
    with pytest.raises(GraphError, match="negative"):
        ctl.add_edge(2, 0, -1)
    for weight in (math.nan, math.inf, True, "3"):
        with pytest.raises(GraphError):
            ctl.add_edge(2, 0, weight)
    with pytest.raises(GraphError):
        ctl.remove_edge("2-0")
    with pytest.raises(GraphError):
        ctl.remove_node(5)
    assert ctl.graph.edge_count() == 3

    ctl.set_algorithm("bellmanford")
    ctl.add_edge(2, 0, -1)
    assert ctl.graph.get_edge("2-0").is_negative
