"""
timeline.py — Step Replay & View Reconciliation
================================================
The TimelineController is the ONLY object the host interacts with during
a run.  It owns the Step list and the current index, and turns any index
into a renderable ViewState.

Index semantics:
    view at index 0   – the empty Reset view
    view at index k   – steps[0 … k-1] applied in order; steps[k-1] is
                        the step on screen

Applying a step (forward):
    1. every edge outside the confirmed path set → UNVISITED,
       every edge inside it → INCLUDED
    2. overlay the step's edge_updates
    3. merge path_edge_updates into the confirmed set, force them INCLUDED
    4. copy the step's total snapshots (distances, visited, heap, pass)

Stepping back never inverts a step.  The confirmed set is recomputed
from scratch and the previous step re-applied (`view_at`), so the same
index always yields the same view, whichever way it was reached.

State machine:
    NOT_STARTED →  start()   → RUNNING
    RUNNING     →  pause()   → PAUSED
    PAUSED      →  resume()  → RUNNING
    RUNNING     →  (index reaches end) → FINISHED
    any         →  reset()   → NOT_STARTED

Manual next / back / skip / jump work from every state.  From NOT_STARTED
they move to PAUSED; reaching the end from PAUSED also finishes; stepping
back from FINISHED returns to PAUSED.

Thread safety:
  This class is NOT thread-safe.  Auto-replay is driven by calling
  tick() from the host's single event loop / timer.  Every pause, resume,
  start, reset or load bumps `tick_token`; a tick carrying an older token
  (or arriving while not RUNNING) does nothing, so a stale timer can never
  apply a step from a discarded run.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from spviz.algorithms import AlgoInfo, HeapEntry, ShortestPathResult, Step, get_algorithm
from spviz.algorithms.step import json_distances
from spviz.config import MIN_INTERVAL, PLAYBACK_DEFAULTS, SPEED_PRESETS
from spviz.graph import Edge, EdgeStatus, Graph, GraphError, Node
from spviz.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackState(Enum):
    NOT_STARTED = "not_started"
    RUNNING     = "running"
    PAUSED      = "paused"
    FINISHED    = "finished"


# ---------------------------------------------------------------------------
# ViewState: everything the renderer needs for one frame
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ViewState:
    """
    Attributes:
        index                   : Number of steps applied.
        edge_statuses           : {edge_id: EdgeStatus} for every edge of the graph.
        confirmed_path_edges    : Edges confirmed as tree edges by steps[0 … index-1].
        distances               : Distance table of the step on screen.
        visited_nodes           : Visited set of the step on screen (Dijkstra).
        min_heap                : Priority-queue snapshot (Dijkstra).
        iteration_count         : Bellman-Ford pass.
        negative_cycle_detected : Negative-cycle flag of the step on screen.
        explanation             : Explanation of the step on screen.
        algorithm_step          : Pseudocode label of the step on screen.
        current_edge            : First edge touched by the step on screen.
        updated_distances       : Nodes whose distance changed with this step.
    """

    index:                   int                     = 0
    edge_statuses:           Dict[str, EdgeStatus]   = field(default_factory=dict)
    confirmed_path_edges:    FrozenSet[str]          = frozenset()
    distances:               Dict[int, float]        = field(default_factory=dict)
    visited_nodes:           Tuple[int, ...]         = ()
    min_heap:                Tuple[HeapEntry, ...]   = ()
    iteration_count:         int                     = 0
    negative_cycle_detected: bool                    = False
    explanation:             str                     = ""
    algorithm_step:          str                     = ""
    current_edge:            Optional[str]           = None
    updated_distances:       Tuple[int, ...]         = ()

    def to_dict(self) -> dict:
        return {
            "index":                  self.index,
            "edgeStatuses":          {k: v.value for k, v in self.edge_statuses.items()},
            "confirmedPathEdges":    sorted(self.confirmed_path_edges),
            "distanceArray":         json_distances(self.distances),
            "visitedNodes":          list(self.visited_nodes),
            "minHeap":               [e.to_dict() for e in self.min_heap],
            "iterationCount":        self.iteration_count,
            "negativeCycleDetected": self.negative_cycle_detected,
            "explanation":           self.explanation,
            "algorithmStep":         self.algorithm_step,
            "currentEdge":           self.current_edge,
            "updatedDistances":      list(self.updated_distances),
        }


# ---------------------------------------------------------------------------
# Pure reconciliation helpers
# ---------------------------------------------------------------------------
def initial_view(edge_ids: Sequence[str]) -> ViewState:
    return ViewState(edge_statuses={eid: EdgeStatus.UNVISITED for eid in edge_ids})


def apply_step(view: ViewState, step: Step, edge_ids: Sequence[str]) -> ViewState:
    """The view after applying `step` on top of `view`.  Does not mutate either."""
    confirmed = view.confirmed_path_edges
    statuses = {
        eid: EdgeStatus.INCLUDED if eid in confirmed else EdgeStatus.UNVISITED
        for eid in edge_ids
    }
    for update in step.edge_updates:
        if update.id in statuses:
            statuses[update.id] = update.status

    if step.path_edge_updates:
        confirmed = confirmed | frozenset(step.path_edge_updates)
        for eid in step.path_edge_updates:
            if eid in statuses:
                statuses[eid] = EdgeStatus.INCLUDED

    previous = view.distances
    updated = tuple(
        nid for nid, d in step.distance_array.items()
        if nid in previous and previous[nid] != d
    )

    return ViewState(
        index=view.index + 1,
        edge_statuses=statuses,
        confirmed_path_edges=confirmed,
        distances=dict(step.distance_array),
        visited_nodes=step.visited_nodes,
        min_heap=step.min_heap,
        iteration_count=step.iteration_count,
        negative_cycle_detected=step.negative_cycle_detected,
        explanation=step.explanation,
        algorithm_step=step.algorithm_step,
        current_edge=step.edge_updates[0].id if step.edge_updates else None,
        updated_distances=updated,
    )


def confirmed_edges_before(steps: Sequence[Step], index: int) -> FrozenSet[str]:
    """Union of path_edge_updates over steps[0 … index-1]."""
    confirmed = set()
    for step in steps[:max(index, 0)]:
        confirmed.update(step.path_edge_updates)
    return frozenset(confirmed)


def view_at(steps: Sequence[Step], index: int, edge_ids: Sequence[str]) -> ViewState:
    """Rebuild the view at `index` from scratch (random seek / step back)."""
    index = max(0, min(index, len(steps)))
    if index == 0:
        return initial_view(edge_ids)
    baseline = ViewState(
        index=index - 1,
        confirmed_path_edges=confirmed_edges_before(steps, index - 1),
        distances=dict(steps[index - 2].distance_array) if index >= 2 else {},
    )
    return apply_step(baseline, steps[index - 1], edge_ids)


def is_significant(step: Step, visited_count: int) -> bool:
    """New tree edge, more visited nodes than `visited_count`, or a negative cycle."""
    return (
        bool(step.path_edge_updates)
        or len(step.visited_nodes) > visited_count
        or step.negative_cycle_detected
    )


def next_significant_index(steps: Sequence[Step], start: int, visited_count: int) -> int:
    """Index of the first significant step at or after `start`, or len(steps)."""
    index = max(start, 0)
    while index < len(steps) and not is_significant(steps[index], visited_count):
        index += 1
    return index


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class TimelineController:
    """
    Attributes:
        graph       : The graph being run (frozen while steps exist).
        source_id   : Start node.
        algorithm   : Registry key ("dijkstra" / "bellmanford").
        steps       : Generated Step list (empty until first needed).
        result      : ShortestPathResult of the generated run, or None.
        view        : Current ViewState.
        state       : PlaybackState.
        interval    : Seconds between auto-replay ticks.
        tick_token  : Changes whenever pending ticks must be ignored.
        message     : Status line for the host ("Reached the end…"), not part of the view.
    """

    def __init__(
        self,
        graph: Optional[Graph] = None,
        source_id: int = 0,
        algorithm: str = PLAYBACK_DEFAULTS.default_algorithm,
        interval: float = PLAYBACK_DEFAULTS.interval,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._info:     AlgoInfo                    = self._lookup(algorithm)
        self.graph:     Graph                       = graph if graph is not None else Graph()
        self.source_id: int                         = source_id
        self.interval:  float                       = max(MIN_INTERVAL, interval)
        self._clock:    Callable[[], float]         = clock

        self.steps:      List[Step]                   = []
        self.result:     Optional[ShortestPathResult] = None
        self.view:       ViewState                    = initial_view(self._edge_ids())
        self.state:      PlaybackState                = PlaybackState.NOT_STARTED
        self.tick_token: int                          = 0
        self.message:    str                          = ""

        self._generated: bool  = False
        self._last_tick: float = 0.0

    # ------------------------------------------------------------------
    # Configuration (each change discards the current run)
    # ------------------------------------------------------------------
    @property
    def algorithm(self) -> str:
        return self._info.key

    @property
    def algorithm_info(self) -> AlgoInfo:
        return self._info

    def load(
        self,
        graph: Graph,
        source_id: Optional[int] = None,
        algorithm: Optional[str] = None,
    ) -> None:
        """Swap in a new graph (and optionally source / algorithm), then reset."""
        if algorithm is not None:
            self._info = self._lookup(algorithm)
        self.graph = graph
        if source_id is not None:
            self.source_id = source_id
        logger.info(
            "Loaded %r, source=%s, algorithm=%s", graph, self.source_id, self.algorithm
        )
        self.reset()

    def set_algorithm(self, key: str) -> None:
        self._info = self._lookup(key)
        self.reset()

    def set_source(self, source_id: int) -> None:
        if self.graph.get_node(source_id) is None:
            raise GraphError(f"source id {source_id!r} is not a node of {self.graph!r}")
        self.source_id = source_id
        self.reset()

    def set_speed(self, preset: str) -> None:
        self.interval = SPEED_PRESETS.get(preset, PLAYBACK_DEFAULTS.interval)

    def set_interval(self, seconds: float) -> None:
        self.interval = max(MIN_INTERVAL, seconds)

    # ------------------------------------------------------------------
    # Graph editing (each edit discards the current run)
    # ------------------------------------------------------------------
    def add_node(self, x: float, y: float) -> Node:
        node = self.graph.add_node(x, y)
        self.reset()
        return node

    def remove_node(self, node_id: int) -> None:
        """Delete a node; the source follows the renumbering, or falls back to 0."""
        if self.graph.get_node(node_id) is None:
            raise GraphError(f"node {node_id!r} is not a node of {self.graph!r}")
        self.graph.remove_node(node_id)
        if self.source_id == node_id:
            self.source_id = 0
        elif self.source_id > node_id:
            self.source_id -= 1
        self.reset()

    def add_edge(self, source: int, target: int, weight: float) -> Edge:
        if isinstance(weight, bool) or not isinstance(weight, Real) or not math.isfinite(weight):
            raise GraphError(f"edge weight must be a finite number, got {weight!r}")
        if weight < 0 and not self._info.supports_negative:
            raise GraphError(f"{self._info.label} does not accept negative weights")
        edge = self.graph.add_edge(source, target, weight)
        self.reset()
        return edge

    def remove_edge(self, edge_id: str) -> None:
        if self.graph.get_edge(edge_id) is None:
            raise GraphError(f"edge {edge_id!r} is not an edge of {self.graph!r}")
        self.graph.remove_edge(edge_id)
        self.reset()

    # ------------------------------------------------------------------
    # Step generation (lazy)
    # ------------------------------------------------------------------
    def ensure_steps(self) -> List[Step]:
        """Generate the run on first need; later calls return the same list."""
        if self._generated:
            return self.steps

        if self.graph.node_count() == 0:
            self.steps = []
            self.result = ShortestPathResult()
            self.message = "Graph is empty. Add nodes or generate a graph first."
        else:
            self.steps, self.result = self._info.fn(
                self.graph.nodes, self.graph.edges, self.source_id
            )
        self._generated = True
        logger.info("Generated %d %s steps", len(self.steps), self.algorithm)
        return self.steps

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin auto-replay from the current index (resumes if paused)."""
        if self.state is PlaybackState.PAUSED:
            self.resume()
            return
        if self.state is not PlaybackState.NOT_STARTED:
            return
        self.ensure_steps()
        self.state = PlaybackState.RUNNING
        self._arm()
        logger.info("Auto-replay started at step %d/%d", self.index, len(self.steps))
        self._finish_if_at_end()

    def pause(self) -> None:
        if self.state is not PlaybackState.RUNNING:
            return
        self.state = PlaybackState.PAUSED
        self.tick_token += 1
        logger.info("Paused at step %d/%d", self.index, len(self.steps))

    def resume(self) -> None:
        if self.state is not PlaybackState.PAUSED:
            return
        self.state = PlaybackState.RUNNING
        self._arm()
        logger.info("Resumed at step %d/%d", self.index, len(self.steps))
        self._finish_if_at_end()

    def toggle_play(self) -> None:
        if self.state is PlaybackState.RUNNING:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        """Discard the run: no steps, index 0, empty view, all edges unvisited."""
        self.steps = []
        self.result = None
        self._generated = False
        self.state = PlaybackState.NOT_STARTED
        self.tick_token += 1
        self.message = ""
        self.graph.reset_statuses()
        self.view = initial_view(self._edge_ids())
        logger.info("Timeline reset")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def step_forward(self) -> bool:
        """Apply steps[index].  Returns False (no-op) at the end."""
        steps = self.ensure_steps()
        if self.index >= len(steps):
            self._finish_if_at_end()
            return False
        self._leave_not_started()
        self._show(apply_step(self.view, steps[self.index], self._edge_ids()))
        logger.debug("Forward to step %d/%d", self.index, len(steps))
        self._finish_if_at_end()
        return True

    def step_backward(self) -> bool:
        """Go back one step by recomputing the previous view.  No-op at 0."""
        if self.index == 0:
            return False
        self._show(view_at(self.steps, self.index - 1, self._edge_ids()))
        if self.state is PlaybackState.FINISHED:
            self.state = PlaybackState.PAUSED
        self.message = ""
        logger.debug("Back to step %d/%d", self.index, len(self.steps))
        return True

    def skip_to_next_event(self) -> int:
        """
        Step forward through the next significant step (new tree edge,
        newly visited node, or negative cycle), or to the end.  Returns the
        number of steps applied.
        """
        steps = self.ensure_steps()
        start = self.index
        if start >= len(steps):
            self._finish_if_at_end()
            return 0

        found = next_significant_index(steps, start, len(self.view.visited_nodes))
        last = min(found, len(steps) - 1)
        for _ in range(start, last + 1):
            self.step_forward()
        if found >= len(steps):
            self.message = "Reached the end of the algorithm execution."
        logger.debug("Skipped %d step(s) to %d/%d", last + 1 - start, self.index, len(steps))
        return last + 1 - start

    def jump_to(self, index: int) -> bool:
        """Random seek.  Out-of-range indices are a no-op."""
        steps = self.ensure_steps()
        if not 0 <= index <= len(steps):
            return False
        if index > 0:
            self._leave_not_started()
        self._show(view_at(steps, index, self._edge_ids()))
        if self.state is PlaybackState.FINISHED and index < len(steps):
            self.state = PlaybackState.PAUSED
        self._finish_if_at_end()
        return True

    # ------------------------------------------------------------------
    # Tick  (call this from your event loop / timer)
    # ------------------------------------------------------------------
    def tick(self, now: Optional[float] = None, token: Optional[int] = None) -> bool:
        """
        Advance one step if RUNNING, the token is current and `interval`
        has elapsed since the last applied step.  Returns True if a step
        was applied.
        """
        if token is not None and token != self.tick_token:
            return False
        if self.state is not PlaybackState.RUNNING:
            return False
        now = self._clock() if now is None else now
        if now - self._last_tick < self.interval:
            return False
        self._last_tick = now
        return self.step_forward()

    # ------------------------------------------------------------------
    # View mode projection
    # ------------------------------------------------------------------
    def final_view(self, destination: Optional[int] = None) -> ViewState:
        """
        The final shortest-path tree drawn straight from the result; the
        index and playback state are left untouched.
        """
        steps = self.ensure_steps()
        result = self.result or ShortestPathResult()
        last = steps[-1] if steps else Step()
        label = self._info.label

        if not steps:
            statuses = {e.id: EdgeStatus.UNVISITED for e in self.graph.edges}
            confirmed: FrozenSet[str] = frozenset()
            explanation = self.message
        elif result.negative_cycle:
            d = result.distances
            statuses = {
                e.id: EdgeStatus.NEGATIVE_CYCLE
                if not math.isinf(d[e.source]) and d[e.source] + e.weight < d[e.target]
                else EdgeStatus.UNVISITED
                for e in self.graph.edges
            }
            confirmed = frozenset()
            explanation = f"{label} detected a negative cycle. No shortest paths exist."
        else:
            confirmed = frozenset(result.path_edges(destination))
            statuses = {
                e.id: EdgeStatus.INCLUDED if e.id in confirmed else EdgeStatus.EXCLUDED
                for e in self.graph.edges
            }
            source = self.graph.get_node(self.source_id)
            explanation = f"{label} complete. Shortest distances from {source.label} shown."

        return ViewState(
            index=self.index,
            edge_statuses=statuses,
            confirmed_path_edges=confirmed,
            distances=dict(result.distances),
            visited_nodes=last.visited_nodes,
            iteration_count=last.iteration_count,
            negative_cycle_detected=result.negative_cycle,
            explanation=explanation,
            algorithm_step=last.algorithm_step,
        )

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def index(self) -> int:
        return self.view.index

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def current_step(self) -> Optional[Step]:
        if 0 < self.index <= len(self.steps):
            return self.steps[self.index - 1]
        return None

    @property
    def is_finished(self) -> bool:
        return self.state is PlaybackState.FINISHED

    @property
    def is_running(self) -> bool:
        return self.state is PlaybackState.RUNNING

    def snapshot(self) -> dict:
        """JSON-safe status for the host."""
        return {
            "state":       self.state.value,
            "algorithm":   self.algorithm,
            "source":      self.source_id,
            "index":       self.index,
            "totalSteps":  self.total_steps,
            "running":     self.is_running,
            "finished":    self.is_finished,
            "currentStep": self.current_step.to_dict() if self.current_step else None,
            "interval":    self.interval,
            "tickToken":   self.tick_token,
            "message":     self.message,
            "view":        self.view.to_dict(),
            "result":      self.result.to_dict() if self.result else None,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    @staticmethod
    def _lookup(key: str) -> AlgoInfo:
        info = get_algorithm(key)
        if info is None:
            raise ValueError(f"Unknown algorithm: {key}")
        return info

    def _edge_ids(self) -> List[str]:
        return [e.id for e in self.graph.edges]

    def _arm(self) -> None:
        self.tick_token += 1
        self._last_tick = self._clock()

    def _show(self, view: ViewState) -> None:
        self.view = view
        self.graph.apply_statuses(view.edge_statuses)

    def _leave_not_started(self) -> None:
        if self.state is PlaybackState.NOT_STARTED:
            self.state = PlaybackState.PAUSED

    def _finish_if_at_end(self) -> None:
        if self.index < len(self.steps):
            return
        if self.state in (PlaybackState.RUNNING, PlaybackState.PAUSED):
            self.state = PlaybackState.FINISHED
            if not self.message:
                self.message = "Reached the end of the algorithm execution."
            logger.info("Finished after %d steps", len(self.steps))
