"""
step.py — Algorithm Step Record
================================
Every simulator returns an ordered list of Step objects.  A Step is the
unit of replay: one atomic decision of the algorithm, described as

    • which edges changed status             (delta: edge_updates)
    • which edges joined the shortest-path tree (delta: path_edge_updates)
    • the distance table after the decision  (full snapshot)
    • the visited set / priority queue        (full snapshots, Dijkstra)
    • the outer pass number                   (Bellman-Ford)
    • a plain-English explanation and the pseudocode line label

Design decisions:
  - Step is a frozen dataclass.  It is a SNAPSHOT.  The simulator is the
    only writer; the timeline and renderer are pure readers.
  - Edge / path updates are deltas, everything else is total.  The
    timeline can therefore rebuild any view from (confirmed path set, step)
    without replaying distances.
  - distance_array is a read-only mapping copied at construction, so a
    Step stays hashable and no reader can edit a recorded table.
  - StepBuilder owns the live tables during a run and copies them into
    each Step, so a simulator never hands out a reference it still mutates.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from spviz.graph import EdgeStatus, Node


@dataclass(frozen=True)
class EdgeUpdate:
    id:     str
    status: EdgeStatus

    def to_dict(self) -> dict:
        return {"id": self.id, "status": self.status.value}


@dataclass(frozen=True)
class HeapEntry:
    id:   int
    dist: float

    def to_dict(self) -> dict:
        return {"id": self.id, "dist": json_distance(self.dist)}


@dataclass(frozen=True)
class Step:
    """
    Attributes:
        explanation             : Human-readable description of the decision.
        algorithm_step          : Pseudocode line label, for UI highlighting.
        visited_nodes           : Node ids visited so far, in visit order (Dijkstra).
        min_heap                : Priority-queue content after this step (Dijkstra).
        distance_array          : {node_id: distance} after this step; inf = unreached.
        iteration_count         : Bellman-Ford pass number; 0 for init steps.
        negative_cycle_detected : True once a negative cycle has been found.
        edge_updates            : Edges whose status this step sets.
        path_edge_updates       : Edges newly confirmed as shortest-path tree edges.
    """

    explanation:             str                     = ""
    algorithm_step:          str                     = ""
    visited_nodes:           Tuple[int, ...]         = ()
    min_heap:                Tuple[HeapEntry, ...]   = ()
    distance_array:          Mapping[int, float]     = field(default_factory=dict, hash=False)
    iteration_count:         int                     = 0
    negative_cycle_detected: bool                    = False
    edge_updates:            Tuple[EdgeUpdate, ...]  = ()
    path_edge_updates:       Tuple[str, ...]         = ()

    def to_dict(self) -> dict:
        """JSON-safe form using the camelCase wire names; inf becomes None."""
        return {
            "explanation":           self.explanation,
            "algorithmStep":         self.algorithm_step,
            "visitedNodes":          list(self.visited_nodes),
            "minHeap":               [e.to_dict() for e in self.min_heap],
            "distanceArray":         json_distances(self.distance_array),
            "iterationCount":        self.iteration_count,
            "negativeCycleDetected": self.negative_cycle_detected,
            "edgeUpdates":           [u.to_dict() for u in self.edge_updates],
            "pathEdgeUpdates":       list(self.path_edge_updates),
        }

    def __post_init__(self):
        object.__setattr__(self, "distance_array", MappingProxyType(dict(self.distance_array)))


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------
def format_distance(value: float) -> str:
    """Distances as shown in explanations: ∞ for unreached, ints without '.0'."""
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def json_distance(value: float) -> Optional[float]:
    return None if math.isinf(value) else value


def json_distances(table: Mapping[int, float]) -> Dict[str, Optional[float]]:
    return {str(k): json_distance(v) for k, v in table.items()}


# ---------------------------------------------------------------------------
# Builder used by the simulators
# ---------------------------------------------------------------------------
class StepBuilder:
    """
    Mutable scratch-pad that simulators record through.

    Usage inside a simulator:
        sb = StepBuilder(nodes)
        sb.distances[source] = 0
        sb.record("Distances initialised.", PSEUDOCODE[0])
        …
        steps = sb.steps
    """

    def __init__(self, nodes: Sequence[Node]):
        self.nodes:           Sequence[Node]     = nodes
        self.steps:           List[Step]         = []
        self.distances:       Dict[int, float]   = {n.id: math.inf for n in nodes}
        self.visited:         List[int]          = []
        self.heap:            List[HeapEntry]    = []
        self.iteration:       int                = 0
        self.negative_cycle:  bool               = False

    def label(self, node_id: int) -> str:
        return self.nodes[node_id].label

    def record(
        self,
        explanation: str,
        algorithm_step: str,
        edge_updates: Iterable[Tuple[str, EdgeStatus]] = (),
        path_edge_updates: Iterable[str] = (),
    ) -> Step:
        step = Step(
            explanation=explanation,
            algorithm_step=algorithm_step,
            visited_nodes=tuple(self.visited),
            min_heap=tuple(self.heap),
            distance_array=dict(self.distances),
            iteration_count=self.iteration,
            negative_cycle_detected=self.negative_cycle,
            edge_updates=tuple(EdgeUpdate(eid, status) for eid, status in edge_updates),
            path_edge_updates=tuple(path_edge_updates),
        )
        self.steps.append(step)
        return step
