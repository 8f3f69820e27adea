"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every algorithm the visualizer knows about.

    from spviz.algorithms import REGISTRY, get_algorithm

REGISTRY is a dict:
    {
        "dijkstra":    AlgoInfo(key, label, fn, pseudocode, supports_negative, …),
        "bellmanford": AlgoInfo(…),
    }

Every `fn` has the same contract:
    fn(nodes, edges, source_id) -> Simulation(steps, result)
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from spviz.algorithms.bellman_ford import PSEUDOCODE as _bf_pc, simulate_bellman_ford
from spviz.algorithms.dijkstra     import PSEUDOCODE as _dij_pc, simulate_dijkstra
from spviz.algorithms.result       import ShortestPathResult, Simulation, build_paths
from spviz.algorithms.step         import EdgeUpdate, HeapEntry, Step, StepBuilder, format_distance


# ---------------------------------------------------------------------------
# AlgoInfo: metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:               str                    # registry key, e.g. "dijkstra"
    label:             str                    # human label
    fn:                Callable[..., Simulation]
    pseudocode:        List[str]              # lines for the side-panel
    supports_negative: bool = False           # relaxes negative edges?
    complexity_time:   str  = ""
    complexity_space:  str  = ""
    description:       str  = ""

    def to_dict(self) -> dict:
        return {
            "key":              self.key,
            "label":            self.label,
            "pseudocode":       list(self.pseudocode),
            "supportsNegative": self.supports_negative,
            "complexityTime":   self.complexity_time,
            "complexitySpace":  self.complexity_space,
            "description":      self.description,
        }


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "dijkstra": AlgoInfo(
        key="dijkstra", label="Dijkstra's Algorithm", fn=simulate_dijkstra, pseudocode=_dij_pc,
        complexity_time="O((V + E) log V)", complexity_space="O(V + E)",
        description="Greedily extracts the closest node. Skips negative edges.",
    ),

    "bellmanford": AlgoInfo(
        key="bellmanford", label="Bellman–Ford", fn=simulate_bellman_ford, pseudocode=_bf_pc,
        supports_negative=True,
        complexity_time="O(V · E)", complexity_space="O(V)",
        description="Relaxes every edge |V|-1 times. Handles negative edges, detects negative cycles.",
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


__all__ = [
    "AlgoInfo",
    "REGISTRY",
    "get_algorithm",
    "list_algorithms",
    "simulate_dijkstra",
    "simulate_bellman_ford",
    "Step",
    "StepBuilder",
    "EdgeUpdate",
    "HeapEntry",
    "ShortestPathResult",
    "Simulation",
    "build_paths",
    "format_distance",
]
