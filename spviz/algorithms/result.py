"""
result.py — Final Simulation Output
====================================
`Simulation` is what every simulator returns: the full step list plus the
final ShortestPathResult, both computed eagerly up front.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from spviz.algorithms.step import Step, json_distances


@dataclass(frozen=True)
class ShortestPathResult:
    """
    Attributes:
        distances      : {node_id: final distance}; inf for unreachable nodes.
        paths          : {node_id: [source, …, node_id]} for every reachable
                         non-source node.  Empty when a negative cycle exists.
        negative_cycle : True if Bellman-Ford found a negative cycle.  When set,
                         `distances` are not shortest-path lengths.
    """

    distances:      Dict[int, float]       = field(default_factory=dict)
    paths:          Dict[int, List[int]]   = field(default_factory=dict)
    negative_cycle: bool                   = False

    def path_edges(self, destination: Optional[int] = None) -> List[str]:
        """Edge ids on the reconstructed paths (only `destination`'s, if given)."""
        if destination is not None:
            chosen = [self.paths[destination]] if destination in self.paths else []
        else:
            chosen = list(self.paths.values())
        seen: Dict[str, None] = {}
        for path in chosen:
            for a, b in zip(path, path[1:]):
                seen[f"{a}-{b}"] = None
        return list(seen)

    def to_dict(self) -> dict:
        return {
            "distances":     json_distances(self.distances),
            "paths":         {str(k): list(v) for k, v in self.paths.items()},
            "negativeCycle": self.negative_cycle,
        }


class Simulation(NamedTuple):
    steps:  List[Step]
    result: ShortestPathResult


def build_paths(
    distances: Dict[int, float],
    predecessors: Dict[int, Optional[int]],
    source_id: int,
) -> Dict[int, List[int]]:
    """Walk predecessors back to the source for every reachable non-source node."""
    paths: Dict[int, List[int]] = {}
    for node_id in sorted(distances):
        if node_id == source_id or math.isinf(distances[node_id]):
            continue
        path, cur = [], node_id
        while cur is not None:
            path.append(cur)
            cur = predecessors.get(cur)
        path.reverse()
        paths[node_id] = path
    return paths
