"""
bellman_ford.py — Bellman–Ford Simulator
=========================================
Handles NEGATIVE edge weights and reports negative cycles.

Structure:
  • Up to |V|-1 passes relaxing every edge in input order.  A pass that
    relaxes nothing ends the loop early.
  • One more pass that only looks for an edge that could still be
    relaxed; the first one found proves a negative cycle.

Records a Step for:
  1. Init
  2. Start of each pass
  3. Each edge: unreachable source (EXCLUDED), candidate (CANDIDATE), then
     improvement (INCLUDED, and the edge joins the tentative tree via
     path_edge_updates) or no improvement (EXCLUDED)
  4. Early stop
  5. Start of the negative-cycle check, and the witness edge if any
  6. Done

iteration_count is the 1-based pass number during relaxation and
|V| from the negative-cycle check onwards.
"""

import math
from typing import Dict, List, Optional, Sequence

from spviz.algorithms.result import ShortestPathResult, Simulation, build_paths
from spviz.algorithms.step import StepBuilder, format_distance as fmt
from spviz.graph import Edge, EdgeStatus, Node, validate_input
from spviz.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Pseudocode: also used as the algorithm_step labels
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "1. Initialize distances (source=0, others=∞)",
    "2. For i=1 to |V|-1: Relax all edges",
    "3. Check for negative cycles by a final pass",
]
DONE = "Done"


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------
def simulate_bellman_ford(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    source_id: int,
) -> Simulation:
    validate_input(nodes, edges, source_id)

    V = len(nodes)
    sb = StepBuilder(nodes)
    L = sb.label
    dist = sb.distances
    pred: Dict[int, Optional[int]] = {n.id: None for n in nodes}

    # --- init ---
    dist[source_id] = 0
    sb.record(f"Distances init. Source {L(source_id)}=0, others=∞", PSEUDOCODE[0])

    # ==============================================================
    # RELAXATION PASSES
    # ==============================================================
    passes = 0
    for i in range(1, V):
        passes = i
        sb.iteration = i
        relaxed_any = False
        sb.record(f"Iteration {i} of {V - 1}", PSEUDOCODE[1])

        for edge in edges:
            u, v, w = edge.source, edge.target, edge.weight
            arrow = f"{L(u)}→{L(v)}"

            if math.isinf(dist[u]):
                sb.record(
                    f"Edge {arrow} skip (unreachable)",
                    PSEUDOCODE[1],
                    edge_updates=[(edge.id, EdgeStatus.EXCLUDED)],
                )
                continue

            sb.record(
                f"Check edge {arrow} (w={fmt(w)})",
                PSEUDOCODE[1],
                edge_updates=[(edge.id, EdgeStatus.CANDIDATE)],
            )

            new_dist = dist[u] + w
            if new_dist < dist[v]:
                old_dist = dist[v]
                dist[v] = new_dist
                pred[v] = u
                relaxed_any = True
                sb.record(
                    f"Relaxed edge. Dist to {L(v)} from {fmt(old_dist)} → {fmt(new_dist)}",
                    PSEUDOCODE[1],
                    edge_updates=[(edge.id, EdgeStatus.INCLUDED)],
                    path_edge_updates=[edge.id],
                )
            else:
                sb.record(
                    f"No improvement for {L(v)}. Dist remains {fmt(dist[v])}",
                    PSEUDOCODE[1],
                    edge_updates=[(edge.id, EdgeStatus.EXCLUDED)],
                )

        if not relaxed_any:
            sb.record(f"No edges relaxed in iteration {i}. Early stop.", PSEUDOCODE[1])
            break

    # ==============================================================
    # NEGATIVE-CYCLE CHECK
    # ==============================================================
    sb.iteration = V
    sb.record("Check for negative cycles", PSEUDOCODE[2])

    for edge in edges:
        u, v, w = edge.source, edge.target, edge.weight
        if not math.isinf(dist[u]) and dist[u] + w < dist[v]:
            sb.negative_cycle = True
            sb.record(
                f"Negative cycle found via edge {L(u)}→{L(v)}: "
                f"{fmt(dist[u])} + {fmt(w)} < {fmt(dist[v])}",
                PSEUDOCODE[2],
                edge_updates=[(edge.id, EdgeStatus.NEGATIVE_CYCLE)],
            )
            break

    distances = dict(dist)
    if sb.negative_cycle:
        sb.record(
            "Bellman-Ford complete. Negative cycle detected; shortest paths are undefined.",
            DONE,
        )
        result = ShortestPathResult(distances=distances, paths={}, negative_cycle=True)
    else:
        sb.record("Bellman-Ford complete. No negative cycle.", DONE)
        result = ShortestPathResult(
            distances=distances,
            paths=build_paths(distances, pred, source_id),
        )

    logger.debug(
        "Bellman-Ford from %s: %d steps, %d pass(es), negative_cycle=%s",
        L(source_id), len(sb.steps), passes, sb.negative_cycle,
    )
    return Simulation(sb.steps, result)
