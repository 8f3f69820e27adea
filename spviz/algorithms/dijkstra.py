"""
dijkstra.py — Dijkstra's Shortest-Path Simulator
==================================================
Records a Step at:
  1. Initialise distances
  2. Push source into the priority queue
  3. Each pop:  stale entry → "already visited, skipping"
                fresh entry → "extracted", node marked visited; the tree
                edge into it (if any) is confirmed on this step
  4. Each outgoing edge, in input order:
        negative weight   → EXCLUDED, never relaxed
        otherwise         → CANDIDATE, then RELAXED or EXCLUDED
  5. Queue empty → "Done"

Priority queue: a heapq of (dist, node_id) with lazy deletion.  An
improved distance pushes a new entry and leaves the old one in place; it
is discarded when it surfaces.  Ties on distance go to the lower node id.

Negative edges are not an error: they are recorded as EXCLUDED so the UI
can show why Dijkstra cannot use them.
"""

import heapq
from typing import Dict, List, Optional, Sequence, Tuple

from spviz.algorithms.result import ShortestPathResult, Simulation, build_paths
from spviz.algorithms.step import HeapEntry, StepBuilder, format_distance as fmt
from spviz.graph import Edge, EdgeStatus, Node, edge_key, validate_input
from spviz.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Pseudocode: also used as the algorithm_step labels
# ---------------------------------------------------------------------------
PSEUDOCODE: List[str] = [
    "1. Initialize distances (source=0, others=∞)",
    "2. Push source into priority queue",
    "3. While queue not empty, pop min-dist node, mark visited",
    "4. Relax all outgoing edges if it improves distance",
]
DONE = "Done"


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------
def simulate_dijkstra(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    source_id: int,
) -> Simulation:
    validate_input(nodes, edges, source_id)

    outgoing: Dict[int, List[Edge]] = {n.id: [] for n in nodes}
    for edge in edges:
        outgoing[edge.source].append(edge)

    sb = StepBuilder(nodes)
    L = sb.label
    pred: Dict[int, Optional[int]] = {n.id: None for n in nodes}
    visited = set()
    pq: List[Tuple[float, int]] = []

    def snapshot_heap() -> None:
        sb.heap = [HeapEntry(node_id, d) for d, node_id in sorted(pq)]

    # --- init ---
    sb.distances[source_id] = 0
    sb.record(
        f"Distances initialized. Source {L(source_id)} = 0, rest = ∞",
        PSEUDOCODE[0],
    )

    heapq.heappush(pq, (0, source_id))
    snapshot_heap()
    sb.record(f"Source {L(source_id)} added to priority queue.", PSEUDOCODE[1])

    # --- main loop ---
    while pq:
        d, current = heapq.heappop(pq)
        snapshot_heap()

        if current in visited:
            sb.record(
                f"Node {L(current)} already visited, skipping "
                f"(stale entry with distance {fmt(d)}).",
                PSEUDOCODE[2],
            )
            continue

        visited.add(current)
        sb.visited.append(current)
        tree_edge = []
        if pred[current] is not None:
            tree_edge = [edge_key(pred[current], current)]
        sb.record(
            f"Extracted node {L(current)}, distance={fmt(sb.distances[current])}. Mark visited.",
            PSEUDOCODE[2],
            edge_updates=[(eid, EdgeStatus.INCLUDED) for eid in tree_edge],
            path_edge_updates=tree_edge,
        )

        for edge in outgoing[current]:
            target, weight = edge.target, edge.weight
            arrow = f"{L(current)}→{L(target)}"

            if weight < 0:
                sb.record(
                    f"Edge {arrow} is negative ({fmt(weight)}). Skipping.",
                    PSEUDOCODE[3],
                    edge_updates=[(edge.id, EdgeStatus.EXCLUDED)],
                )
                continue

            sb.record(
                f"Check edge {arrow}, weight={fmt(weight)}.",
                PSEUDOCODE[3],
                edge_updates=[(edge.id, EdgeStatus.CANDIDATE)],
            )

            new_dist = sb.distances[current] + weight
            old_dist = sb.distances[target]
            if new_dist < old_dist:
                sb.distances[target] = new_dist
                pred[target] = current
                heapq.heappush(pq, (new_dist, target))
                snapshot_heap()
                sb.record(
                    f"Relaxed edge. Distance to {L(target)} updated from "
                    f"{fmt(old_dist)} to {fmt(new_dist)}.",
                    PSEUDOCODE[3],
                    edge_updates=[(edge.id, EdgeStatus.RELAXED)],
                )
            else:
                sb.record(
                    f"No improvement. Dist to {L(target)} remains {fmt(old_dist)}.",
                    PSEUDOCODE[3],
                    edge_updates=[(edge.id, EdgeStatus.EXCLUDED)],
                )

    sb.heap = []
    sb.record("Dijkstra complete. Distances finalized.", DONE)

    distances = dict(sb.distances)
    result = ShortestPathResult(
        distances=distances,
        paths=build_paths(distances, pred, source_id),
    )
    logger.debug(
        "Dijkstra from %s: %d steps, %d/%d nodes visited",
        L(source_id), len(sb.steps), len(visited), len(nodes),
    )
    return Simulation(sb.steps, result)
