"""
generate.py — Random Graph Factory
===================================
Produces a directed weighted graph that reads well on screen:

  1. Nodes on a jittered circle (less jitter as the count grows).
  2. A BFS-like spanning structure grown from a random source, so every
     node is reachable from it.
  3. Extra edges up to an adaptive density, preferring neighbours on the
     circle and avoiding most bidirectional pairs / edges through the centre.
  4. Algorithm-specific weights.  Under Bellman-Ford with negative edges
     allowed, some weights go negative and a small negative cycle may be
     planted.

Only the output contract matters to the simulators: dense node ids,
unique "s-t" edge ids, every status `unvisited`, a valid source id.
"""

import math
import random
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set

from spviz.config import GenerationParams
from spviz.graph.edge import edge_key
from spviz.graph.graph import Graph, GraphError
from spviz.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GeneratedGraph:
    graph:              Graph
    source_id:          int
    has_negative_cycle: bool
    params:             GenerationParams


@dataclass
class _Candidate:
    source:          int
    target:          int
    adjusted:        float     # geometric distance scaled by circle distance
    circle_distance: int


def _placement_variance(count: int) -> float:
    if count <= 5:
        return 20
    if count <= 8:
        return 15
    if count <= 12:
        return 10
    return 6


def _draw_weight(rng: random.Random, algorithm: str, params: GenerationParams) -> int:
    lo, hi = params.min_weight, params.max_weight
    if algorithm == "dijkstra":
        # clustered weights make the greedy choice visible
        roll = rng.random()
        if roll < 0.3:
            return rng.randrange(5) + lo
        if rng.random() < 0.7:
            return rng.randrange(7) + lo + 4
        return rng.randrange(5) + hi - 4

    if rng.random() < 0.7:
        w = rng.randrange(hi - lo + 1) + lo
    else:
        w = rng.randrange(10) + hi - 9
    if params.allow_negative_edges and rng.random() < 0.25:
        w = -(rng.randrange(12) + 1)
    return w


def generate_random_graph(
    params: Optional[GenerationParams] = None,
    algorithm: str = "dijkstra",
    seed: Optional[int] = None,
) -> GeneratedGraph:
    """Build a random graph for `algorithm` ("dijkstra" or "bellmanford")."""
    params = replace(params) if params is not None else GenerationParams()
    if params.node_count < 1:
        raise GraphError(f"node_count must be at least 1, got {params.node_count}")
    if params.min_weight > params.max_weight:
        raise GraphError(
            f"min_weight {params.min_weight} exceeds max_weight {params.max_weight}"
        )

    if algorithm == "dijkstra":
        params.min_weight, params.max_weight = 1, 15
        params.density = min(params.density * 1.15, 0.5)
        params.allow_negative_edges = False
    else:
        params.min_weight = max(params.min_weight, 2)
        params.max_weight = max(params.max_weight, 25)

    rng = random.Random(seed)
    n = params.node_count
    source_id = rng.randrange(n)
    g = Graph()

    # -- nodes on a circle --
    w, h = params.canvas_width, params.canvas_height
    radius = max(min(w, h) / 3.2 * (1 + (max(n - 8, 0)) * 0.03), min(150.0, min(w, h) / 2.5))
    variance = _placement_variance(n)
    angle_variance = math.pi / (180 * max(1.0, n / 4))
    for i in range(n):
        angle = 2 * math.pi * i / n + (rng.random() * 2 - 1) * angle_variance
        r = radius + (rng.random() * 2 - 1) * variance
        g.add_node(w / 2 + r * math.cos(angle), h / 2 + r * math.sin(angle))

    # -- candidate edges, nearest first --
    factor = 0.15 if algorithm == "dijkstra" else 0.2
    candidates: List[_Candidate] = []
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            circle = min(abs(i - j), n - abs(i - j))
            dist = g.nodes[i].distance_to(g.nodes[j])
            candidates.append(_Candidate(i, j, dist * (1 + circle * factor), circle))
    candidates.sort(key=lambda c: c.adjusted)

    # -- spanning structure from the source --
    connected: Set[int] = {source_id}
    queue = deque([source_id])
    tree: List[_Candidate] = []
    while len(connected) < n:
        if not queue:
            queue.append(rng.choice(sorted(connected)))
        current = queue.popleft()
        best = next(
            (c for c in candidates if c.source == current and c.target not in connected),
            None,
        )
        if best is not None:
            tree.append(best)
            connected.add(best.target)
            queue.append(best.target)

    in_tree = {edge_key(c.source, c.target) for c in tree}

    def add(c: _Candidate) -> None:
        key = edge_key(c.source, c.target)
        if g.get_edge(key) is not None:
            return
        opposite = g.get_edge(edge_key(c.target, c.source))
        if opposite is not None and key not in in_tree and rng.random() < 0.8:
            return
        g.add_edge(c.source, c.target, _draw_weight(rng, algorithm, params))

    for c in tree:
        add(c)

    # -- extra edges up to the adaptive density --
    max_density = min(0.5, 0.8 - n * 0.04)
    multiplier = 1.05 if algorithm == "dijkstra" else 1.0
    effective = max(0.0, min(params.density * multiplier, max_density))
    target_count = math.ceil(n * (n - 1) * effective)
    remaining = max(0, target_count - len(tree))

    skip_long = 0.4 if algorithm == "dijkstra" else 0.5
    pool: List[_Candidate] = []
    for c in candidates:
        if g.get_edge(edge_key(c.target, c.source)) is not None and rng.random() < 0.8:
            continue
        if c.circle_distance / (n / 2) > 0.8 and rng.random() < skip_long:
            continue
        pool.append(c)
    scores: Dict[str, float] = {
        edge_key(c.source, c.target): c.adjusted + rng.random() * 20 for c in pool
    }
    pool.sort(key=lambda c: scores[edge_key(c.source, c.target)])
    for c in pool[:remaining]:
        add(c)

    has_negative_cycle = False
    if algorithm != "dijkstra" and params.allow_negative_edges and rng.random() < 0.4:
        has_negative_cycle = _plant_negative_cycle(g, rng)

    logger.debug(
        "Generated %s graph: %d nodes, %d edges, source=%d, negative_cycle=%s",
        algorithm, g.node_count(), g.edge_count(), source_id, has_negative_cycle,
    )
    return GeneratedGraph(
        graph=g,
        source_id=source_id,
        has_negative_cycle=has_negative_cycle,
        params=params,
    )


def _plant_negative_cycle(g: Graph, rng: random.Random) -> bool:
    """Turn a run of consecutive circle nodes into a negative cycle."""
    n = g.node_count()
    size = min(3, n // 2)
    if size < 2:
        return False
    start = rng.randrange(n)
    members = [(start + i) % n for i in range(size)]

    total = 0
    cycle_edges = []
    for i in range(size):
        src, dst = members[i], members[(i + 1) % size]
        weight = rng.randrange(10) + 1
        total += weight
        edge = g.get_edge_between(src, dst)
        if edge is None:
            edge = g.add_edge(src, dst, weight)
        edge.weight = weight
        edge.in_negative_cycle = True
        cycle_edges.append(edge)

    cycle_edges[-1].weight = -(total + rng.randrange(3) + 1)
    return True
