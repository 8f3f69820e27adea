"""
graph.py — Graph Container
==========================
Single source of truth for the graph.  Simulators, the timeline and the
renderer all talk to this object (or to its `nodes` / `edges` lists).

Responsibilities:
  1. CRUD on nodes & edges                  (manual authoring)
  2. Adjacency queries                      (edges_from)
  3. Input validation                       (fail fast on malformed graphs)
  4. Serialisation round-trip               (to_dict / from_dict)
  5. Status helpers                         (reset / publish a view's edge statuses)

Design decisions:
  - Nodes live in a list indexed by id; ids are kept dense (0 … n-1).
  - Edges live in a list in construction order.  That order IS the
    Bellman-Ford iteration order, so it is never re-sorted.
  - `_adj[node_id] → [edge_index, …]` preserves the same order per source.
"""

import math
from numbers import Real
from typing import Dict, List, Mapping, Optional, Sequence

from spviz.graph.edge import Edge, EdgeStatus, edge_key
from spviz.graph.node import Node, node_label


class GraphError(ValueError):
    """Malformed graph or out-of-range node id: a caller contract violation."""


# ---------------------------------------------------------------------------
# Validation (shared by Graph and the simulators)
# ---------------------------------------------------------------------------
def validate_input(nodes: Sequence[Node], edges: Sequence[Edge], source_id: int) -> None:
    """Raise GraphError unless (nodes, edges, source_id) is a well-formed run input."""
    for index, node in enumerate(nodes):
        if node.id != index:
            raise GraphError(
                f"node ids must be dense and ordered: position {index} holds id {node.id}"
            )

    n = len(nodes)
    if isinstance(source_id, bool) or not isinstance(source_id, int) or not 0 <= source_id < n:
        raise GraphError(f"source id {source_id!r} is not a node of this {n}-node graph")

    seen = set()
    for edge in edges:
        for end in (edge.source, edge.target):
            if not 0 <= end < n:
                raise GraphError(f"edge {edge.id} references missing node {end}")
        if edge.source == edge.target:
            raise GraphError(f"edge {edge.id} is a self loop")
        if edge.id != edge_key(edge.source, edge.target):
            raise GraphError(f"edge id {edge.id!r} does not match its endpoints")
        if edge.id in seen:
            raise GraphError(f"duplicate edge {edge.id}")
        if isinstance(edge.weight, bool) or not isinstance(edge.weight, Real) or not math.isfinite(edge.weight):
            raise GraphError(f"edge {edge.id} has invalid weight {edge.weight!r}")
        seen.add(edge.id)


class Graph:
    """
    Attributes:
        nodes : [Node] indexed by id
        edges : [Edge] in construction order
        _adj  : {node_id: [edge_index, …]} outgoing edges per node
    """

    def __init__(self):
        self.nodes: List[Node]            = []
        self.edges: List[Edge]            = []
        self._adj:  Dict[int, List[int]]  = {}

    # ==================================================================
    # NODE CRUD
    # ==================================================================
    def add_node(self, x: float = 0.0, y: float = 0.0, label: Optional[str] = None) -> Node:
        node = Node(node_id=len(self.nodes), x=x, y=y, label=label)
        self.nodes.append(node)
        self._adj[node.id] = []
        return node

    def remove_node(self, node_id: int) -> None:
        """Drop a node and its edges, then renumber so ids stay dense."""
        if self.get_node(node_id) is None:
            return

        def shift(i: int) -> int:
            return i - 1 if i > node_id else i

        kept = [e for e in self.edges if node_id not in (e.source, e.target)]
        old_nodes = [n for n in self.nodes if n.id != node_id]

        self.nodes, self.edges, self._adj = [], [], {}
        for node in old_nodes:
            relabel = node.label == node_label(node.id)
            self.add_node(node.x, node.y, label=None if relabel else node.label)
        for e in kept:
            new_edge = self.add_edge(shift(e.source), shift(e.target), e.weight)
            new_edge.in_negative_cycle = e.in_negative_cycle

    def get_node(self, node_id: int) -> Optional[Node]:
        if isinstance(node_id, int) and 0 <= node_id < len(self.nodes):
            return self.nodes[node_id]
        return None

    # ==================================================================
    # EDGE CRUD
    # ==================================================================
    def add_edge(self, source: int, target: int, weight: float = 1) -> Edge:
        if self.get_node(source) is None or self.get_node(target) is None:
            raise GraphError(f"cannot add edge {source}→{target}: unknown node")
        if source == target:
            raise GraphError(f"cannot add self loop on node {source}")
        if self.get_edge(edge_key(source, target)) is not None:
            raise GraphError(f"edge {edge_key(source, target)} already exists")

        edge = Edge(source=source, target=target, weight=weight)
        self.edges.append(edge)
        self._adj[source].append(len(self.edges) - 1)
        return edge

    def remove_edge(self, edge_id: str) -> None:
        remaining = [e for e in self.edges if e.id != edge_id]
        if len(remaining) == len(self.edges):
            return
        self.edges = remaining
        self._rebuild_adjacency()

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def get_edge_between(self, source: int, target: int) -> Optional[Edge]:
        return self.get_edge(edge_key(source, target))

    # ==================================================================
    # ADJACENCY QUERIES
    # ==================================================================
    def edges_from(self, node_id: int) -> List[Edge]:
        """Outgoing edges of `node_id` in construction order."""
        return [self.edges[i] for i in self._adj.get(node_id, [])]

    def _rebuild_adjacency(self) -> None:
        self._adj = {node.id: [] for node in self.nodes}
        for index, edge in enumerate(self.edges):
            self._adj.setdefault(edge.source, []).append(index)

    # ==================================================================
    # VALIDATION
    # ==================================================================
    def validate(self, source_id: int) -> None:
        validate_input(self.nodes, self.edges, source_id)

    # ==================================================================
    # STATUS HELPERS
    # ==================================================================
    def reset_statuses(self) -> None:
        for edge in self.edges:
            edge.reset()

    def apply_statuses(self, statuses: Mapping[str, EdgeStatus]) -> None:
        """Publish a view's edge statuses; edges missing from it become unvisited."""
        for edge in self.edges:
            edge.status = statuses.get(edge.id, EdgeStatus.UNVISITED)

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        """Rebuild a graph.  Node ids must already be dense; edges keep their order."""
        g = cls()
        nodes = sorted((Node.from_dict(nd) for nd in data.get("nodes", [])), key=lambda n: n.id)
        for index, node in enumerate(nodes):
            if node.id != index:
                raise GraphError(f"node ids must be dense: expected {index}, got {node.id}")
            g.add_node(node.x, node.y, label=node.label)
        for ed in data.get("edges", []):
            parsed = Edge.from_dict(ed)
            edge = g.add_edge(parsed.source, parsed.target, parsed.weight)
            edge.in_negative_cycle = parsed.in_negative_cycle
            edge.status = parsed.status
        return g

    # ==================================================================
    # UTILITY
    # ==================================================================
    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def has_negative_edges(self) -> bool:
        return any(e.is_negative for e in self.edges)

    def node_ids(self) -> List[int]:
        return [n.id for n in self.nodes]

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"
