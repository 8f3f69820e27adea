"""
node.py — Graph Node
====================
A node is identity plus position.  Ids are dense 0-based integers so the
simulators can index distance tables directly; the label (A, B, C, …) is
derived from the id and only ever used for display and explanations.

Design decisions:
  - Nodes carry NO algorithm state.  Visited / distance information lives
    in Step records and the timeline's ViewState, never on the node.
  - Once a graph is frozen for a run its nodes are not mutated; editing
    produces fresh Node objects (see Graph.remove_node).
"""

from typing import Optional


def node_label(node_id: int) -> str:
    """0 → 'A', 25 → 'Z', 26 → 'AA', 27 → 'AB', …"""
    if node_id < 0:
        raise ValueError(f"node id must be non-negative, got {node_id}")
    label = ""
    n = node_id + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        label = chr(65 + rem) + label
    return label


class Node:
    """
    Attributes:
        id    : Dense 0-based integer identifier.
        label : Display name, derived from the id unless given.
        x, y  : Canvas coordinates.
    """

    __slots__ = ("id", "label", "x", "y")

    def __init__(
        self,
        node_id: int,
        x: float = 0.0,
        y: float = 0.0,
        label: Optional[str] = None,
    ):
        self.id:    int   = node_id
        self.label: str   = label or node_label(node_id)
        self.x:     float = float(x)
        self.y:     float = float(y)

    def distance_to(self, other: "Node") -> float:
        """Euclidean distance; the generator prefers near edges."""
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id":    self.id,
            "label": self.label,
            "x":     self.x,
            "y":     self.y,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(
            node_id=int(data["id"]),
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
            label=data.get("label"),
        )

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"Node(id={self.id}, label={self.label}, pos=({self.x:.1f},{self.y:.1f}))"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Node)
            and (self.id, self.label, self.x, self.y) == (other.id, other.label, other.x, other.y)
        )

    def __hash__(self) -> int:
        return hash(self.id)
