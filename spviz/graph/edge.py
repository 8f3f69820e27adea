"""
edge.py — Directed Weighted Edge
================================
Connects two node ids.  Carries its presentation status so the renderer
can colour-code edges as Candidate / Relaxed / Included / Excluded exactly
as the timeline reports them.

Design decisions:
  - `source` and `target` are node ids, NOT Node references.
    This keeps edges serialisable and avoids circular references.
  - The id is always "source-target", so at most one edge exists per
    ordered pair.  Multigraphs are not supported.
  - `status` is output, not input: the simulators never read it.
"""

from enum import Enum


# ---------------------------------------------------------------------------
# Edge Status Enum: visual encoding for the renderer
# ---------------------------------------------------------------------------
class EdgeStatus(Enum):
    UNVISITED      = "unvisited"       # neutral, untouched in the current step
    CANDIDATE      = "candidate"       # being examined right now
    RELAXED        = "relaxed"         # just improved the target's distance
    INCLUDED       = "included"        # part of the (tentative) shortest-path tree
    EXCLUDED       = "excluded"        # skipped: negative, unreachable or no improvement
    NEGATIVE_CYCLE = "negativecycle"   # witness of a negative cycle


def edge_key(source: int, target: int) -> str:
    return f"{source}-{target}"


# ---------------------------------------------------------------------------
# Edge
# ---------------------------------------------------------------------------
class Edge:
    """
    Attributes:
        id                : "source-target".
        source            : Tail node id.
        target            : Head node id.
        weight            : Numeric cost; may be negative.
        status            : EdgeStatus for visual encoding.
        in_negative_cycle : Set by the generator on edges of a planted negative cycle.
    """

    __slots__ = ("id", "source", "target", "weight", "status", "in_negative_cycle")

    def __init__(
        self,
        source: int,
        target: int,
        weight: float = 1,
        in_negative_cycle: bool = False,
    ):
        self.id:                str        = edge_key(source, target)
        self.source:            int        = source
        self.target:            int        = target
        self.weight:            float      = weight
        self.status:            EdgeStatus = EdgeStatus.UNVISITED
        self.in_negative_cycle: bool       = in_negative_cycle

    @property
    def is_negative(self) -> bool:
        return self.weight < 0

    def reset(self) -> None:
        """Wipe visual state between algorithm runs."""
        self.status = EdgeStatus.UNVISITED

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id":              self.id,
            "source":          self.source,
            "target":          self.target,
            "weight":          self.weight,
            "status":          self.status.value,
            "isNegative":      self.is_negative,
            "inNegativeCycle": self.in_negative_cycle,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        edge = cls(
            source=int(data["source"]),
            target=int(data["target"]),
            weight=data.get("weight", 1),
            in_negative_cycle=bool(data.get("inNegativeCycle", False)),
        )
        edge.status = EdgeStatus(data.get("status", EdgeStatus.UNVISITED.value))
        return edge

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"Edge({self.source} → {self.target}, w={self.weight}, status={self.status.value})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Edge)
            and (self.id, self.weight) == (other.id, other.weight)
        )

    def __hash__(self) -> int:
        return hash(self.id)
