from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Arc:
    tail: int
    head: int
    lower: int = 0
    upper: Optional[int] = None  # None: unbounded
    cost: int = 0


class Network:
    """
    Flat arena for a min-cost flow network.
      - add_node(supply) -> node index
      - add_arc(tail, head, upper, cost, lower) -> arc index
    Supplies are positive for producing nodes, negative for consuming ones.
    """

    __slots__ = ("supplies", "arcs")

    def __init__(self):
        self.supplies: List[int] = []
        self.arcs: List[Arc] = []

    def add_node(self, supply: int = 0) -> int:
        self.supplies.append(supply)
        return len(self.supplies) - 1

    def add_arc(self, tail: int, head: int, upper: Optional[int] = None, cost: int = 0, lower: int = 0) -> int:
        if not (0 <= tail < len(self.supplies) and 0 <= head < len(self.supplies)):
            raise IndexError(f"arc {tail}->{head} references an unknown node")
        if lower < 0 or cost < 0 or (upper is not None and upper < lower):
            raise ValueError(f"invalid bounds/cost for arc {tail}->{head}: [{lower}, {upper}] cost {cost}")
        self.arcs.append(Arc(tail, head, lower, upper, cost))
        return len(self.arcs) - 1

    @property
    def node_count(self) -> int:
        return len(self.supplies)

    @property
    def arc_count(self) -> int:
        return len(self.arcs)

    def flow_bound(self) -> int:
        """Finite stand-in for an unbounded capacity.

        No arc of a cycle-free flow carries more than every unit of supply
        plus every unit that can cross a bounded arc.
        """
        supply = sum(s for s in self.supplies if s > 0)
        bounded = sum(a.upper for a in self.arcs if a.upper is not None)
        return max(1, supply + bounded)

    def imbalance(self, flows: List[int]) -> List[int]:
        """Per node: supply minus (outflow - inflow). All zeros for a valid flow."""
        balance = list(self.supplies)
        for arc, f in zip(self.arcs, flows):
            balance[arc.tail] -= f
            balance[arc.head] += f
        return balance
