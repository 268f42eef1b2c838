from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from collections.abc import Sequence

import math
import numpy as np
from numpy.typing import NDArray
from matplotlib import colors as mcolors
from matplotlib.patches import Circle


FloatArray = NDArray[np.float64]

OUTER_FILL = "#F00"
INNER_FILL = "#FF0"
MATCH_FILL = "#0F0"


# ---------------------------
# Geometry
# ---------------------------
@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float

    def plus(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def minus(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def times(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


def _darker(fill: Any) -> tuple[float, float, float]:
    """Shade used for the members drawn inside a blossom."""
    r, g, b = mcolors.to_rgb(fill)
    return (r * 13 / 15, g * 13 / 15, b * 13 / 15)


def _disk_arrays(rated: Sequence[tuple[Node, float]]) -> tuple[FloatArray, FloatArray, FloatArray]:
    """Pack (disk, rate) pairs into contiguous float64 arrays."""
    pos = np.empty((len(rated), 2), dtype=np.float64)
    radii = np.empty(len(rated), dtype=np.float64)
    rates = np.empty(len(rated), dtype=np.float64)
    for k, (node, rate) in enumerate(rated):
        if not isinstance(node, Node):
            raise TypeError(f"Bad disk in growth rates: {node!r}")
        pos[k, 0] = node.pos.x
        pos[k, 1] = node.pos.y
        radii[k] = node.weight
        rates[k] = rate
    return pos, radii, rates


# ---------------------------
# Piece capability
# ---------------------------
class GraphPiece:
    """A node or blossom collapsed into a node, or anything built out of them.

    Subclasses report their weighted disks together with a growth rate tag:
    +1 for a disk that grows, -1 for one that shrinks and 0 for a frozen one.
    """
    __slots__ = ()

    def center(self) -> Point:
        raise NotImplementedError

    def all_disks(self) -> tuple[Node, ...]:
        raise NotImplementedError

    def disks_with_growth_rate(self) -> list[tuple[Node, float]]:
        raise NotImplementedError

    def after_growing(self, dt: float) -> GraphPiece:
        raise NotImplementedError

    def time_until_collision(self, other: GraphPiece, ignore_rate: bool = False) -> float:
        """Earliest time at which a disk of ``self`` touches a disk of ``other``.

        Pairs whose combined rate is not positive never converge and are skipped.
        Negative results mean the disks already overlap.
        """
        p1, r1, g1 = _disk_arrays(self.disks_with_growth_rate())
        p2, r2, g2 = _disk_arrays(other.disks_with_growth_rate())
        if p1.shape[0] == 0 or p2.shape[0] == 0:
            return math.inf
        d = p1[:, None, :] - p2[None, :, :]                       # (m,n,2)
        gap = np.sqrt(np.sum(d * d, axis=2)) - r1[:, None] - r2[None, :]
        rate = np.ones_like(gap) if ignore_rate else g1[:, None] + g2[None, :]
        mask = rate > 0
        if not mask.any():
            return math.inf
        return float(np.min(gap[mask] / rate[mask]))


class Matchable(GraphPiece):
    """A piece that may sit in a tree node or in a finalized matching."""
    __slots__ = ()

    def draw(self, ax: Any, fill: Any) -> None:
        raise NotImplementedError


def _require_matchable(value: Any) -> None:
    if not isinstance(value, Matchable):
        raise TypeError(f"Not a Matchable: {value!r}")


@dataclass(frozen=True, slots=True)
class Node(Matchable):
    """A single input point with its current disk radius (dual weight)."""
    pos: Point
    weight: float = 0.0

    def center(self) -> Point:
        return self.pos

    def all_disks(self) -> tuple[Node, ...]:
        return (self,)

    def disks_with_growth_rate(self) -> list[tuple[Node, float]]:
        return [(self, 1)]

    def after_growing(self, dt: float) -> Node:
        return Node(self.pos, self.weight + dt)

    def draw(self, ax: Any, fill: Any) -> None:
        pt = self.pos
        if self.weight <= 0:
            ax.plot([pt.x], [pt.y], marker=".", color="black", markersize=2)
        else:
            ax.add_patch(Circle((pt.x, pt.y), self.weight, facecolor=fill, edgecolor="black", linewidth=0.8))


@dataclass(frozen=True, slots=True)
class Blossom(Matchable):
    """An odd alternating cycle contracted into one piece.

    Every disk of the cycle members is inflated by ``weight_delta``.
    """
    cycle: tuple[Matchable, ...]
    weight_delta: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "cycle", tuple(self.cycle))
        if self.weight_delta < 0:
            raise ValueError(f"weight_delta is negative: {self.weight_delta}")
        for e in self.cycle:
            _require_matchable(e)
        if len(self.cycle) < 3 or len(self.cycle) % 2 != 1:
            raise ValueError(f"Blossom cycle must have odd length of at least 3, got {len(self.cycle)}.")

    def center(self) -> Point:
        return self.cycle[0].center()

    def all_disks(self) -> tuple[Node, ...]:
        return tuple(
            Node(n.pos, n.weight + self.weight_delta)
            for e in self.cycle
            for n in e.all_disks()
        )

    def disks_with_growth_rate(self) -> list[tuple[Node, float]]:
        return [(n, 1) for n in self.all_disks()]

    def after_growing(self, dt: float) -> Blossom:
        return Blossom(self.cycle, self.weight_delta + dt)

    def closest_index_to(self, other: GraphPiece) -> int:
        times = [other.time_until_collision(e) for e in self.cycle]
        return min(range(len(times)), key=times.__getitem__)

    def draw(self, ax: Any, fill: Any) -> None:
        disks = self.all_disks()
        # Outline first, then cover the inner outline noise with the fill.
        for n in disks:
            ax.add_patch(Circle((n.pos.x, n.pos.y), max(n.weight, 0.0), fill=False, edgecolor="black", linewidth=0.8))
        for n in disks:
            ax.add_patch(Circle((n.pos.x, n.pos.y), max(n.weight, 0.0), facecolor=fill, edgecolor="none"))
        sub_fill = _darker(fill)
        for m in self.cycle:
            m.draw(ax, sub_fill)


class Matching(GraphPiece):
    """A finalized, non-growing pair of matchables. Equality ignores order."""
    __slots__ = ("first", "second")

    def __init__(self, first: Matchable, second: Matchable) -> None:
        _require_matchable(first)
        _require_matchable(second)
        self.first = first
        self.second = second

    def center(self) -> Point:
        return self.first.center()

    def all_disks(self) -> tuple[Node, ...]:
        return (*self.first.all_disks(), *self.second.all_disks())

    def disks_with_growth_rate(self) -> list[tuple[Node, float]]:
        return [(n, 0) for n in self.all_disks()]

    def after_growing(self, dt: float) -> Matching:
        return self

    def draw(self, ax: Any, fill: Any = MATCH_FILL) -> None:
        self.first.draw(ax, fill)
        self.second.draw(ax, fill)
        n1 = min(self.first.all_disks(), key=lambda e: self.second.time_until_collision(e, ignore_rate=True))
        n2 = min(self.second.all_disks(), key=lambda e: n1.time_until_collision(e, ignore_rate=True))
        ax.plot([n1.pos.x, n2.pos.x], [n1.pos.y, n2.pos.y], color="black", linewidth=1.0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matching):
            return NotImplemented
        if self.first == other.first and self.second == other.second:
            return True
        return self.first == other.second and self.second == other.first

    def __hash__(self) -> int:
        return hash(frozenset((self.first, self.second)))

    def __repr__(self) -> str:
        return f"Matching({self.first!r}, {self.second!r})"
