from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from collections.abc import Iterable, Iterator

from .pieces import (
    INNER_FILL,
    OUTER_FILL,
    GraphPiece,
    Matchable,
    Matching,
    Node,
    Point,
    _require_matchable,
)


# ---------------------------
# Alternating tree
# ---------------------------
@dataclass(frozen=True, slots=True)
class AlternatingTree(GraphPiece):
    """Immutable alternating search tree node.

    Outer nodes grow and may branch; inner nodes shrink and hold exactly one
    (outer) child continuing the alternating path.
    """
    value: Matchable
    outer: bool
    children: tuple[AlternatingTree, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))
        _require_matchable(self.value)
        if not self.outer and len(self.children) != 1:
            raise ValueError(f"Inner node must have exactly 1 child but got {len(self.children)}.")
        for c in self.children:
            if not isinstance(c, AlternatingTree):
                raise TypeError(f"Child isn't an alternating tree node: {c!r}")
            if c.outer == self.outer:
                raise ValueError("Child has the same layer as its parent.")

    @staticmethod
    def inner_outer(
        inner_value: Matchable,
        outer_value: Matchable,
        children: Iterable[AlternatingTree] = (),
    ) -> AlternatingTree:
        return AlternatingTree(inner_value, False, (AlternatingTree(outer_value, True, tuple(children)),))

    @staticmethod
    def from_matching_setting_root_closest_to(match: Matching, other: GraphPiece) -> AlternatingTree:
        """Turn ``match`` into an inner->outer chain rooted at the endpoint nearest ``other``."""
        t1 = match.first.time_until_collision(other)
        t2 = match.second.time_until_collision(other)
        if t1 > t2:
            close, far = match.second, match.first
        else:
            close, far = match.first, match.second
        return AlternatingTree(close, False, (AlternatingTree(far, True),))

    # -------- structure --------
    def matchings(self) -> list[Matching]:
        """Pair every inner node with its single child, in pre-order."""
        result: list[Matching] = []
        for z in self.iter_nodes_with_ancestry():
            node = z.focus
            if not node.outer:
                result.append(Matching(node.value, node.children[0].value))
        return result

    def iter_nodes_with_ancestry(self, ancestry: AltTreeZipper | None = None) -> Iterator[AltTreeZipper]:
        """Pre-order walk; children reuse their parent's zipper."""
        stack = [AltTreeZipper(self, ancestry)]
        while stack:
            z = stack.pop()
            yield z
            for c in reversed(z.focus.children):
                stack.append(AltTreeZipper(c, z))

    def outer_nodes_with_ancestry(self, ancestry: AltTreeZipper | None = None) -> Iterator[AltTreeZipper]:
        for z in self.iter_nodes_with_ancestry(ancestry):
            if z.focus.outer:
                yield z

    def closest_outer_node_to(self, other: GraphPiece) -> AltTreeZipper:
        return min(self.outer_nodes_with_ancestry(), key=lambda z: z.focus.value.time_until_collision(other))

    def descend(self, *indices: int) -> AltTreeZipper:
        return AltTreeZipper(self, None).descend(*indices)

    def size(self) -> int:
        return sum(1 for _ in self.iter_nodes_with_ancestry())

    # -------- piece protocol --------
    def center(self) -> Point:
        return self.value.center()

    def all_disks(self) -> tuple[Node, ...]:
        return tuple(n for z in self.iter_nodes_with_ancestry() for n in z.focus.value.all_disks())

    def disks_with_growth_rate(self) -> list[tuple[Node, float]]:
        result: list[tuple[Node, float]] = []
        for z in self.iter_nodes_with_ancestry():
            rate = 1 if z.focus.outer else -1
            result.extend((n, rate) for n in z.focus.value.all_disks())
        return result

    def after_growing(self, dt: float) -> AlternatingTree:
        # Explicit stack: trees may be deeper than the recursion limit.
        grown: dict[int, AlternatingTree] = {}
        stack: list[tuple[AlternatingTree, bool]] = [(self, False)]
        while stack:
            node, ready = stack.pop()
            if not ready:
                stack.append((node, True))
                stack.extend((c, False) for c in node.children)
                continue
            sign = 1 if node.outer else -1
            grown[id(node)] = AlternatingTree(
                node.value.after_growing(dt * sign),
                node.outer,
                tuple(grown[id(c)] for c in node.children),
            )
        return grown[id(self)]

    def draw(self, ax: Any, outer_fill: Any = OUTER_FILL, inner_fill: Any = INNER_FILL) -> None:
        nodes = [z.focus for z in self.iter_nodes_with_ancestry()]
        for node in nodes:
            node.value.draw(ax, outer_fill if node.outer else inner_fill)

        # Edges with an arrow head at the child; dashed when leaving an outer node.
        for node in nodes:
            c1 = node.value.center()
            style = "--" if node.outer else "-"
            for c in node.children:
                c2 = c.center()
                d = c2.minus(c1)
                length = d.length()
                if length == 0:
                    continue
                head = min(10.0, 0.25 * length)
                d = d.times(1 / length)
                p = Point(-d.y, d.x)
                c3 = c2.minus(d.plus(p).times(head))
                c4 = c2.minus(d.minus(p).times(head))
                ax.plot([c1.x, c2.x], [c1.y, c2.y], color="black", linestyle=style, linewidth=0.8)
                ax.plot([c3.x, c2.x, c4.x], [c3.y, c2.y, c4.y], color="black", linewidth=0.8)

    def _preorder(self) -> Iterator[AlternatingTree]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    # Structural equality without recursion: equal pre-order sequences of
    # (value, layer, child count) describe the same tree.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AlternatingTree):
            return NotImplemented
        for a, b in zip(self._preorder(), other._preorder()):
            if a is b:
                continue
            if a.outer != b.outer or len(a.children) != len(b.children) or a.value != b.value:
                return False
        return True

    def __hash__(self) -> int:
        return hash(tuple((n.value, n.outer, len(n.children)) for n in self._preorder()))

    def __str__(self) -> str:
        if not self.outer:
            return f"{self.value!r} ===> {self.children[0]}"
        lines = [repr(self.value)]
        for c in self.children:
            paragraph = str(c).rstrip().split("\n")
            lines.append("+---" + paragraph[0])
            lines.extend("|   " + line for line in paragraph[1:])
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class PrunedPath:
    """Result of cutting the path between a zipper focus and one of its ancestors."""
    orphaned_subtrees: tuple[AlternatingTree, ...]
    removed_values: tuple[Matchable, ...]
    child_tree: AlternatingTree | None


# ---------------------------
# Zipper
# ---------------------------
@dataclass(frozen=True, slots=True)
class AltTreeZipper:
    """A focused subtree together with the path of zippers leading back to the root."""
    focus: AlternatingTree
    parent: AltTreeZipper | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.focus, AlternatingTree):
            raise TypeError(f"Not an AlternatingTree: {self.focus!r}")
        if self.parent is not None and not isinstance(self.parent, AltTreeZipper):
            raise TypeError(f"Not an AltTreeZipper: {self.parent!r}")

    def iter_upward(self, stop_before: AltTreeZipper | None = None) -> Iterator[AltTreeZipper]:
        """Walk toward the root, stopping before the zipper focused on the same subtree as ``stop_before``."""
        stop = None if stop_before is None else stop_before.focus
        z: AltTreeZipper | None = self
        while z is not None and z.focus is not stop:
            yield z
            z = z.parent

    def most_recent_common_ancestor(self, other: AltTreeZipper) -> AltTreeZipper:
        seen = {id(z.focus) for z in self.iter_upward()}
        for z in other.iter_upward():
            if id(z.focus) in seen:
                return z
        raise ValueError("No common ancestor between the two zippers.")

    def prune_upward_to(self, ancestor: AltTreeZipper | None = None) -> PrunedPath:
        child: AlternatingTree | None = None
        orphaned: list[AlternatingTree] = []
        removed: list[Matchable] = []
        for z in self.iter_upward(ancestor):
            orphaned.extend(c for c in z.focus.children if c is not child)
            child = z.focus
            removed.append(child.value)
        return PrunedPath(tuple(orphaned), tuple(removed), child)

    def root(self) -> AlternatingTree:
        z = self
        while z.parent is not None:
            z = z.parent
        return z.focus

    def as_new_augmented_root(self, removed_child: AlternatingTree | None = None) -> AlternatingTree:
        """Re-root the tree at the focus; the old parent chain becomes a child subtree."""
        path = list(self.iter_upward())
        rebuilt: AlternatingTree | None = None
        # From the old root down: each ancestor drops the child on the path and
        # adopts the already rebuilt part above it.
        for k in range(len(path) - 1, -1, -1):
            node = path[k].focus
            dropped = path[k - 1].focus if k > 0 else removed_child
            children = [c for c in node.children if c is not dropped]
            if rebuilt is not None:
                children.append(rebuilt)
            rebuilt = AlternatingTree(node.value, node.outer, tuple(children))
        return rebuilt

    def with_appended_child(self, appended_child: AlternatingTree) -> AltTreeZipper:
        if not isinstance(appended_child, AlternatingTree):
            raise TypeError(f"appended_child is not an AlternatingTree: {appended_child!r}")
        node = self.focus
        return self.with_subtree_replaced_by(AlternatingTree(node.value, node.outer, (*node.children, appended_child)))

    def descend(self, *indices: int) -> AltTreeZipper:
        result = self
        for i in indices:
            if i < 0 or i >= len(result.focus.children):
                raise IndexError(f"Descended to non-existent child {i} of a node with {len(result.focus.children)} children.")
            result = AltTreeZipper(result.focus.children[i], result)
        return result

    def with_subtree_replaced_by(self, new_subtree: AlternatingTree) -> AltTreeZipper:
        """Rebuild the path from the focus to the root, sharing every untouched sibling."""
        if not isinstance(new_subtree, AlternatingTree):
            raise TypeError(f"new_subtree is not an AlternatingTree: {new_subtree!r}")
        path = list(self.iter_upward())
        nodes = [new_subtree]
        for below, z in zip(path, path[1:]):
            parent_node = z.focus
            nodes.append(AlternatingTree(
                parent_node.value,
                parent_node.outer,
                tuple(nodes[-1] if c is below.focus else c for c in parent_node.children),
            ))
        result: AltTreeZipper | None = None
        for node in reversed(nodes):
            result = AltTreeZipper(node, result)
        return result

    def depth(self) -> int:
        return sum(1 for _ in self.iter_upward()) - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AltTreeZipper):
            return NotImplemented
        a: AltTreeZipper | None = self
        b: AltTreeZipper | None = other
        while a is not None and b is not None:
            if a is b:
                return True
            if a.focus != b.focus:
                return False
            a, b = a.parent, b.parent
        return a is None and b is None

    def __hash__(self) -> int:
        return hash((self.focus, self.depth()))
