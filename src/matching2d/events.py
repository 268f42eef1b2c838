from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar
from collections.abc import Sequence

from .alt_tree import AlternatingTree, AltTreeZipper
from .edit import Edit
from .pieces import Blossom, Matching


T = TypeVar("T")


def cycle_split(items: Sequence[T], i: int, j: int) -> tuple[list[T], list[T]]:
    """Split a cyclic sequence into the arcs i..j and j..i (both inclusive).

    When ``i == j`` the first arc is the single element and the second is the
    full rotation starting and ending at it.
    """
    n = len(items)
    i %= n
    j %= n
    if i == j:
        return [items[i]], [*items[i:], *items[:i + 1]]

    arc1 = []
    k = i
    while k != j:
        arc1.append(items[k])
        k = (k + 1) % n
    arc1.append(items[j])

    arc2 = []
    k = j
    while k != i:
        arc2.append(items[k])
        k = (k + 1) % n
    arc2.append(items[i])
    return arc1, arc2


# ---------------------------
# Events
# ---------------------------
@dataclass(frozen=True, slots=True)
class Event:
    """A predicted collision (or plain wait) ``time`` units from now."""
    time: float

    def edit(self) -> Edit:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class WaitEvent(Event):
    def edit(self) -> Edit:
        dt = self.time
        return Edit().transform(lambda e: e.after_growing(dt) if isinstance(e, AlternatingTree) else e)


@dataclass(frozen=True, slots=True)
class TreeHitTreeEvent(Event):
    tree1: AlternatingTree
    tree2: AlternatingTree

    def edit(self) -> Edit:
        c1 = self.tree1.closest_outer_node_to(self.tree2)
        c2 = self.tree2.closest_outer_node_to(c1.focus.value)
        return Edit().remove(self.tree1, self.tree2).add(
            *c1.as_new_augmented_root().matchings(),
            *c2.as_new_augmented_root().matchings(),
            Matching(c1.focus.value, c2.focus.value),
        )


@dataclass(frozen=True, slots=True)
class TreeHitSelfEvent(Event):
    zipper1: AltTreeZipper
    zipper2: AltTreeZipper

    def edit(self) -> Edit:
        c = self.zipper1.most_recent_common_ancestor(self.zipper2)
        p1 = self.zipper1.prune_upward_to(c)
        p2 = self.zipper2.prune_upward_to(c)
        orphaned = [
            *(e for e in c.focus.children if e is not p1.child_tree and e is not p2.child_tree),
            *p1.orphaned_subtrees,
            *p2.orphaned_subtrees,
        ]
        # Up one path, across the common ancestor, down the other.
        cycle = [*p1.removed_values, c.focus.value, *reversed(p2.removed_values)]
        new_subtree = AlternatingTree(Blossom(cycle, 0.0), True, orphaned)
        new_root = c.with_subtree_replaced_by(new_subtree).root()
        return Edit().remove(self.zipper1.root()).add(new_root)


@dataclass(frozen=True, slots=True)
class TreeHitMatchEvent(Event):
    tree: AlternatingTree
    match: Matching

    def edit(self) -> Edit:
        match_subtree = AlternatingTree.from_matching_setting_root_closest_to(self.match, self.tree)
        closest = self.tree.closest_outer_node_to(self.match)
        return Edit().remove(self.match, self.tree).add(closest.with_appended_child(match_subtree).root())


@dataclass(frozen=True, slots=True)
class BlossomExpandEvent(Event):
    zipper: AltTreeZipper

    def __post_init__(self) -> None:
        if not isinstance(self.zipper, AltTreeZipper):
            raise TypeError(f"zipper must be an AltTreeZipper but got {self.zipper!r}")
        if self.zipper.focus.outer:
            raise ValueError("Only inner blossoms can expand.")
        if not isinstance(self.zipper.focus.value, Blossom):
            raise ValueError(f"zipper must focus on a blossom but got {self.zipper.focus.value!r}")
        if self.zipper.parent is None:
            raise ValueError("An expanding blossom needs a parent node.")

    def edit(self) -> Edit:
        parent = self.zipper.parent.focus
        child = self.zipper.focus.children[0]
        blossom: Any = self.zipper.focus.value
        i = blossom.closest_index_to(parent.value)
        j = blossom.closest_index_to(child.value)

        p0, p1 = cycle_split(blossom.cycle, i, j)
        p1.reverse()
        if len(p1) % 2 == 0:
            p0, p1 = p1, p0

        # The even arc's interior pairs up; the odd arc becomes the new path.
        matches = [Matching(p0[k], p0[k + 1]) for k in range(1, len(p0) - 2, 2)]

        new_subtree = AlternatingTree(p1[-1], False, (child,))
        for k in range(len(p1) - 3, -1, -2):
            new_subtree = AlternatingTree.inner_outer(p1[k], p1[k + 1], (new_subtree,))

        return Edit().remove(self.zipper.root()).add(
            *matches,
            self.zipper.with_subtree_replaced_by(new_subtree).root(),
        )
