from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
from collections.abc import Iterable, Iterator

import logging

from .alt_tree import AlternatingTree
from .edit import Edit
from .events import (
    BlossomExpandEvent,
    Event,
    TreeHitMatchEvent,
    TreeHitSelfEvent,
    TreeHitTreeEvent,
    WaitEvent,
)
from .pieces import Blossom, Matching, Node, Point

if TYPE_CHECKING:
    from .api import MatchingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MinWeightMatchingState:
    """Immutable forest of outer alternating trees plus the finalized matchings.

    Candidate events are enumerated in a fixed order: the wait fallback, tree/tree
    pairs, outer-node pairs inside each tree, tree/match pairs, then inner blossoms.
    Ties on predicted time go to the earliest candidate in that order.
    """
    trees: tuple[AlternatingTree, ...] = ()
    matches: tuple[Matching, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "trees", tuple(self.trees))
        object.__setattr__(self, "matches", tuple(self.matches))
        for t in self.trees:
            if not isinstance(t, AlternatingTree):
                raise TypeError(f"Not an alternating tree: {t!r}")
            if not t.outer:
                raise ValueError("Top-level trees must have an outer root.")
        for m in self.matches:
            if not isinstance(m, Matching):
                raise TypeError(f"Not a matching: {m!r}")

    @staticmethod
    def from_points(points: Iterable[Point]) -> MinWeightMatchingState:
        return MinWeightMatchingState(tuple(AlternatingTree(Node(pt, 0.0), True) for pt in points), ())

    # -------- event prediction --------
    def _predicted_inter_tree_collision_events(self) -> Iterator[Event]:
        trees = self.trees
        for i in range(len(trees)):
            for j in range(i + 1, len(trees)):
                t1 = trees[i]
                t2 = trees[j]
                yield TreeHitTreeEvent(t1.time_until_collision(t2), t1, t2)

    def _predicted_self_tree_collision_events(self) -> Iterator[Event]:
        for tree in self.trees:
            outer = list(tree.outer_nodes_with_ancestry())
            for i in range(len(outer)):
                for j in range(i + 1, len(outer)):
                    a1 = outer[i]
                    a2 = outer[j]
                    yield TreeHitSelfEvent(a1.focus.value.time_until_collision(a2.focus.value), a1, a2)

    def _predicted_tree_match_collision_events(self) -> Iterator[Event]:
        for tree in self.trees:
            for match in self.matches:
                yield TreeHitMatchEvent(tree.time_until_collision(match), tree, match)

    def _predicted_blossom_events(self) -> Iterator[Event]:
        for tree in self.trees:
            for z in tree.iter_nodes_with_ancestry():
                if not z.focus.outer and isinstance(z.focus.value, Blossom):
                    yield BlossomExpandEvent(z.focus.value.weight_delta, z)

    def predicted_events(self, config: MatchingConfig | None = None) -> Iterator[Event]:
        wait_time = 1.0 if config is None else config.wait_time
        yield WaitEvent(wait_time)
        yield from self._predicted_inter_tree_collision_events()
        yield from self._predicted_self_tree_collision_events()
        yield from self._predicted_tree_match_collision_events()
        yield from self._predicted_blossom_events()

    def next_event(self, config: MatchingConfig | None = None) -> Event:
        """Earliest candidate event, before any demotion to a wait."""
        return min(self.predicted_events(config), key=lambda e: e.time)

    def next_collision_event(self) -> Event | None:
        """Earliest candidate other than the wait fallback, or None when there is none."""
        events = self.predicted_events()
        next(events)
        return min(events, key=lambda e: e.time, default=None)

    # -------- transitions --------
    def advance(self, config: MatchingConfig | None = None) -> MinWeightMatchingState:
        """One simulation step: resolve the next event, or grow until it happens."""
        tolerance = 1e-8 if config is None else config.collision_tolerance
        event = self.next_event(config)
        if event.time > tolerance:
            event = WaitEvent(event.time)
        logger.debug("Resolving %s at t=%.6g", type(event).__name__, event.time)
        edit = event.edit()
        if edit.removed or edit.added:
            logger.debug("Edit removes %d and adds %d forest members.", len(edit.removed), len(edit.added))
        return self.edited(edit)

    def edited(self, edit: Edit) -> MinWeightMatchingState:
        for e in (*edit.added, *edit.removed):
            if not isinstance(e, (AlternatingTree, Matching)):
                raise TypeError(f"Not a matching or alternating tree: {e!r}")

        removed = {id(e) for e in edit.removed}
        transformer = edit.full_transformer()
        trees = [transformer(t) for t in self.trees if id(t) not in removed]
        matches = [transformer(m) for m in self.matches if id(m) not in removed]
        trees.extend(e for e in edit.added if isinstance(e, AlternatingTree))
        matches.extend(e for e in edit.added if isinstance(e, Matching))
        return MinWeightMatchingState(tuple(trees), tuple(matches))

    # -------- inspection --------
    @property
    def is_perfect(self) -> bool:
        return not self.trees

    def all_points(self) -> list[Point]:
        """Every input point held by the state, trees first, then matches."""
        return [n.pos for piece in (*self.trees, *self.matches) for n in piece.all_disks()]

    def draw(self, ax: Any) -> None:
        for t in self.trees:
            t.draw(ax)
        for m in self.matches:
            m.draw(ax)
