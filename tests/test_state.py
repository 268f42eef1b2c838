from __future__ import annotations

import logging
import math
from collections import Counter

import numpy as np
import pytest

from matching2d import (
    AlternatingTree,
    Blossom,
    BlossomExpandEvent,
    Edit,
    Matching,
    MatchingConfig,
    MinWeightMatchingState,
    Node,
    Point,
    TreeHitTreeEvent,
    WaitEvent,
    seed_uniform_points,
    simulate,
)


def point_counts(state: MinWeightMatchingState) -> Counter:
    return Counter((p.x, p.y) for p in state.all_points())


def iter_blossoms(piece):
    if isinstance(piece, Blossom):
        yield piece
        for e in piece.cycle:
            yield from iter_blossoms(e)


def check_invariants(state: MinWeightMatchingState, expected: Counter) -> None:
    assert point_counts(state) == expected
    for tree in state.trees:
        assert tree.outer
        for z in tree.iter_nodes_with_ancestry():
            node = z.focus
            for c in node.children:
                assert c.outer != node.outer
            if not node.outer:
                assert len(node.children) == 1
            for b in iter_blossoms(node.value):
                assert len(b.cycle) % 2 == 1 and len(b.cycle) >= 3
    for m in state.matches:
        for b in (*iter_blossoms(m.first), *iter_blossoms(m.second)):
            assert len(b.cycle) % 2 == 1 and len(b.cycle) >= 3


def test_from_points_builds_singleton_outer_trees():
    pts = [Point(0, 0), Point(3, 4)]
    state = MinWeightMatchingState.from_points(pts)
    assert state.trees == (AlternatingTree(Node(pts[0]), True), AlternatingTree(Node(pts[1]), True))
    assert state.matches == ()
    assert not state.is_perfect


def test_state_rejects_inner_roots_and_foreign_members():
    inner = AlternatingTree.inner_outer(Node(Point(0, 0)), Node(Point(1, 0)))
    with pytest.raises(ValueError):
        MinWeightMatchingState((inner,), ())
    with pytest.raises(TypeError):
        MinWeightMatchingState((), (inner,))
    with pytest.raises(TypeError):
        MinWeightMatchingState.from_points([]).edited(Edit().add(Node(Point(0, 0))))


def test_edited_removes_by_identity():
    tree = AlternatingTree(Node(Point(0, 0)), True)
    twin = AlternatingTree(Node(Point(0, 0)), True)
    state = MinWeightMatchingState((tree,), ())
    assert state.edited(Edit().remove(twin)).trees == (tree,)
    assert state.edited(Edit().remove(tree)).trees == ()


def test_edited_partitions_added_members():
    m = Matching(Node(Point(0, 0)), Node(Point(1, 0)))
    t = AlternatingTree(Node(Point(5, 5)), True)
    state = MinWeightMatchingState.from_points([]).edited(Edit().add(m, t))
    assert state.trees == (t,)
    assert state.matches == (m,)


def test_two_points_scenario():
    a, b = Point(0.0, 0.0), Point(10.0, 0.0)
    state = MinWeightMatchingState.from_points([a, b])

    event = state.next_collision_event()
    assert isinstance(event, TreeHitTreeEvent)
    assert event.time == 5.0
    assert isinstance(state.next_event(), WaitEvent)

    states = list(simulate(state, 50))
    final = states[-1]
    assert len(states) == 6
    assert final.trees == ()
    assert final.is_perfect
    assert final.matches == (Matching(Node(a, 5.0), Node(b, 5.0)),)


def test_triangle_contracts_into_blossom():
    pts = [Point(0.0, 0.0), Point(10.0, 0.0), Point(5.0, 5.0 * math.sqrt(3.0))]
    state = MinWeightMatchingState.from_points(pts)

    first = state.next_collision_event()
    assert isinstance(first, TreeHitTreeEvent)
    assert first.time == pytest.approx(5.0)

    blossom_state = None
    for s in simulate(state, 30):
        if any(isinstance(t.value, Blossom) for t in s.trees):
            blossom_state = s
            break
    assert blossom_state is not None
    assert len(blossom_state.trees) == 1
    assert blossom_state.matches == ()
    (tree,) = blossom_state.trees
    assert sorted((n.pos.x, n.pos.y) for n in tree.value.all_disks()) == sorted((p.x, p.y) for p in pts)
    assert blossom_state.next_collision_event() is None


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_invariants_hold_along_random_runs(seed: int):
    pts = seed_uniform_points(8, 100.0, 100.0, rng=np.random.default_rng(seed))
    state = MinWeightMatchingState.from_points(pts)
    expected = point_counts(state)
    for s in simulate(state, 150):
        check_invariants(s, expected)


def test_advance_is_deterministic():
    pts = seed_uniform_points(6, 50.0, 50.0, rng=np.random.default_rng(7))
    state = MinWeightMatchingState.from_points(pts)
    for _ in range(25):
        nxt = state.advance()
        assert state.advance() == nxt
        state = nxt


def test_advance_uses_config_wait_time():
    state = MinWeightMatchingState.from_points([Point(0, 0), Point(100, 0)])
    after = state.advance(MatchingConfig(wait_time=0.5))
    assert [t.value.weight for t in after.trees] == [0.5, 0.5]


def test_advance_demotes_distant_event_to_wait():
    state = MinWeightMatchingState.from_points([Point(0, 0), Point(1, 0)])
    after = state.advance()
    assert len(after.trees) == 2
    assert [t.value.weight for t in after.trees] == [0.5, 0.5]
    assert after.advance().is_perfect


def test_advance_logs_resolved_event(caplog):
    state = MinWeightMatchingState.from_points([Point(0, 0), Point(100, 0)])
    with caplog.at_level(logging.DEBUG, logger="matching2d"):
        state.advance()
    assert "WaitEvent" in caplog.text


def test_matching_config_validation():
    with pytest.raises(ValueError):
        MatchingConfig(wait_time=0.0)
    with pytest.raises(ValueError):
        MatchingConfig(collision_tolerance=-1.0)


def inner_blossom_state(delta: float) -> MinWeightMatchingState:
    # root -> inner blossom -> outer leaf, spread out so nothing else collides soon
    blossom = Blossom([Node(Point(100, 0)), Node(Point(110, 0)), Node(Point(105, 8))], delta)
    tree = AlternatingTree(Node(Point(0, 0)), True, [
        AlternatingTree(blossom, False, [AlternatingTree(Node(Point(300, 0)), True)]),
    ])
    return MinWeightMatchingState((tree,), ())


def test_inner_blossom_shrinks_while_waiting():
    state = inner_blossom_state(0.75)
    after = state.edited(WaitEvent(0.25).edit())
    (tree,) = after.trees
    assert tree.value.weight == 0.25
    assert tree.children[0].value.weight_delta == 0.5
    assert [n.weight for n in tree.children[0].value.all_disks()] == [0.5, 0.5, 0.5]
    assert tree.children[0].children[0].value.weight == 0.25


def test_blossom_expand_is_predicted_and_resolved():
    state = inner_blossom_state(0.75)
    event = state.next_event()
    assert isinstance(event, BlossomExpandEvent)
    assert event.time == 0.75
    assert event.zipper.focus is state.trees[0].children[0]

    # Far from zero the expand is only waited for, shrinking the blossom to nothing.
    waited = state.advance()
    assert waited.trees[0].children[0].value.weight_delta == 0.0
    assert waited.trees[0].value.weight == 0.75
    assert isinstance(waited.next_event(), BlossomExpandEvent)
    assert waited.next_event().time == 0.0

    expanded = waited.advance()
    assert expanded.matches == ()
    (tree,) = expanded.trees
    nodes = [z.focus for z in tree.iter_nodes_with_ancestry()]
    assert not any(isinstance(node.value, Blossom) for node in nodes)
    assert [node.outer for node in nodes] == [True, False, True, False, True]
    assert [(node.value.pos.x, node.value.pos.y) for node in nodes] == [
        (0, 0), (100, 0), (105, 8), (110, 0), (300, 0),
    ]
    assert point_counts(expanded) == point_counts(state)


def test_random_runs_expand_blossoms_and_keep_invariants():
    expands = 0
    for n in (16, 20):
        for seed in range(20):
            pts = seed_uniform_points(n, 100.0, 100.0, rng=np.random.default_rng(seed))
            state = MinWeightMatchingState.from_points(pts)
            expected = point_counts(state)
            for _ in range(5000):
                if state.is_perfect:
                    break
                event = state.next_event()
                if isinstance(event, BlossomExpandEvent) and event.time <= 1e-8:
                    expands += 1
                state = state.advance()
                check_invariants(state, expected)
            assert state.is_perfect
    assert expands > 0
