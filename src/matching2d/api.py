from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterator, Sequence

import numpy as np

from .pieces import Point
from .state import MinWeightMatchingState


# ----------------------
# Configuration objects
# ----------------------

@dataclass(slots=True)
class MatchingConfig:
    """Step controls for the matching simulation.

    wait_time: growth applied when no collision is predicted sooner.
    collision_tolerance: events predicted further out than this are replaced by a wait.
    """
    wait_time: float = 1.0
    collision_tolerance: float = 1e-8

    def __post_init__(self) -> None:
        if not (np.isfinite(self.wait_time) and self.wait_time > 0.0):
            raise ValueError("wait_time must be positive and finite.")
        if not (np.isfinite(self.collision_tolerance) and self.collision_tolerance >= 0.0):
            raise ValueError("collision_tolerance must be non-negative and finite.")


# ----------------------
# Seeder utilities
# ----------------------

def seed_uniform_points(n: int, width: float = 800.0, height: float = 500.0, rng: np.random.Generator | None = None) -> list[Point]:
    """Points drawn uniformly from the box [0, width) x [0, height)."""
    if n < 0:
        raise ValueError("n must be non-negative.")
    rng = np.random.default_rng() if rng is None else rng
    xy = rng.uniform(0.0, 1.0, size=(n, 2)) * np.array([width, height])
    return [Point(float(x), float(y)) for x, y in xy]


def seed_clustered_points(
    centers: Sequence[tuple[float, float]],
    spread: float,
    n_per_cluster: int,
    rng: np.random.Generator | None = None,
) -> list[Point]:
    """Isotropic Gaussian clusters of points around each center."""
    rng = np.random.default_rng() if rng is None else rng
    pts: list[Point] = []
    for c in centers:
        xy = rng.normal(loc=np.asarray(c, dtype=float), scale=spread, size=(n_per_cluster, 2))
        pts.extend(Point(float(x), float(y)) for x, y in xy)
    return pts


# ----------------------
# Driving the simulation
# ----------------------

def simulate(
    state: MinWeightMatchingState,
    steps: int,
    config: MatchingConfig | None = None,
) -> Iterator[MinWeightMatchingState]:
    """Yield up to ``steps`` successive states, stopping early once every point is matched."""
    if steps < 0:
        raise ValueError("steps must be non-negative.")
    for _ in range(steps):
        if state.is_perfect:
            return
        state = state.advance(config)
        yield state
