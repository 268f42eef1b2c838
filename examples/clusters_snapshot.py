from __future__ import annotations

import numpy as np

from matching2d import MinWeightMatchingState, plot_state, seed_clustered_points, simulate


def main() -> None:
    pts = seed_clustered_points(
        centers=[(150.0, 150.0), (450.0, 300.0), (650.0, 120.0)],
        spread=40.0,
        n_per_cluster=8,
        rng=np.random.default_rng(3),
    )
    state = MinWeightMatchingState.from_points(pts)
    for state in simulate(state, 3000):
        pass

    plot_state(state, domain=(0.0, 800.0, 0.0, 500.0))

if __name__ == "__main__":
    main()
