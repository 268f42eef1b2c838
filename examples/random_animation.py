from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np

from matching2d import AnimationConfig, run_animation, seed_uniform_points


def main() -> None:
    pts = seed_uniform_points(50, 800.0, 500.0, rng=np.random.default_rng())
    cfg = AnimationConfig(
        domain=(0.0, 800.0, 0.0, 500.0),
        interval_ms=100,
    )
    # Keep a reference so the timer is not garbage collected.
    anim = run_animation(pts, steps=2000, config=cfg, save_path=None)
    plt.show()
    del anim

if __name__ == "__main__":
    main()
