from __future__ import annotations

import argparse
import time

import numpy as np

from matching2d import MinWeightMatchingState, seed_uniform_points, setup_logging, simulate


def main() -> None:
    ap = argparse.ArgumentParser(description="Run the growing-disk matching simulation on random points.")
    ap.add_argument("--N", type=int, default=50)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--steps", type=int, default=5000)
    ap.add_argument("--width", type=float, default=800.0)
    ap.add_argument("--height", type=float, default=500.0)
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING"])
    ap.add_argument("--log-file", default=None)
    ap.add_argument("--plot", action="store_true", help="show the final state with matplotlib")
    ap.add_argument("--save", default=None, help="save an animation of the run to .mp4 or .gif")
    args = ap.parse_args()

    log = setup_logging(args.log_level, log_file=args.log_file).getChild("scripts")

    pts = seed_uniform_points(args.N, args.width, args.height, rng=np.random.default_rng(args.seed))
    state = MinWeightMatchingState.from_points(pts)

    t0 = time.perf_counter()
    steps = 0
    for state in simulate(state, args.steps):
        steps += 1
    elapsed = time.perf_counter() - t0

    log.info("%d steps in %.2f s: %d trees, %d matches", steps, elapsed, len(state.trees), len(state.matches))
    if not state.is_perfect:
        log.warning("Stopped after %d steps before every point was matched.", steps)

    domain = (0.0, args.width, 0.0, args.height)
    if args.plot:
        from matching2d import plot_state
        plot_state(state, domain=domain)
    if args.save:
        from matching2d import AnimationConfig, run_animation
        run_animation(pts, steps=max(steps, 1), config=AnimationConfig(domain=domain), save_path=args.save)
        log.info("Saved animation to %s", args.save)

if __name__ == "__main__":
    main()
