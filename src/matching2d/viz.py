from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from collections.abc import Sequence

import matplotlib.pyplot as plt
from matplotlib import animation

from .api import MatchingConfig
from .pieces import Point
from .state import MinWeightMatchingState


# ------------------------------
# Plot helpers
# ------------------------------
@dataclass(slots=True)
class AnimationConfig:
    domain: tuple[float, float, float, float] = (0.0, 800.0, 0.0, 500.0)
    figsize: tuple[float, float] = (10.0, 6.5)
    interval_ms: int = 100
    title: str = "Minimum weight perfect matching"

    def __post_init__(self) -> None:
        xmin, xmax, ymin, ymax = self.domain
        if xmax <= xmin or ymax <= ymin:
            raise ValueError("domain must be (xmin, xmax, ymin, ymax) with positive extent.")
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive.")


def _style_axes(ax: Any, domain: tuple[float, float, float, float], title: str) -> None:
    xmin, xmax, ymin, ymax = domain
    ax.set_xlim(xmin, xmax)
    ax.set_ylim(ymin, ymax)
    ax.set_aspect("equal", adjustable="box")
    ax.set_title(title)
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.grid(True, alpha=0.2)


def _summary(state: MinWeightMatchingState, step: int) -> str:
    return f"step {step}: {len(state.trees)} trees, {len(state.matches)} matches"


def plot_state(
    state: MinWeightMatchingState,
    *,
    ax: Any | None = None,
    domain: tuple[float, float, float, float] = (0.0, 800.0, 0.0, 500.0),
    figsize: tuple[float, float] = (10.0, 6.5),
    title: str | None = None,
    show: bool = True,
) -> Any:
    """Draw ``state`` onto ``ax`` (a new figure when omitted) and return the axes."""
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    state.draw(ax)
    _style_axes(ax, domain, title or _summary(state, 0))
    if show:
        plt.show()
    return ax


def run_animation(
    points: Sequence[Point],
    *,
    steps: int,
    config: AnimationConfig | None = None,
    matching: MatchingConfig | None = None,
    save_path: str | None = None,
    fps: int = 10,
) -> Any:
    """Advance the simulation on a timer, redrawing each state.

    Keys: ``=`` advances once more, ``r`` restarts from the initial points.
    """
    if config is None:
        config = AnimationConfig()

    initial = MinWeightMatchingState.from_points(points)
    current = {"state": initial, "step": 0}

    fig, ax = plt.subplots(figsize=config.figsize)

    def _redraw() -> None:
        ax.clear()
        current["state"].draw(ax)
        _style_axes(ax, config.domain, f"{config.title} - {_summary(current['state'], current['step'])}")

    def _advance() -> None:
        current["state"] = current["state"].advance(matching)
        current["step"] += 1

    def _update(_i: int) -> list[Any]:
        _advance()
        _redraw()
        return []

    def _on_key(event: Any) -> None:
        if event.key == "=":
            _advance()
        elif event.key == "r":
            current["state"] = initial
            current["step"] = 0
        else:
            return
        _redraw()
        fig.canvas.draw_idle()

    fig.canvas.mpl_connect("key_press_event", _on_key)
    _redraw()
    anim = animation.FuncAnimation(fig, _update, frames=steps, interval=config.interval_ms, blit=False, repeat=False)

    if save_path:
        if save_path.lower().endswith(".mp4"):
            Writer = animation.FFMpegWriter
            writer = Writer(fps=fps, metadata={"artist": "matching2d"}, bitrate=1800)
            anim.save(save_path, writer=writer, dpi=150)
        elif save_path.lower().endswith(".gif"):
            anim.save(save_path, writer="pillow", fps=fps, dpi=100)
        else:
            raise ValueError("Unsupported extension. Use .mp4 or .gif")
    return anim
