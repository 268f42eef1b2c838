from .pieces import (
    Point,
    GraphPiece,
    Matchable,
    Node,
    Blossom,
    Matching,
)
from .alt_tree import AlternatingTree, AltTreeZipper, PrunedPath
from .edit import Edit
from .events import (
    Event,
    WaitEvent,
    TreeHitTreeEvent,
    TreeHitSelfEvent,
    TreeHitMatchEvent,
    BlossomExpandEvent,
    cycle_split,
)
from .state import MinWeightMatchingState
from .api import (
    MatchingConfig,
    seed_uniform_points, seed_clustered_points, simulate,
)
from .viz import AnimationConfig, plot_state, run_animation
from .plotly_viz import plot_state_interactive, PlotlySnapshotConfig
from .logging_config import setup_logging

__all__ = [
    "Point", "GraphPiece", "Matchable", "Node", "Blossom", "Matching",
    "AlternatingTree", "AltTreeZipper", "PrunedPath",
    "Edit",
    "Event", "WaitEvent", "TreeHitTreeEvent", "TreeHitSelfEvent",
    "TreeHitMatchEvent", "BlossomExpandEvent", "cycle_split",
    "MinWeightMatchingState",
    "MatchingConfig", "seed_uniform_points", "seed_clustered_points", "simulate",
    "AnimationConfig", "plot_state", "run_animation",
    "plot_state_interactive", "PlotlySnapshotConfig",
    "setup_logging",
]
