from __future__ import annotations

from dataclasses import dataclass
from typing import Any

try:
    import plotly.graph_objects as go
    _PLOTLY = True
except Exception:  # pragma: no cover
    _PLOTLY = False

from .alt_tree import AlternatingTree
from .pieces import GraphPiece, Matching
from .state import MinWeightMatchingState


@dataclass(slots=True)
class PlotlySnapshotConfig:
    domain: tuple[float, float, float, float] = (0.0, 800.0, 0.0, 500.0)
    outer_color: str = "rgba(255, 0, 0, 0.45)"
    inner_color: str = "rgba(255, 255, 0, 0.45)"
    match_color: str = "rgba(0, 255, 0, 0.45)"
    show_tree_edges: bool = True


def _disk_shapes(piece: GraphPiece, color: str) -> list[dict[str, Any]]:
    shapes = []
    for n in piece.all_disks():
        r = max(n.weight, 0.0)
        shapes.append(dict(
            type="circle", xref="x", yref="y",
            x0=n.pos.x - r, x1=n.pos.x + r, y0=n.pos.y - r, y1=n.pos.y + r,
            fillcolor=color, line=dict(width=0.5, color="black"), layer="below",
        ))
    return shapes


def _tree_shapes_and_edges(tree: AlternatingTree, cfg: PlotlySnapshotConfig) -> tuple[list[dict[str, Any]], list[Any], list[Any]]:
    shapes: list[dict[str, Any]] = []
    xs: list[Any] = []
    ys: list[Any] = []
    for z in tree.iter_nodes_with_ancestry():
        node = z.focus
        shapes.extend(_disk_shapes(node.value, cfg.outer_color if node.outer else cfg.inner_color))
        c1 = node.value.center()
        for c in node.children:
            c2 = c.value.center()
            xs.extend([c1.x, c2.x, None])
            ys.extend([c1.y, c2.y, None])
    return shapes, xs, ys


def _match_segment(match: Matching) -> tuple[list[float], list[float]]:
    n1 = min(match.first.all_disks(), key=lambda e: match.second.time_until_collision(e, ignore_rate=True))
    n2 = min(match.second.all_disks(), key=lambda e: n1.time_until_collision(e, ignore_rate=True))
    return [n1.pos.x, n2.pos.x], [n1.pos.y, n2.pos.y]


def plot_state_interactive(
    state: MinWeightMatchingState,
    *,
    config: PlotlySnapshotConfig | None = None,
    save_html: str | None = None,
) -> Any:
    """Interactive snapshot with Plotly (pan/zoom, hover). Returns the Figure."""
    if not _PLOTLY:
        raise RuntimeError("plotly is not installed. `pip install plotly`")

    cfg = config or PlotlySnapshotConfig()
    xmin, xmax, ymin, ymax = cfg.domain

    shapes: list[dict[str, Any]] = []
    edge_x: list[Any] = []
    edge_y: list[Any] = []
    for tree in state.trees:
        s, xs, ys = _tree_shapes_and_edges(tree, cfg)
        shapes.extend(s)
        edge_x.extend(xs)
        edge_y.extend(ys)

    match_x: list[Any] = []
    match_y: list[Any] = []
    for m in state.matches:
        shapes.extend(_disk_shapes(m, cfg.match_color))
        xs, ys = _match_segment(m)
        match_x.extend([*xs, None])
        match_y.extend([*ys, None])

    pts = state.all_points()
    fig = go.Figure(
        data=[
            go.Scatter(x=[p.x for p in pts], y=[p.y for p in pts], mode="markers",
                       marker=dict(size=4, color="black"), name="points"),
            go.Scatter(x=match_x, y=match_y, mode="lines", line=dict(width=1.5, color="black"), name="matches"),
        ]
    )
    if cfg.show_tree_edges:
        fig.add_trace(go.Scatter(x=edge_x, y=edge_y, mode="lines",
                                 line=dict(width=1, dash="dash", color="gray"), name="tree edges"))

    fig.update_layout(
        title=f"{len(state.trees)} trees, {len(state.matches)} matches",
        shapes=shapes,
        xaxis=dict(scaleanchor="y", scaleratio=1, range=[xmin, xmax]),
        yaxis=dict(range=[ymin, ymax]),
        template="plotly_white",
        legend=dict(x=0.01, y=0.99),
    )

    if save_html:
        fig.write_html(save_html, include_plotlyjs="cdn")
    return fig
