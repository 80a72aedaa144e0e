#!/usr/bin/env python3
# scripts/plot_graph.py

from __future__ import annotations

from pathlib import Path
import sys
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Any, Dict, List, Optional, Tuple
import typer
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch
from matplotlib.lines import Line2D
import networkx as nx

from dryflow.config import load_config
from dryflow.errors import ConfigError, ParseError
from dryflow.structural.connections import find_unreachable
from dryflow.structural.loader import load_document
from dryflow.utils.graph import build_connection_graph, trigger_names
from dryflow.utils.io import ensure_parent
from dryflow.utils.logger import log


app = typer.Typer(help="Plot the connection graph of a workflow and highlight unreachable nodes.")

# ---------- color/theme ----------
BASE_NODE = "#5B8FD9"     # blue
TRIGGER_NODE = "#2AA876"  # green
LOOP_NODE = "#F4A259"     # orange (loop marker / batch splitter)
UNREACHABLE = "#E4572E"   # red
EDGE_BASE = "#888888"
FONT_FAMILY = "DejaVu Sans"

BOX_W, BOX_H = 0.28, 0.14


def _canvas_layout(G: nx.DiGraph, positions: Dict[str, Any]) -> Dict[str, Tuple[float, float]]:
    """
    Use the editor canvas coordinates stored on each node, scaled to box units.
    Falls back to a spring layout when any node lacks a usable position.
    """
    pts: Dict[str, Tuple[float, float]] = {}
    for name in G.nodes:
        pos = positions.get(name)
        if not (isinstance(pos, list) and len(pos) == 2 and all(isinstance(v, (int, float)) for v in pos)):
            log.info("node %r has no canvas position, using spring layout", name)
            return nx.spring_layout(G, k=0.7, iterations=200, seed=42)
        pts[name] = (float(pos[0]), -float(pos[1]))  # canvas y grows downwards

    xs = [x for x, _ in pts.values()] or [0.0]
    span = max(max(xs) - min(xs), 1.0)
    scale = (BOX_W * 3.0 * max(len(set(xs)) - 1, 1)) / span
    return {n: (x * scale, y * scale) for n, (x, y) in pts.items()}


def _draw_box(ax, xy, text, facecolor, edgecolor="#3c3c3c"):
    x, y = xy
    box = FancyBboxPatch(
        (x - BOX_W / 2, y - BOX_H / 2), BOX_W, BOX_H,
        boxstyle="round,pad=0.03,rounding_size=0.02",
        linewidth=1.2, edgecolor=edgecolor, facecolor=facecolor, zorder=2,
    )
    ax.add_patch(box)
    ax.text(x, y, text, ha="center", va="center", fontsize=8, zorder=3)


def _node_color(name: str, data: Dict[str, Any], triggers: List[str], unreachable: List[str], loop_types) -> str:
    if name in unreachable:
        return UNREACHABLE
    if name in triggers:
        return TRIGGER_NODE
    if data.get("type") in loop_types:
        return LOOP_NODE
    return BASE_NODE


@app.command()
def plot(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to workflow JSON"),
    out: Path = typer.Option(Path("experiments/results/graph.png"), "--out", "-o", help="Output image path"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True, help="JSON/YAML config file"),
    title: Optional[str] = typer.Option(None, "--title", help="Figure title"),
    show_legend: bool = typer.Option(True, "--legend/--no-legend", help="Show legend"),
):
    """Draw nodes at their canvas positions; unreachable nodes are red, dangling edges are listed below."""
    matplotlib.rcParams["font.family"] = FONT_FAMILY

    try:
        cfg = load_config(config_path)
        doc = load_document(input)
    except (ConfigError, ParseError) as e:
        typer.echo(f"[error] {e}", err=True)
        raise typer.Exit(code=1)

    G = build_connection_graph(doc)
    triggers = trigger_names(G, cfg.trigger_types)
    unreachable = find_unreachable(G, cfg)
    dangling = [str(e) for e in G.graph["dangling_edges"]]
    log.info("graph built: %d nodes, %d edges", G.number_of_nodes(), G.number_of_edges())

    positions = {n.name: n.position for n in doc.nodes}
    pos = _canvas_layout(G, positions)

    fig = plt.figure(figsize=(9.5, 6.2), dpi=180)
    ax = plt.gca()
    ax.set_axis_off()
    xs = [x for x, _ in pos.values()]
    ys = [y for _, y in pos.values()]
    if xs and ys:
        ax.set_xlim(min(xs) - BOX_W, max(xs) + BOX_W)
        ax.set_ylim(min(ys) - BOX_H * 2, max(ys) + BOX_H * 2)
    ax.set_aspect("equal")

    nx.draw_networkx_edges(
        G, pos, ax=ax,
        width=1.4, alpha=0.7,
        arrows=True, arrowstyle="-|>", arrowsize=14,
        edge_color=EDGE_BASE,
        connectionstyle="arc3,rad=0.08",
        min_source_margin=18, min_target_margin=18,
    )

    loop_types = {cfg.loop_marker_type, cfg.batch_node_type}
    for name, data in G.nodes(data=True):
        _draw_box(ax, pos[name], name, _node_color(name, data, triggers, unreachable, loop_types))

    ax.set_title(title or f"Connection graph: {doc.label}", fontsize=13, pad=18)
    if dangling:
        fig.text(0.02, 0.02, "Dangling edges: " + ", ".join(dangling), fontsize=8, ha="left", va="bottom")

    if show_legend:
        legend_elems = [
            Line2D([0], [0], marker="s", color="w", label="Trigger", markerfacecolor=TRIGGER_NODE, markersize=11),
            Line2D([0], [0], marker="s", color="w", label="Loop / batch", markerfacecolor=LOOP_NODE, markersize=11),
            Line2D([0], [0], marker="s", color="w", label="Unreachable", markerfacecolor=UNREACHABLE, markersize=11),
            Line2D([0], [0], marker="s", color="w", label="Other nodes", markerfacecolor=BASE_NODE, markersize=11),
        ]
        fig.legend(handles=legend_elems, loc="upper left", frameon=False, fontsize=9, ncol=4)

    ensure_parent(out)
    plt.tight_layout()
    fig.savefig(out, bbox_inches="tight", pad_inches=0.05)
    plt.close(fig)
    log.info("wrote graph to %s", out)
    typer.echo(f"[ok] wrote {out}")


if __name__ == "__main__":
    app()
