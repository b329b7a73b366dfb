"""Preview rendering of computed family tree layouts."""

from pathlib import Path

import matplotlib.patches as mpatches
import pydot

from config import DEFAULT_CONFIG, LayoutConfig
from models import PARTNERSHIP, LayoutResult

# Points per inch for Graphviz and matplotlib figure sizing
DPI = 72


def _node_label(node) -> str:
    name = " ".join(part for part in (node.first_name, node.last_name) if part) or node.id
    year = str(node.birth_year) if node.birth_year is not None else ""
    return f"{name}\n{year}" if year else name


def plot_layout(
    result: LayoutResult,
    output_path: Path | None = None,
    config: LayoutConfig = DEFAULT_CONFIG,
):
    """
    Draw a computed layout with matplotlib.

    Cards are drawn as rounded boxes and connectors as the routed polylines, in
    canvas coordinates (y grows downwards, like the UI).

    Args:
        result: Output of layout()
        output_path: Path to save the image (PNG, SVG or PDF). If None, displays interactively.
        config: Geometry used to produce the layout

    Returns:
        The matplotlib Figure
    """
    import matplotlib.pyplot as plt

    width = result.bounds.width
    height = result.bounds.height
    fig, ax = plt.subplots(figsize=(width / DPI / 2, height / DPI / 2))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_aspect("equal")
    ax.axis("off")

    # Add edges
    for edge in result.edges:
        xs = [point.x for point in edge.path]
        ys = [point.y for point in edge.path]
        style = "--" if edge.kind == PARTNERSHIP else "-"
        ax.plot(xs, ys, style, color="darkgray", linewidth=1.5, zorder=1)

    # Add nodes
    for node in result.nodes:
        # Color by claimed/alive state
        if node.is_claimed:
            fillcolor = "lightblue"
        elif node.is_alive:
            fillcolor = "lightyellow"
        else:
            fillcolor = "lightgray"

        ax.add_patch(
            mpatches.FancyBboxPatch(
                (node.x, node.y),
                config.node_width,
                config.node_height,
                boxstyle="round,pad=0,rounding_size=16",
                facecolor=fillcolor,
                edgecolor="gray",
                zorder=2,
            )
        )
        ax.text(node.center_x, node.center_y, _node_label(node), ha="center", va="center", fontsize=8, zorder=3)

    if output_path:
        fig.savefig(str(output_path), bbox_inches="tight")
        print(f"Layout saved to {output_path}")
    else:
        plt.show()

    return fig


def layout_to_dot(result: LayoutResult, config: LayoutConfig = DEFAULT_CONFIG) -> pydot.Dot:
    """
    Export a computed layout as a Graphviz graph with pinned positions.

    Render it with `neato -n` so Graphviz keeps the given coordinates. Each
    connector polyline becomes a chain of invisible point nodes joined by
    straight edges, so the routing is reproduced exactly.
    """
    P = pydot.Dot(graph_type="graph")
    P.set("splines", "line")
    P.set("bb", f"0,0,{result.bounds.width},{result.bounds.height}")

    def pos(x: float, y: float) -> str:
        # Graphviz y grows upwards
        return f"{x},{result.bounds.height - y}!"

    for node in result.nodes:
        P.add_node(
            pydot.Node(
                node.id,
                label=_node_label(node),
                shape="box",
                style="rounded,filled",
                fillcolor="lightblue" if node.is_claimed else "lightgray",
                fixedsize="true",
                width=str(config.node_width / DPI),
                height=str(config.node_height / DPI),
                pos=pos(node.center_x, node.center_y),
            )
        )

    for edge in result.edges:
        names = [f"{edge.id}__{index}" for index in range(len(edge.path))]
        for name, point in zip(names, edge.path):
            P.add_node(pydot.Node(name, shape="point", width="0", label="", pos=pos(point.x, point.y)))
        for start, end in zip(names, names[1:]):
            P.add_edge(
                pydot.Edge(start, end, color="darkgray", style="dashed" if edge.kind == PARTNERSHIP else "solid")
            )

    return P
