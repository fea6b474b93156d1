"""Interactive seating visualisation built with networkx and pyvis."""
from __future__ import annotations

import math
from typing import Dict, List, Mapping, Tuple

import networkx as nx
from pyvis.network import Network

from .models import Assignment, Table

_PALETTE = [
    "#FFB347", "#77DD77", "#AEC6CF", "#C23B22", "#F49AC2", "#B39EB5",
    "#03C03C", "#779ECB", "#966FD6", "#FFD700", "#FF6961", "#CB99C9",
    "#CFCFC4", "#FDFD96", "#84B6F4", "#FDCAE1",
]
_SATISFIED = "#3CB371"
_UNSATISFIED = "#A9A9A9"
_VIOLATION = "#FF6B6B"


def build_assignment_graph(
    assignment: Assignment,
    companions: Mapping[str, str],
    show_unsatisfied_edges: bool = False,
    canvas_size: Tuple[int, int] = (1600, 1000),
) -> nx.DiGraph:
    """
    Build a directed graph of the seating.

    Nodes are people placed in a circle around their table's centre. Edges
    point from a person to each preference: green when seated together, grey
    when not (only if ``show_unsatisfied_edges``). Violated companion pairs
    are drawn in red. Preferences naming unknown people are ignored.
    """
    width, height = canvas_size
    centers = _compute_table_centers(len(assignment.tables), width, height)
    table_of = assignment.as_mapping()

    G = nx.DiGraph()
    for index, table in enumerate(assignment.tables):
        cx, cy = centers[index]
        coords = _circle_layout(cx, cy, 60 + 6 * table.capacity, table.capacity)
        for person, (x, y) in zip(table.occupants, coords):
            G.add_node(
                person.name,
                label=person.name,
                title=_node_tooltip(person.name, index, table),
                color=_PALETTE[index % len(_PALETTE)],
                table=index,
                x=x,
                y=y,
                physics=False,
                shape="dot",
                size=18,
            )

    for index, table in enumerate(assignment.tables):
        for person in table.occupants:
            for pref in person.preferences:
                if pref not in table_of or pref == person.name:
                    continue
                together = table_of[pref] == index
                if not together and not show_unsatisfied_edges:
                    continue
                G.add_edge(person.name, pref, color=_SATISFIED if together else _UNSATISFIED,
                           width=3 if together else 1, arrows="to")
            companion = companions.get(person.name)
            if companion in table_of and table_of[companion] != index:
                G.add_edge(person.name, companion, color=_VIOLATION, width=4, label="companion", arrows="to")
    return G


def generate_assignment_mind_map(
    assignment: Assignment,
    companions: Mapping[str, str],
    show_unsatisfied_edges: bool = False,
    canvas_size: Tuple[int, int] = (1600, 1000),
) -> str:
    """Return HTML with the seating network embedded."""
    G = build_assignment_graph(assignment, companions, show_unsatisfied_edges, canvas_size)
    net = Network(height="700px", width="100%", bgcolor="#111111", font_color="#EEEEEE", directed=True)
    net.toggle_physics(False)  # positions are fixed
    net.from_nx(G)
    html = net.generate_html()
    if "</body>" in html:
        return html.replace("</body>", _legend_html() + "</body>")
    return html + _legend_html()


def _compute_table_centers(count: int, width: int, height: int) -> Dict[int, Tuple[int, int]]:
    """Place table centres on a grid inside the canvas area."""
    if not count:
        return {}
    cols = max(1, int(math.ceil(math.sqrt(count))))
    rows = int(math.ceil(count / cols))
    margin_x = 120
    margin_y = 120
    step_x = max(1, width - 2 * margin_x) // cols
    step_y = max(1, height - 2 * margin_y) // rows

    centers: Dict[int, Tuple[int, int]] = {}
    for idx in range(count):
        r, c = divmod(idx, cols)
        centers[idx] = (margin_x + c * step_x + step_x // 2, margin_y + r * step_y + step_y // 2)
    return centers


def _circle_layout(cx: int, cy: int, r: int, n: int) -> List[Tuple[int, int]]:
    pts = []
    for i in range(n):
        theta = 2 * math.pi * i / n
        pts.append((int(cx + r * math.cos(theta)), int(cy + r * math.sin(theta))))
    return pts


def _node_tooltip(name: str, index: int, table: Table) -> str:
    person = next(p for p in table.occupants if p.name == name)
    satisfied = [p for p in person.preferences if p in table.people_map]
    return (
        f"<b>{name}</b><br>"
        f"Table: {index}<br>"
        f"Preferences: {', '.join(person.preferences) or 'none'}<br>"
        f"Satisfied: {len(satisfied)}"
    )


def _legend_html() -> str:
    return f"""
    <style>
    .legend-box{{
      position:absolute;right:12px;bottom:12px;
      background:#222;color:#eee;border:1px solid #444;border-radius:8px;
      padding:8px 12px;font-family:system-ui, -apple-system, Segoe UI, Roboto, Arial;font-size:12px;
      z-index:10;
    }}
    .legend-swatch{{display:inline-block;width:12px;height:12px;margin-right:6px;vertical-align:middle;border:1px solid #444;}}
    </style>
    <div class="legend-box">
      <div><span class="legend-swatch" style="background:{_SATISFIED}"></span>satisfied preference</div>
      <div><span class="legend-swatch" style="background:{_UNSATISFIED}"></span>unsatisfied preference</div>
      <div><span class="legend-swatch" style="background:{_VIOLATION}"></span>companion not seated together</div>
      <div style="margin-top:6px;">node color: table</div>
    </div>
    """
