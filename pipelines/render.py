# pipelines/render.py
"""
Passe de rendu d'un graphe : niveaux -> simulation de forces -> cadrage -> formes.
Produit une vue sérialisable ({nodes, edges, transform, ticks, settled}) ;
le dessin reste à la charge de l'hôte.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Union

from app.core.config import LayoutCfg
from app.core.logging import get_logger
from graph_based.layout.force import ForceLayout
from graph_based.layout.levels import assign_levels
from graph_based.layout.shapes import misconception_shape, node_shape
from graph_based.utils.types import GraphView
from pipelines.orchestrator import Orchestrator, State, Step
from tutor.models import MisconceptionGraph, ReasoningGraph

logger = get_logger(__name__)

AnyGraph = Union[ReasoningGraph, MisconceptionGraph]


def _levels(state: State) -> State:
    g: AnyGraph = state["graph"]
    state["levels"] = assign_levels(g.nodes, g.edges)
    return state


def _layout(state: State) -> State:
    g: AnyGraph = state["graph"]
    cfg: LayoutCfg = state["cfg"]
    if state["kind"] == "misconception":
        sim = ForceLayout(
            g.nodes, g.edges, state["width"], state["height"], cfg=cfg, layered=False,
            link_distance=cfg.misconception_link_distance,
            charge_strength=cfg.misconception_charge_strength,
            collide_radius=cfg.misconception_collide_radius,
        )
    else:
        link = cfg.link_distance_coding if state["domain"] == "CODING" else cfg.link_distance
        sim = ForceLayout(g.nodes, g.edges, state["width"], state["height"], cfg=cfg, link_distance=link)
    sim.run(max_ticks=state.get("max_ticks"))
    state["sim"] = sim
    state["positions"] = sim.positions()
    return state


def _fit(state: State) -> State:
    state["transform"] = state["sim"].fit_transform()
    return state


def _shapes(state: State) -> State:
    g: AnyGraph = state["graph"]
    if state["kind"] == "misconception":
        state["shapes"] = {n.id: misconception_shape(n) for n in g.nodes}
    else:
        state["shapes"] = {n.id: node_shape(n, state["domain"]) for n in g.nodes}
    return state


RENDER_STEPS = [
    Step("levels", _levels),
    Step("layout", _layout),
    Step("fit", _fit),
    Step("shapes", _shapes),
]


def _view(state: State) -> GraphView:
    g: AnyGraph = state["graph"]
    levels, positions, shapes = state["levels"], state["positions"], state["shapes"]
    nodes = []
    seen = set()
    for n in g.nodes:
        if n.id in seen:
            continue
        seen.add(n.id)
        x, y = positions[n.id]
        item: Dict[str, Any] = n.model_dump(exclude={"x", "y", "level"})
        item.update(level=levels.get(n.id, 0), x=x, y=y, shape=shapes[n.id].to_dict())
        nodes.append(item)
    sim: ForceLayout = state["sim"]
    return {
        "kind": state["kind"],
        "nodes": nodes,
        "edges": [e.model_dump(by_alias=True) for e in g.edges],
        "transform": state["transform"],
        "ticks": sim.ticks,
        "settled": sim.settled,
    }


def render_graph(
    graph: AnyGraph,
    width: float,
    height: float,
    *,
    domain: str = "MATH",
    cfg: Optional[LayoutCfg] = None,
    max_ticks: Optional[int] = None,
) -> GraphView:
    """Graphe typé -> vue positionnée. Le type de graphe choisit le jeu de forces."""
    kind = "misconception" if isinstance(graph, MisconceptionGraph) else "reasoning"
    state: State = {
        "graph": graph, "kind": kind, "domain": domain,
        "width": width, "height": height,
        "cfg": cfg or LayoutCfg(), "max_ticks": max_ticks,
    }
    state = Orchestrator(RENDER_STEPS).execute(state)
    logger.info("render %s: %d nodes, %d ticks, settled=%s",
                kind, len(state["positions"]), state["sim"].ticks, state["sim"].settled)
    return _view(state)
