# graph_based/layout/shapes.py
# Forme/couleur/icône d'un nœud : purement du rendu, la simulation ne les lit pas.
from __future__ import annotations
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from graph_based.utils.types import NodeLike

ROLE_COLORS = {
    "PROBLEM": "#6366F1",
    "SOLUTION": "#10B981",
    "FACT": "#F59E0B",
}
DEFAULT_COLOR = "#334155"

ROLE_ICONS = {"PROBLEM": "?", "SOLUTION": "✓", "FACT": "i"}

FLOW_COLORS = {
    "start": "#3B82F6",
    "end": "#3B82F6",
    "decision": "#F59E0B",
    "loop": "#F59E0B",
}
PROCESS_COLOR = "#8B5CF6"

FLOW_ICONS = {"decision": "?", "loop": "⟳", "start": "Start", "end": "End"}

MISCONCEPTION_COLOR = "#EF4444"
CONCEPT_COLOR = "#10B981"

# losange d'aire 3000 (d3.symbolDiamond) : demi-hauteur sqrt(A / 2tan30), demi-largeur * tan30
_TAN30 = math.sqrt(1.0 / 3.0)
_DIAMOND_HALF_H = math.sqrt(3000.0 / (_TAN30 * 2.0))
_DIAMOND_HALF_W = _DIAMOND_HALF_H * _TAN30


@dataclass(frozen=True)
class NodeShape:
    kind: str                 # circle | rect | pill | diamond
    width: float
    height: float
    radius: float             # cercle : rayon ; rect/pill : arrondi des coins
    color: str
    icon: str
    label_offset: float = 35.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _field(n: NodeLike, name: str) -> Optional[str]:
    v = n.get(name) if isinstance(n, dict) else getattr(n, name, None)
    return v if isinstance(v, str) else None


def node_shape(node: NodeLike, domain: str = "MATH") -> NodeShape:
    """
    Forme d'un nœud du graphe de raisonnement.
    CODING : organigramme (losange décision/boucle, pilule début/fin, rectangle sinon).
    MATH/PHYSICS : cercle coloré selon le rôle.
    """
    role = (_field(node, "role") or "STEP").upper()
    ntype = (_field(node, "type") or "default").lower()

    if domain == "CODING":
        color = FLOW_COLORS.get(ntype, PROCESS_COLOR)
        icon = FLOW_ICONS.get(ntype, "{}")
        if ntype in ("decision", "loop"):
            return NodeShape("diamond", 2 * _DIAMOND_HALF_W, 2 * _DIAMOND_HALF_H, 0.0, color, icon,
                             label_offset=50.0 if ntype == "decision" else 40.0)
        if ntype in ("start", "end"):
            return NodeShape("pill", 100.0, 40.0, 20.0, color, icon, label_offset=40.0)
        return NodeShape("rect", 100.0, 50.0, 4.0, color, icon, label_offset=40.0)

    return NodeShape("circle", 40.0, 40.0, 20.0, ROLE_COLORS.get(role, DEFAULT_COLOR), ROLE_ICONS.get(role, "•"))


def misconception_shape(node: NodeLike) -> NodeShape:
    if (_field(node, "type") or "concept") == "misconception":
        return NodeShape("circle", 40.0, 40.0, 20.0, MISCONCEPTION_COLOR, "!")
    return NodeShape("circle", 40.0, 40.0, 20.0, CONCEPT_COLOR, "✓")
