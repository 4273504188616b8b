# graph_based/utils/types.py
# Types partagés par le layout et la corrélation : nœuds/arêtes en modèle pydantic OU en dict brut.

from typing import Any, Dict, Mapping, Optional, Tuple, Union

NodeLike = Union[Mapping[str, Any], Any]   # {"id", ...} ou ReasoningNode/MisconceptionNode
EdgeLike = Union[Mapping[str, Any], Any]   # {"from","to"} / {"source","target"} ou *Edge pydantic

LevelMap = Dict[str, int]                  # id -> profondeur >= 0 (éphémère, recalculé à chaque rendu)
Position = Tuple[float, float]             # (x, y)
Transform = Dict[str, float]               # {"scale","translate_x","translate_y"}
GraphView = Dict[str, Any]                 # {"nodes":[...], "edges":[...], "transform":{...}, "ticks", "settled"}


def as_id(v: Any) -> Optional[str]:
    """Identifiant exploitable : str non vide, ou nombre converti ; None sinon. Partagé avec tutor.builder."""
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, (str, int, float)):
        s = str(v).strip()
        return s or None
    return None


def node_key(n: NodeLike) -> Optional[str]:
    """Id d'un nœud, quelle que soit sa forme."""
    if isinstance(n, Mapping):
        return as_id(n.get("id"))
    return as_id(getattr(n, "id", None))


def edge_ends(e: EdgeLike) -> Optional[Tuple[str, str]]:
    """(source, cible) d'une arête, ou None si une extrémité manque."""
    if isinstance(e, Mapping):
        src = as_id(e.get("from", e.get("source")))
        dst = as_id(e.get("to", e.get("target")))
    else:
        src = as_id(getattr(e, "source", None))
        dst = as_id(getattr(e, "target", None))
    if src is None or dst is None:
        return None
    return src, dst
