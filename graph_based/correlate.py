# graph_based/correlate.py
"""
Nœud du graphe -> index (0-based) dans la liste d'étapes `student_analysis`.

Les deux collections sont produites indépendamment par le modèle : pas de
convention d'ids commune garantie. Les heuristiques sont une liste ordonnée
(`STRATEGIES`), la première qui répond gagne.
"""
from __future__ import annotations
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from app.core.logging import get_logger

logger = get_logger(__name__)

_DIGITS = re.compile(r"\d+")

Strategy = Callable[[str, Optional[int], List[Optional[str]]], Optional[int]]


def first_number(s: Optional[str]) -> Optional[int]:
    """Premier groupe de chiffres ("step12b3" -> 12), None si aucun."""
    if not isinstance(s, str):
        return None
    m = _DIGITS.search(s)
    return int(m.group(0)) if m else None


def _step_id(step: Any) -> Optional[str]:
    if isinstance(step, str):
        return step
    if isinstance(step, dict):
        v = step.get("step_id")
    else:
        v = getattr(step, "step_id", None)
    if isinstance(v, (int, str)) and not isinstance(v, bool):
        return str(v)
    return None


def by_unique_number(node_id: str, num: Optional[int], step_ids: List[Optional[str]]) -> Optional[int]:
    if num is None:
        return None
    hits = [i for i, sid in enumerate(step_ids) if first_number(sid) == num]
    return hits[0] if len(hits) == 1 else None


def by_exact_id(node_id: str, num: Optional[int], step_ids: List[Optional[str]]) -> Optional[int]:
    for i, sid in enumerate(step_ids):
        if sid == node_id:
            return i
    return None


def by_position(node_id: str, num: Optional[int], step_ids: List[Optional[str]]) -> Optional[int]:
    if num is not None and 0 < num <= len(step_ids):
        return num - 1
    return None


STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("unique_number", by_unique_number),
    ("exact_id", by_exact_id),
    ("position", by_position),
)


def resolve_step(node_id: Any, steps: Optional[Sequence[Any]]) -> Optional[int]:
    """Index de l'étape correspondant à `node_id`, ou None (pas de surlignage)."""
    if isinstance(node_id, bool) or not isinstance(node_id, (str, int)):
        return None
    node_id = str(node_id)
    if not node_id or not steps:
        return None

    step_ids = [_step_id(s) for s in steps]
    num = first_number(node_id)
    for name, strategy in STRATEGIES:
        idx = strategy(node_id, num, step_ids)
        if idx is not None:
            logger.debug("correlate %r -> %d (%s)", node_id, idx, name)
            return idx
    return None
