# tutor/builder.py
"""
Graph Model Builder : payload JSON (non typé) -> modèles pydantic.

Politique : tolérance maximale. Les sections optionnelles absentes donnent
des valeurs vides, les entrées inutilisables sont ignorées, les valeurs
d'énumération inconnues sont normalisées. Seule condition pour qu'un graphe
existe : au moins un nœud avec un `id` exploitable.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, get_args

from app.core.logging import get_logger
from graph_based.utils.types import as_id
from tutor.models import (
    ChatResponse, CodeSolution, Domain, Evaluation, Flashcard,
    MisconceptionEdge, MisconceptionGraph, MisconceptionNode,
    NodeRole, NodeType, ProblemSummary, ReasoningEdge, ReasoningGraph,
    ReasoningNode, StudentStepAnalysis, TutorResponse,
)

logger = get_logger(__name__)

_ROLES = set(get_args(NodeRole))
_TYPES = set(get_args(NodeType))
_DOMAINS = set(get_args(Domain))
_EVALUATIONS = set(get_args(Evaluation))
_MISC_TYPES = {"misconception", "concept", "gap"}
_MISC_RELATIONS = {"stems_from", "blocks", "related_to"}
_SEVERITIES = {"high", "medium", "low"}


# ---------------------------------------------------------------------------
# helpers de coercition
# ---------------------------------------------------------------------------

def _text(v: Any, default: str = "") -> str:
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return default

_ident = as_id   # même coercition que le layout (graph_based.utils.types)

def _enum(v: Any, allowed: set, default: str, *, upper: bool = False) -> str:
    s = _text(v).strip()
    s = s.upper().replace(" ", "_") if upper else s.lower()
    return s if s in allowed else default

def _items(v: Any) -> Iterable[Mapping[str, Any]]:
    """Ne garde que les dicts d'une liste (tout le reste est ignoré)."""
    if not isinstance(v, list):
        return []
    return [x for x in v if isinstance(x, Mapping)]

def _float(v: Any) -> Optional[float]:
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    return None

def _endpoints(e: Mapping[str, Any]) -> Optional[tuple]:
    src = _ident(e.get("from", e.get("source")))
    dst = _ident(e.get("to", e.get("target")))
    if not src or not dst:
        return None
    return src, dst


# ---------------------------------------------------------------------------
# graphes
# ---------------------------------------------------------------------------

def build_reasoning_graph(part: Any) -> Optional[ReasoningGraph]:
    """
    Valide la section `reasoning_graph`. None si aucun nœud exploitable.
    Doublons d'id : la dernière écriture gagne (position du premier).
    Arêtes sans extrémités : ignorées ; arêtes pendantes : conservées.
    """
    if not isinstance(part, Mapping):
        return None

    by_id: Dict[str, ReasoningNode] = {}
    for n in _items(part.get("nodes")):
        nid = _ident(n.get("id"))
        if not nid:
            continue
        if nid in by_id:
            logger.debug("reasoning_graph: duplicate node id %r (last wins)", nid)
        level = n.get("level")
        by_id[nid] = ReasoningNode(
            id=nid,
            role=_enum(n.get("role"), _ROLES, "STEP", upper=True),
            type=_enum(n.get("type"), _TYPES, "default"),
            label=_text(n.get("label")) or nid,
            math=_text(n.get("math")) or None,
            explanation=_text(n.get("explanation")),
            level=level if isinstance(level, int) and not isinstance(level, bool) and level >= 0 else None,
            x=_float(n.get("x")),
            y=_float(n.get("y")),
        )
    if not by_id:
        return None

    edges: List[ReasoningEdge] = []
    for e in _items(part.get("edges")):
        ends = _endpoints(e)
        if ends is None:
            continue
        edges.append(ReasoningEdge(source=ends[0], target=ends[1], reason=_text(e.get("reason"))))

    raw_path = part.get("main_path")
    main_path = [p for p in map(_ident, raw_path) if p] if isinstance(raw_path, list) else []
    return ReasoningGraph(nodes=list(by_id.values()), edges=edges, main_path=main_path)


def build_misconception_graph(part: Any) -> Optional[MisconceptionGraph]:
    """Même politique que le graphe de raisonnement, vocabulaire misconceptions."""
    if not isinstance(part, Mapping):
        return None

    by_id: Dict[str, MisconceptionNode] = {}
    for n in _items(part.get("nodes")):
        nid = _ident(n.get("id"))
        if not nid:
            continue
        sev = _text(n.get("severity")).strip().lower()
        by_id[nid] = MisconceptionNode(
            id=nid,
            label=_text(n.get("label")) or nid,
            type=_enum(n.get("type"), _MISC_TYPES, "concept"),
            severity=sev if sev in _SEVERITIES else None,
            explanation=_text(n.get("explanation")),
        )
    if not by_id:
        return None

    edges: List[MisconceptionEdge] = []
    for e in _items(part.get("edges")):
        ends = _endpoints(e)
        if ends is None:
            continue
        edges.append(MisconceptionEdge(
            source=ends[0], target=ends[1],
            relation=_enum(e.get("relation"), _MISC_RELATIONS, "related_to"),
        ))
    return MisconceptionGraph(nodes=list(by_id.values()), edges=edges)


# ---------------------------------------------------------------------------
# sections annexes
# ---------------------------------------------------------------------------

def build_steps(part: Any) -> List[StudentStepAnalysis]:
    steps: List[StudentStepAnalysis] = []
    for s in _items(part):
        steps.append(StudentStepAnalysis(
            step_id=_text(s.get("step_id")).strip(),
            math_latex=_text(s.get("math_latex")),
            explanation=_text(s.get("explanation")),
            evaluation=_enum(s.get("evaluation"), _EVALUATIONS, "CORRECT", upper=True),
            feedback=_text(s.get("feedback")),
        ))
    return steps

def build_flashcards(part: Any) -> List[Flashcard]:
    cards: List[Flashcard] = []
    for c in _items(part):
        front, back = _text(c.get("front")).strip(), _text(c.get("back")).strip()
        if not front or not back:
            continue
        cards.append(Flashcard(front=front, back=back, concept=_text(c.get("concept"))))
    return cards

def _summary(part: Any) -> ProblemSummary:
    if isinstance(part, str):
        return ProblemSummary(short_text=part)
    if not isinstance(part, Mapping):
        return ProblemSummary()
    return ProblemSummary(short_text=_text(part.get("short_text")), question=_text(part.get("question")))

def _chat(part: Any) -> Optional[ChatResponse]:
    if not isinstance(part, Mapping):
        return None
    raw_steps = part.get("step_by_step")
    steps = [_text(x) for x in raw_steps if _text(x)] if isinstance(raw_steps, list) else []
    return ChatResponse(
        opening=_text(part.get("opening")),
        step_by_step=steps,
        encouragement=_text(part.get("encouragement")),
    )

def _code(part: Any) -> Optional[CodeSolution]:
    if not isinstance(part, Mapping) or not _text(part.get("code")):
        return None
    return CodeSolution(
        language=_text(part.get("language")) or "python",
        code=_text(part.get("code")),
        output=_text(part.get("output")),
        time_complexity=_text(part.get("time_complexity")),
        space_complexity=_text(part.get("space_complexity")),
    )


def build_response(payload: Any) -> Optional[TutorResponse]:
    """Payload complet -> TutorResponse ; None si le payload n'est pas un objet."""
    if not isinstance(payload, Mapping):
        return None
    resp = TutorResponse(
        domain=_enum(payload.get("domain"), _DOMAINS, "MATH", upper=True),
        problem_summary=_summary(payload.get("problem_summary")),
        student_analysis=build_steps(payload.get("student_analysis")),
        reasoning_graph=build_reasoning_graph(payload.get("reasoning_graph")),
        misconception_graph=build_misconception_graph(payload.get("misconception_graph")),
        chat_response=_chat(payload.get("chat_response")),
        flashcards=build_flashcards(payload.get("flashcards")),
        code_solution=_code(payload.get("code_solution")),
    )
    if resp.reasoning_graph is None:
        logger.info("build_response: no renderable reasoning graph in payload")
    return resp
