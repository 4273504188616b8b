# tutor/models.py
from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

Domain = Literal["MATH", "PHYSICS", "CODING"]
NodeRole = Literal["PROBLEM", "STEP", "FACT", "SOLUTION"]
NodeType = Literal["default", "start", "end", "process", "decision", "loop"]
Evaluation = Literal["CORRECT", "PARTIALLY_CORRECT", "INCORRECT", "MISSING_KEY_STEP"]
AccessibilityMode = Literal["default", "adhd", "dyslexia"]

# ---------------------------------------------------------------------------
# Graphe de raisonnement
# ---------------------------------------------------------------------------

class ReasoningNode(BaseModel):
    id: str
    role: NodeRole = "STEP"
    type: NodeType = "default"     # flowchart (domaine CODING)
    label: str = ""
    math: Optional[str] = None
    explanation: str = ""
    # champs de layout (renseignés par graph_based.layout)
    level: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None

class ReasoningEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    reason: str = ""

class ReasoningGraph(BaseModel):
    nodes: List[ReasoningNode] = Field(default_factory=list)
    edges: List[ReasoningEdge] = Field(default_factory=list)
    main_path: List[str] = Field(default_factory=list)

# ---------------------------------------------------------------------------
# Carte des misconceptions
# ---------------------------------------------------------------------------

class MisconceptionNode(BaseModel):
    id: str
    label: str = ""
    type: Literal["misconception", "concept", "gap"] = "concept"
    severity: Optional[Literal["high", "medium", "low"]] = None
    explanation: str = ""
    level: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None

class MisconceptionEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    relation: Literal["stems_from", "blocks", "related_to"] = "related_to"

class MisconceptionGraph(BaseModel):
    nodes: List[MisconceptionNode] = Field(default_factory=list)
    edges: List[MisconceptionEdge] = Field(default_factory=list)

# ---------------------------------------------------------------------------
# Payload complet (contrat JSON attendu du modèle)
# ---------------------------------------------------------------------------

class StudentStepAnalysis(BaseModel):
    step_id: str
    math_latex: str = ""
    explanation: str = ""
    evaluation: Evaluation = "CORRECT"
    feedback: str = ""

class ProblemSummary(BaseModel):
    short_text: str = ""
    question: str = ""

class ChatResponse(BaseModel):
    opening: str = ""
    step_by_step: List[str] = Field(default_factory=list)
    encouragement: str = ""

class Flashcard(BaseModel):
    front: str
    back: str
    concept: str = ""

class CodeSolution(BaseModel):
    language: str = "python"
    code: str = ""
    output: str = ""
    time_complexity: str = ""
    space_complexity: str = ""

class TutorResponse(BaseModel):
    domain: Domain = "MATH"
    problem_summary: ProblemSummary = Field(default_factory=ProblemSummary)
    student_analysis: List[StudentStepAnalysis] = Field(default_factory=list)
    reasoning_graph: Optional[ReasoningGraph] = None
    misconception_graph: Optional[MisconceptionGraph] = None
    chat_response: Optional[ChatResponse] = None
    flashcards: List[Flashcard] = Field(default_factory=list)
    code_solution: Optional[CodeSolution] = None

class AnalysisResult(BaseModel):
    id: str
    timestamp: int                  # epoch ms
    parsed_data: Optional[TutorResponse] = None
    raw_text: str = ""
    original_prompt: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.parsed_data is None

# ---------------------------------------------------------------------------
# Chat de suivi
# ---------------------------------------------------------------------------

class QuizQuestion(BaseModel):
    id: str = ""
    question: str
    options: List[str] = Field(default_factory=list)

class QuizContent(BaseModel):
    questions: List[QuizQuestion] = Field(default_factory=list)

class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class FollowUpReply(BaseModel):
    type: Literal["text", "quiz"] = "text"
    content: Union[QuizContent, str] = ""

# ---------------------------------------------------------------------------
# Requêtes HTTP
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    notes: str = ""
    mode: AccessibilityMode = "default"
    attachment_name: Optional[str] = None   # le fichier lui-même est géré par le client

class ParseRequest(BaseModel):
    raw_text: str
    original_prompt: Optional[str] = None

class LayoutRequest(BaseModel):
    graph: Dict[str, Any]
    width: float = Field(800.0, gt=0)
    height: float = Field(600.0, gt=0)
    domain: Domain = "MATH"
    kind: Literal["reasoning", "misconception"] = "reasoning"
    max_ticks: Optional[int] = Field(None, ge=0, le=5000)

class LevelsRequest(BaseModel):
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    edges: List[Dict[str, Any]] = Field(default_factory=list)

class CorrelateRequest(BaseModel):
    node_id: Optional[str] = None
    steps: List[Dict[str, Any]] = Field(default_factory=list)

class FollowUpRequest(BaseModel):
    context: TutorResponse
    history: List[ChatTurn] = Field(default_factory=list)
    question: str
