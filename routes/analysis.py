# routes/analysis.py
from fastapi import APIRouter, HTTPException

from app.core import resources
from app.core.logging import get_logger
from graph_based.correlate import resolve_step
from graph_based.layout.errors import LayoutError
from graph_based.layout.levels import assign_levels
from pipelines.render import render_graph
from tutor.builder import build_misconception_graph, build_reasoning_graph
from tutor.errors import AnalysisFailed, ProviderUnavailable
from tutor.models import (
    AnalyzeRequest, CorrelateRequest, FollowUpReply, FollowUpRequest,
    LayoutRequest, LevelsRequest, MisconceptionGraph, ParseRequest, ReasoningGraph,
)

router = APIRouter(prefix="/analysis", tags=["analysis"])
logger = get_logger(__name__)


def _status(result) -> dict:
    body = result.model_dump(by_alias=True)
    body["status"] = "failed" if result.failed else "ok"
    return body

# -----------------------------------------------------------------------------------

@router.post("/analyze") # POST : /api/analysis/analyze
async def analyze(req: AnalyzeRequest):
    logger.info("POST:analyze:start", extra={})
    try:
        analyzer = resources.get_analyzer()
        result = analyzer.analyze(req.notes, mode=req.mode, attachment_name=req.attachment_name)
    except ProviderUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except AnalysisFailed as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result.failed:
        # le modèle a répondu mais rien n'est exploitable : texte brut renvoyé pour inspection
        raise HTTPException(status_code=502, detail={"status": "failed", "raw_text": result.raw_text})
    logger.info("POST:analyze:end", extra={})
    return _status(result)

@router.post("/parse") # POST : /api/analysis/parse
async def parse(req: ParseRequest):
    analyzer = resources.get_parser()
    return _status(analyzer.parse(req.raw_text, original_prompt=req.original_prompt))

# -----------------------------------------------------------------------------------

@router.post("/layout") # POST : /api/analysis/layout
async def layout(req: LayoutRequest):
    if req.kind == "misconception":
        graph = build_misconception_graph(req.graph) or MisconceptionGraph()
    else:
        graph = build_reasoning_graph(req.graph) or ReasoningGraph()
    try:
        return render_graph(
            graph, req.width, req.height,
            domain=req.domain, cfg=resources.get_all_settings().layout, max_ticks=req.max_ticks,
        )
    except LayoutError as e:
        raise HTTPException(status_code=422, detail=str(e))

@router.post("/levels") # POST : /api/analysis/levels
async def levels(req: LevelsRequest):
    return {"levels": assign_levels(req.nodes, req.edges)}

@router.post("/correlate") # POST : /api/analysis/correlate
async def correlate(req: CorrelateRequest):
    return {"index": resolve_step(req.node_id, req.steps)}

# -----------------------------------------------------------------------------------

@router.post("/follow-up", response_model=FollowUpReply) # POST : /api/analysis/follow-up
async def follow_up(req: FollowUpRequest):
    try:
        analyzer = resources.get_analyzer()
    except ProviderUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return analyzer.ask_follow_up(req.context, req.history, req.question)
