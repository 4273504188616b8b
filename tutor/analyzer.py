# tutor/analyzer.py
from __future__ import annotations
import json
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from adapters.llm.base import Provider
from app.core.config import AnalysisCfg
from app.core.logging import get_logger
from tutor.builder import build_response
from tutor.errors import AnalysisFailed, ProviderUnavailable
from tutor.extract import extract_json
from tutor.models import (
    AnalysisResult, ChatTurn, FollowUpReply, QuizContent, TutorResponse,
)
from tutor.prompts import build_follow_up_prompt, build_problem_prompt, build_system_instruction

logger = get_logger(__name__)

FOLLOW_UP_APOLOGY = "Sorry, I couldn't process that follow-up question."


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Analyzer:
    """
    Service d'analyse : prompt -> provider -> extract_json -> build_response.
    Un échec de parsing n'est pas une exception : `parsed_data` vaut None et
    `raw_text` est conservé pour inspection.
    """
    provider: Optional[Provider] = None       # None : parse() seulement
    cfg: AnalysisCfg = field(default_factory=AnalysisCfg)

    def parse(self, raw_text: str, original_prompt: Optional[str] = None) -> AnalysisResult:
        """Texte brut (déjà obtenu) -> AnalysisResult, sans appel au modèle."""
        payload = extract_json(raw_text)
        parsed = build_response(payload)
        if parsed is None:
            logger.warning("analysis failed: no structured payload (%d chars)", len(raw_text or ""))
        ts = _now_ms()
        return AnalysisResult(
            id=str(ts),
            timestamp=ts,
            parsed_data=parsed,
            raw_text=raw_text or "",
            original_prompt=original_prompt,
        )

    def analyze(self, notes: str, *, mode: Optional[str] = None, attachment_name: Optional[str] = None) -> AnalysisResult:
        notes = (notes or "").strip()
        if not notes and not attachment_name:
            raise AnalysisFailed("nothing to analyze: empty notes and no attachment")
        if self.provider is None:
            raise ProviderUnavailable("no LLM provider configured")

        mode = mode or self.cfg.default_mode
        system = build_system_instruction(mode)
        prompt = build_problem_prompt(notes, attachment_name)
        logger.info("analyze: mode=%s attachment=%s notes=%d chars", mode, bool(attachment_name), len(notes))

        raw = self.provider.ask_llm(prompt, system=system, temperature=self.cfg.temperature, json_mode=True)
        original = notes or (f"File Upload: {attachment_name}" if attachment_name else "Problem Analysis")
        return self.parse(raw or "", original_prompt=original)

    def ask_follow_up(self, context: TutorResponse, history: Iterable[ChatTurn], question: str) -> FollowUpReply:
        """Question de suivi : quiz ou texte. Ne lève jamais (message d'excuse en cas d'erreur)."""
        prompt = build_follow_up_prompt(context, history, question)
        try:
            raw = self.provider.ask_llm(prompt, temperature=self.cfg.follow_up_temperature, json_mode=True)
        except Exception:
            logger.exception("follow-up: provider error")
            return FollowUpReply(type="text", content=FOLLOW_UP_APOLOGY)

        data = extract_json(raw)
        if isinstance(data, dict):
            quiz = data.get("quiz")
            if isinstance(quiz, dict):
                try:
                    return FollowUpReply(type="quiz", content=QuizContent.model_validate(quiz))
                except ValueError:
                    logger.warning("follow-up: malformed quiz, falling back to text")
            text = data.get("text")
            if isinstance(text, str) and text:
                return FollowUpReply(type="text", content=text)
        if isinstance(data, str):
            return FollowUpReply(type="text", content=data)
        if data is None:
            # pas de JSON : on rend le texte brut tel quel
            return FollowUpReply(type="text", content=raw or FOLLOW_UP_APOLOGY)
        return FollowUpReply(type="text", content=json.dumps(data, ensure_ascii=False))
