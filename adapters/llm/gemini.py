# adapters/llm/gemini.py
from __future__ import annotations
from typing import Dict, Optional, Tuple
import logging

from app.core.config import get_settings
from adapters.llm.base import Provider, _get_env

# Imports protégés (pas d'erreur si non installés)
try:
    from langchain_google_genai import ChatGoogleGenerativeAI
except Exception:  # pragma: no cover
    ChatGoogleGenerativeAI = None  # type: ignore

log = logging.getLogger(__name__)


class GeminiProvider(Provider):
    """
    Provider Gemini:
    - Chat : ChatGoogleGenerativeAI (model p.ex. "gemini-1.5-pro")
    - Un client par couple (temperature, json_mode), créé à la demande.
    """

    def __init__(self, api_key: Optional[str] = None, chat_model: Optional[str] = None):
        self.gemini = get_settings().provider.gemini
        # Fallback env si pas fournis
        self.api_key = api_key or self.gemini.api_key or _get_env("GOOGLE_API_KEY")
        self.chat_model = chat_model or self.gemini.chat_model
        self._clients: Dict[Tuple[float, bool], object] = {}

        if ChatGoogleGenerativeAI is None:
            raise RuntimeError(
                "Gemini provider requires 'langchain-google-genai'. "
                "pip install -U langchain-google-genai"
            )
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY is missing for GeminiProvider.")
        if not self.chat_model:
            raise RuntimeError("GOOGLE_CHAT_MODEL is missing for GeminiProvider.")

    def _client(self, temperature: float, json_mode: bool):
        key = (temperature, json_mode)
        if key not in self._clients:
            extra = {"response_mime_type": "application/json"} if json_mode else {}
            self._clients[key] = ChatGoogleGenerativeAI(  # type: ignore[misc]
                model=self.chat_model,
                google_api_key=self.api_key,
                temperature=temperature,
                max_output_tokens=None,
                **extra,
            )
        return self._clients[key]

    # ---- Chat ----
    def ask_llm(
        self,
        query: str,
        *,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> str:
        chat = self._client(0.0 if temperature is None else float(temperature), json_mode)
        messages = [("system", system), ("human", query)] if system else [("human", query)]
        log.debug("gemini ask_llm model=%s json=%s chars=%d", self.chat_model, json_mode, len(query))
        resp = chat.invoke(messages)  # type: ignore[attr-defined]
        content = getattr(resp, "content", resp)
        # certains modèles renvoient une liste de parts
        if isinstance(content, list):
            content = "".join(p.get("text", "") if isinstance(p, dict) else str(p) for p in content)
        return str(content)

    def capabilities(self) -> Dict:
        return {
            "provider": "gemini",
            "supports_chat": True,
            "supports_json_mode": True,
            "chat_model": self.chat_model,
        }
