# adapters/llm/openai.py
from __future__ import annotations
from typing import Dict, List, Optional
from dataclasses import dataclass
from app.core.config import get_settings
import logging

from adapters.llm.base import Provider, _get_env

try:
    from openai import OpenAI  # type: ignore
except Exception:
    OpenAI = None  # type: ignore

log = logging.getLogger(__name__)


@dataclass
class OpenAIProvider(Provider):
    """
    Provider OpenAI direct (OpenAI SDK 1.x):
    - Chat: chat.completions (ex: "gpt-4o-mini"), JSON mode via response_format
    """
    api_key: Optional[str] = None
    chat_model: Optional[str] = None

    _client = None

    def __post_init__(self):
        self.openai = get_settings().provider.openai
        if OpenAI is None:
            raise RuntimeError("OpenAI SDK not installed. pip install openai>=1.0.0")
        self.api_key = self.api_key or self.openai.api_key or _get_env("OPENAI_API_KEY")
        self.chat_model = self.chat_model or self.openai.chat_model
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is required for OpenAIProvider.")

        self._client = OpenAI(api_key=self.api_key)

    # ---- Chat ----
    def ask_llm(
        self,
        query: str,
        *,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> str:
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": query})
        resp = self._client.chat.completions.create(  # type: ignore[union-attr]
            model=self.chat_model,
            messages=messages,
            temperature=0 if temperature is None else temperature,
            **({"response_format": {"type": "json_object"}} if json_mode else {}),
        )
        return resp.choices[0].message.content or ""

    def capabilities(self) -> Dict:
        return {
            "provider": "openai",
            "supports_chat": True,
            "supports_json_mode": True,
            "chat_model": self.chat_model,
        }
