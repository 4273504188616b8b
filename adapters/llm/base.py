# adapters/llm/base.py
from abc import abstractmethod
from typing import Protocol, Optional
import logging
import os

log = logging.getLogger(__name__)

class Provider(Protocol):
    """
    Interface minimale commune à tous les providers.
    - ask_llm : retourne le texte brut de la réponse (non fiable, à passer à l'extracteur)
    """

    # ---- Chat ----
    @abstractmethod
    def ask_llm(
        self,
        query: str,
        *,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = False,
    ) -> str: ...

    # ---- Introspection facultative ----
    def capabilities(self) -> dict:
        """
        Renvoie des métadonnées utiles (provider, supports_chat, supports_json_mode, chat_model).
        """
        return {}

# ---------------------- Helpers communs ----------------------

def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None or str(v).strip() == "":
        return default
    return v
