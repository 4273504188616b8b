# app/core/resources.py
# Ressources singletons (branchement centralisé des adapters) :
# le code métier et les routes consomment ces fabriques, les tests les surchargent via monkeypatch.

from functools import lru_cache

from adapters.llm.base import Provider
from adapters.llm.gemini import GeminiProvider
from adapters.llm.openai import OpenAIProvider
from app.core.config import Settings, get_settings
from app.core.logging import get_logger
from tutor.analyzer import Analyzer
from tutor.errors import ProviderUnavailable

log = get_logger(__name__)


@lru_cache
def get_all_settings() -> Settings:
    return get_settings()

@lru_cache
def get_provider() -> Provider:
    """ Returns instance from Provider of default (if available). """
    name = get_all_settings().provider.default
    try:
        match name:
            case "gemini":
                provider = GeminiProvider()
            case "openai":
                provider = OpenAIProvider()
            case _:
                raise ProviderUnavailable(f"unknown LLM provider {name!r} (expected gemini | openai)")
    except RuntimeError as e:
        # SDK absent ou clé manquante
        raise ProviderUnavailable(str(e)) from e
    log.info("LLM provider ready: %s", provider.__class__.__name__)
    return provider

@lru_cache
def get_analyzer() -> Analyzer:
    return Analyzer(provider=get_provider(), cfg=get_all_settings().analysis)

@lru_cache
def get_parser() -> Analyzer:
    """Analyzer sans provider : re-parsing de texte brut, aucune clé API requise."""
    return Analyzer(cfg=get_all_settings().analysis)
