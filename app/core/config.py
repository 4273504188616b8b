# app/core/config.py
# Core → config (YAML + env + cache)
from __future__ import annotations
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Pydantic models (typage fort + auto-doc)
# ---------------------------------------------------------------------------

class AppCfg(BaseModel):
    """Configuration de l'application"""
    name: str = "deepslate"
    env: str = "dev"
    host: str = "127.0.0.1"
    port: int = 8050
    log_level: str = "INFO"

class OpenAICfg(BaseModel):
    """Configuration de l'API OpenAI"""
    api_key: Optional[str] = None
    chat_model: str = "gpt-4o-mini"

class GeminiCfg(BaseModel):
    """Configuration de l'API Gemini"""
    api_key: Optional[str] = None
    chat_model: str = "gemini-1.5-pro"

class ProviderCfg(BaseModel):
    """Configuration du LLM provider"""
    openai: OpenAICfg = OpenAICfg()
    gemini: GeminiCfg = GeminiCfg()
    default: str = "gemini" # openai | gemini

class AnalysisCfg(BaseModel):
    """Paramètres d'appel du modèle pour l'analyse et le chat de suivi"""
    temperature: float = 0.2
    follow_up_temperature: float = 0.4
    default_mode: str = "default" # default | adhd | dyslexia

class LayoutCfg(BaseModel):
    """Paramètres de la simulation de forces (graphe de raisonnement)"""
    link_distance: float = 100.0
    link_distance_coding: float = 80.0
    charge_strength: float = -800.0
    y_strength: float = 1.5
    x_strength: float = 0.1
    collide_radius: float = 60.0
    # carte des idées fausses : pas de couches, forces plus douces
    misconception_link_distance: float = 120.0
    misconception_charge_strength: float = -500.0
    misconception_collide_radius: float = 50.0
    top_margin: float = 50.0
    row_spread: float = 1.5
    jitter: float = 100.0
    alpha_decay: float = 0.0228
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    max_ticks: int = 300
    padding: float = 60.0
    min_zoom: float = 0.4
    max_zoom: float = 2.0
    seed: int = 7

class Settings(BaseModel):
    """Configuration générale de l'application"""
    app: AppCfg = AppCfg()
    provider: ProviderCfg = ProviderCfg()
    analysis: AnalysisCfg = AnalysisCfg()
    layout: LayoutCfg = LayoutCfg()


# ---------------------------------------------------------------------------
# YAML loader + interpolation ${VAR:default}
# ---------------------------------------------------------------------------

# Pattern pour l'expansion des variables d'environnement
_env_pattern = re.compile(r"\$\{([A-Z0-9_]+)(?::([^}]*))?\}")

def _interpolate_env(value: Any) -> Any:
    """Interpole les variables d'environnement dans les chaînes de caractères."""
    if isinstance(value, str):
        def repl(match: re.Match[str]) -> str:
            var, default = match.group(1), match.group(2) or ""
            return os.getenv(var, default)
        return _env_pattern.sub(repl, value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(v) for v in value]
    return value

def _load_yaml(path: Path) -> Dict[str, Any]:
    """Charge un fichier YAML et retourne un dictionnaire."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return raw

# ---------------------------------------------------------------------------
# Public factory (cache)
# ---------------------------------------------------------------------------

def load_settings(cfg_path: Path) -> Settings:
    """Lit un fichier YAML, interpole l'environnement et valide."""
    data = _interpolate_env(_load_yaml(cfg_path))
    # une clé vide (ex: api_key: ${GOOGLE_API_KEY:}) vaut "non renseignée"
    for section in ("openai", "gemini"):
        prov = (data.get("provider") or {}).get(section) or {}
        if prov.get("api_key") == "":
            prov["api_key"] = None
    try:
        return Settings(**data)
    except ValidationError as exc:
        # Affiche l'erreur proprement dès le boot
        raise RuntimeError(f"Invalid configuration in {cfg_path}:\n{exc}")

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Charge .env puis settings.yaml, effectue l'interpolation et valide (renvoie les paramètres de configuration)."""
    load_dotenv(override=True)
    cfg_path = Path(os.getenv("DEEPSLATE_CONFIG", "config/settings.yaml"))
    return load_settings(cfg_path)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
__all__ = [
"Settings",
"LayoutCfg",
"get_settings",
"load_settings",
]
