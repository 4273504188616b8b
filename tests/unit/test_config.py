# tests/unit/test_config.py
from pathlib import Path

import pytest

from app.core.config import get_settings, load_settings


def test_defaults_when_file_missing(tmp_path: Path):
    s = load_settings(tmp_path / "missing.yaml")
    assert s.provider.default == "gemini"
    assert s.layout.charge_strength == -800.0
    assert s.analysis.temperature == 0.2


def test_env_interpolation_and_empty_keys(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TEST_PROVIDER", "openai")
    monkeypatch.delenv("TEST_OPENAI_KEY", raising=False)
    cfg = tmp_path / "settings.yaml"
    cfg.write_text(
        "provider:\n"
        "  default: ${TEST_PROVIDER:gemini}\n"
        "  openai:\n"
        "    api_key: ${TEST_OPENAI_KEY:}\n"
        "layout:\n"
        "  seed: 42\n",
        encoding="utf-8",
    )
    s = load_settings(cfg)
    assert s.provider.default == "openai"
    assert s.provider.openai.api_key is None
    assert s.layout.seed == 42


def test_invalid_config_raises_runtime_error(tmp_path: Path):
    cfg = tmp_path / "settings.yaml"
    cfg.write_text("layout:\n  max_ticks: lots\n", encoding="utf-8")
    with pytest.raises(RuntimeError):
        load_settings(cfg)


def test_shipped_settings_load():
    s = load_settings(Path("config/settings.yaml"))
    assert s.layout.misconception_link_distance == 120.0
    assert get_settings() is get_settings()
