# config_home.py: scoutcli home and per-user paths
from __future__ import annotations

import os
import json
from pathlib import Path
from loguru import logger

# ---------- App home ----------

def _resolve_home() -> Path:
    env = os.getenv("SCOUTCLI_HOME", "").strip()
    base = Path(os.path.expanduser(env)) if env else (Path.home() / ".scoutcli")
    try:
        base.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        logger.error("Failed to create scoutcli home at '{}': {}", str(base), e)
        base = Path.cwd() / ".scoutcli"
        base.mkdir(parents=True, exist_ok=True)
    return base

APP_DIR: Path = _resolve_home()
BIN_DIR: Path = APP_DIR / "bin"      # ripgrep download cache
LOGS_DIR: Path = APP_DIR / "logs"

# Single-file, app-scoped artifacts
ENV_PATH: Path = APP_DIR / ".env"
MODELS_JSON_PATH: Path = APP_DIR / "models.json"

# Directory name skipped when rendering project trees
TOOL_CONFIG_DIRNAME = ".scoutcli"

_MODELS_TEMPLATE = {
    "default_llm_model": "gpt-4o-mini",
    "llm_models": [
        {
            "name": "gpt-4o-mini",
            "provider": "openai",
            "endpoint": "https://api.openai.com/v1",
            "api_key_reqd": True,
            "api_key_env": "OPENAI_API_KEY",
            "temperature": 0.2,
        },
        {
            "name": "qwen2.5-coder",
            "provider": "ollama",
            "endpoint": "http://localhost:11434/v1",
            "model": "qwen2.5-coder:7b",
        },
    ],
}

# ---------- helpers ----------

def _write_json(p: Path, d: dict) -> None:
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(d, indent=2), encoding="utf-8")
    except Exception as e:
        logger.warning("Failed to save json '{}': {}", str(p), e)

def ensure_models_template() -> Path:
    """
    Make sure the app-level models.json exists so a fresh install has something
    to edit. Existing files are never touched.
    """
    if not MODELS_JSON_PATH.exists():
        _write_json(MODELS_JSON_PATH, _MODELS_TEMPLATE)
        logger.info("Initialized template models.json at {}", str(MODELS_JSON_PATH))
    return MODELS_JSON_PATH

def ensure_dirs() -> None:
    for _p in (BIN_DIR, LOGS_DIR):
        try:
            _p.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            logger.warning("Could not create '{}': {}", str(_p), e)

__all__ = [
    "APP_DIR",
    "BIN_DIR",
    "LOGS_DIR",
    "ENV_PATH",
    "MODELS_JSON_PATH",
    "TOOL_CONFIG_DIRNAME",
    "ensure_models_template",
    "ensure_dirs",
]
