# models.py
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful coding assistant working inside the user's project. "
    "Use the available tools to inspect and change files instead of guessing."
)
DEFAULT_ENDPOINT = "https://api.openai.com/v1"


@dataclass
class LLMModel:
    """One entry of models.json: an OpenAI-compatible chat endpoint."""

    name: str
    provider: str = "openai"
    endpoint: str = DEFAULT_ENDPOINT
    model: Optional[str] = None          # wire model id; defaults to `name`
    temperature: float = 0.2
    max_tokens: int = 1024
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    api_key_reqd: bool = False
    api_key_env: Optional[str] = None    # env var holding the key, e.g. OPENAI_API_KEY
    timeout_s: int = 300

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LLMModel":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            logger.debug("Model '{}': ignoring unknown key(s) {}", d.get("name"), unknown)
        m = cls(**{k: v for k, v in d.items() if k in known})
        m.temperature = float(m.temperature)
        m.max_tokens = int(m.max_tokens)
        m.timeout_s = int(m.timeout_s)
        m.api_key_reqd = bool(m.api_key_reqd)
        return m

    def resolved_model(self) -> str:
        return self.model or self.name


class ModelRegistry:
    """
    Models declared in models.json:

        {"default_llm_model": "<name>", "llm_models": [{"name": ...}, ...]}

    Without a default, the first declared model is used.
    """

    def __init__(self, config_path):
        self.path = Path(config_path)
        self.models: Dict[str, LLMModel] = {}
        self.default_name: Optional[str] = None
        self.load(self.path)

    def load(self, path) -> None:
        data = self._read(Path(path))
        entries = data.get("llm_models")
        if not isinstance(entries, list):
            logger.error("models.json at '{}' has no 'llm_models' list", str(path))
            raise ValueError("Invalid model config: expected 'llm_models' array.")

        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                logger.warning("Skipping model entry without a name: {}", entry)
                continue
            model = LLMModel.from_dict(entry)
            self.models[model.name] = model

        self.default_name = data.get("default_llm_model") or next(iter(self.models), None)
        logger.info("Loaded {} model(s) from '{}'; default='{}'", len(self.models), str(path), self.default_name)

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.is_file():
            logger.error("Model config not found: '{}'", str(path))
            raise FileNotFoundError(f"Model config not found at: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Invalid model config: expected a JSON object.")
        return data

    def get(self, name: Optional[str] = None) -> LLMModel:
        key = name or self.default_name
        if key in self.models:
            return self.models[key]
        available = ", ".join(self.models) or "none"
        if name:
            raise ValueError(f"Model '{name}' not found. Available: {available}")
        raise ValueError(f"No default model configured. Available: {available}")

    def list(self) -> List[LLMModel]:
        return list(self.models.values())
