# tools/registry.py
from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from ..config_home import BIN_DIR
from ..logging_decorators import log_call
from ..ripgrep import RipgrepProvisioner


class ToolError(Exception):
    """Raised when a tool is called with invalid args or cannot complete."""


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    executor: Callable[[Dict[str, Any]], str]

    def execute(self, args: Optional[Dict[str, Any]]) -> str:
        return self.executor(dict(args or {}))

    def declaration(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "input_schema": self.input_schema}


def _accepted_kwargs(fn: Callable, args: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys the function does not take so stray model args don't crash it."""
    orig = fn
    while hasattr(orig, "__wrapped__"):
        orig = orig.__wrapped__
    sig = inspect.signature(orig)
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return dict(args)
    return {k: v for k, v in args.items() if k in sig.parameters}


def make_executor(name: str, fn: Callable[..., str], input_schema: Dict[str, Any]) -> Callable[[Dict[str, Any]], str]:
    """Adapt a keyword-argument tool function to the dict-in / str-out executor contract."""
    wrapped = log_call(name, slow_ms=1000, redact={"api_key", "authorization"})(fn)
    required = list(input_schema.get("required") or [])

    def executor(args: Dict[str, Any]) -> str:
        if not isinstance(args, dict):
            raise ToolError(f"{name} expects an object of arguments, got {type(args).__name__}")
        missing = [k for k in required if k not in args]
        if missing:
            raise ToolError(f"{name} is missing required argument(s): {', '.join(missing)}")
        result = wrapped(**_accepted_kwargs(fn, args))
        return result if isinstance(result, str) else str(result)

    return executor


class ToolRegistry:
    """
    Ordered, build-once registry of the tools the model may call.
    The public surface:
      - get(name) -> ToolDefinition | None
      - call(name, args) -> str
      - declarations() -> list[dict]    (name, description, input_schema)
      - schemas_openai() -> list[dict]  (OpenAI function-calling schema)
    """
    def __init__(
        self,
        project_root,
        provisioner: Optional[RipgrepProvisioner] = None,
        *,
        builtins: bool = True,
        extra_tools: Iterable[ToolDefinition] = (),
    ):
        self.root = Path(project_root).resolve()
        self.provisioner = provisioner or RipgrepProvisioner(BIN_DIR)
        self.tools: Dict[str, ToolDefinition] = {}
        self._frozen = False
        logger.info("ToolRegistry init → root='{}'", str(self.root))
        if builtins:
            self._register_builtin_tools()
        for tool in extra_tools:
            self.add(tool)
        self._frozen = True
        logger.info("ToolRegistry ready with {} tool(s): {}", len(self.tools), ", ".join(self.tools))

    # ---------------- registration & dispatch ----------------

    def add(self, tool: ToolDefinition) -> None:
        if self._frozen:
            raise RuntimeError("ToolRegistry is frozen; tools are registered at startup only")
        if tool.name in self.tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self.tools[tool.name] = tool
        logger.debug("Registered tool '{}'", tool.name)

    def register(self, name: str, description: str, input_schema: Dict[str, Any], fn: Callable[..., str]) -> None:
        self.add(ToolDefinition(name, description, input_schema, make_executor(name, fn, input_schema)))

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self.tools.get(name)

    def call(self, name: str, args: Optional[Dict[str, Any]] = None) -> str:
        tool = self.get(name)
        if tool is None:
            raise KeyError(f"Unknown tool: {name}")
        return tool.execute(args)

    def resolve(self, path: Optional[str]) -> Path:
        """Resolve a tool path argument against the project root."""
        if not path:
            return self.root
        p = Path(path).expanduser()
        return p if p.is_absolute() else (self.root / p)

    def _register_builtin_tools(self):
        from .builtin import register_builtin_tools
        from .search_tools import register_search_tools

        register_builtin_tools(self)
        register_search_tools(self)

    # --------------- declarations for the inference client ---------------

    def declarations(self) -> List[Dict[str, Any]]:
        return [t.declaration() for t in self.tools.values()]

    def schemas_openai(self) -> List[dict]:
        """Expose tools for OpenAI function-calling models."""
        schemas = [
            {
                "type": "function",
                "function": {
                    "name": t.name,
                    "description": t.description,
                    "parameters": t.input_schema,
                },
            }
            for t in self.tools.values()
        ]
        logger.debug("schemas_openai: {} tool schema(s)", len(schemas))
        return schemas
