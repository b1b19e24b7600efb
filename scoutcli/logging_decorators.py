# logging_decorators.py
from __future__ import annotations

import functools
import time
from typing import Any, Callable, Dict, Iterable, Optional

from loguru import logger

SECRET_KEYS = frozenset({"api_key", "authorization", "password", "token", "secret"})


def _clip(value: Any, max_len: int) -> Any:
    """Shorten long strings and collections so one tool call stays on one log line."""
    if isinstance(value, str) and len(value) > max_len:
        return f"{value[:max_len]}...(+{len(value) - max_len} chars)"
    if isinstance(value, (list, tuple)) and len(value) > 20:
        return [_clip(v, max_len) for v in value[:20]] + [f"... (+{len(value) - 20} more)"]
    if isinstance(value, dict):
        return {k: _clip(v, max_len) for k, v in value.items()}
    return value


def loggable_args(kwargs: Dict[str, Any], secrets: Iterable[str] = SECRET_KEYS, max_len: int = 200) -> Dict[str, Any]:
    hidden = {s.lower() for s in secrets}
    return {k: ("******" if k.lower() in hidden else _clip(v, max_len)) for k, v in kwargs.items()}


def output_summary(ret: Any) -> str:
    if isinstance(ret, str):
        lines = ret.count("\n") + 1 if ret else 0
        return f"{len(ret)} chars, {lines} line(s)"
    return type(ret).__name__


def log_call(
    name: Optional[str] = None,
    *,
    level: str = "DEBUG",
    slow_ms: int = 800,
    redact: Iterable[str] = SECRET_KEYS,
    arg_max_len: int = 200,
    summarize: Callable[[Any], str] = output_summary,
):
    """
    Log a tool function's keyword args on entry, and its duration plus an
    output summary on exit. Calls slower than `slow_ms` log at WARNING.
    Exceptions are logged and re-raised unchanged.
    """
    secrets = tuple(redact)

    def decorator(fn: Callable):
        if getattr(fn, "__logged__", False):
            return fn
        label = name or fn.__name__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            lg = logger.opt(depth=1)
            lg.log(level, "→ {} {}", label, loggable_args(kwargs, secrets, arg_max_len))
            started = time.perf_counter()
            try:
                ret = fn(*args, **kwargs)
            except Exception as e:
                lg.warning("✗ {} raised {} after {:.0f}ms: {}",
                           label, type(e).__name__, (time.perf_counter() - started) * 1000.0, e)
                raise
            elapsed = (time.perf_counter() - started) * 1000.0
            lg.log("WARNING" if elapsed >= slow_ms else level,
                   "✓ {} {:.0f}ms{} → {}", label, elapsed, " (SLOW)" if elapsed >= slow_ms else "", summarize(ret))
            return ret

        wrapper.__logged__ = True
        return wrapper

    return decorator
