# adapters/openai_compat.py
from __future__ import annotations

import os
import time
import json
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from ..conversation import TextBlock, ToolUseBlock, Turn
from ..models import LLMModel
from ..tools.registry import ToolRegistry


class InferenceError(RuntimeError):
    pass


def turns_to_messages(system_prompt: Optional[str], conversation: List[Turn]) -> List[Dict[str, Any]]:
    """
    Flatten block-structured turns into chat/completions messages.

    A user turn holding tool results becomes one 'tool' message per result,
    in order, right after the assistant message that requested them.
    """
    messages: List[Dict[str, Any]] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})

    for turn in conversation:
        if turn.role == "assistant":
            text = "\n".join(b.text for b in turn.text_blocks())
            msg: Dict[str, Any] = {"role": "assistant", "content": text or None}
            uses = turn.tool_uses()
            if uses:
                msg["tool_calls"] = [
                    {
                        "id": u.id,
                        "type": "function",
                        "function": {"name": u.name, "arguments": json.dumps(u.input)},
                    }
                    for u in uses
                ]
            messages.append(msg)
            continue

        results = turn.tool_results()
        for r in results:
            content = f"Error: {r.content}" if r.is_error else r.content
            messages.append({"role": "tool", "tool_call_id": r.tool_use_id, "content": content})
        texts = turn.text_blocks()
        if texts:
            messages.append({"role": "user", "content": "\n".join(b.text for b in texts)})
    return messages


def message_to_turn(msg: Dict[str, Any]) -> Turn:
    """Convert an OpenAI assistant message into an assistant Turn."""
    blocks = []
    content = msg.get("content")
    if isinstance(content, str) and content:
        blocks.append(TextBlock(content))
    for i, tc in enumerate(msg.get("tool_calls") or []):
        fn = tc.get("function") or {}
        args_raw = fn.get("arguments") or "{}"
        try:
            args = json.loads(args_raw) if isinstance(args_raw, str) else (args_raw or {})
        except json.JSONDecodeError:
            logger.warning("tool_call '{}' has undecodable arguments; using {{}}", fn.get("name"))
            args = {}
        if not isinstance(args, dict):
            args = {}
        blocks.append(ToolUseBlock(id=tc.get("id") or f"call_{i}", name=fn.get("name") or "", input=args))
    return Turn(role="assistant", content=blocks)


class OpenAICompatAdapter:
    """Inference client for any server speaking the OpenAI /chat/completions API."""

    def __init__(self, model: LLMModel, tools: ToolRegistry, session: Optional[requests.Session] = None):
        self.model = model
        self.tools = tools
        self.session = session or requests.Session()
        logger.info(
            "OpenAICompatAdapter init → name='{}' provider='{}' endpoint='{}' tools={}",
            model.name, model.provider, model.endpoint, len(getattr(tools, "tools", {}))
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.model.api_key_reqd:
            if not self.model.api_key_env:
                msg = f"Model '{self.model.name}' requires API key but 'api_key_env' is not set in config."
                logger.error("_headers: {}", msg)
                raise InferenceError(msg)
            key = os.getenv(self.model.api_key_env)
            if not key:
                msg = (f"API key env '{self.model.api_key_env}' not found in environment. "
                       f"Did you add it to your .env?")
                logger.error("_headers: {}", msg)
                raise InferenceError(msg)
            headers["Authorization"] = f"Bearer {key}"
        return headers

    def complete(self, conversation: List[Turn]) -> Turn:
        url = (self.model.endpoint or "https://api.openai.com/v1").rstrip("/") + "/chat/completions"
        payload: Dict[str, Any] = {
            "model": self.model.resolved_model(),
            "messages": turns_to_messages(self.model.system_prompt, conversation),
            "temperature": self.model.temperature,
            "max_tokens": self.model.max_tokens,
            "stream": False,
        }
        schemas = self.tools.schemas_openai()
        if schemas:
            payload["tools"] = schemas
            payload["tool_choice"] = "auto"

        logger.info("openai_compat.complete → url='{}' model='{}' turns={} tools={}",
                    url, payload["model"], len(conversation), len(schemas))
        t0 = time.time()
        try:
            resp = self.session.post(url, headers=self._headers(), json=payload, timeout=self.model.timeout_s)
        except requests.RequestException as e:
            logger.error("openai_compat.complete: transport error: {}", e)
            raise InferenceError(f"Request to {url} failed: {e}") from e
        dt = (time.time() - t0) * 1000.0
        logger.info("openai_compat.complete ← status={} time_ms≈{:.0f}", resp.status_code, dt)

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", resp.status_code)
            server_text = (resp.text or "")[:500]
            if status == 401:
                logger.error("openai_compat.complete: 401 Unauthorized")
                raise InferenceError(
                    "401 Unauthorized. Ensure the required API key env is set, or use a local model."
                ) from e
            logger.error("openai_compat.complete: HTTP {} {}", status, server_text)
            raise InferenceError(f"OpenAI error {status}: {server_text}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise InferenceError(f"Invalid JSON from {url}: {(resp.text or '')[:200]}") from e
        choices = data.get("choices") or []
        if not choices:
            raise InferenceError(f"No choices in response from {url}")
        msg = choices[0].get("message") or {}
        turn = message_to_turn(msg)
        logger.debug("openai_compat.complete: text_blocks={} tool_uses={}",
                     len(turn.text_blocks()), len(turn.tool_uses()))
        return turn
