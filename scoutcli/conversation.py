# conversation.py
"""
Dialogue data model shared by the agent loop and the inference adapter.

A conversation is a plain list of Turns. Each Turn carries an ordered list of
content blocks: free text, a model request to run a tool, or the answer to
such a request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class TextBlock:
    text: str
    type: str = field(default="text", init=False)


@dataclass(frozen=True)
class ToolUseBlock:
    id: str
    name: str
    input: Dict[str, Any] = field(default_factory=dict)
    type: str = field(default="tool_use", init=False)


@dataclass(frozen=True)
class ToolResultBlock:
    tool_use_id: str
    content: str
    is_error: bool = False
    type: str = field(default="tool_result", init=False)


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]


@dataclass
class Turn:
    role: str  # "user" | "assistant"
    content: List[ContentBlock] = field(default_factory=list)

    @classmethod
    def user_text(cls, text: str) -> "Turn":
        return cls(role="user", content=[TextBlock(text)])

    def text_blocks(self) -> List[TextBlock]:
        return [b for b in self.content if isinstance(b, TextBlock)]

    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def tool_results(self) -> List[ToolResultBlock]:
        return [b for b in self.content if isinstance(b, ToolResultBlock)]


Conversation = List[Turn]
