# agent.py
from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Protocol

from loguru import logger

from .console import Console
from .conversation import Conversation, TextBlock, ToolResultBlock, ToolUseBlock, Turn
from .tools.registry import ToolRegistry


class InferenceClient(Protocol):
    def complete(self, conversation: List[Turn]) -> Turn: ...


class LoopState(str, Enum):
    AWAITING_USER_INPUT = "awaiting_user_input"
    AWAITING_MODEL_RESPONSE = "awaiting_model_response"
    DISPATCHING_TOOLS = "dispatching_tools"
    ENDED = "ended"


def tool_not_found(name: str) -> str:
    return f"Tool not found: {name}"


class Agent:
    """
    Interactive chat loop: user line → model → (tools → model)* → user line.

    Tool failures are answered to the model as error results and the dialogue
    continues; a failure of the inference call itself ends the session.
    """

    def __init__(
        self,
        client: InferenceClient,
        tools: ToolRegistry,
        console: Optional[Console] = None,
        read_line: Optional[Callable[[], str]] = None,
    ):
        self.client = client
        self.tools = tools
        self.console = console or Console()
        self.read_line = read_line or (lambda: input(self.console.prompt()))
        self.conversation: Conversation = []
        self.state = LoopState.AWAITING_USER_INPUT
        self.error: Optional[BaseException] = None

    # --------------------------- Public API ---------------------------

    def run(self) -> bool:
        """
        Drive the dialogue until input ends (returns True) or inference fails
        (returns False; the error is kept on `self.error`).
        """
        logger.info("Conversation started with {} tool(s)", len(self.tools.tools))
        while True:
            self.state = LoopState.AWAITING_USER_INPUT
            try:
                user_input = self.read_line()
            except (EOFError, KeyboardInterrupt):
                logger.debug("User input ended, leaving chat loop")
                break

            if not user_input:
                logger.debug("Skipping empty message")
                continue

            logger.debug("User input received ({} chars)", len(user_input))
            self.conversation.append(Turn.user_text(user_input))

            try:
                self._complete_turn()
            except Exception as e:
                logger.exception("Inference failed; ending session: {}", e)
                self.error = e
                self.state = LoopState.ENDED
                self.console.error(str(e) or type(e).__name__)
                return False

        self.state = LoopState.ENDED
        logger.info("Conversation ended after {} turn(s)", len(self.conversation))
        return True

    # --------------------------- Turn handling ---------------------------

    def _infer(self) -> Turn:
        self.state = LoopState.AWAITING_MODEL_RESPONSE
        logger.debug("Sending {} turn(s) to the model", len(self.conversation))
        message = self.client.complete(self.conversation)
        self.conversation.append(message)
        return message

    def _complete_turn(self) -> None:
        """Run inference, then dispatch tools until a reply carries no tool use."""
        message = self._infer()
        while True:
            self.state = LoopState.DISPATCHING_TOOLS
            results: List[ToolResultBlock] = []
            for block in message.content:
                if isinstance(block, TextBlock):
                    self.console.assistant(block.text)
                elif isinstance(block, ToolUseBlock):
                    results.append(self.dispatch(block))

            if not any(isinstance(b, ToolUseBlock) for b in message.content):
                self.console.finish_turn()
                return

            logger.debug("Sending {} tool result(s) to the model", len(results))
            self.conversation.append(Turn(role="user", content=list(results)))
            message = self._infer()

    def dispatch(self, block: ToolUseBlock) -> ToolResultBlock:
        """Execute one tool request; every outcome becomes a ToolResultBlock."""
        tool = self.tools.get(block.name)
        if tool is None:
            logger.error("Tool not found: '{}'", block.name)
            self.console.tool(block.name, ok=False)
            return ToolResultBlock(tool_use_id=block.id, content=tool_not_found(block.name), is_error=True)

        logger.debug("Using tool '{}'", block.name)
        try:
            output = tool.execute(block.input)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error("Tool '{}' failed: {}", block.name, message)
            self.console.tool(block.name, ok=False)
            return ToolResultBlock(tool_use_id=block.id, content=message, is_error=True)

        logger.debug("Tool '{}' succeeded ({} chars)", block.name, len(output))
        self.console.tool(block.name, ok=True)
        return ToolResultBlock(tool_use_id=block.id, content=output, is_error=False)
