# scoutcli/__init__.py

__version__ = "0.1.0"

# For external import access (e.g., embedding the loop or adding tools)
from .agent import Agent
from .conversation import TextBlock, ToolResultBlock, ToolUseBlock, Turn
from .models import LLMModel, ModelRegistry
from .tools.registry import ToolDefinition, ToolRegistry
