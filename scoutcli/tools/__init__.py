from .registry import ToolDefinition, ToolError, ToolRegistry

__all__ = ["ToolDefinition", "ToolError", "ToolRegistry"]
