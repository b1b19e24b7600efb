from .openai_compat import InferenceError, OpenAICompatAdapter

__all__ = ["InferenceError", "OpenAICompatAdapter"]
