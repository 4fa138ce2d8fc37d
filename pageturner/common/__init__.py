"""
Common utilities shared across PageTurnerAI modules.
"""

from .config import Settings
from .errors import InvalidPromptError, OutlineGenerationError, StorybookError
from .llm import ChatResult, CompletionCallable, call_chat_completion
from .logger import configure_logging

__all__ = [
    "ChatResult",
    "CompletionCallable",
    "call_chat_completion",
    "configure_logging",
    "InvalidPromptError",
    "OutlineGenerationError",
    "Settings",
    "StorybookError",
]
