"""
Exceptions that terminate a story request.

Only fatal conditions get a dedicated type. Failures of a single illustration are
absorbed by the pipeline and never surface as exceptions.
"""

from __future__ import annotations


class StorybookError(Exception):
    """Base class for request-level failures."""


class InvalidPromptError(StorybookError, ValueError):
    """Raised when the story prompt is missing or blank."""

    def __init__(self, message: str = "Prompt is required") -> None:
        super().__init__(message)


class OutlineGenerationError(StorybookError, RuntimeError):
    """Raised when the story outline could not be produced or validated."""
