"""
PageTurnerAI package exposing outline generation, illustration and the story pipeline.
"""

from .common import InvalidPromptError, OutlineGenerationError, Settings
from .pipeline import CompletedStory, StorybookOrchestrator, StoryPage

__all__ = [
    "CompletedStory",
    "InvalidPromptError",
    "OutlineGenerationError",
    "Settings",
    "StorybookOrchestrator",
    "StoryPage",
]
