"""
End-to-end orchestration for PageTurnerAI story and image generation.
"""

from .outcomes import AssetFailure, AssetOutcome, AssetSuccess
from .pipeline import (
    PAGE_IMAGE_ERROR,
    CompletedStory,
    ProgressCallback,
    StorybookOrchestrator,
    StoryPage,
)

__all__ = [
    "AssetFailure",
    "AssetOutcome",
    "AssetSuccess",
    "CompletedStory",
    "PAGE_IMAGE_ERROR",
    "ProgressCallback",
    "StorybookOrchestrator",
    "StoryPage",
]
