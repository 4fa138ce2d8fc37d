"""
Story generation utilities: outline model, outline service and illustration prompts.
"""

from .outline import PAGE_COUNT_RANGE, PageOutline, StoryOutline, StoryRequest
from .prompting import OutlinePrompt, build_outline_prompt, build_outline_response_format
from .scene_builder import ImagePromptSynthesizer
from .story_service import StoryOutlineGenerator

__all__ = [
    "PAGE_COUNT_RANGE",
    "PageOutline",
    "StoryOutline",
    "StoryRequest",
    "OutlinePrompt",
    "build_outline_prompt",
    "build_outline_response_format",
    "ImagePromptSynthesizer",
    "StoryOutlineGenerator",
]
