"""
AI image generation package for PageTurnerAI.
"""

from .prompting import (
    ImagePrompt,
    StyleDirective,
    StyleProfile,
    STYLE_PROFILES,
    apply_style_directive,
    build_style_directive,
)
from .replicate_service import GeneratedAsset, ReplicateImageGenerator, encode_data_uri

__all__ = [
    "apply_style_directive",
    "build_style_directive",
    "encode_data_uri",
    "GeneratedAsset",
    "ImagePrompt",
    "ReplicateImageGenerator",
    "StyleDirective",
    "StyleProfile",
    "STYLE_PROFILES",
]
