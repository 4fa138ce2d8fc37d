"""
Style directive construction for PageTurnerAI image generation.

Every illustration in a book is rendered from a prompt that ends with the same style
directive, so the cover and all pages read as one coherent book.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from pageturner.common.config import DEFAULT_STYLE_PROFILE


@dataclass(frozen=True)
class StyleProfile:
    """
    The clauses that make up a style directive.

    Parameters
    ----------
    name:
        Registry key of the profile.
    medium:
        Keywords describing the illustration medium and overall look.
    palette:
        Colour guidance shared by every image.
    line_style:
        Linework and rendering guidance.
    character_consistency:
        Rules that keep recurring characters recognisable from page to page.
    negative_constraints:
        Artifacts and looks the image model must avoid.
    """

    name: str
    medium: Sequence[str]
    palette: str
    line_style: str
    character_consistency: str
    negative_constraints: Sequence[str]


@dataclass(frozen=True)
class StyleDirective:
    """Immutable style text appended verbatim to every image prompt."""

    profile_name: str
    text: str
    keywords: str


@dataclass(frozen=True)
class ImagePrompt:
    """Container for the final prompt handed to the image model."""

    text: str
    style_applied: bool = True


STORYBOOK_CARTOON = StyleProfile(
    name="storybook_cartoon",
    medium=(
        "cartoon illustration style",
        "children's book art",
        "digital painting",
        "whimsical",
        "colorful",
        "hand-drawn look",
    ),
    palette="warm, bright and inviting colour palette with soft saturated tones",
    line_style="clean rounded outlines with gentle hand-drawn texture and soft shading",
    character_consistency=(
        "each recurring character keeps the same face, hair, body shape, clothing colours "
        "and proportions on every page"
    ),
    negative_constraints=(
        "not realistic",
        "not photographic",
        "no text",
        "no letters",
        "no watermark",
        "no distorted faces",
        "no extra limbs",
    ),
)

SOFT_WATERCOLOR = StyleProfile(
    name="soft_watercolor",
    medium=(
        "soft watercolor illustration",
        "children's picture book art",
        "gentle and dreamy",
        "hand-painted look",
    ),
    palette="pastel colour palette with airy washes and warm highlights",
    line_style="light pencil outlines under loose watercolor washes with paper texture",
    character_consistency=(
        "each recurring character keeps the same face, hair, body shape, clothing colours "
        "and proportions on every page"
    ),
    negative_constraints=(
        "not realistic",
        "not photographic",
        "no text",
        "no letters",
        "no watermark",
        "no harsh shadows",
        "no distorted faces",
    ),
)

STYLE_PROFILES: Mapping[str, StyleProfile] = {
    STORYBOOK_CARTOON.name: STORYBOOK_CARTOON,
    SOFT_WATERCOLOR.name: SOFT_WATERCOLOR,
}


def resolve_style_profile(profile: str | StyleProfile | None = None) -> StyleProfile:
    if isinstance(profile, StyleProfile):
        return profile

    name = (profile or DEFAULT_STYLE_PROFILE).strip().lower()
    resolved = STYLE_PROFILES.get(name)
    if resolved is None:
        supported = ", ".join(sorted(STYLE_PROFILES))
        raise ValueError(f"Unknown style profile '{profile}'. Supported profiles: {supported}.")
    return resolved


def build_style_directive(profile: str | StyleProfile | None = None) -> StyleDirective:
    """
    Build the shared style directive for a profile.

    The result depends only on the profile, so two calls with the same profile produce
    byte-identical text.
    """
    resolved = resolve_style_profile(profile)
    clauses = [
        ", ".join(resolved.medium),
        resolved.palette,
        resolved.line_style,
        f"character consistency: {resolved.character_consistency}",
        ", ".join(resolved.negative_constraints),
    ]
    keywords = ", ".join([*resolved.medium, *resolved.negative_constraints[:2]])
    return StyleDirective(profile_name=resolved.name, text=", ".join(clauses), keywords=keywords)


def apply_style_directive(base_prompt: str, directive: StyleDirective) -> ImagePrompt:
    """Append the directive verbatim to a synthesized scene prompt."""
    text = base_prompt.strip().rstrip(",. ")
    if not text:
        raise ValueError("base_prompt must be a non-empty string.")
    return ImagePrompt(text=f"{text}, {directive.text}", style_applied=True)
