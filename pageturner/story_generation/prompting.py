"""
Prompt construction utilities for the PageTurnerAI outline request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .outline import PAGE_COUNT_RANGE

DEFAULT_AUDIENCE_GUIDANCE = "Make it educational, fun, and age-appropriate for children aged 4-8 years."

DEFAULT_PAGE_GUIDANCE = (
    "Each page must have:\n"
    "- A clear title\n"
    "- 2-3 sentences of engaging content appropriate for children\n"
    "- The characters involved in that scene\n"
    "- A setting/location description\n"
    "- A mood/atmosphere"
)

_PAGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "pageNumber": {"type": "integer"},
        "title": {"type": "string"},
        "content": {"type": "string"},
        "characters": {"type": "array", "items": {"type": "string"}},
        "setting": {"type": "string"},
        "mood": {"type": "string"},
    },
    "required": ["pageNumber", "title", "content", "characters", "setting", "mood"],
    "additionalProperties": False,
}

STORY_OUTLINE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "pages": {
            "type": "array",
            "items": _PAGE_SCHEMA,
        },
        "genre": {"type": "string"},
        "targetAge": {"type": "string"},
    },
    "required": ["title", "pages", "genre", "targetAge"],
    "additionalProperties": False,
}


@dataclass(frozen=True)
class OutlinePrompt:
    """
    Container for the system and user prompts sent with the outline request.
    """

    system: str
    user: str


def build_outline_response_format() -> dict[str, Any]:
    """Return the LiteLLM ``response_format`` that pins the outline to its schema."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "story_outline",
            "schema": STORY_OUTLINE_SCHEMA,
            "strict": True,
        },
    }


def build_outline_prompt(
    prompt: str,
    *,
    page_range: tuple[int, int] = PAGE_COUNT_RANGE,
    page_guidance: str = DEFAULT_PAGE_GUIDANCE,
    audience_guidance: str = DEFAULT_AUDIENCE_GUIDANCE,
) -> OutlinePrompt:
    """
    Build the prompt pair used to solicit a children's storybook outline.
    """
    lower, upper = page_range

    system_prompt = f"""You are a children's picture-book author who plans short illustrated stories.

Writing directives:
- Follow a clear beginning, middle, and satisfying ending.
- Keep every page self-contained enough that an illustrator can depict it.
- Keep characters consistent: use the same name for the same character on every page.
- Use warm, inclusive, child-safe language. Avoid frightening peril or mature themes.

Output format:
Respond with JSON only, matching this shape:
{{
  "title": "string",
  "genre": "string",
  "targetAge": "string, e.g. '4-8 years'",
  "pages": [
    {{
      "pageNumber": 1,
      "title": "string",
      "content": "string, 2-3 sentences",
      "characters": ["string", ...],
      "setting": "string",
      "mood": "string"
    }}
  ]
}}
Number pages sequentially starting from 1. Do not include commentary outside the JSON."""

    user_prompt = f"""Create a children's storybook based on this prompt: "{prompt}".
The story should have {lower}-{upper} pages.
{page_guidance}

{audience_guidance}"""

    return OutlinePrompt(system=system_prompt, user=user_prompt)
