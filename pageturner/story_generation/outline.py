"""
Structured representation of a story outline returned by the text model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from pageturner.common.errors import InvalidPromptError

logger = logging.getLogger(__name__)

PAGE_COUNT_RANGE = (6, 8)


def _require_text(payload: Mapping[str, Any], key: str, *, context: str) -> str:
    value = payload.get(key)
    if value is None:
        raise ValueError(f"{context} is missing '{key}'.")
    text = str(value).strip()
    if not text:
        raise ValueError(f"{context} has an empty '{key}'.")
    return text


def _normalize_characters(value: Any, *, context: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError(f"{context} 'characters' must be a list of strings.")
    return tuple(filter(None, (str(item).strip() for item in value)))


@dataclass(frozen=True)
class StoryRequest:
    """Inbound request carrying the free-text story prompt."""

    prompt: str | None

    def validated(self) -> "StoryRequest":
        text = (self.prompt or "").strip()
        if not text:
            raise InvalidPromptError()
        return StoryRequest(prompt=text)


@dataclass(frozen=True)
class PageOutline:
    """
    Narrative fields for a single page, before any illustration exists.
    """

    page_number: int
    title: str
    content: str
    characters: tuple[str, ...]
    setting: str
    mood: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "title": self.title,
            "content": self.content,
            "characters": list(self.characters),
            "setting": self.setting,
            "mood": self.mood,
        }


@dataclass(frozen=True)
class StoryOutline:
    """
    The complete story skeleton. Produced once per request and never mutated.
    """

    title: str
    genre: str
    target_age: str
    pages: tuple[PageOutline, ...]

    def all_characters(self) -> list[str]:
        """Characters across every page, de-duplicated in first-seen order."""
        seen: dict[str, None] = {}
        for page in self.pages:
            for character in page.characters:
                seen.setdefault(character, None)
        return list(seen)

    def as_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "genre": self.genre,
            "targetAge": self.target_age,
            "pages": [page.as_dict() for page in self.pages],
        }

    @classmethod
    def from_mapping(
        cls,
        payload: Mapping[str, Any],
        *,
        page_range: tuple[int, int] = PAGE_COUNT_RANGE,
    ) -> "StoryOutline":
        """
        Validate a raw model payload and build the outline.

        Page numbers are re-assigned from list position; the model's own numbering is
        only used to warn about disagreement.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Story outline must be a JSON object.")

        title = _require_text(payload, "title", context="Story outline")
        genre = _require_text(payload, "genre", context="Story outline")
        target_age = _require_text(payload, "targetAge", context="Story outline")

        pages_payload = payload.get("pages")
        if not isinstance(pages_payload, list):
            raise ValueError("Story outline must contain a 'pages' list.")

        lower, upper = page_range
        if not lower <= len(pages_payload) <= upper:
            raise ValueError(
                f"Expected between {lower} and {upper} pages, received {len(pages_payload)}."
            )

        pages = tuple(_convert_pages(pages_payload))
        return cls(title=title, genre=genre, target_age=target_age, pages=pages)


def _convert_pages(pages_data: Iterable[Any]) -> Iterable[PageOutline]:
    for position, item in enumerate(pages_data, start=1):
        context = f"Page {position}"
        if not isinstance(item, Mapping):
            raise ValueError(f"{context} must be a JSON object, got {item!r}.")

        declared = item.get("pageNumber")
        if declared is not None and declared != position:
            logger.warning(
                "Outline page %s declared pageNumber=%r; renumbering by position.",
                position,
                declared,
            )

        yield PageOutline(
            page_number=position,
            title=_require_text(item, "title", context=context),
            content=_require_text(item, "content", context=context),
            characters=_normalize_characters(item.get("characters"), context=context),
            setting=_require_text(item, "setting", context=context),
            mood=_require_text(item, "mood", context=context),
        )
