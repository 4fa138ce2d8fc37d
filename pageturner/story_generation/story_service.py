"""
Service layer for producing structured story outlines via LiteLLM-compatible models.
"""

from __future__ import annotations

import json
import os
from typing import Any

from pageturner.common import ChatResult, CompletionCallable, call_chat_completion
from pageturner.common.config import DEFAULT_TEXT_MODEL

from .outline import PAGE_COUNT_RANGE, StoryOutline
from .prompting import OutlinePrompt, build_outline_prompt, build_outline_response_format


class StoryOutlineGenerator:
    """
    High-level helper that turns a free-text prompt into a typed story outline.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        completion_fn: CompletionCallable | None = None,
        page_range: tuple[int, int] = PAGE_COUNT_RANGE,
    ) -> None:
        self._api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("LITELLM_API_KEY")
        self._model = (
            model
            or os.getenv("PAGETURNER_OUTLINE_MODEL")
            or os.getenv("PAGETURNER_TEXT_MODEL")
            or os.getenv("LITELLM_MODEL")
            or DEFAULT_TEXT_MODEL
        )
        self._completion_fn: CompletionCallable = completion_fn or call_chat_completion
        self._page_range = page_range

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._model

    async def generate_outline(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_output_tokens: int = 2500,
        **response_kwargs: Any,
    ) -> StoryOutline:
        """
        Ask the configured model for a schema-constrained outline and validate it.

        Raises ``ValueError`` when the response does not satisfy the outline schema;
        transport and provider errors propagate unchanged.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Story prompt must be a non-empty string.")

        outline_prompt: OutlinePrompt = build_outline_prompt(
            prompt.strip(), page_range=self._page_range
        )

        result: ChatResult = await self._completion_fn(
            model=self._model,
            messages=[
                {"role": "system", "content": outline_prompt.system},
                {"role": "user", "content": outline_prompt.user},
            ],
            temperature=temperature,
            max_tokens=max_output_tokens,
            api_key=self._api_key,
            response_format=build_outline_response_format(),
            **response_kwargs,
        )

        if not result.text:
            raise RuntimeError("LLM response did not contain any text content.")

        payload = self._parse_outline_json(result.text)
        return StoryOutline.from_mapping(payload, page_range=self._page_range)

    def _parse_outline_json(self, raw_text: str) -> dict[str, Any]:
        text = raw_text.strip()
        # Some providers still wrap JSON mode output in a Markdown fence.
        if text.startswith("```"):
            text = text.strip("`")
            if text.lower().startswith("json"):
                text = text[4:]
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError("Failed to parse story outline response as JSON.") from exc

        if not isinstance(parsed, dict):
            raise ValueError("Story outline JSON must be an object.")
        return parsed
