"""
Convert outline pages (and the whole book, for the cover) into image-ready prompts.
"""

from __future__ import annotations

import os
from typing import Any

from pageturner.ai_generation.prompting import ImagePrompt, StyleDirective, apply_style_directive
from pageturner.common import ChatResult, CompletionCallable, call_chat_completion
from pageturner.common.config import DEFAULT_TEXT_MODEL

from .outline import PageOutline, StoryOutline


class ImagePromptSynthesizer:
    """
    Asks the text model for a short illustration prompt and appends the shared style.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        completion_fn: CompletionCallable | None = None,
    ) -> None:
        self._api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("LITELLM_API_KEY")
        self._model = (
            model
            or os.getenv("PAGETURNER_TEXT_MODEL")
            or os.getenv("LITELLM_MODEL")
            or DEFAULT_TEXT_MODEL
        )
        self._completion_fn: CompletionCallable = completion_fn or call_chat_completion

    @property
    def model(self) -> str:
        return self._model

    async def cover_prompt(
        self,
        outline: StoryOutline,
        directive: StyleDirective,
        **response_kwargs: Any,
    ) -> ImagePrompt:
        """
        Build the cover illustration prompt from the book's title, genre and cast.
        """
        user_prompt = self._build_cover_prompt(outline, directive)
        base_text = await self._synthesize(user_prompt, **response_kwargs)
        return apply_style_directive(base_text, directive)

    async def page_prompt(
        self,
        page: PageOutline,
        directive: StyleDirective,
        **response_kwargs: Any,
    ) -> ImagePrompt:
        """
        Build the illustration prompt for a single page.
        """
        user_prompt = self._build_page_prompt(page, directive)
        base_text = await self._synthesize(user_prompt, **response_kwargs)
        return apply_style_directive(base_text, directive)

    async def _synthesize(
        self,
        user_prompt: str,
        *,
        temperature: float = 0.6,
        max_output_tokens: int = 300,
        **response_kwargs: Any,
    ) -> str:
        result: ChatResult = await self._completion_fn(
            model=self._model,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
            max_tokens=max_output_tokens,
            api_key=self._api_key,
            **response_kwargs,
        )
        if not result.text:
            raise RuntimeError("LLM response did not contain an illustration prompt.")
        return result.text

    def _build_cover_prompt(self, outline: StoryOutline, directive: StyleDirective) -> str:
        characters = ", ".join(outline.all_characters()) or "the story's main characters"
        return f"""Create a detailed cover image prompt for this children's storybook:

Title: {outline.title}
Genre: {outline.genre}
Main Characters: {characters}

Generate a prompt for a beautiful, colorful children's book cover illustration.
The style must be: {directive.keywords}.
Include:
- Main characters in a welcoming scene
- Title placement area (but don't include text)
- Warm, inviting colors
- Child-friendly artistic style
- Storybook cover composition

Keep it concise (max 80 words). Reply with the prompt only."""

    def _build_page_prompt(self, page: PageOutline, directive: StyleDirective) -> str:
        return f"""Create a detailed, child-friendly illustration prompt for this storybook page:

Title: {page.title}
Content: {page.content}
Characters: {", ".join(page.characters)}
Setting: {page.setting}
Mood: {page.mood}

Generate a prompt for a colorful children's book illustration that captures this scene.
The style must be: {directive.keywords}.
Include details about:
- The characters and their expressions
- The setting and environment
- Colors and lighting that match the mood
- Important objects or elements from the story

Keep it descriptive but concise (max 80 words). Reply with the prompt only."""
