"""
Orchestrates the full PageTurnerAI pipeline from prompt to illustrated story.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Protocol, Sequence

import yaml

from pageturner.ai_generation import (
    GeneratedAsset,
    ImagePrompt,
    ReplicateImageGenerator,
    StyleDirective,
    build_style_directive,
)
from pageturner.common import CompletionCallable, Settings
from pageturner.common.errors import OutlineGenerationError
from pageturner.story_generation import (
    ImagePromptSynthesizer,
    PageOutline,
    StoryOutline,
    StoryOutlineGenerator,
    StoryRequest,
)

from .outcomes import AssetFailure, AssetOutcome, AssetSuccess

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, Any]], None]

PAGE_IMAGE_ERROR = "Failed to generate image"


class ImageGenerator(Protocol):
    async def generate_image(self, prompt: ImagePrompt, *, size: str | None = None) -> GeneratedAsset:
        ...


@dataclass
class StoryPage:
    """A page of the finished book: outline fields plus its illustration outcome."""

    outline: PageOutline
    image_url: str | None = None
    image_prompt: str | None = None
    error: str | None = None

    @property
    def page_number(self) -> int:
        return self.outline.page_number

    def to_dict(self) -> dict[str, Any]:
        payload = self.outline.as_dict()
        if self.image_url is not None:
            payload["imageUrl"] = self.image_url
        if self.image_prompt is not None:
            payload["imagePrompt"] = self.image_prompt
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass
class CompletedStory:
    """Aggregated output of the PageTurnerAI pipeline."""

    title: str
    genre: str
    target_age: str
    pages: list[StoryPage] = field(default_factory=list)
    cover_image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "genre": self.genre,
            "targetAge": self.target_age,
            "pages": [page.to_dict() for page in self.pages],
        }
        if self.cover_image_url is not None:
            payload["coverImageUrl"] = self.cover_image_url
        return payload

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)


class StorybookOrchestrator:
    """
    High-level coordinator that chains outline, illustration prompts and images.

    Runs four phases per request: validate, outline, asset fan-out, merge. Only the
    first two can fail the request; each illustration task absorbs its own failure.
    """

    def __init__(
        self,
        *,
        outline_generator: StoryOutlineGenerator | None = None,
        prompt_synthesizer: ImagePromptSynthesizer | None = None,
        image_generator: ImageGenerator | None = None,
        settings: Settings | None = None,
        completion_fn: CompletionCallable | None = None,
    ) -> None:
        self._settings = settings or Settings.from_env()
        self._outline_generator = outline_generator or StoryOutlineGenerator(
            api_key=self._settings.text_api_key,
            model=self._settings.outline_model,
            completion_fn=completion_fn,
        )
        self._prompt_synthesizer = prompt_synthesizer or ImagePromptSynthesizer(
            api_key=self._settings.text_api_key,
            model=self._settings.text_model,
            completion_fn=completion_fn,
        )
        self._image_generator = image_generator or ReplicateImageGenerator(
            model_identifier=self._settings.image_model,
            size=self._settings.image_size,
            output_format=self._settings.image_format,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    async def generate_story(
        self,
        prompt: str | None,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> CompletedStory:
        """
        Complete pipeline from a free-text prompt to the merged story.

        Raises
        ------
        InvalidPromptError
            When the prompt is missing or blank. No model is called.
        OutlineGenerationError
            When the outline call fails or its payload does not satisfy the schema.
            No image work is started.
        ValueError
            When the configured style profile is unknown. No model is called.
        """
        request = StoryRequest(prompt=prompt).validated()
        directive = build_style_directive(self._settings.style_profile)

        outline = await self._generate_outline(request.prompt, progress_callback)

        cover_outcome, page_outcomes = await self._generate_assets(
            outline=outline,
            directive=directive,
            progress_callback=progress_callback,
        )

        story = self._merge(outline, cover_outcome, page_outcomes)
        failed = sum(1 for page in story.pages if page.error is not None)
        logger.info(
            "Story '%s' complete: %d pages, %d without image, cover=%s",
            story.title,
            len(story.pages),
            failed,
            "yes" if story.cover_image_url else "no",
        )
        self._notify(
            progress_callback,
            "story:complete",
            title=story.title,
            total_pages=len(story.pages),
            failed_pages=failed,
        )
        return story

    async def _generate_outline(
        self,
        prompt: str,
        progress_callback: ProgressCallback | None,
    ) -> StoryOutline:
        self._notify(progress_callback, "outline:generating")
        logger.info("Generating story outline...")
        try:
            outline = await self._outline_generator.generate_outline(prompt)
        except Exception as exc:
            logger.exception("Story outline generation failed.")
            raise OutlineGenerationError("Failed to generate story outline.") from exc

        logger.info("Outline ready: '%s' with %d pages", outline.title, len(outline.pages))
        self._notify(
            progress_callback,
            "outline:ready",
            title=outline.title,
            total_pages=len(outline.pages),
        )
        return outline

    async def _generate_assets(
        self,
        *,
        outline: StoryOutline,
        directive: StyleDirective,
        progress_callback: ProgressCallback | None,
    ) -> tuple[AssetOutcome, list[AssetOutcome]]:
        limit = self._settings.max_concurrent_assets
        gate = asyncio.Semaphore(limit) if limit else None
        self._notify(
            progress_callback,
            "assets:generating",
            total_pages=len(outline.pages),
            max_concurrent=limit,
        )

        async with asyncio.TaskGroup() as group:
            cover_task = group.create_task(
                self._run_asset_task(
                    label="cover",
                    build_prompt=lambda: self._prompt_synthesizer.cover_prompt(outline, directive),
                    gate=gate,
                    progress_callback=progress_callback,
                )
            )
            page_tasks = [
                group.create_task(
                    self._run_asset_task(
                        label=f"page {page.page_number}",
                        build_prompt=lambda page=page: self._prompt_synthesizer.page_prompt(page, directive),
                        gate=gate,
                        progress_callback=progress_callback,
                        page_number=page.page_number,
                    )
                )
                for page in outline.pages
            ]

        return cover_task.result(), [task.result() for task in page_tasks]

    async def _run_asset_task(
        self,
        *,
        label: str,
        build_prompt: Callable[[], Awaitable[ImagePrompt]],
        gate: asyncio.Semaphore | None,
        progress_callback: ProgressCallback | None,
        page_number: int | None = None,
    ) -> AssetOutcome:
        async with _acquire(gate):
            try:
                image_prompt = await build_prompt()
                logger.debug("Image prompt for %s: %s...", label, image_prompt.text[:100])
                asset = await self._image_generator.generate_image(
                    image_prompt, size=self._settings.image_size
                )
            except Exception as exc:
                logger.exception("Error generating image for %s", label)
                self._notify(
                    progress_callback,
                    "asset:failed",
                    label=label,
                    page_number=page_number,
                    reason=str(exc),
                )
                return AssetFailure(reason=str(exc) or exc.__class__.__name__)

        logger.info("Image generated for %s", label)
        self._notify(progress_callback, "asset:done", label=label, page_number=page_number)
        return AssetSuccess(asset=asset)

    @staticmethod
    def _merge(
        outline: StoryOutline,
        cover_outcome: AssetOutcome,
        page_outcomes: Sequence[AssetOutcome],
    ) -> CompletedStory:
        pages: list[StoryPage] = []
        for page, outcome in zip(outline.pages, page_outcomes, strict=True):
            if isinstance(outcome, AssetSuccess):
                pages.append(
                    StoryPage(
                        outline=page,
                        image_url=outcome.asset.encoded_image,
                        image_prompt=outcome.asset.source_prompt,
                    )
                )
            else:
                pages.append(StoryPage(outline=page, error=PAGE_IMAGE_ERROR))

        cover_url = (
            cover_outcome.asset.encoded_image if isinstance(cover_outcome, AssetSuccess) else None
        )
        return CompletedStory(
            title=outline.title,
            genre=outline.genre,
            target_age=outline.target_age,
            pages=pages,
            cover_image_url=cover_url,
        )

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is None:
            return
        # Callback errors are logged, never propagated into the pipeline.
        try:
            callback(stage, payload)
        except Exception:
            logger.exception("Progress callback failed for stage %s", stage)


@contextlib.asynccontextmanager
async def _acquire(gate: asyncio.Semaphore | None) -> AsyncIterator[None]:
    if gate is None:
        yield
        return
    async with gate:
        yield
