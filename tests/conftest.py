import asyncio
import base64
import json
from typing import Any, Optional

import pytest

from pageturner.ai_generation import GeneratedAsset, ImagePrompt
from pageturner.common import ChatResult, Settings
from pageturner.pipeline import StorybookOrchestrator

EXAMPLE_PROMPT = "A boy and a dog meet at street and became best friends"

PAGE_TITLES = [
    "A Rainy Street",
    "The Shivering Pup",
    "Sharing a Sandwich",
    "Home at Last",
    "The Lost Ball",
    "Park Adventure",
    "Best Friends Forever",
]


def make_outline_payload(page_count: int = 7) -> dict[str, Any]:
    pages = []
    for index in range(page_count):
        title = PAGE_TITLES[index] if index < len(PAGE_TITLES) else f"Extra Page {index + 1}"
        characters = ["Leo", "Biscuit"] if index % 2 == 0 else ["Biscuit", "Grandma Rose"]
        pages.append(
            {
                "pageNumber": index + 1,
                "title": title,
                "content": f"Leo and Biscuit share moment {index + 1}. They smile together.",
                "characters": characters,
                "setting": "a quiet city street",
                "mood": "warm and hopeful",
            }
        )
    return {
        "title": "Leo and Biscuit",
        "genre": "Friendship",
        "targetAge": "4-8 years",
        "pages": pages,
    }


def _title_from_user_prompt(messages: list[dict[str, Any]]) -> str:
    content = messages[-1]["content"]
    for line in content.splitlines():
        if line.startswith("Title: "):
            return line[len("Title: "):].strip()
    return "unknown"


class FakeCompletion:
    """Async stand-in for the LiteLLM helper that records every call."""

    def __init__(self, *, outline_payload: Optional[dict[str, Any]] = None) -> None:
        self.outline_payload = outline_payload or make_outline_payload()
        self.outline_error: Optional[Exception] = None
        self.failing_titles: set[str] = set()
        self.empty_reply_titles: set[str] = set()
        self.outline_calls: list[dict[str, Any]] = []
        self.prompt_calls: list[dict[str, Any]] = []

    @property
    def total_calls(self) -> int:
        return len(self.outline_calls) + len(self.prompt_calls)

    async def __call__(self, **kwargs: Any) -> ChatResult:
        await asyncio.sleep(0)
        if kwargs.get("response_format") is not None:
            self.outline_calls.append(kwargs)
            if self.outline_error is not None:
                raise self.outline_error
            text = json.dumps(self.outline_payload)
            return ChatResult(text=text, raw=None)

        self.prompt_calls.append(kwargs)
        title = _title_from_user_prompt(kwargs["messages"])
        if title in self.failing_titles:
            raise RuntimeError(f"text model unavailable for {title}")
        if title in self.empty_reply_titles:
            return ChatResult(text="", raw=None)
        return ChatResult(text=f"Scene for {title}", raw=None)


class FakeImageGenerator:
    """Async stand-in for the Replicate generator with latency and fault injection."""

    def __init__(self, *, latency: float = 0.0) -> None:
        self.latency = latency
        self.failing_markers: set[str] = set()
        self.calls: list[ImagePrompt] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate_image(self, prompt: ImagePrompt, *, size: Optional[str] = None) -> GeneratedAsset:
        self.calls.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                await asyncio.sleep(self.latency)
            else:
                await asyncio.sleep(0)
            for marker in self.failing_markers:
                if marker in prompt.text:
                    raise RuntimeError("image quota exceeded")
        finally:
            self.in_flight -= 1

        payload = base64.b64encode(prompt.text[:24].encode("utf-8")).decode("ascii")
        return GeneratedAsset(encoded_image=f"data:image/png;base64,{payload}", source_prompt=prompt.text)


@pytest.fixture(name="completion")
def completion_fixture():
    return FakeCompletion()


@pytest.fixture(name="images")
def images_fixture():
    return FakeImageGenerator()


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(max_concurrent_assets=None)


@pytest.fixture(name="orchestrator")
def orchestrator_fixture(completion: FakeCompletion, images: FakeImageGenerator, settings: Settings):
    return StorybookOrchestrator(
        completion_fn=completion,
        image_generator=images,
        settings=settings,
    )
