"""
Runtime settings for PageTurnerAI, read from the environment (and an optional `.env`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_TEXT_MODEL = "gemini/gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "black-forest-labs/flux-schnell"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_IMAGE_FORMAT = "png"
DEFAULT_STYLE_PROFILE = "storybook_cartoon"
DEFAULT_MAX_CONCURRENT_ASSETS = 4


def _coerce_optional_int(value: str | None, *, name: str) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"Expected an integer for {name}, got {value!r}") from exc
    return parsed if parsed > 0 else None


@dataclass(frozen=True)
class Settings:
    """
    Configuration knobs shared by the pipeline, the API and the CLI.

    Attributes
    ----------
    text_model:
        LiteLLM model used to synthesize illustration prompts.
    outline_model:
        LiteLLM model used for the schema-constrained outline call.
    text_api_key:
        Optional API key forwarded to LiteLLM. When ``None`` LiteLLM resolves the
        provider key from its own environment variables.
    image_model:
        Replicate model identifier in the ``owner/model[:version]`` format.
    image_size:
        Target resolution as ``WIDTHxHEIGHT``.
    image_format:
        Output format requested from the image model; also used as the data-URI
        media subtype.
    style_profile:
        Name of the style profile used to build the shared style directive.
    max_concurrent_assets:
        Upper bound on concurrently running asset tasks within one request.
        ``None`` disables the gate.
    log_level:
        Level handed to :func:`pageturner.common.logger.configure_logging`.
    """

    text_model: str = DEFAULT_TEXT_MODEL
    outline_model: str = DEFAULT_TEXT_MODEL
    text_api_key: str | None = None
    image_model: str = DEFAULT_IMAGE_MODEL
    image_size: str = DEFAULT_IMAGE_SIZE
    image_format: str = DEFAULT_IMAGE_FORMAT
    style_profile: str = DEFAULT_STYLE_PROFILE
    max_concurrent_assets: int | None = DEFAULT_MAX_CONCURRENT_ASSETS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, load_dotenv_file: bool = True) -> "Settings":
        if load_dotenv_file:
            load_dotenv()

        text_model = os.getenv("PAGETURNER_TEXT_MODEL") or os.getenv("LITELLM_MODEL") or DEFAULT_TEXT_MODEL
        raw_limit = os.getenv("PAGETURNER_MAX_CONCURRENT_ASSETS")
        max_concurrent = (
            _coerce_optional_int(raw_limit, name="PAGETURNER_MAX_CONCURRENT_ASSETS")
            if raw_limit is not None
            else DEFAULT_MAX_CONCURRENT_ASSETS
        )

        return cls(
            text_model=text_model,
            outline_model=os.getenv("PAGETURNER_OUTLINE_MODEL") or text_model,
            text_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("LITELLM_API_KEY"),
            image_model=(
                os.getenv("PAGETURNER_IMAGE_MODEL")
                or os.getenv("REPLICATE_MODEL")
                or DEFAULT_IMAGE_MODEL
            ),
            image_size=os.getenv("PAGETURNER_IMAGE_SIZE") or DEFAULT_IMAGE_SIZE,
            image_format=os.getenv("PAGETURNER_IMAGE_FORMAT") or DEFAULT_IMAGE_FORMAT,
            style_profile=os.getenv("PAGETURNER_STYLE_PROFILE") or DEFAULT_STYLE_PROFILE,
            max_concurrent_assets=max_concurrent,
            log_level=os.getenv("PAGETURNER_LOG_LEVEL") or "INFO",
        )
