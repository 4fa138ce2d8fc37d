"""
Integration with Replicate for storybook image generation.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Callable

import replicate
import requests

from pageturner.common.config import DEFAULT_IMAGE_FORMAT, DEFAULT_IMAGE_MODEL, DEFAULT_IMAGE_SIZE

from .prompting import ImagePrompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedAsset:
    """An encoded illustration plus the prompt that produced it."""

    encoded_image: str
    source_prompt: str


def parse_size(size: str) -> tuple[int, int]:
    """Parse ``"WIDTHxHEIGHT"`` into a pair of positive integers."""
    try:
        width_text, height_text = size.lower().split("x", maxsplit=1)
        width, height = int(width_text), int(height_text)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Image size must look like '1024x1024', got {size!r}.") from exc
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {size!r}.")
    return width, height


def _aspect_ratio(width: int, height: int) -> str:
    divisor = math.gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def _build_flux_input(
    *,
    prompt: ImagePrompt,
    width: int,
    height: int,
    output_format: str,
) -> dict[str, Any]:
    return {
        "prompt": prompt.text,
        "aspect_ratio": _aspect_ratio(width, height),
        "output_format": output_format,
        "num_outputs": 1,
    }


def _build_sdxl_input(
    *,
    prompt: ImagePrompt,
    width: int,
    height: int,
    output_format: str,
) -> dict[str, Any]:
    return {
        "prompt": prompt.text,
        "width": width,
        "height": height,
        "num_outputs": 1,
    }


_MODEL_INPUT_BUILDERS: dict[str, Callable[..., dict[str, Any]]] = {
    "black-forest-labs/flux-schnell": _build_flux_input,
    "black-forest-labs/flux-dev": _build_flux_input,
    "stability-ai/sdxl": _build_sdxl_input,
}


def _build_replicate_input_payload(
    *,
    model_identifier: str,
    prompt: ImagePrompt,
    size: str,
    output_format: str,
) -> dict[str, Any]:
    normalized_identifier = model_identifier.strip().lower()
    builder = _MODEL_INPUT_BUILDERS.get(normalized_identifier)
    if builder is None and ":" in normalized_identifier:
        base_identifier = normalized_identifier.split(":", maxsplit=1)[0]
        builder = _MODEL_INPUT_BUILDERS.get(base_identifier)
    if builder is None:
        supported_models = ", ".join(sorted(_MODEL_INPUT_BUILDERS))
        raise ValueError(
            "Model identifier "
            f"'{model_identifier}' is not configured with a default input payload. "
            f"Supported models: {supported_models}."
        )

    width, height = parse_size(size)
    return builder(prompt=prompt, width=width, height=height, output_format=output_format)


def encode_data_uri(image_bytes: bytes, *, image_format: str = DEFAULT_IMAGE_FORMAT) -> str:
    """Encode raw image bytes as a ``data:`` URI that survives a JSON boundary."""
    if not image_bytes:
        raise ValueError("Cannot encode an empty image payload.")
    subtype = "jpeg" if image_format.lower() in {"jpg", "jpeg"} else image_format.lower()
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:image/{subtype};base64,{encoded}"


class ReplicateImageGenerator:
    """
    Convenience wrapper around the Replicate client for storybook image generation.

    Parameters
    ----------
    api_token:
        Replicate API token. Falls back to ``REPLICATE_API_TOKEN`` environment variable.
    model_identifier:
        Model string in the ``owner/model[:version]`` format. Falls back to
        ``PAGETURNER_IMAGE_MODEL``, then ``REPLICATE_MODEL``, then FLUX schnell.
    size:
        Default target resolution, ``WIDTHxHEIGHT``.
    output_format:
        Image format requested from the model and used in the data URI.
    client:
        Optional pre-configured :class:`replicate.Client`. Mainly useful for testing.
    download_timeout:
        Seconds to wait when an output has to be downloaded from a URL.
    """

    def __init__(
        self,
        *,
        api_token: str | None = None,
        model_identifier: str | None = None,
        size: str = DEFAULT_IMAGE_SIZE,
        output_format: str = DEFAULT_IMAGE_FORMAT,
        client: replicate.Client | None = None,
        download_timeout: float = 60.0,
    ) -> None:
        self._api_token = api_token or os.getenv("REPLICATE_API_TOKEN")
        if not self._api_token and not client:
            raise ValueError(
                "Replicate API token is required. Set REPLICATE_API_TOKEN or pass api_token."
            )

        self._model_identifier = (
            model_identifier
            or os.getenv("PAGETURNER_IMAGE_MODEL")
            or os.getenv("REPLICATE_MODEL")
            or DEFAULT_IMAGE_MODEL
        )
        parse_size(size)
        self._size = size
        self._output_format = output_format
        self._download_timeout = download_timeout
        self._client = client or replicate.Client(api_token=self._api_token)

    @property
    def model_identifier(self) -> str:
        """Return the model identifier currently used."""
        return self._model_identifier

    async def generate_image(
        self,
        prompt: ImagePrompt,
        *,
        size: str | None = None,
        **model_kwargs: Any,
    ) -> GeneratedAsset:
        """
        Render one illustration and return it as an encoded asset.

        Parameters
        ----------
        prompt:
            Final prompt, already carrying the shared style directive.
        size:
            Optional override of the configured resolution.
        **model_kwargs:
            Additional keyword arguments forwarded directly to the Replicate model input.
        """
        replicate_input = _build_replicate_input_payload(
            model_identifier=self._model_identifier,
            prompt=prompt,
            size=size or self._size,
            output_format=self._output_format,
        )
        replicate_input.update(model_kwargs)

        output = await self._client.async_run(self._model_identifier, input=replicate_input)
        image_bytes = await self._read_output_bytes(output)

        return GeneratedAsset(
            encoded_image=encode_data_uri(image_bytes, image_format=self._output_format),
            source_prompt=prompt.text,
        )

    async def _read_output_bytes(self, output: Any) -> bytes:
        item = _first_output(output)

        if isinstance(item, (bytes, bytearray)):
            return bytes(item)

        if hasattr(item, "aread"):
            return await item.aread()

        if hasattr(item, "read"):
            return await asyncio.to_thread(item.read)

        url = str(item)
        if not url.lower().startswith(("http://", "https://")):
            raise RuntimeError(f"Unsupported Replicate output: {url[:80]!r}")
        logger.debug("Downloading generated image from %s", url)
        return await asyncio.to_thread(self._download, url)

    def _download(self, url: str) -> bytes:
        response = requests.get(url, timeout=self._download_timeout)
        response.raise_for_status()
        return response.content


def _first_output(output: Any) -> Any:
    """
    Return the first image from a Replicate output.

    Image models return either a single file/URL or a list of them.
    """
    if output is None:
        raise RuntimeError("Replicate returned no output.")

    if isinstance(output, (str, bytes, bytearray)) or hasattr(output, "read"):
        return output

    if isinstance(output, (list, tuple)):
        if not output:
            raise RuntimeError("Replicate returned an empty output list.")
        return output[0]

    try:
        return next(iter(output))
    except StopIteration as exc:
        raise RuntimeError("Replicate returned an empty output iterator.") from exc
    except TypeError:
        return output
