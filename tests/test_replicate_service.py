"""
Replicate Service Tests
=======================
Input payloads, output reading and data-URI encoding, with a stubbed client.
"""
import asyncio
import base64

import pytest

from pageturner.ai_generation import ImagePrompt, ReplicateImageGenerator, encode_data_uri
from pageturner.ai_generation.replicate_service import parse_size

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class StubClient:
    def __init__(self, output):
        self.output = output
        self.calls = []

    async def async_run(self, ref, input):
        self.calls.append((ref, input))
        if isinstance(self.output, Exception):
            raise self.output
        return self.output


class StubFileOutput:
    def __init__(self, data):
        self._data = data

    async def aread(self):
        return self._data


def _generate(client, **kwargs):
    generator = ReplicateImageGenerator(client=client, **kwargs)
    return asyncio.run(generator.generate_image(ImagePrompt(text="a puppy, cartoon style")))


class TestEncoding:
    def test_data_uri(self):
        uri = encode_data_uri(PNG_BYTES)
        prefix = "data:image/png;base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]) == PNG_BYTES

    def test_jpeg_subtype(self):
        assert encode_data_uri(b"x", image_format="jpg").startswith("data:image/jpeg;base64,")

    def test_empty_payload_raises(self):
        with pytest.raises(ValueError):
            encode_data_uri(b"")

    @pytest.mark.parametrize("size", ["1024", "axb", "0x512", ""])
    def test_bad_size_raises(self, size):
        with pytest.raises(ValueError):
            parse_size(size)


class TestReplicateImageGenerator:
    def test_flux_payload_and_file_output(self):
        client = StubClient([StubFileOutput(PNG_BYTES)])

        asset = _generate(client, model_identifier="black-forest-labs/flux-schnell", size="1024x768")

        ref, payload = client.calls[0]
        assert ref == "black-forest-labs/flux-schnell"
        assert payload == {
            "prompt": "a puppy, cartoon style",
            "aspect_ratio": "4:3",
            "output_format": "png",
            "num_outputs": 1,
        }
        assert asset.source_prompt == "a puppy, cartoon style"
        assert asset.encoded_image == encode_data_uri(PNG_BYTES)

    def test_sdxl_payload_with_version_and_raw_bytes(self):
        client = StubClient([PNG_BYTES])

        asset = _generate(client, model_identifier="stability-ai/sdxl:abc123")

        _, payload = client.calls[0]
        assert payload["width"] == 1024 and payload["height"] == 1024
        assert asset.encoded_image == encode_data_uri(PNG_BYTES)

    def test_unsupported_model_raises(self):
        client = StubClient([PNG_BYTES])
        with pytest.raises(ValueError, match="not configured"):
            _generate(client, model_identifier="someone/unknown-model")
        assert client.calls == []

    def test_empty_output_raises(self):
        with pytest.raises(RuntimeError, match="empty"):
            _generate(StubClient([]), model_identifier="black-forest-labs/flux-schnell")

    def test_client_errors_propagate(self):
        client = StubClient(ConnectionError("quota exceeded"))
        with pytest.raises(ConnectionError):
            _generate(client, model_identifier="black-forest-labs/flux-schnell")

    def test_url_output_is_downloaded(self, monkeypatch):
        class Response:
            content = PNG_BYTES

            def raise_for_status(self):
                return None

        requested = []

        def fake_get(url, timeout):
            requested.append(url)
            return Response()

        monkeypatch.setattr("pageturner.ai_generation.replicate_service.requests.get", fake_get)
        client = StubClient(["https://replicate.delivery/out.png"])

        asset = _generate(client, model_identifier="black-forest-labs/flux-schnell")

        assert requested == ["https://replicate.delivery/out.png"]
        assert asset.encoded_image == encode_data_uri(PNG_BYTES)

    def test_missing_token_without_client_raises(self, monkeypatch):
        monkeypatch.delenv("REPLICATE_API_TOKEN", raising=False)
        with pytest.raises(ValueError, match="REPLICATE_API_TOKEN"):
            ReplicateImageGenerator()
