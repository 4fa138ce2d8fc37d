"""
API Tests
=========
POST /generate-story status codes and payloads, with a faked orchestrator backend.
"""
import pytest
from fastapi.testclient import TestClient

from pageturner.api import app, get_orchestrator

from .conftest import EXAMPLE_PROMPT, PAGE_TITLES


@pytest.fixture(name="client")
def client_fixture(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


class TestGenerateStory:
    def test_success(self, client, images):
        response = client.post("/generate-story", json={"prompt": EXAMPLE_PROMPT})

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Leo and Biscuit"
        assert [page["pageNumber"] for page in body["pages"]] == list(range(1, len(PAGE_TITLES) + 1))
        assert all(page["imageUrl"].startswith("data:image/png;base64,") for page in body["pages"])
        assert all("error" not in page for page in body["pages"])
        assert body["coverImageUrl"]
        assert len(images.calls) == len(PAGE_TITLES) + 1

    @pytest.mark.parametrize("payload", [{"prompt": ""}, {"prompt": "   "}, {}, {"prompt": None}])
    def test_missing_prompt_returns_400(self, client, completion, images, payload):
        response = client.post("/generate-story", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}
        assert completion.total_calls == 0
        assert images.calls == []

    def test_unreadable_body_returns_400(self, client, completion):
        response = client.post(
            "/generate-story",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert completion.total_calls == 0

    def test_outline_failure_returns_500(self, client, completion, images):
        completion.outline_error = RuntimeError("upstream 503")

        response = client.post("/generate-story", json={"prompt": EXAMPLE_PROMPT})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate story"}
        assert images.calls == []

    def test_degraded_page_still_returns_200(self, client, images):
        images.failing_markers.add(f"Scene for {PAGE_TITLES[3]}")

        response = client.post("/generate-story", json={"prompt": EXAMPLE_PROMPT})

        assert response.status_code == 200
        pages = response.json()["pages"]
        assert len(pages) == len(PAGE_TITLES)
        assert pages[3]["error"] == "Failed to generate image"
        assert "imageUrl" not in pages[3]
        assert all(page["imageUrl"] for index, page in enumerate(pages) if index != 3)

    def test_orchestrator_setup_failure_returns_500(self):
        def broken_orchestrator():
            raise ValueError("Replicate API token is required.")

        app.dependency_overrides[get_orchestrator] = broken_orchestrator
        try:
            client = TestClient(app, raise_server_exceptions=False)
            response = client.post("/generate-story", json={"prompt": EXAMPLE_PROMPT})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate story"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_blank_prompt_is_rejected_by_orchestrator(client, orchestrator, completion, monkeypatch):
    seen = []
    original = orchestrator.generate_story

    async def recording(prompt, **kwargs):
        seen.append(prompt)
        return await original(prompt, **kwargs)

    monkeypatch.setattr(orchestrator, "generate_story", recording)
    response = client.post("/generate-story", json={"prompt": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required"}
    assert seen == ["   "]
    assert completion.total_calls == 0
