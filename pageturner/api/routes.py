import logging
from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pageturner.common import InvalidPromptError, Settings
from pageturner.pipeline import StorybookOrchestrator

from .schemas import ErrorResponse, GenerateStoryRequest, GenerateStoryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def get_orchestrator() -> StorybookOrchestrator:
    return StorybookOrchestrator(settings=Settings.from_env())


@router.post(
    "/generate-story",
    response_model=GenerateStoryResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_story(
    request: GenerateStoryRequest,
    orchestrator: StorybookOrchestrator = Depends(get_orchestrator),
):
    """Generate a complete illustrated story from a single prompt"""
    try:
        story = await orchestrator.generate_story(request.prompt)
    except InvalidPromptError:
        return JSONResponse(status_code=400, content={"error": "Prompt is required"})
    except Exception:
        logger.exception("Error generating story")
        return JSONResponse(status_code=500, content={"error": "Failed to generate story"})

    return story.to_dict()
