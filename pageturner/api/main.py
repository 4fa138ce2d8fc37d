import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pageturner.common import Settings, configure_logging

from .routes import router as generate_story_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv()
    settings = Settings.from_env(load_dotenv_file=False)
    configure_logging(settings.log_level)
    logger.info(
        "PageTurnerAI ready (text=%s, image=%s, style=%s, max_concurrent_assets=%s)",
        settings.text_model,
        settings.image_model,
        settings.style_profile,
        settings.max_concurrent_assets,
    )
    yield


app = FastAPI(
    title="PageTurnerAI API",
    description="Turns a single prompt into an illustrated children's story",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    # An unreadable body carries no usable prompt.
    return JSONResponse(status_code=400, content={"error": "Prompt is required"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Failed to generate story"})


app.include_router(generate_story_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pageturner.api.main:app", host="0.0.0.0", port=8000, reload=True)
