"""
Configuration and logging setup tests.
"""
import logging

import pytest

from pageturner.common import Settings, configure_logging
from pageturner.common.config import DEFAULT_IMAGE_MODEL, DEFAULT_MAX_CONCURRENT_ASSETS, DEFAULT_TEXT_MODEL

ENV_KEYS = [
    "PAGETURNER_TEXT_MODEL",
    "PAGETURNER_OUTLINE_MODEL",
    "PAGETURNER_IMAGE_MODEL",
    "PAGETURNER_IMAGE_SIZE",
    "PAGETURNER_IMAGE_FORMAT",
    "PAGETURNER_STYLE_PROFILE",
    "PAGETURNER_MAX_CONCURRENT_ASSETS",
    "PAGETURNER_LOG_LEVEL",
    "LITELLM_MODEL",
    "REPLICATE_MODEL",
    "GEMINI_API_KEY",
    "LITELLM_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings.from_env(load_dotenv_file=False)
    assert settings.text_model == DEFAULT_TEXT_MODEL
    assert settings.outline_model == DEFAULT_TEXT_MODEL
    assert settings.image_model == DEFAULT_IMAGE_MODEL
    assert settings.image_size == "1024x1024"
    assert settings.max_concurrent_assets == DEFAULT_MAX_CONCURRENT_ASSETS
    assert settings.text_api_key is None


def test_outline_model_falls_back_to_text_model(monkeypatch):
    monkeypatch.setenv("PAGETURNER_TEXT_MODEL", "openai/gpt-4.1-mini")
    monkeypatch.setenv("REPLICATE_MODEL", "stability-ai/sdxl")
    settings = Settings.from_env(load_dotenv_file=False)
    assert settings.outline_model == "openai/gpt-4.1-mini"
    assert settings.image_model == "stability-ai/sdxl"


@pytest.mark.parametrize("raw, expected", [("8", 8), ("0", None), ("-1", None), ("", None)])
def test_concurrency_limit(monkeypatch, raw, expected):
    monkeypatch.setenv("PAGETURNER_MAX_CONCURRENT_ASSETS", raw)
    assert Settings.from_env(load_dotenv_file=False).max_concurrent_assets == expected


def test_invalid_concurrency_limit(monkeypatch):
    monkeypatch.setenv("PAGETURNER_MAX_CONCURRENT_ASSETS", "many")
    with pytest.raises(ValueError, match="PAGETURNER_MAX_CONCURRENT_ASSETS"):
        Settings.from_env(load_dotenv_file=False)


def test_configure_logging_is_idempotent():
    logger = configure_logging("debug")
    configure_logging("INFO")
    named = [handler for handler in logger.handlers if handler.get_name() == "pageturner-console"]
    assert len(named) == 1
    assert logger.level == logging.INFO
