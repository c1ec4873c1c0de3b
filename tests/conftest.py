"""Shared test fixtures."""

import json
import random
from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from rental_search.config import RentalSearchConfig
from rental_search.dispatcher import SearchDispatcher, build_cache
from rental_search.fallback import FallbackSynthesizer
from rental_search.llm.client import ModelGateway, ModelReply


@dataclass
class MockResponse:
    """Lightweight mock for curl_cffi response objects."""

    status_code: int
    text: str = ""


def completion_body(content, model: str = "gpt-4o", usage: dict | None = None) -> str:
    """Serialized chat-completion envelope wrapping ``content``."""
    body = {"model": model, "choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        body["usage"] = usage
    return json.dumps(body)


def reply(content: str) -> ModelReply:
    return ModelReply(content=content, model="gpt-4o")


def make_config(**overrides) -> RentalSearchConfig:
    """Config with a dummy API key and short timeout for tests."""
    defaults = {"openai_api_key": "sk-test", "timeout_seconds": 5.0}
    defaults.update(overrides)
    return RentalSearchConfig(**defaults)


@pytest.fixture
def config() -> RentalSearchConfig:
    return make_config()


@pytest.fixture
def gateway(config):
    """ModelGateway whose ``complete`` is an AsyncMock; set side_effect per test."""
    gw = ModelGateway(config)
    gw.complete = AsyncMock()
    return gw


@pytest.fixture
def dispatcher(gateway, config) -> SearchDispatcher:
    return SearchDispatcher(
        gateway=gateway,
        cache=build_cache(config),
        synthesizer=FallbackSynthesizer(random.Random(42)),
        config=config,
    )
