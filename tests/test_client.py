"""Tests for the chat-completion gateway."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from curl_cffi.requests import RequestsError

from rental_search.errors import ConfigurationError, MalformedResponseError, UpstreamError
from rental_search.llm.client import ModelGateway, Profile
from tests.conftest import MockResponse, completion_body, make_config


def _options(gateway: ModelGateway, profile: Profile = Profile.FULL, model: str | None = None):
    return gateway.options_for(profile, model)


@pytest.mark.asyncio
async def test_complete_success():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(return_value=MockResponse(200, completion_body("apt-1, apt-2")))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            result = await gateway.complete("find me a flat", _options(gateway))
    assert result.content == "apt-1, apt-2"
    assert result.model == "gpt-4o"
    assert mock_session.post.call_count == 1
    mock_session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_complete_request_body():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(return_value=MockResponse(200, completion_body("ok")))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config(openai_base_url="https://llm.example/v1/")) as gateway:
            await gateway.complete("hello", _options(gateway, Profile.FAST, "gpt-4o-mini"))

    args, kwargs = mock_session.post.call_args
    assert args[0] == "https://llm.example/v1/chat/completions"
    body = kwargs["json"]
    assert body["model"] == "gpt-4o-mini"
    assert body["max_tokens"] == 200
    assert body["temperature"] == 0.1
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"] == "hello"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"


@pytest.mark.asyncio
async def test_missing_api_key_raises_before_network():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        gateway = ModelGateway(make_config(openai_api_key=""))
        with pytest.raises(ConfigurationError):
            await gateway.complete("hello", _options(gateway))
    MockSession.assert_not_called()


@pytest.mark.asyncio
async def test_non_2xx_raises_upstream_error_without_retry():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(return_value=MockResponse(503, "overloaded"))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            with pytest.raises(UpstreamError) as exc_info:
                await gateway.complete("hello", _options(gateway))
    assert exc_info.value.upstream_status == 503
    assert exc_info.value.body == "overloaded"
    assert mock_session.post.call_count == 1


@pytest.mark.asyncio
async def test_transport_error_raises_upstream_error():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(side_effect=RequestsError("connection reset"))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            with pytest.raises(UpstreamError) as exc_info:
                await gateway.complete("hello", _options(gateway))
    assert exc_info.value.upstream_status is None
    assert "connection reset" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        json.dumps({"choices": []}),
        json.dumps({"choices": [{"message": {}}]}),
        json.dumps({"choices": [{"message": {"content": None}}]}),
        json.dumps({"error": "nope"}),
    ],
)
async def test_malformed_envelope(text):
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(return_value=MockResponse(200, text))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            with pytest.raises(MalformedResponseError):
                await gateway.complete("hello", _options(gateway))


@pytest.mark.asyncio
async def test_usage_is_reported():
    usage = {"prompt_tokens": 100, "completion_tokens": 50, "total_tokens": 150}
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.post = AsyncMock(return_value=MockResponse(200, completion_body("ok", usage=usage)))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            result = await gateway.complete("hello", _options(gateway))
    assert result.total_tokens == 150


def test_options_full_profile_defaults():
    gateway = ModelGateway(make_config())
    options = gateway.options_for(Profile.FULL)
    assert options.model_id == "gpt-4o"
    assert options.max_tokens == 2000
    assert options.temperature == 0.2


def test_options_capped_by_model_ceiling():
    gateway = ModelGateway(make_config(full_max_tokens=10000, full_temperature=1.5))
    options = gateway.options_for(Profile.FULL, "gpt-3.5-turbo")
    assert options.model_id == "gpt-3.5-turbo"
    assert options.max_tokens == 4096
    assert options.temperature == 0.7


def test_options_unknown_model_uses_configured_default():
    gateway = ModelGateway(make_config(default_model="gpt-4o-mini"))
    assert gateway.options_for(Profile.FAST, "llama-99").model_id == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_check_status():
    with patch("rental_search.llm.client.AsyncSession") as MockSession:
        mock_session = MockSession.return_value
        mock_session.get = AsyncMock(return_value=MockResponse(200, "{}"))
        mock_session.close = AsyncMock()
        async with ModelGateway(make_config()) as gateway:
            assert await gateway.check_status() is True
    args, _ = mock_session.get.call_args
    assert args[0].endswith("/models")


@pytest.mark.asyncio
async def test_check_status_without_key():
    gateway = ModelGateway(make_config(openai_api_key=""))
    assert await gateway.check_status() is False
