"""Async client for the OpenAI-compatible chat-completion endpoint."""

import json
import logging
from dataclasses import dataclass
from enum import Enum

from curl_cffi.requests import AsyncSession, RequestsError

from rental_search.config import RentalSearchConfig
from rental_search.errors import ConfigurationError, MalformedResponseError, UpstreamError
from rental_search.llm.catalog import estimate_cost, get_model_config
from rental_search.llm.prompts import FAST_SYSTEM_PROMPT, FULL_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class Profile(str, Enum):
    """Operating profile of a completion call, chosen by the caller.

    FULL has a large token budget and low temperature for structured
    extraction; FAST is for short free-text answers.
    """

    FULL = "full"
    FAST = "fast"


@dataclass(frozen=True)
class CompletionOptions:
    max_tokens: int
    temperature: float
    model_id: str
    system_prompt: str


@dataclass(frozen=True)
class ModelReply:
    content: str
    model: str
    total_tokens: int | None = None


class ModelGateway:
    """Issues exactly one chat-completion request per call. No retries."""

    def __init__(self, config: RentalSearchConfig | None = None):
        self._config = config or RentalSearchConfig()
        self._client: AsyncSession | None = None

    def _get_client(self) -> AsyncSession:
        if self._client is None:
            self._client = AsyncSession(timeout=self._config.timeout_seconds)
        return self._client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.openai_api_key}",
            "Content-Type": "application/json",
        }

    def options_for(self, profile: Profile, model_id: str | None = None) -> CompletionOptions:
        """Resolve a profile against the model catalog.

        The catalog entry's token ceiling and temperature cap the profile's
        own budget.
        """
        model = get_model_config(model_id, default=self._config.default_model)
        if profile is Profile.FAST:
            max_tokens = self._config.fast_max_tokens
            temperature = self._config.fast_temperature
            system_prompt = FAST_SYSTEM_PROMPT
        else:
            max_tokens = self._config.full_max_tokens
            temperature = self._config.full_temperature
            system_prompt = FULL_SYSTEM_PROMPT
        return CompletionOptions(
            max_tokens=min(max_tokens, model.max_tokens),
            temperature=min(temperature, model.temperature),
            model_id=model.id,
            system_prompt=system_prompt,
        )

    async def complete(self, prompt: str, options: CompletionOptions) -> ModelReply:
        if not self._config.openai_api_key:
            raise ConfigurationError(
                "Model API key is not configured (set RENTAL_SEARCH_OPENAI_API_KEY)"
            )

        body = {
            "model": options.model_id,
            "messages": [
                {"role": "system", "content": options.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        url = f"{self._config.openai_base_url.rstrip('/')}/chat/completions"
        logger.info(
            "Completion request: model=%s max_tokens=%d prompt_chars=%d",
            options.model_id,
            options.max_tokens,
            len(prompt),
        )

        try:
            response = await self._get_client().post(url, json=body, headers=self._headers())
        except RequestsError as exc:
            raise UpstreamError(None, str(exc)) from exc

        if not 200 <= response.status_code < 300:
            logger.error("Completion endpoint returned %d", response.status_code)
            raise UpstreamError(response.status_code, response.text)

        return self._parse_envelope(response.text, options)

    def _parse_envelope(self, text: str, options: CompletionOptions) -> ModelReply:
        try:
            payload = json.loads(text)
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError(f"Unexpected completion envelope: {exc!r}") from exc
        if not isinstance(content, str):
            raise MalformedResponseError("Completion content is not a string")

        usage = payload.get("usage") or {}
        total_tokens = usage.get("total_tokens")
        if total_tokens is not None:
            cost = estimate_cost(
                options.model_id,
                usage.get("prompt_tokens", 0),
                usage.get("completion_tokens", 0),
            )
            logger.info("Completion ok: tokens=%s est_cost=$%.5f", total_tokens, cost)
        return ModelReply(
            content=content,
            model=payload.get("model", options.model_id),
            total_tokens=total_tokens,
        )

    async def check_status(self) -> bool:
        """Query the models listing to see whether the API key is usable."""
        if not self._config.openai_api_key:
            return False
        url = f"{self._config.openai_base_url.rstrip('/')}/models"
        try:
            response = await self._get_client().get(url, headers=self._headers())
        except RequestsError as exc:
            logger.warning("Model API status check failed: %s", exc)
            return False
        return response.status_code == 200

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> "ModelGateway":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
