"""OpenAI chat completions as the analysis engine."""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from config.settings import Settings, settings as default_settings
from offer_engine.errors import CapabilityUnavailable, EngineUnavailable
from offer_engine.transport.base import EngineRequest, EngineTransport

LOGGER = logging.getLogger(__name__)

# Status codes that mean "this key/tier can't use that model or tool".
_CAPABILITY_ERRORS = (openai.BadRequestError, openai.PermissionDeniedError, openai.NotFoundError)


class OpenAITransport(EngineTransport):
    """
    Search-grounded requests go to the search-preview model with
    ``web_search_options``; plain requests go to the analysis model.
    """

    name = "openai"

    def __init__(self, config: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config or default_settings
        if client is None and self.config.openai_api_key:
            client = AsyncOpenAI(
                api_key=self.config.openai_api_key,
                timeout=self.config.request_timeout,
                max_retries=0,
            )
        self.client = client

    async def complete(self, request: EngineRequest) -> str:
        if self.client is None:
            raise EngineUnavailable("OpenAI API key is missing. Set OPENAI_API_KEY.")

        kwargs = {
            "model": self.config.analysis_model,
            "messages": [
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": request.prompt},
            ],
        }
        if request.use_search:
            kwargs["model"] = self.config.search_model
            kwargs["web_search_options"] = {}
        elif request.json_output:
            # Search-preview models don't accept response_format.
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except _CAPABILITY_ERRORS as e:
            if request.use_search:
                LOGGER.warning("OpenAI rejected the search request: %s", e)
                raise CapabilityUnavailable(f"Search capability rejected: {e}") from e
            raise EngineUnavailable(f"OpenAI request rejected: {e}") from e
        except openai.APIError as e:
            raise EngineUnavailable(f"OpenAI request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
