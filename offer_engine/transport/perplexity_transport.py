"""Perplexity API as the analysis engine - search-grounded by default."""

import logging
from typing import Optional

import httpx

from config.settings import Settings, settings as default_settings
from offer_engine.errors import CapabilityUnavailable, EngineUnavailable
from offer_engine.transport.base import EngineRequest, EngineTransport

LOGGER = logging.getLogger(__name__)


class PerplexityTransport(EngineTransport):
    """
    Perplexity chat completions.

    Sonar models search the web on every request; ``disable_search`` turns that
    off for the fallback attempt.
    """

    name = "perplexity"
    BASE_URL = "https://api.perplexity.ai"

    def __init__(self, config: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or default_settings
        self.api_key = self.config.perplexity_api_key
        self.client = client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            },
            timeout=self.config.request_timeout
        )

    async def complete(self, request: EngineRequest) -> str:
        if not self.api_key:
            raise EngineUnavailable("Perplexity API key is missing. Set PERPLEXITY_API_KEY.")

        payload = {
            "model": self.config.perplexity_model,
            "messages": [
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": request.prompt}
            ],
            "temperature": 0.1,
        }
        if not request.use_search:
            payload["disable_search"] = True

        try:
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if request.use_search and status in (400, 403):
                LOGGER.warning("Perplexity rejected the search request (%s)", status)
                raise CapabilityUnavailable(f"Search capability rejected: HTTP {status}") from e
            raise EngineUnavailable(f"Perplexity returned HTTP {status}") from e
        except httpx.HTTPError as e:
            raise EngineUnavailable(f"Perplexity request failed: {e}") from e
        except ValueError as e:
            raise EngineUnavailable(f"Perplexity returned a non-JSON envelope: {e}") from e

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
