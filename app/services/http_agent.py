"""
Shared HTTP plumbing for the knowledge agents.

Each agent makes one GET per call with its own timeout and no retries. Failures are
raised as AgentError carrying the upstream message; the orchestrator decides what
the model sees.
"""

import logging
from typing import Any

import httpx

from app.core.config import USER_AGENT
from app.core.errors import AgentError

logger = logging.getLogger(__name__)


class HttpAgent:
    """Base for agents wrapping one external JSON API."""

    name: str = "agent"
    timeout: float = 10.0

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        # transport is swapped for httpx.MockTransport in tests
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
        )

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET url; raise AgentError on transport failure. Status handling is left to the caller."""
        try:
            async with self._client() as client:
                return await client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning("[%s] request timed out: %s", self.name, e)
            raise AgentError(f"{self.name} request timed out", agent=self.name) from e
        except httpx.HTTPError as e:
            logger.warning("[%s] request failed: %s", self.name, e)
            raise AgentError(f"{self.name} request failed: {e}", agent=self.name) from e

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET url and decode JSON; any non-2xx status is an AgentError."""
        return self._decode(await self._get(url, params=params))

    def _decode(self, response: httpx.Response) -> Any:
        if response.status_code >= 400:
            logger.warning("[%s] upstream error %s: %s", self.name, response.status_code, response.text[:200])
            raise AgentError(
                f"{self.name} API error: {response.status_code} {response.reason_phrase}",
                agent=self.name,
            )
        try:
            return response.json()
        except ValueError as e:
            raise AgentError(f"{self.name} returned invalid JSON", agent=self.name) from e
