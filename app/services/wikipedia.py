"""Wikipedia agent: article summary from the REST v1 API."""

import logging
import re
from typing import Any
from urllib.parse import quote

from app.core.config import WIKIPEDIA_API_URL, WIKIPEDIA_TIMEOUT
from app.core.errors import ArticleNotFoundError
from app.services.http_agent import HttpAgent

logger = logging.getLogger(__name__)


def normalize_title(term: str) -> str:
    """Trim and turn whitespace runs into underscores ("Albert  Einstein" -> "Albert_Einstein")."""
    return re.sub(r"\s+", "_", (term or "").strip())


class WikipediaAgent(HttpAgent):
    name = "Wikipedia"
    timeout = WIKIPEDIA_TIMEOUT

    async def execute(self, term: str) -> dict[str, Any]:
        """
        Fetch the summary for term.

        Raises:
            ArticleNotFoundError: the API answered 404 for the normalized title.
            AgentError: any other transport or upstream failure.
        """
        title = normalize_title(term)
        logger.info("[wikipedia:execute] IN  term=%r title=%r", term, title)
        url = f"{WIKIPEDIA_API_URL}/page/summary/{quote(title, safe='')}"
        response = await self._get(url)
        if response.status_code == 404:
            logger.warning("[wikipedia:execute] article not found: %r", term)
            raise ArticleNotFoundError(f'Wikipedia article not found for: "{term}"', agent=self.name)
        data = self._decode(response)
        logger.info("[wikipedia:execute] OUT title=%r", data.get("title"))
        return data


def format_summary(summary: dict[str, Any]) -> str:
    out = f"**{summary.get('title', '')}**\n\n{summary.get('extract', '')}"
    page = ((summary.get("content_urls") or {}).get("desktop") or {}).get("page")
    if page:
        out += f"\n\nRead more: {page}"
    return out
