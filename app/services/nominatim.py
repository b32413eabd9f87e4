"""
Nominatim agent: place name or address -> candidate coordinates (OpenStreetMap).

Nominatim's usage policy asks for an identifying User-Agent and at most one
request per second; we send one request per tool call and never retry.
"""

import logging
from typing import Any

from app.core.config import NOMINATIM_LIMIT, NOMINATIM_TIMEOUT, NOMINATIM_URL
from app.services.http_agent import HttpAgent

logger = logging.getLogger(__name__)


class NominatimAgent(HttpAgent):
    name = "Nominatim"
    timeout = NOMINATIM_TIMEOUT

    async def geocode(self, query: str) -> list[dict[str, Any]]:
        """Return up to NOMINATIM_LIMIT results, each with lat, lon, display_name."""
        logger.info("[nominatim:geocode] IN  query=%r", query)
        results = await self._get_json(
            f"{NOMINATIM_URL}/search",
            params={"q": query, "format": "json", "limit": NOMINATIM_LIMIT},
        )
        results = results if isinstance(results, list) else []
        logger.info("[nominatim:geocode] OUT locations=%d", len(results))
        return results


def format_results(results: list[dict[str, Any]]) -> str:
    """Single hit -> location + coordinates; several -> numbered list for the model to disambiguate."""
    if not results:
        return "No locations found."
    if len(results) == 1:
        r = results[0]
        return f"Location: {r.get('display_name', '')}\nCoordinates: lat: {r.get('lat')}, lon: {r.get('lon')}"
    return "\n".join(
        f"{i}. {r.get('display_name', '')} (lat: {r.get('lat')}, lon: {r.get('lon')})"
        for i, r in enumerate(results, 1)
    )
