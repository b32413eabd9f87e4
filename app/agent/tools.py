"""
Agent tools: definitions and execution for tool-calling (agentic) mode.

Tools: query_wikidata (SPARQL, validated first), get_wikipedia_summary,
geocode_location (Nominatim), get_weather (Open-Meteo).
"""

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx

from app.core.errors import QueryValidationError, UnsupportedToolError
from app.services import nominatim, open_meteo, wikidata, wikipedia
from app.services.nominatim import NominatimAgent
from app.services.open_meteo import OpenMeteoAgent
from app.services.sparql_validator import validate_sparql
from app.services.wikidata import WikidataAgent
from app.services.wikipedia import WikipediaAgent

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    QUERY_WIKIDATA = "query_wikidata"
    GET_WIKIPEDIA_SUMMARY = "get_wikipedia_summary"
    GEOCODE_LOCATION = "geocode_location"
    GET_WEATHER = "get_weather"


# OpenAI function-calling format: list of tool definitions
AGENT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": ToolName.QUERY_WIKIDATA.value,
            "description": (
                "Execute a SPARQL query on Wikidata to retrieve structured knowledge graph data. "
                "Use this for factual queries about entities, relationships, and properties. "
                "IMPORTANT: When searching by entity name (rdfs:label), ALWAYS add type constraints (wdt:P31) "
                "to disambiguate. Example: for \"Paris\", add ?city wdt:P31 wd:Q515 to get the city, not the person. "
                "Verify entity IDs are correct for the context before using hardcoded wd:Q### codes. "
                "Only read-only queries are accepted."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "sparql_query": {
                        "type": "string",
                        "description": (
                            "A complete SPARQL query string. Must be syntactically valid SPARQL 1.1. "
                            "Use prefixes like wd: for entities and wdt: for properties. "
                            "Always include SERVICE wikibase:label for human-readable labels."
                        ),
                    }
                },
                "required": ["sparql_query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": ToolName.GET_WIKIPEDIA_SUMMARY.value,
            "description": (
                "Retrieve a concise summary of a Wikipedia article. Use this for encyclopedic information "
                "about people, places, concepts, events."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "term": {
                        "type": "string",
                        "description": "The Wikipedia article title or search term (e.g. \"Albert_Einstein\", \"Solar_energy\")",
                    }
                },
                "required": ["term"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": ToolName.GEOCODE_LOCATION.value,
            "description": (
                "Convert a location name or address into geographic coordinates (latitude, longitude). "
                "Use this when you need coordinates for a place, city, address, or landmark. "
                "Uses OpenStreetMap Nominatim. Several candidates may be returned; ask the user when ambiguous."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Location name, address, or place (e.g. \"Rome, Italy\", \"Eiffel Tower\")",
                    }
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": ToolName.GET_WEATHER.value,
            "description": (
                "Get current weather and optional forecast for geographic coordinates. "
                "Use this after geocoding a location. Uses the Open-Meteo weather API."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "latitude": {"type": "number", "description": "Latitude coordinate (-90 to 90)"},
                    "longitude": {"type": "number", "description": "Longitude coordinate (-180 to 180)"},
                    "include_forecast": {
                        "type": "boolean",
                        "description": "Include 3-day forecast (default: false)",
                    },
                },
                "required": ["latitude", "longitude"],
            },
        },
    },
]


def _require_text(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} is required")
    return value.strip()


def _require_coordinate(args: dict[str, Any], key: str, bound: float) -> float:
    value = args.get(key)
    if value is None or isinstance(value, bool):
        raise ValueError(f"{key} is required")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number, got {value!r}") from e
    if not -bound <= number <= bound:
        raise ValueError(f"{key} must be between {-bound} and {bound}")
    return number


def _optional_flag(args: dict[str, Any], key: str) -> bool:
    value = args.get(key)
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false", ""):
        return value.strip().lower() == "true"
    raise ValueError(f"{key} must be a boolean, got {value!r}")


ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


class ToolRegistry:
    """
    Dispatch table from ToolName to an async handler returning text for the model.

    Built once; handlers raise on failure (AgentError, QueryValidationError, ValueError)
    and the orchestrator converts the exception into an error tool result.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.wikidata = WikidataAgent(transport)
        self.wikipedia = WikipediaAgent(transport)
        self.nominatim = NominatimAgent(transport)
        self.open_meteo = OpenMeteoAgent(transport)
        self._handlers: dict[ToolName, ToolHandler] = {
            ToolName.QUERY_WIKIDATA: self._query_wikidata,
            ToolName.GET_WIKIPEDIA_SUMMARY: self._get_wikipedia_summary,
            ToolName.GEOCODE_LOCATION: self._geocode_location,
            ToolName.GET_WEATHER: self._get_weather,
        }

    def resolve(self, name: str) -> ToolName:
        try:
            return ToolName(name)
        except ValueError:
            raise UnsupportedToolError(name) from None

    async def execute(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Execute a tool by name with the given arguments. Returns a string result for the LLM."""
        tool = self.resolve(name)
        args = arguments or {}
        logger.info("[tools] execute name=%r arguments=%r", tool.value, args)
        return await self._handlers[tool](args)

    async def _query_wikidata(self, args: dict[str, Any]) -> str:
        query = _require_text(args, "sparql_query")
        verdict = validate_sparql(query)
        if not verdict.valid:
            raise QueryValidationError(f"SPARQL validation failed: {verdict.error}", agent="Wikidata")
        data = await self.wikidata.execute(query)
        return wikidata.format_results(data)

    async def _get_wikipedia_summary(self, args: dict[str, Any]) -> str:
        summary = await self.wikipedia.execute(_require_text(args, "term"))
        return wikipedia.format_summary(summary)

    async def _geocode_location(self, args: dict[str, Any]) -> str:
        locations = await self.nominatim.geocode(_require_text(args, "query"))
        return nominatim.format_results(locations)

    async def _get_weather(self, args: dict[str, Any]) -> str:
        latitude = _require_coordinate(args, "latitude", 90.0)
        longitude = _require_coordinate(args, "longitude", 180.0)
        include_forecast = _optional_flag(args, "include_forecast")
        data = await self.open_meteo.get_weather(latitude, longitude, include_forecast)
        return open_meteo.format_weather(data)
