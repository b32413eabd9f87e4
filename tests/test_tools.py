"""
Tests for the tool registry: dispatch, argument checks, and the SPARQL gate before network.
"""

import asyncio

import httpx
import pytest

from app.agent.tools import AGENT_TOOLS, ToolName, ToolRegistry
from app.core.errors import QueryValidationError, UnsupportedToolError


def _recording_transport(payload, seen: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    return httpx.MockTransport(handler)


def test_tool_schemas_match_registry() -> None:
    names = {t["function"]["name"] for t in AGENT_TOOLS}
    assert names == {t.value for t in ToolName}


def test_unknown_tool_raises() -> None:
    registry = ToolRegistry(_recording_transport({}, []))
    with pytest.raises(UnsupportedToolError) as exc_info:
        asyncio.run(registry.execute("search_web", {"q": "x"}))
    assert str(exc_info.value) == "Unsupported operation: search_web"


def test_invalid_sparql_never_reaches_network() -> None:
    seen: list[httpx.Request] = []
    registry = ToolRegistry(_recording_transport({}, seen))
    with pytest.raises(QueryValidationError) as exc_info:
        asyncio.run(registry.execute("query_wikidata", {"sparql_query": "DELETE WHERE { ?s ?p ?o }"}))
    assert str(exc_info.value).startswith("SPARQL validation failed: Dangerous SPARQL keyword detected: DELETE")
    assert seen == []


def test_valid_sparql_is_executed_and_formatted() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "head": {"vars": ["mayorLabel"]},
        "results": {"bindings": [{"mayorLabel": {"type": "literal", "value": "Roberto Gualtieri"}}]},
    }
    registry = ToolRegistry(_recording_transport(payload, seen))
    out = asyncio.run(
        registry.execute("query_wikidata", {"sparql_query": "SELECT ?mayor WHERE { wd:Q220 wdt:P6 ?mayor }"})
    )
    assert len(seen) == 1
    assert out == "Found 1 result(s):\n\n1. mayor: Roberto Gualtieri"


def test_missing_argument_raises_value_error() -> None:
    registry = ToolRegistry(_recording_transport({}, []))
    with pytest.raises(ValueError, match="term is required"):
        asyncio.run(registry.execute("get_wikipedia_summary", {}))


@pytest.mark.parametrize(
    "args, message",
    [
        ({"longitude": 12.5}, "latitude is required"),
        ({"latitude": "north", "longitude": 12.5}, "latitude must be a number"),
        ({"latitude": 91, "longitude": 12.5}, "latitude must be between"),
        ({"latitude": 41.9, "longitude": -181}, "longitude must be between"),
    ],
)
def test_weather_coordinates_checked(args: dict, message: str) -> None:
    seen: list[httpx.Request] = []
    registry = ToolRegistry(_recording_transport({}, seen))
    with pytest.raises(ValueError, match=message):
        asyncio.run(registry.execute("get_weather", args))
    assert seen == []


def test_weather_accepts_numeric_strings() -> None:
    seen: list[httpx.Request] = []
    payload = {"latitude": 48.4, "longitude": 9.99, "current_weather": {"temperature": 10, "weathercode": 0}}
    registry = ToolRegistry(_recording_transport(payload, seen))
    out = asyncio.run(registry.execute("get_weather", {"latitude": "48.40", "longitude": "9.99"}))
    assert "Conditions: Clear sky" in out
    assert seen[0].url.params["latitude"] == "48.4"


@pytest.mark.parametrize(
    "flag, wants_daily",
    [(True, True), ("true", True), ("false", False), (False, False), (None, False)],
)
def test_weather_forecast_flag(flag, wants_daily: bool) -> None:
    seen: list[httpx.Request] = []
    payload = {"latitude": 48.4, "longitude": 9.99, "current_weather": {"temperature": 10, "weathercode": 0}}
    registry = ToolRegistry(_recording_transport(payload, seen))
    args = {"latitude": 48.4, "longitude": 9.99, "include_forecast": flag}
    asyncio.run(registry.execute("get_weather", args))
    assert ("daily" in seen[0].url.params) is wants_daily


def test_weather_forecast_flag_rejects_garbage() -> None:
    seen: list[httpx.Request] = []
    registry = ToolRegistry(_recording_transport({}, seen))
    with pytest.raises(ValueError, match="include_forecast must be a boolean"):
        asyncio.run(registry.execute("get_weather", {"latitude": 1, "longitude": 2, "include_forecast": "maybe"}))
    assert seen == []


def test_geocode_dispatch() -> None:
    hits = [{"display_name": "Rome, Italy", "lat": "41.89", "lon": "12.48"}]
    registry = ToolRegistry(_recording_transport(hits, []))
    out = asyncio.run(registry.execute("geocode_location", {"query": "Rome"}))
    assert out.startswith("Location: Rome, Italy")
