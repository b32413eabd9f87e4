"""
Tests for the knowledge agents and their result formatting.

HTTP is served by httpx.MockTransport so nothing leaves the process.
"""

import asyncio

import httpx
import pytest

from app.core.errors import AgentError, ArticleNotFoundError
from app.services import nominatim, open_meteo, wikidata, wikipedia
from app.services.nominatim import NominatimAgent
from app.services.open_meteo import OpenMeteoAgent
from app.services.wikidata import WikidataAgent
from app.services.wikipedia import WikipediaAgent, normalize_title


def _transport(status: int = 200, payload=None, seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload if payload is not None else {})

    return httpx.MockTransport(handler)


def _timeout_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    return httpx.MockTransport(handler)


def _bindings(n: int) -> dict:
    return {
        "head": {"vars": ["city", "cityLabel"]},
        "results": {
            "bindings": [
                {
                    "city": {"type": "uri", "value": f"http://www.wikidata.org/entity/Q{i}"},
                    "cityLabel": {"type": "literal", "value": f"City {i}"},
                }
                for i in range(n)
            ]
        },
    }


# --- Wikidata ---

class TestWikidataAgent:
    def test_sends_query_as_json_request(self) -> None:
        seen: list[httpx.Request] = []
        agent = WikidataAgent(_transport(payload=_bindings(1), seen=seen))
        data = asyncio.run(agent.execute("SELECT ?city WHERE { ?city wdt:P31 wd:Q515 }"))
        assert data["results"]["bindings"][0]["cityLabel"]["value"] == "City 0"
        assert seen[0].url.params["format"] == "json"
        assert seen[0].url.params["query"].startswith("SELECT ?city")
        assert "User-Agent" in seen[0].headers

    def test_upstream_error_raises_agent_error(self) -> None:
        agent = WikidataAgent(_transport(status=500))
        with pytest.raises(AgentError) as exc_info:
            asyncio.run(agent.execute("SELECT ?x WHERE { ?x ?y ?z }"))
        assert "Wikidata API error: 500" in str(exc_info.value)

    def test_timeout_raises_agent_error(self) -> None:
        agent = WikidataAgent(_timeout_transport())
        with pytest.raises(AgentError, match="timed out"):
            asyncio.run(agent.execute("SELECT ?x WHERE { ?x ?y ?z }"))


class TestWikidataFormat:
    def test_no_bindings(self) -> None:
        assert wikidata.format_results({"head": {"vars": []}, "results": {"bindings": []}}) == "No results found."
        assert wikidata.format_results({}) == "No results found."

    def test_rows_strip_label_suffix(self) -> None:
        text = wikidata.format_results(_bindings(2))
        assert text.startswith("Found 2 result(s):")
        assert "1. city: http://www.wikidata.org/entity/Q0 city: City 0" in text
        assert "more results" not in text

    def test_truncates_after_ten_rows(self) -> None:
        text = wikidata.format_results(_bindings(13))
        assert "10. " in text
        assert "11. " not in text
        assert text.endswith("... and 3 more results")


# --- Wikipedia ---

class TestWikipediaAgent:
    def test_normalize_title(self) -> None:
        assert normalize_title("  Albert   Einstein ") == "Albert_Einstein"

    def test_fetches_summary_for_normalized_title(self) -> None:
        seen: list[httpx.Request] = []
        summary = {
            "title": "Albert Einstein",
            "extract": "German-born theoretical physicist.",
            "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Albert_Einstein"}},
        }
        agent = WikipediaAgent(_transport(payload=summary, seen=seen))
        data = asyncio.run(agent.execute("Albert Einstein"))
        assert data["title"] == "Albert Einstein"
        assert seen[0].url.path.endswith("/page/summary/Albert_Einstein")

    def test_404_raises_article_not_found(self) -> None:
        agent = WikipediaAgent(_transport(status=404, payload={"type": "not_found"}))
        with pytest.raises(ArticleNotFoundError) as exc_info:
            asyncio.run(agent.execute("Qwxzzy"))
        assert str(exc_info.value) == 'Wikipedia article not found for: "Qwxzzy"'

    def test_other_status_raises_agent_error(self) -> None:
        agent = WikipediaAgent(_transport(status=503))
        with pytest.raises(AgentError) as exc_info:
            asyncio.run(agent.execute("Rome"))
        assert not isinstance(exc_info.value, ArticleNotFoundError)

    def test_format_summary(self) -> None:
        text = wikipedia.format_summary(
            {
                "title": "Rome",
                "extract": "Capital of Italy.",
                "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Rome"}},
            }
        )
        assert text == "**Rome**\n\nCapital of Italy.\n\nRead more: https://en.wikipedia.org/wiki/Rome"

    def test_format_summary_without_url(self) -> None:
        assert wikipedia.format_summary({"title": "Rome", "extract": "Capital."}) == "**Rome**\n\nCapital."


# --- Nominatim ---

class TestNominatimAgent:
    def test_geocode_passes_limit(self) -> None:
        seen: list[httpx.Request] = []
        hits = [{"display_name": "Ulm, Germany", "lat": "48.40", "lon": "9.99"}]
        agent = NominatimAgent(_transport(payload=hits, seen=seen))
        assert asyncio.run(agent.geocode("Ulm")) == hits
        assert seen[0].url.path.endswith("/search")
        assert seen[0].url.params["q"] == "Ulm"
        assert seen[0].url.params["limit"] == "5"

    def test_non_list_payload_becomes_empty(self) -> None:
        agent = NominatimAgent(_transport(payload={"error": "bad"}))
        assert asyncio.run(agent.geocode("nowhere")) == []

    def test_format_single_and_multiple(self) -> None:
        one = [{"display_name": "Ulm, Germany", "lat": "48.40", "lon": "9.99"}]
        assert nominatim.format_results(one) == "Location: Ulm, Germany\nCoordinates: lat: 48.40, lon: 9.99"
        two = one + [{"display_name": "Ulm, Montana", "lat": "47.43", "lon": "-111.50"}]
        assert nominatim.format_results(two).splitlines() == [
            "1. Ulm, Germany (lat: 48.40, lon: 9.99)",
            "2. Ulm, Montana (lat: 47.43, lon: -111.50)",
        ]
        assert nominatim.format_results([]) == "No locations found."


# --- Open-Meteo ---

WEATHER = {
    "latitude": 41.9,
    "longitude": 12.5,
    "current_weather": {"temperature": 21.3, "windspeed": 7.2, "weathercode": 2, "time": "2024-05-01T12:00"},
}


class TestOpenMeteoAgent:
    def test_current_only(self) -> None:
        seen: list[httpx.Request] = []
        agent = OpenMeteoAgent(_transport(payload=WEATHER, seen=seen))
        asyncio.run(agent.get_weather(41.9, 12.5))
        params = seen[0].url.params
        assert params["current_weather"] == "true"
        assert "daily" not in params

    def test_forecast_adds_daily_fields(self) -> None:
        seen: list[httpx.Request] = []
        agent = OpenMeteoAgent(_transport(payload=WEATHER, seen=seen))
        asyncio.run(agent.get_weather(41.9, 12.5, include_forecast=True))
        params = seen[0].url.params
        assert params["daily"] == "temperature_2m_max,temperature_2m_min,precipitation_sum"
        assert params["timezone"] == "auto"

    def test_format_current(self) -> None:
        text = open_meteo.format_weather(WEATHER)
        assert "Current temperature: 21.3°C" in text
        assert "Wind speed: 7.2 km/h" in text
        assert "Conditions: Partly cloudy" in text
        assert "Forecast" not in text

    def test_unknown_code(self) -> None:
        data = {**WEATHER, "current_weather": {**WEATHER["current_weather"], "weathercode": 42}}
        assert "Conditions: Unknown" in open_meteo.format_weather(data)

    def test_format_forecast(self) -> None:
        data = {
            **WEATHER,
            "daily": {
                "time": ["2024-05-01", "2024-05-02"],
                "temperature_2m_min": [12.0, 13.5],
                "temperature_2m_max": [22.0, 24.1],
                "precipitation_sum": [0.0, 1.2],
            },
        }
        text = open_meteo.format_weather(data)
        assert "Forecast (next 2 days):" in text
        assert "2024-05-02: 13.5°C - 24.1°C, precipitation: 1.2mm" in text
