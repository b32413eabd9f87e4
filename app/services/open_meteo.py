"""
Open-Meteo agent: current weather (and optional short forecast) for coordinates.

Free API, no key. https://open-meteo.com/en/docs
"""

import logging
from typing import Any

from app.core.config import FORECAST_DAYS, OPEN_METEO_TIMEOUT, OPEN_METEO_URL
from app.services.http_agent import HttpAgent

logger = logging.getLogger(__name__)

# WMO weather codes (abbreviated) for Open-Meteo
WMO_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


class OpenMeteoAgent(HttpAgent):
    name = "Open-Meteo"
    timeout = OPEN_METEO_TIMEOUT

    async def get_weather(
        self, latitude: float, longitude: float, include_forecast: bool = False
    ) -> dict[str, Any]:
        logger.info(
            "[open_meteo:get_weather] IN  lat=%s lon=%s forecast=%s", latitude, longitude, include_forecast
        )
        params: dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "current_weather": "true",
        }
        if include_forecast:
            params["daily"] = "temperature_2m_max,temperature_2m_min,precipitation_sum"
            params["timezone"] = "auto"
        data = await self._get_json(f"{OPEN_METEO_URL}/forecast", params=params)
        logger.info("[open_meteo:get_weather] OUT has_daily=%s", bool((data or {}).get("daily")))
        return data


def format_weather(data: dict[str, Any], days: int = FORECAST_DAYS) -> str:
    current = data.get("current_weather") or {}
    code = current.get("weathercode")
    condition = WMO_CODES.get(code, "Unknown")

    lines = [
        f"Location: lat: {data.get('latitude')}, lon: {data.get('longitude')}",
        f"Current temperature: {current.get('temperature')}°C",
        f"Wind speed: {current.get('windspeed')} km/h",
        f"Conditions: {condition}",
        f"Time: {current.get('time', '')}",
    ]

    daily = data.get("daily") or {}
    dates = daily.get("time") or []
    if dates:
        lows = daily.get("temperature_2m_min") or []
        highs = daily.get("temperature_2m_max") or []
        rain = daily.get("precipitation_sum") or []
        lines.append("")
        lines.append(f"Forecast (next {min(days, len(dates))} days):")
        for i, day in enumerate(dates[:days]):
            low = lows[i] if i < len(lows) else None
            high = highs[i] if i < len(highs) else None
            precip = rain[i] if i < len(rain) else None
            lines.append(f"{day}: {low}°C - {high}°C, precipitation: {precip}mm")

    return "\n".join(lines)
