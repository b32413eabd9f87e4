"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# OpenAI (orchestrator LLM with function calling)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
LLM_TEMPERATURE: float = 0.7
AGENT_MAX_TOKENS: int = 1024

# System prompt variant: "wikidata-focused" (default) or "balanced"
PROMPT_MODE: str = (
    os.getenv("PROMPT_MODE", "wikidata-focused").strip().lower() or "wikidata-focused"
)

# Orchestration loop: hard cap on chat round trips per query
MAX_TURNS: int = 10
INCOMPLETE_ANSWER: str = "Query processing incomplete"

# Conversation store
MAX_CONVERSATIONS: int = 100
TITLE_MAX_LENGTH: int = 50

# Outbound HTTP identity (Wikimedia and Nominatim policies require a UA)
USER_AGENT: str = os.getenv(
    "USER_AGENT", "WikidAI-PoC/0.1 (Educational Project)"
).strip()

# Knowledge agents: endpoints
WIKIDATA_SPARQL_URL: str = "https://query.wikidata.org/sparql"
WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/api/rest_v1"
NOMINATIM_URL: str = "https://nominatim.openstreetmap.org"
OPEN_METEO_URL: str = "https://api.open-meteo.com/v1"

# Knowledge agents: timeouts (seconds)
WIKIDATA_TIMEOUT: float = 10.0
WIKIPEDIA_TIMEOUT: float = 8.0
NOMINATIM_TIMEOUT: float = 10.0
OPEN_METEO_TIMEOUT: float = 10.0

# Knowledge agents: result shaping
MAX_RESULT_ROWS: int = 10
NOMINATIM_LIMIT: int = 5
FORECAST_DAYS: int = 3
