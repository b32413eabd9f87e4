"""
Reflexive mode: slash commands and meta-questions about the assistant itself.

These are answered locally, without calling the LLM or any knowledge agent.
"""

import re
from dataclasses import dataclass

COMMANDS = ("/help", "/how", "/stats", "/clear", "/new", "/explain")

META_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"how\s+(do|does)\s+(you|this|it)\s+work",
        r"what\s+(is|are)\s+(you|this|wikidai)\b",
        r"explain\s+(how|what)\s+you",
        r"what\s+(do|can)\s+you\s+do",
        r"what\s+(agents|sources|tools)\s+(do|can|are)",
    )
]

HELP_TEXT = """# How this assistant works

An LLM orchestrator answers your question by calling open knowledge services and
composing their results.

## Agents
- **Wikidata**: SPARQL queries on the structured knowledge graph (read-only, validated before execution)
- **Wikipedia**: encyclopedic article summaries
- **Nominatim**: geocoding (OpenStreetMap)
- **Open-Meteo**: current weather and a 3-day forecast

## Typical workflow
"What's the weather where Einstein was born?"
1. Wikidata: `SELECT ?birthplaceLabel WHERE { wd:Q937 wdt:P19 ?birthplace . SERVICE wikibase:label { bd:serviceParam wikibase:language "en". } }` returns Ulm
2. Nominatim: "Ulm, Germany" returns lat 48.40, lon 9.99
3. Open-Meteo: current conditions at those coordinates
4. The orchestrator writes the final answer from those results only

Independent lookups run in parallel within one turn; dependent ones run in consecutive turns
(at most 10 turns per question).

## Conversations
Each conversation keeps its message history for context, plus metadata (average latency,
agents used). The title comes from your first question. Up to 100 conversations are kept in
memory; the least recently used are dropped first.

## Commands
- `/help`, `/how`: this message
- `/explain`: short overview
- `/stats`: where to find conversation statistics
- `/clear`: delete the current conversation
- `/new`: start a new conversation
"""

SHORT_EXPLANATION = """# How this assistant works

1. I analyse your question.
2. I decide which agents to call: Wikidata (SPARQL), Wikipedia (summaries), Nominatim (geocoding), Open-Meteo (weather).
3. I run the calls, in parallel when they are independent.
4. I compose the answer from the returned data and link the sources.

Examples: "Who is the mayor of Rome?", "Population of Tokyo", "Weather in Paris tomorrow", "Summary of Einstein".
Use `/help` for the full description.
"""


@dataclass
class ReflexiveResponse:
    is_reflexive: bool
    answer: str = ""
    command: str | None = None


def is_reflexive_query(query: str) -> bool:
    normalized = (query or "").strip().lower()
    if any(normalized.startswith(cmd) for cmd in COMMANDS):
        return True
    return any(p.search(normalized) for p in META_PATTERNS)


def handle_reflexive(query: str) -> ReflexiveResponse:
    normalized = (query or "").strip().lower()

    if normalized.startswith("/help") or normalized.startswith("/how"):
        return ReflexiveResponse(True, HELP_TEXT, "help")
    if normalized.startswith("/stats"):
        return ReflexiveResponse(
            True,
            "Conversation statistics are available at GET /api/conversations/{id}/stats.",
            "stats",
        )
    if normalized.startswith("/clear"):
        return ReflexiveResponse(True, "Conversation cleared. Start a new one with /new.", "clear")
    if normalized.startswith("/new"):
        return ReflexiveResponse(True, "New conversation created. Ask away!", "new")
    if normalized.startswith("/explain") or is_reflexive_query(query):
        return ReflexiveResponse(True, SHORT_EXPLANATION, "explain" if normalized.startswith("/explain") else None)

    return ReflexiveResponse(False)
