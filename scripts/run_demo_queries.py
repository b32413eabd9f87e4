#!/usr/bin/env python3
"""
Run the demo questions through the orchestrator and print what happened.

Needs OPENAI_API_KEY (in .env or the environment) and network access to the
public Wikidata, Wikipedia, Nominatim and Open-Meteo endpoints.

Run from project root:

    python scripts/run_demo_queries.py
    python scripts/run_demo_queries.py --prompt-mode balanced
    python scripts/run_demo_queries.py "What's the weather in Ulm?"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.agent.orchestrator import Orchestrator, QueryResult
from app.agent.prompts import PromptMode
from app.core.config import LOG_LEVEL
from app.core.errors import ServiceUnavailableError

DEMO_QUERIES = [
    "Who was Albert Einstein?",
    "Who is the mayor of Rome?",
    "Tell me about Einstein and then about his birthplace",
]


def print_result(result: QueryResult) -> None:
    print(f"\n=== {result.query}")
    for thought in result.thoughts:
        print(f"  thought: {thought}")
    for call in result.agent_calls:
        outcome = "ok" if call.ok else f"error: {call.error}"
        print(f"  [turn {call.turn}] {call.agent}({call.params}) -> {outcome}")
    status = "complete" if result.complete else "incomplete"
    print(f"  {status}, {result.turns} turn(s), {result.latency_ms} ms")
    print(f"\n{result.answer}")


async def run(queries: list[str], prompt_mode: str) -> None:
    orchestrator = Orchestrator(prompt_mode=prompt_mode)
    for query in queries:
        print_result(await orchestrator.execute_query(query))


def main() -> int:
    parser = argparse.ArgumentParser(description="Run demo questions through the knowledge-agent orchestrator.")
    parser.add_argument("queries", nargs="*", help="Questions to ask (default: the built-in demo set)")
    parser.add_argument(
        "--prompt-mode",
        choices=[m.value for m in PromptMode],
        default=PromptMode.WIKIDATA_FOCUSED.value,
        help="System prompt variant",
    )
    parser.add_argument("--verbose", action="store_true", help="Show agent and LLM logs")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL if args.verbose else logging.WARNING)
    try:
        asyncio.run(run(args.queries or DEMO_QUERIES, args.prompt_mode))
    except ServiceUnavailableError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
