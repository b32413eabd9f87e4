"""
Wikidata agent: run a (pre-validated) SPARQL query against the public endpoint.

Responsibility: one GET to query.wikidata.org with format=json, then flatten the
head/vars + results/bindings shape into a short numbered list for the model.
"""

import logging
from typing import Any

from app.core.config import MAX_RESULT_ROWS, WIKIDATA_SPARQL_URL, WIKIDATA_TIMEOUT
from app.services.http_agent import HttpAgent

logger = logging.getLogger(__name__)


class WikidataAgent(HttpAgent):
    name = "Wikidata"
    timeout = WIKIDATA_TIMEOUT

    async def execute(self, sparql_query: str) -> dict[str, Any]:
        """Execute a SPARQL query. Validation is the caller's job (see ToolRegistry)."""
        preview = sparql_query[:200] + ("..." if len(sparql_query) > 200 else "")
        logger.info("[wikidata:execute] IN  query=%r", preview)
        data = await self._get_json(
            WIKIDATA_SPARQL_URL,
            params={"query": sparql_query, "format": "json"},
        )
        bindings = ((data or {}).get("results") or {}).get("bindings") or []
        logger.info("[wikidata:execute] OUT rows=%d", len(bindings))
        return data


def format_results(data: dict[str, Any], max_rows: int = MAX_RESULT_ROWS) -> str:
    """Render SPARQL JSON results as numbered rows of `var: value`."""
    bindings = ((data or {}).get("results") or {}).get("bindings") or []
    if not bindings:
        return "No results found."
    variables = ((data or {}).get("head") or {}).get("vars") or []

    lines = [f"Found {len(bindings)} result(s):", ""]
    for i, binding in enumerate(bindings[:max_rows], 1):
        cells = []
        for var in variables:
            cell = binding.get(var)
            if cell:
                cells.append(f"{var.replace('Label', '')}: {cell.get('value', '')}")
        lines.append(f"{i}. " + " ".join(cells))
    if len(bindings) > max_rows:
        lines.append("")
        lines.append(f"... and {len(bindings) - max_rows} more results")
    return "\n".join(lines).strip()
