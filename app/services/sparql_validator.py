"""
SPARQL gate: syntax check plus a read-only keyword policy.

Responsibility: Decide whether a model-generated SPARQL string may be sent to the
public Wikidata endpoint. Pure function, no network. The keyword scan is a plain
substring match on the upper-cased text, so a blocked word inside a string
literal or comment is also rejected.
"""

import logging
from dataclasses import dataclass

from pyparsing import ParseBaseException
from rdflib.plugins.sparql.parser import parseQuery

logger = logging.getLogger(__name__)

# SPARQL Update / admin vocabulary; the endpoint is used read-only
DANGEROUS_KEYWORDS: tuple[str, ...] = ("DELETE", "INSERT", "DROP", "CREATE", "CLEAR", "LOAD")


@dataclass(frozen=True)
class ValidationVerdict:
    """Pass, or fail with a human-readable reason."""

    valid: bool
    error: str | None = None


def find_dangerous_keyword(query: str) -> str | None:
    """Return the first blocked keyword found in the query (case-insensitive), or None."""
    upper = (query or "").upper()
    for keyword in DANGEROUS_KEYWORDS:
        if keyword in upper:
            return keyword
    return None


def validate_sparql(query: str) -> ValidationVerdict:
    """
    Validate a SPARQL query string.

    The keyword policy runs before the parser so that an update statement such as
    ``DELETE WHERE { ... }`` is reported by keyword rather than as a grammar error
    (the query grammar rejects updates too). Prefixes are not resolved: Wikidata
    predeclares ``wd:``, ``wdt:`` and friends server-side.
    """
    keyword = find_dangerous_keyword(query)
    if keyword:
        logger.warning("[sparql_validator] rejected keyword=%s", keyword)
        return ValidationVerdict(
            valid=False,
            error=f"Dangerous SPARQL keyword detected: {keyword}. Only read-only queries are allowed.",
        )

    if not query or not query.strip():
        return ValidationVerdict(valid=False, error="SPARQL syntax error: empty query")

    try:
        parseQuery(query)
    except (ParseBaseException, ValueError) as e:
        # ValueError: rdflib expands unicode escapes before the grammar runs
        logger.info("[sparql_validator] syntax error: %s", e)
        return ValidationVerdict(valid=False, error=f"SPARQL syntax error: {e}")

    return ValidationVerdict(valid=True)
