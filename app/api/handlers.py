"""
API handlers: call the orchestrator and conversation store, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging

from fastapi import HTTPException

from app.agent.orchestrator import Orchestrator
from app.agent.reflexive import handle_reflexive
from app.core.conversation_store import ConversationStore
from app.core.errors import ConversationNotFoundError, ServiceUnavailableError
from app.schemas.query import QueryData, QueryRequest, QueryResponse

logger = logging.getLogger(__name__)


def _reflexive_response(body: QueryRequest, store: ConversationStore) -> QueryResponse | None:
    """Answer slash commands and meta-questions locally; None when the query is a real question."""
    query = body.query.strip()
    reflexive = handle_reflexive(query)
    if not reflexive.is_reflexive:
        return None
    logger.info("[api:query] reflexive command=%s", reflexive.command or "meta-question")

    conversation_id = body.conversation_id
    if reflexive.command == "clear" and conversation_id:
        store.delete(conversation_id)
        conversation_id = None
    elif reflexive.command == "new":
        conversation_id = store.create().id

    return QueryResponse(
        reflexive=True,
        command=reflexive.command,
        conversation_id=conversation_id,
        data=QueryData(query=query, answer=reflexive.answer),
    )


async def handle_query(body: QueryRequest, store: ConversationStore, orchestrator: Orchestrator) -> QueryResponse:
    """
    Run one user query, optionally inside a conversation.

    404 for an unknown conversationId (never created implicitly), 503 when the LLM is
    not configured, 500 when the chat transport fails. Tool failures never reach here;
    the orchestrator hands them to the model as text.
    """
    query = body.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query string required")

    reflexive = _reflexive_response(body, store)
    if reflexive is not None:
        return reflexive

    conversation_id = body.conversation_id
    history: list[dict] = []
    if conversation_id:
        try:
            history = store.get_chat_history(conversation_id)
            store.add_user_message(conversation_id, query)
        except ConversationNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
    logger.info("[api:query] IN  query=%r conversation=%s history_len=%d", query, conversation_id, len(history))

    try:
        result = await orchestrator.execute_query(query, history)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e
    except Exception as e:
        logger.exception("Orchestrator failed")
        raise HTTPException(status_code=500, detail=str(e) or "Query processing failed") from e

    payload = result.to_dict()
    if conversation_id:
        try:
            store.add_assistant_message(
                conversation_id,
                result.answer,
                latency_ms=result.latency_ms,
                agents=result.agents_used,
                query_response=payload,
            )
        except ConversationNotFoundError:
            # deleted while the query was running
            logger.warning("[api:query] conversation %s vanished before the answer was stored", conversation_id)

    logger.info("[api:query] OUT complete=%s calls=%d latency_ms=%d", result.complete, len(result.agent_calls), result.latency_ms)
    return QueryResponse(conversation_id=conversation_id, data=QueryData.model_validate(payload))
