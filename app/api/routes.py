"""
API route aggregator: register endpoints; no logic, only delegate to handlers and the store.
"""

import logging

from fastapi import APIRouter, HTTPException

from app.agent.orchestrator import Orchestrator
from app.api.handlers import handle_query
from app.core.config import MAX_CONVERSATIONS
from app.core.conversation_store import InMemoryConversationStore
from app.core.errors import ConversationNotFoundError
from app.schemas.conversation import CreateConversationRequest
from app.schemas.query import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)
router = APIRouter()

conversation_store = InMemoryConversationStore(MAX_CONVERSATIONS)
_orchestrator: Orchestrator | None = None


def get_orchestrator() -> Orchestrator:
    """Process-wide orchestrator, built on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator()
    return _orchestrator


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Knowledge orchestrator backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"status": "ok"}


# --- Query ---

@router.post(
    "/api/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Ask the orchestrator",
    description="Send a question, optionally scoped to a conversation; receive answer, thoughts, agent calls and latency. 404 for an unknown conversation, 500 if the LLM call fails.",
)
async def post_query(body: QueryRequest) -> QueryResponse:
    return await handle_query(body, conversation_store, get_orchestrator())


# --- Conversations ---

@router.post("/api/conversations", tags=["conversations"], summary="Create a conversation")
def create_conversation(body: CreateConversationRequest | None = None) -> dict:
    conversation = conversation_store.create(body.title if body else None)
    return {
        "success": True,
        "data": {
            "id": conversation.id,
            "title": conversation.title,
            "createdAt": conversation.created_at.isoformat(),
        },
    }


@router.get("/api/conversations", tags=["conversations"], summary="List conversations, most recent first")
def list_conversations() -> dict:
    return {"success": True, "data": [c.summary() for c in conversation_store.list_conversations()]}


@router.delete("/api/conversations", tags=["conversations"], summary="Delete all conversations")
def clear_conversations() -> dict:
    cleared = conversation_store.clear_all()
    return {"success": True, "cleared": cleared}


@router.get("/api/conversations/{conversation_id}", tags=["conversations"], summary="Conversation with full history")
def get_conversation(conversation_id: str) -> dict:
    try:
        conversation = conversation_store.get(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e
    return {"success": True, "data": conversation.to_dict()}


@router.get("/api/conversations/{conversation_id}/stats", tags=["conversations"], summary="Conversation usage metrics")
def get_conversation_stats(conversation_id: str) -> dict:
    try:
        stats = conversation_store.get_stats(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e
    return {"success": True, "data": stats}


@router.delete("/api/conversations/{conversation_id}", tags=["conversations"], summary="Delete a conversation")
def delete_conversation(conversation_id: str) -> dict:
    if not conversation_store.delete(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"success": True, "message": "Conversation deleted"}
