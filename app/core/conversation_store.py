"""
Conversation store: chat history plus per-conversation usage metrics.

ConversationStore is the interface the API layer talks to; InMemoryConversationStore
keeps everything in process memory, bounded to max_conversations. Recency is the
OrderedDict order (most recently updated last), so eviction drops from the front.
All access takes the lock: FastAPI runs sync routes in a thread pool. Reads return
deep copies, so callers serialize a snapshot rather than live objects.
"""

import copy
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.core.config import MAX_CONVERSATIONS, TITLE_MAX_LENGTH
from app.core.errors import ConversationNotFoundError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def make_title(first_message: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Title from the first user message, truncated with "..." to max_length chars."""
    text = (first_message or "").strip()
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


@dataclass
class Message:
    role: str  # "user" | "assistant"
    content: str
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=_now)
    query_response: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.query_response is not None:
            out["queryResponse"] = self.query_response
        return out


@dataclass
class ConversationMetadata:
    total_queries: int = 0
    total_latency_ms: int = 0
    agents_used: set[str] = field(default_factory=set)


@dataclass
class Conversation:
    id: str
    title: str
    messages: list[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    metadata: ConversationMetadata = field(default_factory=ConversationMetadata)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "messageCount": len(self.messages),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "messages": [m.to_dict() for m in self.messages],
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "metadata": {
                "totalQueries": self.metadata.total_queries,
                "totalLatencyMs": self.metadata.total_latency_ms,
                "agentsUsed": sorted(self.metadata.agents_used),
            },
        }


class ConversationStore(ABC):
    """Create/get/list/append/delete over conversations, independent of the backing storage."""

    @abstractmethod
    def create(self, title: str | None = None) -> Conversation: ...

    @abstractmethod
    def get(self, conversation_id: str) -> Conversation:
        """Snapshot of the conversation. Raises ConversationNotFoundError if absent."""

    @abstractmethod
    def list_conversations(self) -> list[Conversation]:
        """Most recently updated first."""

    @abstractmethod
    def add_user_message(self, conversation_id: str, content: str) -> Message: ...

    @abstractmethod
    def add_assistant_message(
        self,
        conversation_id: str,
        content: str,
        latency_ms: int = 0,
        agents: list[str] | None = None,
        query_response: dict[str, Any] | None = None,
    ) -> Message: ...

    @abstractmethod
    def delete(self, conversation_id: str) -> bool: ...

    @abstractmethod
    def clear_all(self) -> int: ...

    @abstractmethod
    def __len__(self) -> int: ...

    def get_chat_history(self, conversation_id: str) -> list[dict[str, str]]:
        """Prior messages as {"role", "content"} dicts for the chat model."""
        conversation = self.get(conversation_id)
        return [{"role": m.role, "content": m.content} for m in conversation.messages]

    def get_stats(self, conversation_id: str) -> dict[str, Any]:
        conversation = self.get(conversation_id)
        meta = conversation.metadata
        avg = round(meta.total_latency_ms / meta.total_queries) if meta.total_queries else 0
        return {
            "messageCount": len(conversation.messages),
            "avgLatency": avg,
            "agentsUsed": sorted(meta.agents_used),
        }


class InMemoryConversationStore(ConversationStore):
    def __init__(self, max_conversations: int = MAX_CONVERSATIONS) -> None:
        if max_conversations < 1:
            raise ValueError("max_conversations must be >= 1")
        self.max_conversations = max_conversations
        self._conversations: OrderedDict[str, Conversation] = OrderedDict()
        self._created = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)

    def create(self, title: str | None = None) -> Conversation:
        with self._lock:
            self._created += 1
            conversation = Conversation(
                id=_new_id(),
                title=(title or "").strip() or f"Conversation {self._created}",
            )
            self._conversations[conversation.id] = conversation
            evicted = self._evict_locked()
        logger.info("[conversation_store:create] id=%s title=%r", conversation.id, conversation.title)
        if evicted:
            logger.info("[conversation_store:create] evicted %d old conversations", evicted)
        return conversation

    def _evict_locked(self) -> int:
        evicted = 0
        while len(self._conversations) > self.max_conversations:
            self._conversations.popitem(last=False)
            evicted += 1
        return evicted

    def _get_locked(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def _touch_locked(self, conversation: Conversation) -> None:
        conversation.updated_at = _now()
        self._conversations.move_to_end(conversation.id)

    def get(self, conversation_id: str) -> Conversation:
        with self._lock:
            return copy.deepcopy(self._get_locked(conversation_id))

    def list_conversations(self) -> list[Conversation]:
        with self._lock:
            return [copy.deepcopy(c) for c in reversed(self._conversations.values())]

    def add_user_message(self, conversation_id: str, content: str) -> Message:
        with self._lock:
            conversation = self._get_locked(conversation_id)
            message = Message(role="user", content=content or "")
            conversation.messages.append(message)
            if sum(1 for m in conversation.messages if m.role == "user") == 1:
                conversation.title = make_title(message.content)
            self._touch_locked(conversation)
        logger.info("[conversation_store:add_user_message] id=%s content_len=%d", conversation_id, len(content or ""))
        return message

    def add_assistant_message(
        self,
        conversation_id: str,
        content: str,
        latency_ms: int = 0,
        agents: list[str] | None = None,
        query_response: dict[str, Any] | None = None,
    ) -> Message:
        with self._lock:
            conversation = self._get_locked(conversation_id)
            message = Message(role="assistant", content=content or "", query_response=query_response)
            conversation.messages.append(message)
            conversation.metadata.total_queries += 1
            conversation.metadata.total_latency_ms += int(latency_ms)
            conversation.metadata.agents_used.update(agents or [])
            self._touch_locked(conversation)
        logger.info(
            "[conversation_store:add_assistant_message] id=%s latency_ms=%d agents=%s",
            conversation_id, latency_ms, agents or [],
        )
        return message

    def delete(self, conversation_id: str) -> bool:
        with self._lock:
            deleted = self._conversations.pop(conversation_id, None) is not None
        if deleted:
            logger.info("[conversation_store:delete] id=%s", conversation_id)
        return deleted

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._conversations)
            self._conversations.clear()
        logger.info("[conversation_store:clear_all] cleared %d conversations", count)
        return count
