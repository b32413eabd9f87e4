"""Schemas for the query endpoint. Wire names are camelCase (conversationId, agentCalls, latencyMs)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueryRequest(_CamelModel):
    """Request body for POST /api/query. History is stored server-side by conversationId."""

    query: str = Field(..., min_length=1, description="User question for the orchestrator.")
    conversation_id: str | None = Field(
        None, description="Existing conversation to continue; omit for a standalone query."
    )


class AgentCallOut(_CamelModel):
    """One executed tool invocation paired with its result or error."""

    agent: str = Field(..., description="Tool name, e.g. query_wikidata.")
    params: dict[str, Any] = Field(default_factory=dict, description="Arguments the model passed.")
    status: str = Field(..., description="success or error.")
    response: str | None = Field(None, description="Formatted tool output on success.")
    error: str | None = Field(None, description="Error message on failure.")
    turn: int = Field(0, description="Orchestration turn in which the call ran.")


class QueryData(_CamelModel):
    query: str
    thoughts: list[str] = Field(default_factory=list, description="Intermediate model text emitted alongside tool calls.")
    agent_calls: list[AgentCallOut] = Field(default_factory=list)
    answer: str = Field(..., description="Final answer, or the incomplete marker when the turn limit was reached.")
    latency_ms: int = Field(0, description="Wall-clock time from request start to answer.")
    complete: bool = Field(True, description="False when the loop stopped at the turn limit.")
    turns: int = Field(0, description="Number of chat round trips made.")


class QueryResponse(_CamelModel):
    """Response for POST /api/query."""

    success: bool = True
    reflexive: bool = Field(False, description="True when answered locally by a slash command or meta-question.")
    command: str | None = Field(None, description="Reflexive command name (help, stats, clear, new, explain).")
    conversation_id: str | None = None
    data: QueryData
