"""Schemas for the conversation endpoints."""

from pydantic import BaseModel, Field


class CreateConversationRequest(BaseModel):
    """Request body for POST /api/conversations. The title is replaced by the first question."""

    title: str | None = Field(None, max_length=200, description="Optional initial title.")
