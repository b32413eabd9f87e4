"""
Agent LLM: OpenAI chat completions with function calling.

One call per orchestration turn. The caller keeps the message list; this module only
sends it with the tool schemas and normalizes the reply into a ChatTurn.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI

from app.core.config import AGENT_MAX_TOKENS, LLM_TEMPERATURE, OPENAI_API_KEY, OPENAI_LLM_MODEL
from app.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """One model-requested invocation: provider call id, operation name, decoded arguments."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatTurn:
    """Model reply for one turn: optional text plus zero or more tool calls."""

    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)


def _decode_arguments(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    try:
        args = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        logger.warning("[llm] undecodable tool arguments=%r", raw)
        return {}
    return args if isinstance(args, dict) else {}


def parse_message(msg: Any) -> ChatTurn:
    """Normalize an OpenAI ChatCompletionMessage (or a lookalike) into a ChatTurn."""
    if msg is None:
        return ChatTurn()
    content = (getattr(msg, "content", None) or "").strip() or None
    tool_calls = []
    for tc in getattr(msg, "tool_calls", None) or []:
        fn = getattr(tc, "function", None)
        if not fn:
            continue
        tool_calls.append(
            ToolCall(
                id=getattr(tc, "id", None) or "",
                name=getattr(fn, "name", None) or "",
                arguments=_decode_arguments(getattr(fn, "arguments", None)),
            )
        )
    return ChatTurn(content=content, tool_calls=tool_calls)


async def chat_with_tools(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]],
    max_tokens: int = AGENT_MAX_TOKENS,
) -> ChatTurn:
    """
    Call OpenAI chat with tools. If the returned ChatTurn has tool_calls, the caller
    should execute them and call again with tool results; otherwise content is the
    final answer.

    Raises:
        ServiceUnavailableError: OPENAI_API_KEY is not configured.
        openai.OpenAIError: transport/provider failure (fatal for the request).
    """
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY is not set; the orchestrator cannot reach the LLM.")
    logger.info("[llm:chat_with_tools] IN  messages=%d tools=%d", len(messages), len(tools))
    client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    response = await client.chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        tools=tools,
        temperature=LLM_TEMPERATURE,
        max_tokens=max_tokens,
    )
    turn = parse_message(response.choices[0].message if response.choices else None)
    if turn.tool_calls:
        logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t.name for t in turn.tool_calls])
    if turn.content:
        logger.info("[llm:chat_with_tools] OUT content_len=%d", len(turn.content))
    return turn
