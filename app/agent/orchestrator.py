"""
Orchestrator: multi-turn function-calling loop over the chat model.

Each turn sends the running message list to the model. A reply without tool calls is
the final answer. Otherwise every requested call in that turn runs concurrently and
the results go back as tool messages, paired to their call by tool_call_id. A failing
call becomes an error result for the model to read and does not abort its siblings
or the loop. At most max_turns chat calls are made per query; running out of turns
yields an incomplete result, not an exception. Chat transport errors propagate.
"""

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from app.agent.llm import ChatTurn, ToolCall, chat_with_tools
from app.agent.prompts import get_prompt
from app.agent.tools import AGENT_TOOLS, ToolRegistry
from app.core.config import INCOMPLETE_ANSWER, MAX_TURNS, PROMPT_MODE

logger = logging.getLogger(__name__)

ChatFn = Callable[[list[dict[str, Any]], list[dict[str, Any]]], Awaitable[ChatTurn]]


@dataclass
class AgentCall:
    """One executed tool invocation and its outcome (status is "success" or "error")."""

    agent: str
    params: dict[str, Any]
    status: str
    result: str | None = None
    error: str | None = None
    turn: int = 0
    call_id: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def tool_message_content(self) -> str:
        return (self.result or "") if self.ok else json.dumps({"error": self.error})


@dataclass
class QueryResult:
    query: str
    thoughts: list[str] = field(default_factory=list)
    agent_calls: list[AgentCall] = field(default_factory=list)
    answer: str = ""
    latency_ms: int = 0
    complete: bool = True
    turns: int = 0

    @property
    def agents_used(self) -> list[str]:
        return sorted({c.agent for c in self.agent_calls})

    def to_dict(self) -> dict[str, Any]:
        """Wire shape for POST /api/query (camelCase keys)."""
        return {
            "query": self.query,
            "thoughts": list(self.thoughts),
            "agentCalls": [
                {
                    "agent": c.agent,
                    "params": c.params,
                    "status": c.status,
                    "response": c.result,
                    "error": c.error,
                    "turn": c.turn,
                }
                for c in self.agent_calls
            ],
            "answer": self.answer,
            "latencyMs": self.latency_ms,
            "complete": self.complete,
            "turns": self.turns,
        }


def _assistant_message(reply: ChatTurn) -> dict[str, Any]:
    return {
        "role": "assistant",
        "content": reply.content or "",
        "tool_calls": [
            {
                "id": tc.id,
                "type": "function",
                "function": {"name": tc.name, "arguments": json.dumps(tc.arguments or {})},
            }
            for tc in reply.tool_calls
        ],
    }


class Orchestrator:
    def __init__(
        self,
        chat: ChatFn = chat_with_tools,
        registry: ToolRegistry | None = None,
        prompt_mode: str = PROMPT_MODE,
        max_turns: int = MAX_TURNS,
    ) -> None:
        self._chat = chat
        self.registry = registry or ToolRegistry()
        self.system_prompt = get_prompt(prompt_mode)
        self.max_turns = max_turns
        logger.info("[orchestrator] initialized prompt_mode=%s max_turns=%d", prompt_mode, max_turns)

    def build_messages(self, query: str, history: list[dict[str, Any]] | None = None) -> list[dict[str, Any]]:
        """System prompt, prior user/assistant messages (empty ones skipped), then the query."""
        messages: list[dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        for m in history or []:
            role = (m.get("role") or "user").strip().lower()
            content = (m.get("content") or "").strip()
            if role in ("user", "assistant") and content:
                messages.append({"role": role, "content": content})
        messages.append({"role": "user", "content": query})
        return messages

    async def run_tool(self, call: ToolCall, turn: int = 0) -> AgentCall:
        """Execute one invocation; any failure is captured as an error AgentCall."""
        try:
            output = await self.registry.execute(call.name, call.arguments)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.warning("[orchestrator:run_tool] %s failed: %s", call.name, message)
            return AgentCall(
                agent=call.name,
                params=call.arguments,
                status="error",
                error=message,
                turn=turn,
                call_id=call.id,
            )
        logger.info("[orchestrator:run_tool] %s ok result_preview=%r", call.name, output[:300])
        return AgentCall(
            agent=call.name,
            params=call.arguments,
            status="success",
            result=output,
            turn=turn,
            call_id=call.id,
        )

    async def execute_query(self, query: str, history: list[dict[str, Any]] | None = None) -> QueryResult:
        start = time.perf_counter()
        logger.info("[orchestrator:execute_query] IN  query=%r history_len=%d", query, len(history or []))
        messages = self.build_messages(query, history)
        result = QueryResult(query=query)

        for turn in range(1, self.max_turns + 1):
            result.turns = turn
            reply = await self._chat(messages, AGENT_TOOLS)

            if not reply.tool_calls:
                result.answer = reply.content or "No answer generated."
                result.latency_ms = int((time.perf_counter() - start) * 1000)
                logger.info(
                    "[orchestrator:execute_query] OUT turns=%d calls=%d latency_ms=%d",
                    turn, len(result.agent_calls), result.latency_ms,
                )
                return result

            if reply.content:
                result.thoughts.append(reply.content)
            logger.info("[orchestrator:execute_query] turn=%d tool_calls=%s", turn, [c.name for c in reply.tool_calls])
            messages.append(_assistant_message(reply))

            # gather keeps invocation order regardless of completion order
            calls = await asyncio.gather(*(self.run_tool(call, turn) for call in reply.tool_calls))
            for call in calls:
                result.agent_calls.append(call)
                messages.append(
                    {"role": "tool", "tool_call_id": call.call_id, "content": call.tool_message_content()}
                )

        logger.warning("[orchestrator:execute_query] max turns (%d) reached, stopping", self.max_turns)
        result.answer = INCOMPLETE_ANSWER
        result.complete = False
        result.latency_ms = int((time.perf_counter() - start) * 1000)
        return result
