"""Conversion between persisted message parts and LangChain messages.

Persisted messages carry ordered ``parts``:

- ``{"type": "text", "text": ...}``
- ``{"type": "reasoning", "reasoning": ...}``
- ``{"type": "tool-invocation", "toolInvocation": {"state", "toolCallId",
  "toolName", "args", "result"}}``
"""

import json
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage

from healthdesk.persistence.store import MessageRecord


def text_of(parts: list[dict[str, Any]]) -> str:
    return "\n".join(p["text"] for p in parts if p.get("type") == "text" and p.get("text"))


def to_langchain_messages(records: list[MessageRecord]) -> list[BaseMessage]:
    """Rebuild the model-facing history from stored messages.

    An assistant message becomes one ``AIMessage`` per run of text followed by
    tool calls, each followed by a ``ToolMessage`` per completed call. Tool
    invocations that never produced a result are left out. Reasoning parts and
    attachments are not replayed.
    """
    messages: list[BaseMessage] = []
    for record in records:
        if record.role == "user":
            messages.append(HumanMessage(content=text_of(record.parts), id=record.id))
        elif record.role == "assistant":
            messages.extend(_assistant_messages(record))
    return messages


def _assistant_messages(record: MessageRecord) -> list[BaseMessage]:
    out: list[BaseMessage] = []
    text: list[str] = []
    calls: list[dict[str, Any]] = []

    def flush() -> None:
        if not text and not calls:
            return
        out.append(AIMessage(
            content="".join(text),
            tool_calls=[
                {"id": c["toolCallId"], "name": c["toolName"], "args": c.get("args") or {}}
                for c in calls
            ],
        ))
        out.extend(
            ToolMessage(
                content=json.dumps(c.get("result")),
                tool_call_id=c["toolCallId"],
                name=c["toolName"],
            )
            for c in calls
        )
        text.clear()
        calls.clear()

    for part in record.parts:
        kind = part.get("type")
        if kind == "text":
            if calls:
                flush()
            text.append(part.get("text", ""))
        elif kind == "tool-invocation":
            invocation = part.get("toolInvocation") or {}
            if invocation.get("state") == "result":
                calls.append(invocation)
    flush()
    return out


class AssistantMessageBuilder:
    """Accumulates streamed agent events into ordered assistant message parts."""

    def __init__(self) -> None:
        self.parts: list[dict[str, Any]] = []
        self._invocations: dict[str, dict[str, Any]] = {}

    def add(self, event: dict[str, Any]) -> None:
        kind = event.get("type")
        if kind in ("text", "reasoning"):
            last = self.parts[-1] if self.parts else None
            if last is not None and last["type"] == kind:
                last[kind] += event["delta"]
            else:
                self.parts.append({"type": kind, kind: event["delta"]})
        elif kind == "tool-call":
            invocation = {
                "state": "call",
                "toolCallId": event["toolCallId"],
                "toolName": event["toolName"],
                "args": event["args"],
            }
            self._invocations[event["toolCallId"]] = invocation
            self.parts.append({"type": "tool-invocation", "toolInvocation": invocation})
        elif kind == "tool-result":
            invocation = self._invocations.get(event["toolCallId"])
            if invocation is not None:
                invocation["state"] = "result"
                invocation["result"] = event["result"]

    @property
    def has_content(self) -> bool:
        return bool(self.parts)
