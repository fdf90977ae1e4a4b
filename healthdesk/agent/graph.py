"""LangGraph agent graph: a reason and tools loop bounded by a step budget.

Nodes report progress through the LangGraph stream writer, so callers consume
the graph with ``stream_mode="custom"`` and receive one dict per event:

- ``{"type": "reasoning" | "text", "delta": str}``
- ``{"type": "tool-call", "toolCallId", "toolName", "args"}``
- ``{"type": "tool-result", "toolCallId", "toolName", "result", "summary", "isError"}``
"""

import asyncio
import json
import logging
from typing import Any, Iterator

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import (
    AIMessage,
    AIMessageChunk,
    SystemMessage,
    ToolMessage,
    message_chunk_to_message,
)
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph
from langgraph.types import StreamWriter
from pydantic import ValidationError as ArgsValidationError

from healthdesk.agent.state import AgentState
from healthdesk.rendering import missing_renderers, render_result
from healthdesk.streaming.protocol import WordChunker
from healthdesk.tools.base import error_result

logger = logging.getLogger(__name__)


def content_deltas(chunk: AIMessageChunk) -> Iterator[tuple[str, str]]:
    """Yield ``(kind, delta)`` pairs for the text and reasoning in a streamed chunk."""
    content = chunk.content
    if isinstance(content, str):
        if content:
            yield "text", content
        return
    for block in content:
        if isinstance(block, str):
            yield "text", block
        elif block.get("type") == "text" and block.get("text"):
            yield "text", block["text"]
        elif block.get("type") == "thinking" and block.get("thinking"):
            yield "reasoning", block["thinking"]


def _should_use_tools(state: AgentState) -> str:
    """Edge function: route to tools if the last message has tool_calls."""
    last = state["messages"][-1]
    if isinstance(last, AIMessage) and last.tool_calls:
        return "tools"
    return END


def build_graph(
    model: BaseChatModel,
    tools: list | None = None,
    max_steps: int = 5,
    tool_timeout: float | None = None,
) -> CompiledStateGraph:
    """Build the agent graph for one chat model.

    Args:
        model: Chat model for reasoning steps.
        tools: Tools the model may call. Empty or None binds no tools.
        max_steps: Maximum number of model calls per turn.
        tool_timeout: Per-call timeout in seconds for tool execution.
    """
    tool_list = list(tools or [])
    tools_by_name = {t.name: t for t in tool_list}
    missing = missing_renderers(tools_by_name)
    if missing:
        raise ValueError(f"No result renderer for tool(s): {', '.join(sorted(missing))}")
    bound = model.bind_tools(tool_list) if tool_list else model

    async def reason(state: AgentState, config: RunnableConfig, writer: StreamWriter) -> dict:
        """Stream one model call, forwarding word-aligned deltas as they arrive."""
        messages = [SystemMessage(content=state["system_prompt"])] + state["messages"]
        chunkers = {"reasoning": WordChunker(), "text": WordChunker()}
        current: str | None = None
        aggregate: AIMessageChunk | None = None

        async for chunk in bound.astream(messages, config=config):
            aggregate = chunk if aggregate is None else aggregate + chunk
            for kind, delta in content_deltas(chunk):
                if current is not None and kind != current:
                    for piece in chunkers[current].flush():
                        writer({"type": current, "delta": piece})
                current = kind
                for piece in chunkers[kind].push(delta):
                    writer({"type": kind, "delta": piece})
        if current is not None:
            for piece in chunkers[current].flush():
                writer({"type": current, "delta": piece})

        response = (
            message_chunk_to_message(aggregate) if aggregate is not None else AIMessage(content="")
        )
        for call in getattr(response, "tool_calls", None) or []:
            writer({
                "type": "tool-call",
                "toolCallId": call["id"],
                "toolName": call["name"],
                "args": call["args"],
            })
        return {"messages": [response], "steps": state.get("steps", 0) + 1}

    async def invoke_tool(call: dict[str, Any], config: RunnableConfig) -> dict[str, Any]:
        name = call["name"]
        selected = tools_by_name.get(name)
        if selected is None:
            return error_result("unknown_tool", f"Unknown tool: {name}")
        try:
            return await asyncio.wait_for(
                selected.ainvoke(call["args"], config=config), timeout=tool_timeout
            )
        except ArgsValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            return error_result("validation_error", f"Invalid arguments for {name}: {fields}")
        except TimeoutError:
            logger.warning("Tool %s timed out after %ss", name, tool_timeout)
            return error_result("timeout", f"Tool '{name}' timed out. Try again.")

    async def run_tools(state: AgentState, config: RunnableConfig, writer: StreamWriter) -> dict:
        """Execute the requested tool calls in order and report each result."""
        last = state["messages"][-1]
        results: list[ToolMessage] = []
        for call in getattr(last, "tool_calls", None) or []:
            result = await invoke_tool(call, config)
            is_error = result.get("status") != "success"
            writer({
                "type": "tool-result",
                "toolCallId": call["id"],
                "toolName": call["name"],
                "result": result,
                "summary": render_result(call["name"], result),
                "isError": is_error,
            })
            results.append(ToolMessage(
                content=json.dumps(result),
                tool_call_id=call["id"],
                name=call["name"],
                status="error" if is_error else "success",
            ))
        return {"messages": results}

    def _within_budget(state: AgentState) -> str:
        """Edge function: keep reasoning until the step budget is spent."""
        if state.get("steps", 0) >= max_steps:
            logger.info("Step budget of %d reached", max_steps)
            return END
        return "reason"

    graph = StateGraph(AgentState)
    graph.add_node("reason", reason)
    graph.add_node("tools", run_tools)
    graph.set_entry_point("reason")
    graph.add_conditional_edges("reason", _should_use_tools, {"tools": "tools", END: END})
    graph.add_conditional_edges("tools", _within_budget, {"reason": "reason", END: END})
    return graph.compile()
