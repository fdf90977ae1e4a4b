"""Chat turn orchestration: entitlement check, persistence, agent run, SSE stream."""

import asyncio
import logging
import uuid
from typing import Any, AsyncIterator, Mapping

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.graph.state import CompiledStateGraph

from healthdesk.agent.cost_tracker import TurnCost, record_turn_cost
from healthdesk.agent.entitlements import entitlements_for
from healthdesk.agent.history import AssistantMessageBuilder, text_of, to_langchain_messages
from healthdesk.agent.models import REASONING_MODEL
from healthdesk.agent.prompts import TITLE_PROMPT, RequestHints, system_prompt
from healthdesk.config import Settings
from healthdesk.errors import Forbidden, NotFound, RateLimited
from healthdesk.persistence.store import ChatRecord, ChatStore, MessageRecord, UserRecord
from healthdesk.schemas.chat import ChatRequest
from healthdesk.streaming.protocol import GENERIC_ERROR, emit_sse
from healthdesk.streaming.resumable import BackgroundStreams, ResumableStreamContext

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 80


async def require_owned_chat(store: ChatStore, chat_id: str, user_id: str) -> ChatRecord:
    chat = await store.get_chat(chat_id)
    if chat is None:
        raise NotFound("Chat not found")
    if chat.user_id != user_id:
        raise Forbidden()
    return chat


def truncate_title(text: str) -> str:
    title = " ".join(text.split())
    if len(title) <= MAX_TITLE_LENGTH:
        return title or "New chat"
    return title[: MAX_TITLE_LENGTH - 3].rstrip() + "..."


class ChatOrchestrator:
    """Runs one chat turn per request against the agent graph of the selected model.

    ``streams`` is the resumable stream context built at startup. Without it,
    turns still run in the background but cannot be resumed.
    """

    def __init__(
        self,
        chat_store: ChatStore,
        graphs: Mapping[str, CompiledStateGraph],
        settings: Settings,
        title_model: BaseChatModel | None = None,
        streams: ResumableStreamContext | None = None,
    ) -> None:
        self.chat_store = chat_store
        self.graphs = graphs
        self.settings = settings
        self.title_model = title_model
        self.streams = streams
        self.background = streams if streams is not None else BackgroundStreams()

    @property
    def resumable(self) -> bool:
        return self.streams is not None

    async def start_turn(
        self, user: UserRecord, request: ChatRequest, hints: RequestHints
    ) -> tuple[str, AsyncIterator[str]]:
        """Accept a user message and start streaming the assistant's reply.

        Returns the stream handle id and the SSE chunk iterator. Everything
        that can reject the request happens before the user message is stored.
        """
        entitlements = entitlements_for(user.type, self.settings)
        model_id = request.selected_chat_model
        if model_id not in entitlements.available_chat_model_ids or model_id not in self.graphs:
            raise Forbidden("Chat model not available")

        sent = await self.chat_store.count_user_messages(user.id, hours=24)
        if sent >= entitlements.max_messages_per_day:
            logger.info("User %s hit the daily limit of %d", user.id, sent)
            raise RateLimited()

        chat_id = str(request.id)
        message = request.message
        chat = await self.chat_store.get_chat(chat_id)
        if chat is None:
            title = await self.generate_title(message.content)
            await self.chat_store.save_chat(ChatRecord(
                id=chat_id,
                user_id=user.id,
                title=title,
                visibility=request.selected_visibility_type,
            ))
        elif chat.user_id != user.id:
            raise Forbidden()

        previous = await self.chat_store.get_messages(chat_id)
        user_message = MessageRecord(
            id=str(message.id),
            chat_id=chat_id,
            role="user",
            parts=[p.model_dump() for p in message.parts],
            attachments=[
                a.model_dump(by_alias=True) for a in message.experimental_attachments or []
            ],
        )
        await self.chat_store.save_messages([user_message])

        stream_id = str(uuid.uuid4())
        await self.chat_store.create_stream_id(stream_id, chat_id)

        inputs = {
            "messages": to_langchain_messages(previous + [user_message]),
            "system_prompt": system_prompt(hints, with_tools=model_id != REASONING_MODEL),
            "steps": 0,
        }

        def make_stream() -> AsyncIterator[str]:
            cost = TurnCost(chat_id=chat_id, stream_id=stream_id, model=model_id)
            return self._run_turn(chat_id, user.id, self.graphs[model_id], inputs, cost)

        if self.streams is not None:
            stream = await self.streams.resumable_stream(stream_id, make_stream)
        else:
            stream = await self.background.stream(make_stream)
        return stream_id, stream

    async def _run_turn(
        self,
        chat_id: str,
        user_id: str,
        graph: CompiledStateGraph,
        inputs: dict[str, Any],
        cost: TurnCost,
    ) -> AsyncIterator[str]:
        message_id = str(uuid.uuid4())
        builder = AssistantMessageBuilder()
        steps = 0
        config = {
            "configurable": {"user_id": user_id, "chat_id": chat_id},
            "recursion_limit": 2 * self.settings.max_steps + 2,
        }

        yield emit_sse("start", {"messageId": message_id})
        try:
            async with asyncio.timeout(self.settings.max_request_seconds):
                async for mode, payload in graph.astream(
                    inputs, config=config, stream_mode=["custom", "updates"]
                ):
                    if mode == "updates":
                        steps = (payload.get("reason") or {}).get("steps", steps)
                        continue
                    builder.add(payload)
                    data = {k: v for k, v in payload.items() if k != "type"}
                    yield emit_sse(payload["type"], data)
        except TimeoutError:
            logger.warning(
                "Chat %s turn exceeded %ss", chat_id, self.settings.max_request_seconds
            )
            cost.outcome = "error"
            yield emit_sse("error", {"message": GENERIC_ERROR})
        except Exception:
            logger.exception("Chat %s turn failed", chat_id)
            cost.outcome = "error"
            yield emit_sse("error", {"message": GENERIC_ERROR})
        else:
            last = builder.parts[-1]["type"] if builder.parts else None
            finish_reason = "tool-calls" if last == "tool-invocation" else "stop"
            yield emit_sse("finish", {"finishReason": finish_reason, "steps": steps})

        await self._save_assistant_message(chat_id, message_id, builder)
        cost.steps = steps
        record_turn_cost(cost)

    async def _save_assistant_message(
        self, chat_id: str, message_id: str, builder: AssistantMessageBuilder
    ) -> None:
        if not builder.has_content:
            logger.warning("Chat %s turn produced no assistant content", chat_id)
            return
        try:
            await self.chat_store.save_messages([MessageRecord(
                id=message_id,
                chat_id=chat_id,
                role="assistant",
                parts=builder.parts,
                attachments=[],
            )])
        except Exception:
            logger.exception("Failed to save assistant message for chat %s", chat_id)

    async def generate_title(self, text: str) -> str:
        """Short chat title from the first user message, falling back to truncation."""
        fallback = truncate_title(text)
        if self.title_model is None:
            return fallback
        try:
            response = await self.title_model.ainvoke(
                [SystemMessage(content=TITLE_PROMPT), HumanMessage(content=text)]
            )
        except Exception as e:
            logger.warning("Title generation failed, using truncation: %s", e)
            return fallback
        content = response.content
        title = content if isinstance(content, str) else text_of(
            [b for b in content if isinstance(b, dict)]
        )
        title = title.strip().strip('"').strip()
        return truncate_title(title) if title else fallback

    async def resume(
        self, user: UserRecord, chat_id: str
    ) -> tuple[str, AsyncIterator[str] | None]:
        """Follow the chat's most recent stream.

        Returns the stream id together with its chunks, or with ``None`` once the
        stream has expired.
        """
        if self.streams is None:
            raise RuntimeError("Resumable streams are disabled")
        chat = await self.chat_store.get_chat(chat_id)
        if chat is None:
            raise NotFound()
        if chat.visibility == "private" and chat.user_id != user.id:
            raise Forbidden()
        stream_ids = await self.chat_store.get_stream_ids(chat_id)
        if not stream_ids:
            raise NotFound("No streams found")
        stream_id = stream_ids[-1]
        return stream_id, await self.streams.resume_existing_stream(stream_id)

    async def delete(self, user: UserRecord, chat_id: str) -> ChatRecord:
        await require_owned_chat(self.chat_store, chat_id, user.id)
        deleted = await self.chat_store.delete_chat(chat_id)
        if deleted is None:
            raise NotFound()
        return deleted

    async def set_visibility(self, user: UserRecord, chat_id: str, visibility: str) -> None:
        await require_owned_chat(self.chat_store, chat_id, user.id)
        await self.chat_store.update_chat_visibility(chat_id, visibility)
