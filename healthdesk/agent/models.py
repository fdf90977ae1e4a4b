"""Chat model catalog and factory for LangChain ChatAnthropic instances."""

from dataclasses import dataclass

from langchain_anthropic import ChatAnthropic
from pydantic import SecretStr

from healthdesk.config import Settings
from healthdesk.tools import ALL_TOOLS

CHAT_MODEL = "chat-model"
REASONING_MODEL = "chat-model-reasoning"
DEFAULT_CHAT_MODEL = CHAT_MODEL


@dataclass(frozen=True)
class ChatModelInfo:
    id: str
    name: str
    description: str


CHAT_MODELS = [
    ChatModelInfo(CHAT_MODEL, "Claude Sonnet", "General chat with booking and records tools"),
    ChatModelInfo(
        REASONING_MODEL, "Claude Sonnet (Thinking)", "Extended reasoning, no tools"
    ),
]

CHAT_MODEL_IDS = frozenset(m.id for m in CHAT_MODELS)


def get_chat_model(settings: Settings, model_id: str) -> ChatAnthropic:
    if model_id == REASONING_MODEL:
        return ChatAnthropic(  # type: ignore[call-arg]
            model_name=settings.reasoning_model,
            anthropic_api_key=SecretStr(settings.anthropic_api_key),
            max_tokens_to_sample=settings.max_tokens,
            thinking={"type": "enabled", "budget_tokens": settings.reasoning_budget_tokens},
        )
    if model_id != CHAT_MODEL:
        raise ValueError(f"Unknown chat model: {model_id}")
    return ChatAnthropic(  # type: ignore[call-arg]
        model_name=settings.chat_model,
        anthropic_api_key=SecretStr(settings.anthropic_api_key),
        max_tokens_to_sample=settings.max_tokens,
    )


def get_title_model(settings: Settings) -> ChatAnthropic:
    return ChatAnthropic(  # type: ignore[call-arg]
        model_name=settings.title_model,
        anthropic_api_key=SecretStr(settings.anthropic_api_key),
        max_tokens_to_sample=64,
    )


def active_tools(model_id: str) -> list:
    """Tools the given chat model may call. The reasoning model gets none."""
    if model_id == REASONING_MODEL:
        return []
    return list(ALL_TOOLS)
