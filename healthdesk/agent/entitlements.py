"""Per-tier daily message limits."""

from dataclasses import dataclass

from healthdesk.agent.models import CHAT_MODEL, REASONING_MODEL
from healthdesk.config import Settings


@dataclass(frozen=True)
class Entitlements:
    max_messages_per_day: int
    available_chat_model_ids: tuple[str, ...]


def entitlements_for(user_type: str, settings: Settings) -> Entitlements:
    models = (CHAT_MODEL, REASONING_MODEL)
    if user_type == "guest":
        return Entitlements(settings.guest_max_messages_per_day, models)
    return Entitlements(settings.regular_max_messages_per_day, models)
