"""Web push delivery with VAPID signing via pywebpush."""

import asyncio
import json
import logging
from typing import Any

from pywebpush import WebPushException, webpush

logger = logging.getLogger(__name__)


class PushClient:
    """Sends JSON payloads to browser push subscriptions."""

    def __init__(self, vapid_private_key: str, vapid_subject: str) -> None:
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject

    async def send(self, subscription: dict[str, Any], payload: dict[str, Any]) -> bool:
        """Deliver one notification. Delivery failures are logged and reported as False."""
        try:
            await asyncio.to_thread(
                webpush,
                subscription_info=subscription,
                data=json.dumps(payload),
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
            )
        except (WebPushException, ValueError, OSError) as e:
            logger.warning(
                "Push delivery to %s failed: %s", subscription.get("endpoint", "?"), e
            )
            return False
        return True
