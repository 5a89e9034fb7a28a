"""Notification sink: fire-and-forget events for e-mail / dashboard consumers.

Services call `notify()` only after their transaction committed. A failing
sink is logged and swallowed: it never fails or rolls back the operation
that triggered it.
"""

import json
import logging
from typing import Any, Protocol

from config.settings import settings
from src.fx_common.datetime_utils import utc_now
from src.fx_common.enums import NotificationEvent
from src.fx_common.redis_client import get_redis

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    async def publish(self, event: NotificationEvent, payload: dict[str, Any]) -> None: ...


class RedisNotificationSink:
    """Publishes JSON envelopes on the configured Redis channel."""

    def __init__(self, channel: str | None = None) -> None:
        self._channel = channel or settings.NOTIFICATION_CHANNEL

    async def publish(self, event: NotificationEvent, payload: dict[str, Any]) -> None:
        redis = await get_redis()
        message = json.dumps(
            {"event": event.value, "sent_at": utc_now().isoformat(), "data": payload},
            default=str,
        )
        await redis.publish(self._channel, message)


async def notify(
    sink: NotificationSink | None, event: NotificationEvent, payload: dict[str, Any]
) -> bool:
    """Publish through `sink`; returns False instead of raising on failure."""
    if sink is None:
        return False
    try:
        await sink.publish(event, payload)
    except Exception:
        logger.warning("Notification %s dropped", event.value, exc_info=True)
        return False
    return True
