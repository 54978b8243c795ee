"""
Fire-and-forget change notifications.

Publishes coarse "something changed" events on a Redis pub/sub channel so
the frontends can invalidate their caches. Delivery is best-effort and
unordered; nothing in the points core depends on it. Without REDIS_URL
the events are only logged.

Message format:
    {"type": "points-updated", "data": {...}, "timestamp": "2026-01-01T00:00:00"}
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import redis
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)


class EventTypes:
    POINTS_UPDATED = 'points-updated'
    HOUSE_UPDATED = 'house-updated'
    CLASS_UPDATED = 'class-updated'
    REWARD_UPDATED = 'reward-updated'


class NotificationService:
    """Publishes events to a Redis channel."""

    def __init__(self, redis_url: Optional[str] = None, channel: str = 'housepoints:events', client=None):
        self.channel = channel
        self._client = client
        if self._client is None and redis_url:
            self._client = redis.from_url(redis_url, socket_connect_timeout=2)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def publish(self, event_type: str, data: Dict[str, Any] = None) -> bool:
        """
        Publish one event. Never raises.

        Returns:
            True if the event was handed to Redis
        """
        message = json.dumps({
            'type': event_type,
            'data': data or {},
            'timestamp': datetime.utcnow().isoformat()
        })

        if not self.enabled:
            logger.debug(f"Event {event_type} not published (no channel): {message}")
            return False

        try:
            self._client.publish(self.channel, message)
            logger.debug(f"Broadcasting event: {event_type}")
            return True
        except redis.RedisError as e:
            logger.warning(f"Failed to publish {event_type} event: {e}")
            return False


def get_notifier() -> NotificationService:
    """Notifier bound to the current app (created once per app)."""
    if not has_app_context():
        return NotificationService()

    notifier = current_app.extensions.get('housepoints_notifier')
    if notifier is None:
        notifier = NotificationService(
            redis_url=current_app.config.get('REDIS_URL'),
            channel=current_app.config.get('POINTS_CHANNEL', 'housepoints:events'),
        )
        current_app.extensions['housepoints_notifier'] = notifier
    return notifier


def publish_event(event_type: str, data: Dict[str, Any] = None) -> bool:
    """Publish an event through the app's notifier."""
    return get_notifier().publish(event_type, data)
