"""
Tests for fire-and-forget notifications.
"""
import json
from unittest.mock import MagicMock

import redis

from housepoints.services.notification_service import (
    NotificationService,
    EventTypes,
    get_notifier,
    publish_event,
)


class TestNotificationService:
    """Tests for NotificationService.publish."""

    def test_publishes_json_message(self):
        client = MagicMock()
        service = NotificationService(channel='test:events', client=client)

        assert service.publish(EventTypes.POINTS_UPDATED, {'student_id': 1}) is True

        channel, message = client.publish.call_args[0]
        payload = json.loads(message)
        assert channel == 'test:events'
        assert payload['type'] == 'points-updated'
        assert payload['data'] == {'student_id': 1}
        assert 'timestamp' in payload

    def test_redis_failure_never_raises(self):
        client = MagicMock()
        client.publish.side_effect = redis.ConnectionError('down')
        service = NotificationService(client=client)

        assert service.publish(EventTypes.HOUSE_UPDATED) is False

    def test_disabled_without_client(self):
        service = NotificationService()
        assert service.enabled is False
        assert service.publish(EventTypes.REWARD_UPDATED, {}) is False

    def test_app_notifier_disabled_in_tests(self, app):
        """Testing config has no REDIS_URL, so events are only logged."""
        with app.app_context():
            assert get_notifier().enabled is False
            assert publish_event(EventTypes.CLASS_UPDATED, {'class_id': 1}) is False

    def test_app_notifier_is_reused(self, app):
        with app.app_context():
            assert get_notifier() is get_notifier()
