# tests/test_kafka_helpers.py

from unittest.mock import MagicMock

from kafka.errors import KafkaTimeoutError

from event_registration.constants.notifications import TOPIC_REGISTRATION_EVENTS
from event_registration.schemas.notification import RegistrationNotification
from event_registration.utils import kafka_helpers


def _notification():
    return RegistrationNotification(type="waitlist_promoted", user_id="user_b", event_id="evt_1")


def test_publish_sends_keyed_by_event(monkeypatch):
    producer = MagicMock()
    monkeypatch.setattr(kafka_helpers, "get_kafka_singleton", lambda: producer)

    assert kafka_helpers.publish_registration_event(_notification()) is True

    producer.send.assert_called_once_with(
        TOPIC_REGISTRATION_EVENTS,
        key=b"evt_1",
        value={"type": "waitlist_promoted", "userId": "user_b", "eventId": "evt_1"},
    )


def test_publish_without_producer(monkeypatch):
    monkeypatch.setattr(kafka_helpers, "get_kafka_singleton", lambda: None)

    assert kafka_helpers.publish_registration_event(_notification()) is False


def test_publish_timeout_is_reported_as_failure(monkeypatch):
    producer = MagicMock()
    producer.send.return_value.get.side_effect = KafkaTimeoutError("no ack")
    monkeypatch.setattr(kafka_helpers, "get_kafka_singleton", lambda: producer)

    assert kafka_helpers.publish_registration_event(_notification()) is False
