# event_registration/utils/kafka_helpers.py
"""
Kafka helper functions for publishing events to topics.
Uses the singleton producer from event_registration.core.kafka_producer.
"""
import logging

from event_registration.constants.notifications import TOPIC_REGISTRATION_EVENTS
from event_registration.core.kafka_producer import get_kafka_singleton
from event_registration.schemas.notification import RegistrationNotification

logger = logging.getLogger(__name__)


def publish_registration_event(notification: RegistrationNotification) -> bool:
    """
    Publish a registration lifecycle event to Kafka.

    The email notification service consumes these to send confirmation and
    promotion emails.

    Returns:
        bool: True if published successfully, False otherwise
    """
    try:
        producer = get_kafka_singleton()

        if producer is None:
            logger.warning("Kafka producer unavailable, skipping event publish")
            return False

        future = producer.send(
            TOPIC_REGISTRATION_EVENTS,
            key=notification.event_id.encode("utf-8"),
            value=notification.to_message(),
        )
        # Wait for the send to complete (with timeout)
        future.get(timeout=10)

        logger.info(
            f"Published {notification.type} event for user {notification.user_id}, "
            f"event {notification.event_id}"
        )
        return True

    except Exception as e:
        logger.error(f"Failed to publish registration event: {e}", exc_info=True)
        return False
