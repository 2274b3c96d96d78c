# event_registration/core/kafka_producer.py

import json
import logging
import threading
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError
from event_registration.core.config import settings

logger = logging.getLogger(__name__)

_producer: Optional[KafkaProducer] = None
_producer_lock = threading.Lock()


def _build_producer() -> KafkaProducer:
    return KafkaProducer(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
        # Fail fast on connection issues during a request
        request_timeout_ms=5000,
    )


def get_kafka_singleton() -> Optional[KafkaProducer]:
    """
    Process-wide producer used after transactions commit.

    Returns None when Kafka is disabled or the brokers cannot be reached, so
    callers can degrade to logging instead of failing the request.
    """
    global _producer

    if not settings.KAFKA_ENABLED:
        return None

    if _producer is None:
        with _producer_lock:
            if _producer is None:
                try:
                    _producer = _build_producer()
                except KafkaError as e:
                    logger.error(f"Could not connect Kafka producer: {e}")
                    return None
    return _producer


def close_kafka_singleton() -> None:
    global _producer
    if _producer is not None:
        _producer.flush()
        _producer.close()
        _producer = None
