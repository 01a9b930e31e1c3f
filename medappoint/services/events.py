"""
medappoint/services/events.py

Event emitter: pushes appointment events to a Redis list for consumers
(notifications, calendar sync).

Events are best-effort: a Redis failure is logged and never fails the
booking or cancellation that produced the event.
"""

import json
import time
import logging

from redis.exceptions import RedisError

from .. import redis_client as redis_module
from ..config import settings

logger = logging.getLogger(__name__)

APPOINTMENT_CREATED = "appointment_created"
APPOINTMENT_CANCELLED = "appointment_cancelled"


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Emit an event to the configured queue.

    Returns:
        True if the event was pushed, False if skipped or failed.
    """
    client = redis_module.redis_client
    if client is None:
        logger.debug(f"Redis not configured, event {event_type} skipped")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(settings.events_queue, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {settings.events_queue}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
