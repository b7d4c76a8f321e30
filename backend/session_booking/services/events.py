"""
backend/session_booking/services/events.py

Event emitter: pushes events to Redis queues for downstream consumers.

Queue:
- events:p2p: instant delivery to specific principals (booking notifications)
"""

import json
import time
import logging

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict, queue: str = P2P_QUEUE) -> bool:
    """
    Emit an event.

    Never raises: a failed push is logged and reported as False.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(queue, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {queue}")
        return True
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
