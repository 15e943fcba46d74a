"""
BOS Event Bus — Dispatcher
============================
Routes committed engine events to registered subscribers.

Dispatch behavior:
1. Look up subscribers by event_type
2. Execute handlers sequentially
3. Catch subscriber exceptions per handler, log, continue

A subscriber failure never reaches the operation that produced the
event: the state change is already committed when dispatch runs.
"""

import logging

from core.events.event import DomainEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("bos.events")


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> dict:
    """
    Dispatch a committed event to all registered subscribers.

    Returns:
        {
            'event_type': str,
            'event_id': str,
            'subscribers_notified': int,
            'subscribers_failed': int,
            'failures': list[dict]
        }

    This function NEVER raises exceptions.
    """
    event_type = event.event_type
    event_id = str(event.event_id)

    result = {
        "event_type": event_type,
        "event_id": event_id,
        "subscribers_notified": 0,
        "subscribers_failed": 0,
        "failures": [],
    }

    subscribers = registry.get_subscribers(event_type)
    if not subscribers:
        logger.debug(f"No subscribers for '{event_type}' (event_id: {event_id})")
        return result

    for handler, subscriber_engine in subscribers:
        handler_name = getattr(handler, "__qualname__", str(handler))
        try:
            handler(event)
            result["subscribers_notified"] += 1
        except Exception as exc:
            result["subscribers_failed"] += 1
            result["failures"].append(
                {
                    "handler": handler_name,
                    "engine": subscriber_engine,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                }
            )
            logger.error(
                f"Subscriber failed: {handler_name} for "
                f"{event_type} (event_id: {event_id}): {exc}",
                exc_info=True,
            )

    logger.info(
        f"Dispatch complete: {event_type} (event_id: {event_id}) — "
        f"{result['subscribers_notified']} notified, "
        f"{result['subscribers_failed']} failed"
    )
    return result
