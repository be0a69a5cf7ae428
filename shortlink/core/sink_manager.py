"""
Event Sink Manager

This module manages the global event sink instance.
The sink is created once per application instance and shared across requests.

Design:
- Singleton: One sink per application instance
- Started on application startup, drained and stopped on shutdown
- Requests handled before startup (or after shutdown) get no sink and
  simply record no events
"""

import logging
from typing import Optional

from shortlink.core.setting import settings
from shortlink.services.event_sink import EventSink

logger = logging.getLogger(__name__)

# Global sink instance (initialized on startup)
_sink: Optional[EventSink] = None


def get_event_sink() -> Optional[EventSink]:
    """
    Get the global event sink instance.

    Returns:
        EventSink instance if initialized, None otherwise
    """
    return _sink


async def initialize_event_sink() -> None:
    """Create and start the global event sink."""
    global _sink

    if _sink is not None:
        logger.warning("Event sink already initialized")
        return

    _sink = EventSink(max_queue_size=settings.EVENT_QUEUE_SIZE)
    _sink.start()


async def shutdown_event_sink() -> None:
    """Drain pending events and stop the global event sink."""
    global _sink

    if _sink is None:
        return

    logger.info("Shutting down event sink")
    try:
        await _sink.stop()
    finally:
        _sink = None
