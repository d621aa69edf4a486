"""Event bus for engine parameter-change notifications."""

from typing import Dict, List, Callable, Any
import logging

logger = logging.getLogger(__name__)

DIMENSION_CHANGED = "dimension_changed"
PROJECTION_CHANGED = "projection_changed"
ROTATION_STYLE_CHANGED = "rotation_style_changed"
FRAME_FAILED = "frame_failed"


class EventBus:
    """Simple event bus for component communication."""

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable):
        self.listeners.setdefault(event_type, []).append(callback)
        logger.debug(f"Subscribed to event: {event_type}")

    def publish(self, event_type: str, data: Any = None):
        """Publish an event to all subscribers; a failing listener does not stop the rest."""
        for callback in list(self.listeners.get(event_type, [])):
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in event callback for {event_type}: {e}")
        logger.debug(f"Published event: {event_type}")
