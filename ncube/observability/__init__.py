"""Observability infrastructure for logging, metrics, and events."""

from .logging import setup_logging
from .metrics import MetricsCollector, SeedManager
from .events import (
    EventBus, DIMENSION_CHANGED, PROJECTION_CHANGED, ROTATION_STYLE_CHANGED, FRAME_FAILED
)

__all__ = [
    'setup_logging',
    'MetricsCollector', 'SeedManager',
    'EventBus', 'DIMENSION_CHANGED', 'PROJECTION_CHANGED', 'ROTATION_STYLE_CHANGED', 'FRAME_FAILED'
]
