"""
Time-based parameter transitions.

A Transition animates one parameter from its previous value to a target over
a fixed duration. TransitionController tracks several named transitions
(scale, view distance, projection mode) that may run concurrently.
"""
import logging
from dataclasses import dataclass
from numbers import Number
from typing import Any, Dict, List, Optional

from ..core_geometry.utils import lerp

logger = logging.getLogger('NCube')


def _interpolate(x: float, a: Any, b: Any) -> Any:
    """Numbers interpolate linearly; discrete values switch half-way."""
    if isinstance(a, Number) and isinstance(b, Number) and not isinstance(a, bool):
        return lerp(x, a, b)
    return b if x >= 0.5 else a


@dataclass
class Transition:
    """Animation of a single parameter from start_value to target_value."""
    start_value: Any
    target_value: Any
    start_time: float
    duration: float

    def fraction(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        x = (now - self.start_time) / self.duration
        return min(1.0, max(0.0, x))

    def sample(self, now: float) -> Any:
        x = self.fraction(now)
        if x >= 1.0:
            return self.target_value
        return _interpolate(x, self.start_value, self.target_value)

    def finished(self, now: float) -> bool:
        return now - self.start_time > self.duration


class TransitionController:
    """Tracks named parameters, each either idle (pinned) or mid-transition."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})
        self._active: Dict[str, Transition] = {}

    def pin(self, param: str, value: Any):
        """Set a parameter immediately, cancelling any transition on it."""
        self._active.pop(param, None)
        self._values[param] = value

    def start(self, param: str, old_value: Any, new_value: Any,
              duration: float, now: float) -> Transition:
        """
        Begin animating param toward new_value.

        If param is already animating, its current sample replaces old_value
        so the new transition starts from where the old one was.
        """
        if param in self._active:
            old_value = self._active[param].sample(now)
        tr = Transition(old_value, new_value, float(now), float(duration))
        self._values[param] = new_value
        if duration <= 0:
            self._active.pop(param, None)
        else:
            self._active[param] = tr
        logger.debug(f"Transition '{param}': {old_value} -> {new_value} over {duration}s")
        return tr

    def sample(self, param: str, now: float) -> Any:
        tr = self._active.get(param)
        if tr is None:
            return self._values[param]
        return tr.sample(now)

    def fraction(self, param: str, now: float) -> float:
        tr = self._active.get(param)
        return 1.0 if tr is None else tr.fraction(now)

    def transition(self, param: str) -> Optional[Transition]:
        return self._active.get(param)

    def value(self, param: str) -> Any:
        """Target (or pinned) value of a parameter."""
        return self._values[param]

    def is_active(self, param: Optional[str] = None) -> bool:
        if param is None:
            return bool(self._active)
        return param in self._active

    def active_params(self) -> List[str]:
        return list(self._active)

    def update(self, now: float) -> List[str]:
        """Retire finished transitions, pinning each to its target exactly."""
        retired = [p for p, tr in self._active.items() if tr.finished(now)]
        for p in retired:
            tr = self._active.pop(p)
            self._values[p] = tr.target_value
        if retired:
            logger.debug(f"Transitions finished: {retired}")
        return retired
