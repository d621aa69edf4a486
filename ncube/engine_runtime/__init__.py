"""
Engine runtime components for frame orchestration and state management.

This package contains the per-frame orchestrator and the parameter
transition machinery, separated from the pure geometry computations.
"""

from .transition import Transition, TransitionController
from .engine import HypercubeEngine, EngineState, Frame

__all__ = ['Transition', 'TransitionController', 'HypercubeEngine', 'EngineState', 'Frame']
