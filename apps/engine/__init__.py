"""
Engine application package.

Contains the high-level service wrapper and CLI entrypoint for the
headless hypercube projection engine.
"""

from .engine_service import EngineService, InitRequest, StepRequest, StepResult, ParameterChange

__all__ = ['EngineService', 'InitRequest', 'StepRequest', 'StepResult', 'ParameterChange']
