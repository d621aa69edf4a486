"""
Engine service wrapper providing clean API for the hypercube projection engine.

This service wraps HypercubeEngine to provide a high-level API for
initialization, per-frame stepping with parameter changes, and state
management. Every public method reports failures through its result rather
than raising, so a host can keep its own loop running.
"""
import logging
import time
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from ncube.core_geometry import NCubeError, RotationParameterError
from ncube.engine_runtime import HypercubeEngine, Frame
from ncube.observability import (
    MetricsCollector, SeedManager, EventBus,
    DIMENSION_CHANGED, PROJECTION_CHANGED, ROTATION_STYLE_CHANGED, FRAME_FAILED
)

logger = logging.getLogger('EngineService')

TIMING_KEYS = ('refresh_period', 'rotation_step', 'transition_duration')


@dataclass
class InitRequest:
    """Request parameters for engine initialization."""
    dimension: int = 3
    projection: str = "isometric"
    rotation_style: str = "unit"
    debug: bool = False
    seed: Optional[int] = 0
    device: str = "cpu"
    now: float = 0.0
    params: Optional[Dict] = None


@dataclass
class ParameterChange:
    """User-driven changes; None leaves a setting untouched."""
    dimension: Optional[int] = None
    projection: Optional[str] = None
    rotation_style: Optional[str] = None
    debug: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.dimension, self.projection,
                                       self.rotation_style, self.debug))


@dataclass
class StepRequest:
    """Request parameters for a single frame."""
    now: float
    width: int = 800
    height: int = 800
    changes: Optional[ParameterChange] = None


@dataclass
class StepResult:
    """Result from a single frame."""
    success: bool
    frame: Optional[Frame] = None
    skipped: bool = False
    applied: list = field(default_factory=list)
    message: Optional[str] = None


class EngineService:
    """High-level service wrapper for the hypercube engine."""

    def __init__(self, cfg: Optional[Dict[str, Any]] = None):
        self.cfg = cfg or {}
        self.engine: Optional[HypercubeEngine] = None
        self.metrics = MetricsCollector()
        self.events = EventBus()
        self._init_req: Optional[InitRequest] = None
        self._initialized = False
        self._step_count = 0

        logger.info("EngineService created with configuration")

    def init(self, req: InitRequest) -> Dict[str, Any]:
        """Initialize the engine with specified parameters."""
        try:
            params = {k: self.cfg['timing'][k] for k in TIMING_KEYS
                      if k in self.cfg.get('timing', {})}
            params.update(req.params or {})
            params['device'] = req.device
            params['debug'] = req.debug
            if req.seed is not None:
                params['seed'] = SeedManager(req.seed).get_component_seed('rotation')

            self.engine = HypercubeEngine(
                dimension=req.dimension,
                projection=req.projection,
                rotation_style=req.rotation_style,
                params=params,
                now=req.now,
            )
            self._init_req = req
            self._initialized = True
            self._step_count = 0
            self.metrics.reset()

            logger.info("Engine initialized successfully")
            return {
                'success': True,
                'baseline_snapshot': self.engine.snapshot(),
                'message': 'Engine initialized successfully'
            }

        except (NCubeError, ValueError) as e:
            logger.error(f"Engine initialization failed: {e}")
            return {
                'success': False,
                'message': f'Initialization failed: {str(e)}'
            }

    def apply_changes(self, changes: ParameterChange, now: float) -> Dict[str, Any]:
        """Apply parameter changes; dimension first so the others see the new size."""
        if not self._initialized:
            return {'success': False, 'applied': [], 'message': 'Engine not initialized'}

        applied, errors = [], []
        if changes.dimension is not None:
            try:
                old = self.engine.dim
                if self.engine.set_dimension(changes.dimension, now):
                    applied.append('dimension')
                    self.events.publish(DIMENSION_CHANGED, {'old': old, 'new': self.engine.dim})
            except (NCubeError, ValueError) as e:
                errors.append(f"dimension: {e}")
        if changes.projection is not None:
            try:
                old = self.engine.projection
                if self.engine.set_projection(changes.projection, now):
                    applied.append('projection')
                    self.events.publish(PROJECTION_CHANGED,
                                        {'old': old.value, 'new': self.engine.projection.value})
            except (NCubeError, ValueError) as e:
                errors.append(f"projection: {e}")
        if changes.rotation_style is not None:
            try:
                if self.engine.set_rotation_style(changes.rotation_style):
                    applied.append('rotation_style')
                    self.events.publish(ROTATION_STYLE_CHANGED,
                                        {'new': self.engine.rotation_style.value})
            except ValueError as e:
                errors.append(f"rotation_style: {e}")
        if changes.debug is not None:
            self.engine.set_debug(changes.debug)
            applied.append('debug')

        for err in errors:
            logger.error(f"Parameter change rejected: {err}")
        return {
            'success': not errors,
            'applied': applied,
            'message': '; '.join(errors) if errors else 'Changes applied'
        }

    def step(self, req: StepRequest) -> StepResult:
        """Apply pending changes, then run one update/draw pair."""
        if not self._initialized:
            return StepResult(success=False, message="Engine not initialized")

        applied = []
        if req.changes is not None and not req.changes.is_empty():
            applied = self.apply_changes(req.changes, req.now)['applied']

        try:
            self.metrics.start_timer('update')
            self.engine.update(req.now)
            self.metrics.stop_timer('update')

            self.metrics.start_timer('draw')
            frame = self.engine.draw(req.width, req.height, req.now)
            self.metrics.stop_timer('draw')

        except RotationParameterError as e:
            self.metrics.increment_counter('failed_frames')
            self.events.publish(FRAME_FAILED, {'now': req.now, 'error': str(e)})
            logger.error(f"Frame aborted: {e}")
            return StepResult(success=False, applied=applied, message=f"Frame aborted: {str(e)}")

        except Exception as e:
            self.metrics.increment_counter('failed_frames')
            self.events.publish(FRAME_FAILED, {'now': req.now, 'error': str(e)})
            logger.error(f"Step execution failed: {e}")
            return StepResult(success=False, applied=applied, message=f"Step failed: {str(e)}")

        self._step_count += 1
        self.metrics.increment_counter('frames')
        if frame is None:
            self.metrics.increment_counter('skipped_frames')
            return StepResult(success=True, skipped=True, applied=applied,
                              message="Engine rebuilding, frame skipped")

        if self._step_count % 100 == 0:
            logger.debug(f"Completed frame {self._step_count}")

        return StepResult(success=True, frame=frame, applied=applied,
                          message=f"Frame {self._step_count} completed")

    def snapshot(self) -> Dict[str, Any]:
        """Return summary snapshot of current engine state."""
        if not self._initialized:
            return {
                'initialized': False,
                'message': 'Engine not initialized'
            }
        return {
            'initialized': True,
            'step_count': self._step_count,
            'timestamp': time.time(),
            'metrics': self.metrics.summary_stats(),
            **self.engine.snapshot()
        }

    def reset(self) -> Dict[str, Any]:
        """Rebuild the engine from its original init request."""
        if not self._initialized:
            return {
                'success': False,
                'message': 'Engine not initialized'
            }
        result = self.init(self._init_req)
        if result['success']:
            logger.info("Engine reset to baseline state")
            return {'success': True, 'message': 'Engine reset successfully'}
        return {'success': False, 'message': f"Reset failed: {result['message']}"}

    def shutdown(self) -> Dict[str, Any]:
        """Release the engine."""
        summary = self.metrics.summary_stats()
        self._initialized = False
        self.engine = None
        logger.info(f"Engine service shutdown completed: {summary}")
        return {
            'success': True,
            'summary': summary,
            'message': 'Engine shutdown completed'
        }
