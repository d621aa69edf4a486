"""
Hypercube engine orchestration class.

Contains the per-frame orchestrator that owns the lattice, rotation engine,
projection pipeline and parameter transitions, and exposes the update/draw
pair driven by the host once per frame.
"""
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..core_geometry import (
    DimensionError, ProjectionMode, ProjectionSpec, RotationStyle,
    Edge, HypercubeLattice, build_hypercube, RotationEngine, ProjectionPipeline,
    to_screen, projection_presets, view_position, format_vector, lerp
)
from ..core_geometry.utils import _check_dimension
from .transition import TransitionController

logger = logging.getLogger('NCube')


class EngineState(Enum):
    """Lifecycle of the engine's geometry buffers."""
    READY = "ready"
    REBUILDING = "rebuilding"


@dataclass
class Frame:
    """Everything the host needs to draw one frame."""
    dimension: int
    screen_points: np.ndarray
    projected: np.ndarray
    rotated: np.ndarray
    edges: Tuple[Edge, ...]
    labels: Optional[List[str]] = None
    blend: float = 1.0

    def segments(self) -> np.ndarray:
        """(E, 2, 2) array of screen-space line endpoints, one per edge."""
        if not self.edges:
            return np.zeros((0, 2, 2))
        idx = np.array([(e.u, e.v) for e in self.edges], dtype=np.int64)
        return self.screen_points[idx]


class HypercubeEngine:
    """Main orchestrator for the rotating, projected n-cube."""

    def __init__(self, dimension: int = 3,
                 projection: ProjectionMode = ProjectionMode.ISOMETRIC,
                 rotation_style: RotationStyle = RotationStyle.UNIT,
                 params: Optional[Dict] = None,
                 now: float = 0.0):
        self.params = params if params else {}
        self.refresh_period = float(self.params.get('refresh_period', 1.0))
        self.rotation_step = float(self.params.get('rotation_step', 1.0 / 50.0))
        self.transition_duration = float(self.params.get('transition_duration', 0.5))
        self.seed = self.params.get('seed')
        self.device = self.params.get('device', 'cpu')
        self.debug = bool(self.params.get('debug', False))
        self.rotation_style = RotationStyle.parse(rotation_style)

        self.state = EngineState.REBUILDING
        self.dim: int = 0
        self.lattice: Optional[HypercubeLattice] = None
        self.rotation: Optional[RotationEngine] = None
        self.pipeline: Optional[ProjectionPipeline] = None
        self.view_pos: Optional[np.ndarray] = None
        self.transitions = TransitionController()
        self._projection_from: Tuple[Tuple[ProjectionMode, float], ...] = (
            (ProjectionMode.parse(projection), 1.0),)
        self.frame_count = 0

        self._rebuild(dimension, projection, now)

    # --- geometry (re)construction ---
    def _rebuild(self, n: int, mode: ProjectionMode, now: float):
        n = _check_dimension(n)
        mode = ProjectionMode.parse(mode)
        if n < mode.min_dimension:
            raise DimensionError(
                f"{mode.value} projection needs at least {mode.min_dimension} axes, got {n}")

        prev_state = self.state
        self.state = EngineState.REBUILDING
        try:
            lattice = build_hypercube(n)
            rotation = RotationEngine(
                n, style=self.rotation_style, step=self.rotation_step,
                refresh_period=self.refresh_period, seed=self.seed,
                device=self.device, now=now)
            rotation.refresh_direction(now)
            pipeline = ProjectionPipeline(n)
            scale, dist = projection_presets(mode, n)
            view = view_position(n, dist)
        except Exception:
            self.state = prev_state
            raise

        self.dim = n
        self.lattice, self.rotation, self.pipeline, self.view_pos = lattice, rotation, pipeline, view
        self.transitions = TransitionController(
            {'scale': scale, 'view_distance': dist, 'projection': mode})
        self._projection_from = ((mode, 1.0),)
        self.state = EngineState.READY
        logger.info(f"Engine ready: dimension={n}, projection={mode.value}, "
                    f"V={lattice.V}, E={len(lattice.edges)}, planes={rotation.ncr}")

    def set_dimension(self, n: int, now: float) -> bool:
        """Rebuild for a new dimension; presets are pinned without a transition."""
        n = _check_dimension(n)
        if n == self.dim:
            return False
        logger.info(f"Changing dimension {self.dim} -> {n}")
        self._rebuild(n, self.transitions.value('projection'), now)
        return True

    # --- parameter changes ---
    @property
    def projection(self) -> ProjectionMode:
        return self.transitions.value('projection')

    def set_projection(self, mode, now: float) -> bool:
        """Start the scale, view-distance and projection transitions toward mode."""
        mode = ProjectionMode.parse(mode)
        if self.dim < mode.min_dimension:
            raise DimensionError(
                f"{mode.value} projection needs at least {mode.min_dimension} axes, got {self.dim}")
        if mode is self.transitions.value('projection'):
            return False

        tc = self.transitions
        # the blend on screen right now becomes the outgoing side
        self._projection_from = self._current_weights(now)
        outgoing = tc.sample('projection', now)
        scale, dist = projection_presets(mode, self.dim)
        d = self.transition_duration
        tc.start('scale', tc.sample('scale', now), scale, d, now)
        tc.start('view_distance', tc.sample('view_distance', now), dist, d, now)
        tc.start('projection', outgoing, mode, d, now)
        if not tc.is_active('projection'):
            self._projection_from = ((mode, 1.0),)
        logger.info(f"Changing projection {outgoing.value} -> {mode.value}")
        return True

    def _current_weights(self, now: float) -> Tuple[Tuple[ProjectionMode, float], ...]:
        """Per-mode weights of the projection drawn at now."""
        tc = self.transitions
        target = tc.value('projection')
        if not tc.is_active('projection'):
            return ((target, 1.0),)
        t = tc.fraction('projection', now)
        weights: Dict[ProjectionMode, float] = {}
        for m, w in self._projection_from:
            weights[m] = weights.get(m, 0.0) + w * (1.0 - t)
        weights[target] = weights.get(target, 0.0) + t
        return tuple((m, w) for m, w in weights.items() if w > 0.0)

    def _project_from(self, rotated: np.ndarray, view: np.ndarray, scale: float,
                      target: ProjectionMode, t: float) -> np.ndarray:
        """Blend from the stored outgoing weights toward target by t."""
        pipeline = self.pipeline
        if len(self._projection_from) == 1:
            return pipeline.project_many_blended(
                rotated, view,
                ProjectionSpec(self._projection_from[0][0], scale),
                ProjectionSpec(target, scale),
                t)
        outgoing = sum(w * pipeline.project_many(rotated, view, ProjectionSpec(m, scale))
                       for m, w in self._projection_from)
        if t == 0.0:
            return outgoing
        return lerp(t, outgoing, pipeline.project_many(rotated, view, ProjectionSpec(target, scale)))

    def set_rotation_style(self, style) -> bool:
        style = RotationStyle.parse(style)
        if style is self.rotation_style:
            return False
        self.rotation_style = style
        if self.rotation is not None:
            self.rotation.style = style
        logger.info(f"Rotation style set to {style.value}")
        return True

    def set_debug(self, flag: bool):
        self.debug = bool(flag)

    # --- frame loop ---
    def update(self, now: float):
        """Advance transitions and rotation; a no-op while rebuilding."""
        if self.state is not EngineState.READY:
            return
        if 'projection' in self.transitions.update(now):
            self._projection_from = ((self.transitions.value('projection'), 1.0),)
        self.view_pos = view_position(self.dim, self.transitions.sample('view_distance', now))
        self.rotation.tick(now)
        self.frame_count += 1

    def draw(self, width: float, height: float, now: float) -> Optional[Frame]:
        """Project the current geometry; pure read, None while rebuilding."""
        if self.state is not EngineState.READY:
            return None
        lattice, rotation, pipeline, view = self.lattice, self.rotation, self.pipeline, self.view_pos

        rotated = rotation.apply(lattice.vertices)
        tc = self.transitions
        scale = tc.sample('scale', now)
        target = tc.value('projection')
        if tc.is_active('projection'):
            blend = tc.fraction('projection', now)
            projected = self._project_from(rotated, view, scale, target, blend)
        else:
            blend = 1.0
            projected = pipeline.project_many(rotated, view, ProjectionSpec(target, scale))

        labels = [format_vector(p) for p in rotated] if self.debug else None
        return Frame(
            dimension=self.dim,
            screen_points=to_screen(projected, width, height),
            projected=projected,
            rotated=rotated,
            edges=lattice.edges,
            labels=labels,
            blend=blend,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Create a snapshot of the current engine state."""
        if self.state is not EngineState.READY:
            return {'state': self.state.value, 'dimension': self.dim}
        tc = self.transitions
        return {
            'state': self.state.value,
            'dimension': self.dim,
            'vertices': self.lattice.V,
            'edges': len(self.lattice.edges),
            'rotation_planes': self.rotation.ncr,
            'projection': tc.value('projection').value,
            'projection_from': {m.value: w for m, w in self._projection_from},
            'rotation_style': self.rotation_style.value,
            'scale': float(tc.value('scale')),
            'view_distance': float(tc.value('view_distance')),
            'angles': [float(a) for a in self.rotation.angles_numpy()],
            'refresh_count': self.rotation.refresh_count,
            'active_transitions': tc.active_params(),
            'frame_count': self.frame_count,
            'debug': self.debug,
        }
