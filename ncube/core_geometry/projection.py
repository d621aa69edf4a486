"""
Projection of rotated N-dimensional points to the 2D plane.

Contains the fixed per-dimension projection matrices, the ProjectionPipeline
that applies one of the four projection models (or blends two of them during
a transition), the screen-space mapping and the per-mode parameter presets.
"""
import math
from typing import Optional, Tuple

import numpy as np

from .common import DimensionError, ProjectionMode, ProjectionSpec
from .utils import _check_dimension, lerp

# Smallest allowed view depth; keeps the perspective divisor away from zero
MIN_VIEW_DEPTH = 0.5
DEPTH_EPSILON = 1e-9
VIEW_DEPTH_AXIS = 2


def isometric_matrix(n: int) -> np.ndarray:
    """2 x n matrix whose column k is (cos 2pi k/n, sin 2pi k/n)."""
    n = _check_dimension(n)
    theta = 2.0 * np.pi * np.arange(n) / n
    return np.vstack([np.cos(theta), np.sin(theta)])


def average_matrix(n: int) -> np.ndarray:
    """
    3 x n matrix averaging the axes into three groups.

    Axis k goes to row k % 3 with weight 1/rowCount[row], where n is split
    into three near-equal parts and the extra axes go to the earlier rows.
    Rows that receive no axis (n < 3) stay zero.
    """
    n = _check_dimension(n)
    M = np.zeros((3, n))
    for row in range(3):
        count = n // 3 + (1 if n % 3 > row else 0)
        if count:
            M[row, row::3] = 1.0 / count
    return M


def view_position(n: int, depth: float) -> np.ndarray:
    """Camera offset with only the depth axis set (n >= 3); zero otherwise."""
    n = _check_dimension(n)
    if depth < MIN_VIEW_DEPTH:
        raise ValueError(f"View depth {depth} is below the minimum {MIN_VIEW_DEPTH}")
    v = np.zeros(n)
    if n > VIEW_DEPTH_AXIS:
        v[VIEW_DEPTH_AXIS] = depth
    return v


def view_distance_preset(n: int) -> float:
    return 10.0 + math.sqrt(2) * n


def projection_presets(mode: ProjectionMode, n: int) -> Tuple[float, float]:
    """Target (scale, view distance) for a projection mode at dimension n."""
    mode = ProjectionMode.parse(mode)
    n = _check_dimension(n)
    dist = view_distance_preset(n)
    if mode is ProjectionMode.ISOMETRIC:
        scale = math.sqrt(2) * math.sqrt(n)
    elif mode.is_perspective:
        scale = 4 * math.sqrt(2) * math.sqrt(n) / dist
    else:
        scale = math.sqrt(n)
    return scale, dist


def _guard_depth(depth: np.ndarray) -> np.ndarray:
    return np.where(np.abs(depth) < DEPTH_EPSILON,
                    np.where(depth < 0, -DEPTH_EPSILON, DEPTH_EPSILON),
                    depth)


def to_screen(points, width: float, height: float, scale: float = 1.0) -> np.ndarray:
    """
    Map projected points to viewport pixels.

    Scales by min(width, height)/scale, offsets to the viewport centre and
    flips y so that positive y points up on screen.
    """
    if scale == 0:
        raise ValueError("Screen scale must be non-zero")
    pts = np.asarray(points, dtype=np.float64)
    flat = pts.reshape(-1, 2)
    f = min(width, height) / scale
    out = np.empty_like(flat)
    out[:, 0] = f * flat[:, 0] + width / 2
    out[:, 1] = f * -flat[:, 1] + height / 2
    return out.reshape(pts.shape)


class ProjectionPipeline:
    """Projects (V, n) point arrays to (V, 2) under a ProjectionSpec."""

    def __init__(self, dim: int):
        self.dim = _check_dimension(dim)
        self.iso = isometric_matrix(self.dim)
        self.avg = average_matrix(self.dim)

    def _check(self, pts: np.ndarray, mode: ProjectionMode):
        if pts.ndim != 2 or pts.shape[1] != self.dim:
            raise DimensionError(f"Points of shape {pts.shape} do not match dimension {self.dim}")
        if self.dim < mode.min_dimension:
            raise DimensionError(
                f"{mode.value} projection needs at least {mode.min_dimension} axes, got {self.dim}")

    def _view(self, view) -> np.ndarray:
        if view is None:
            return np.zeros(self.dim)
        v = np.asarray(view, dtype=np.float64).reshape(-1)
        if v.shape[0] != self.dim:
            raise DimensionError(f"View position of length {v.shape[0]} does not match dimension {self.dim}")
        return v

    def project_many(self, points, view, spec: ProjectionSpec,
                     scale: Optional[float] = None) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64)
        mode = spec.mode
        self._check(pts, mode)
        scale = spec.scale if scale is None else scale
        if scale == 0:
            raise ValueError("Projection scale must be non-zero")

        if mode is ProjectionMode.ISOMETRIC:
            xy = pts @ self.iso.T
        elif mode is ProjectionMode.PERSPECTIVE_AVERAGE:
            q = (pts + self._view(view)) @ self.avg.T
            xy = q[:, :2] / _guard_depth(q[:, 2:3])
        elif mode is ProjectionMode.PERSPECTIVE_TRIM:
            q = pts + self._view(view)
            xy = q[:, :2] / _guard_depth(q[:, 2:3])
        elif mode is ProjectionMode.ORTHOGRAPHIC:
            xy = pts[:, :2].copy()
        else:
            raise ValueError(f"Unsupported projection mode: {mode!r}")
        return xy / scale

    def project_many_blended(self, points, view, spec_from: ProjectionSpec,
                             spec_to: ProjectionSpec, t: float) -> np.ndarray:
        """Lerp between the outgoing and incoming projections by t in [0, 1]."""
        t = min(1.0, max(0.0, float(t)))
        a = self.project_many(points, view, spec_from)
        if t == 0.0:
            return a
        b = self.project_many(points, view, spec_to)
        if t == 1.0:
            return b
        return lerp(t, a, b)

    def project(self, point, view, spec: ProjectionSpec,
                scale: Optional[float] = None) -> Tuple[float, float]:
        xy = self.project_many(np.asarray(point, dtype=np.float64)[None, :], view, spec, scale)[0]
        return float(xy[0]), float(xy[1])

    def project_blended(self, point, view, spec_from: ProjectionSpec,
                        spec_to: ProjectionSpec, t: float) -> Tuple[float, float]:
        xy = self.project_many_blended(
            np.asarray(point, dtype=np.float64)[None, :], view, spec_from, spec_to, t)[0]
        return float(xy[0]), float(xy[1])
