"""
Rotation components for N-dimensional hypercube animation.

Contains the rotation-plane generators and RotationEngine, which owns the
angle vector, samples random rotation directions and applies the composed
rotation to vertex coordinates.
"""
import math
import logging
from typing import List, Optional, Sequence

import numpy as np
import torch

from .common import RotationPlane, RotationStyle, RotationParameterError
from .utils import _check_dimension

logger = logging.getLogger('NCube')

DTYPE = torch.float64
TWO_PI = 2.0 * math.pi


def resolve_device(device: str = "cpu") -> str:
    """Map "auto" to cuda when available, else pass the name through."""
    if device == "auto":
        return "cuda" if torch.cuda.is_available() else "cpu"
    return device


def wrap_angles(angles: torch.Tensor) -> torch.Tensor:
    """Reduce angles into [0, 2pi)."""
    wrapped = torch.remainder(angles, TWO_PI)
    # remainder of a tiny negative angle can round up to exactly 2pi
    return torch.where(wrapped >= TWO_PI, wrapped - TWO_PI, wrapped)


def build_rotation_planes(n: int) -> List[RotationPlane]:
    """
    Enumerate the C(n,2) rotation planes.

    Outer loop over axis_i ascending, inner over axis_j ascending, keeping
    only axis_i > axis_j. Position k in this list is the plane driven by
    angle k of the angle vector.
    """
    n = _check_dimension(n)
    return [RotationPlane(i, j) for i in range(n) for j in range(n) if i > j]


def plane_rotation_matrix(plane: RotationPlane, theta: float, n: int,
                          device: str = "cpu") -> torch.Tensor:
    """Identity with cos at (i,i),(j,j), +sin at (i,j) and -sin at (j,i)."""
    R = torch.eye(n, dtype=DTYPE, device=device)
    c, s = math.cos(theta), math.sin(theta)
    i, j = plane.axis_i, plane.axis_j
    R[i, i] = c
    R[j, j] = c
    R[i, j] = s
    R[j, i] = -s
    return R


def random_axis_direction(ncr: int, step: float, generator: torch.Generator) -> torch.Tensor:
    """Direction with a single non-zero entry of magnitude step and random sign."""
    d = torch.zeros(ncr, dtype=DTYPE)
    if ncr == 0:
        return d
    k = int(torch.randint(ncr, (1,), generator=generator).item())
    sign = 1.0 if int(torch.randint(2, (1,), generator=generator).item()) == 0 else -1.0
    d[k] = sign * step
    return d


def random_unit_direction(ncr: int, step: float, generator: torch.Generator) -> torch.Tensor:
    """Uniform sample of [-1,1]^ncr normalised to unit length, times step."""
    if ncr == 0:
        return torch.zeros(0, dtype=DTYPE)
    while True:
        v = torch.rand(ncr, dtype=DTYPE, generator=generator) * 2 - 1
        mag = torch.linalg.vector_norm(v)
        if mag > 0:
            return v / mag * step


class RotationEngine:
    """Owns the rotation-angle vector and applies the composed rotation."""

    def __init__(self, dim: int,
                 style: RotationStyle = RotationStyle.UNIT,
                 step: float = 1.0 / 50.0,
                 refresh_period: float = 1.0,
                 seed: Optional[int] = None,
                 device: str = "cpu",
                 now: float = 0.0):
        self.dim = _check_dimension(dim)
        self.planes = build_rotation_planes(self.dim)
        self.ncr = len(self.planes)
        self.style = RotationStyle.parse(style)
        self.step = float(step)
        self.refresh_period = float(refresh_period)
        self.device = resolve_device(device)

        self.generator = torch.Generator()
        if seed is not None:
            self.generator.manual_seed(int(seed))
        else:
            self.generator.seed()

        self.angles = torch.zeros(self.ncr, dtype=DTYPE)
        self.direction = torch.zeros(self.ncr, dtype=DTYPE)
        self.last_refresh = float(now)
        self.refresh_count = 0

    def sample_direction(self) -> torch.Tensor:
        if self.style is RotationStyle.AXIS:
            return random_axis_direction(self.ncr, self.step, self.generator)
        return random_unit_direction(self.ncr, self.step, self.generator)

    def refresh_direction(self, now: float):
        """Pick a new direction, reset the refresh timer to now and wrap angles into [0, 2pi)."""
        self.direction = self.sample_direction()
        self.last_refresh = float(now)
        self.angles = wrap_angles(self.angles)
        self.refresh_count += 1
        logger.debug(f"Rotation refresh #{self.refresh_count} ({self.style.value})")

    def advance(self, ticks: int = 1):
        """Accumulate the current direction; angles are not wrapped here."""
        self._check_angles(self.angles)
        self.angles = self.angles + self.direction * ticks

    def tick(self, now: float) -> bool:
        """Refresh once the period has elapsed, otherwise advance. Returns True on refresh."""
        if now - self.last_refresh > self.refresh_period:
            self.refresh_direction(now)
            return True
        self.advance()
        return False

    def set_angles(self, angles: Sequence[float]):
        t = torch.as_tensor(np.asarray(angles, dtype=np.float64), dtype=DTYPE).reshape(-1)
        self._check_angles(t)
        self.angles = t.clone()

    def _check_angles(self, angles: torch.Tensor):
        if angles.numel() != self.ncr:
            raise RotationParameterError(
                f"Expected {self.ncr} rotation angles for dimension {self.dim}, got {angles.numel()}")

    def compose(self, angles: Optional[torch.Tensor] = None) -> torch.Tensor:
        """Ordered product R_0 @ R_1 @ ... in plane order."""
        angles = self.angles if angles is None else angles
        self._check_angles(angles)
        W = torch.eye(self.dim, dtype=DTYPE, device=self.device)
        for plane, theta in zip(self.planes, angles.tolist()):
            W = W @ plane_rotation_matrix(plane, theta, self.dim, self.device)
        return W

    def apply(self, vertices: np.ndarray) -> np.ndarray:
        """Rotate every row of a (V, n) coordinate array by the composed rotation."""
        pts = np.asarray(vertices, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[1] != self.dim:
            raise RotationParameterError(
                f"Vertices of shape {pts.shape} do not match dimension {self.dim}")
        W = self.compose()
        P = torch.tensor(pts, dtype=DTYPE, device=self.device)
        return (P @ W.T).cpu().numpy()

    def angles_numpy(self) -> np.ndarray:
        return self.angles.cpu().numpy().copy()
