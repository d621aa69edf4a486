"""
Common data structures, enums and errors used across the geometry package.

Contains shared types like ProjectionMode, RotationStyle and the engine
error hierarchy that are used by multiple modules.
"""
from enum import Enum
from dataclasses import dataclass


class NCubeError(Exception):
    """Base class for hypercube engine errors."""


class DimensionError(NCubeError, ValueError):
    """Requested dimension is non-positive or unsupported by an operation."""


class RotationParameterError(NCubeError, ValueError):
    """Rotation angles or vertex widths do not match the current dimension."""


class ProjectionMode(Enum):
    """Enumeration of the supported 2D projection models."""
    ISOMETRIC = "isometric"
    PERSPECTIVE_AVERAGE = "perspective_average"
    PERSPECTIVE_TRIM = "perspective_trim"
    ORTHOGRAPHIC = "orthographic"

    @property
    def is_perspective(self) -> bool:
        return self in (ProjectionMode.PERSPECTIVE_AVERAGE, ProjectionMode.PERSPECTIVE_TRIM)

    @property
    def min_dimension(self) -> int:
        """Smallest dimension the projection is defined for."""
        if self.is_perspective:
            return 3
        if self is ProjectionMode.ORTHOGRAPHIC:
            return 2
        return 1

    @classmethod
    def parse(cls, value) -> "ProjectionMode":
        """Parse an enum value, member name or UI label ("Perspective - Avg")."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in _PROJECTION_ALIASES:
            return _PROJECTION_ALIASES[key]
        for mode in cls:
            if key in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown projection mode: {value!r}")


_PROJECTION_ALIASES = {
    "perspective - avg": ProjectionMode.PERSPECTIVE_AVERAGE,
    "perspective - trim": ProjectionMode.PERSPECTIVE_TRIM,
    "perspective": ProjectionMode.PERSPECTIVE_AVERAGE,
    "iso": ProjectionMode.ISOMETRIC,
    "ortho": ProjectionMode.ORTHOGRAPHIC,
}


class RotationStyle(Enum):
    """How a fresh rotation direction is sampled on each refresh tick."""
    AXIS = "axis"
    UNIT = "unit"

    @classmethod
    def parse(cls, value) -> "RotationStyle":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for style in cls:
            if key in (style.value, style.name.lower()):
                return style
        raise ValueError(f"Unknown rotation style: {value!r}")


@dataclass(frozen=True)
class ProjectionSpec:
    """A projection model together with its scale factor."""
    mode: ProjectionMode
    scale: float = 1.0

    def __post_init__(self):
        if self.scale == 0:
            raise ValueError("Projection scale must be non-zero")


@dataclass(frozen=True)
class RotationPlane:
    """Rotation confined to the plane spanned by axes (axis_i, axis_j), axis_i > axis_j."""
    axis_i: int
    axis_j: int
