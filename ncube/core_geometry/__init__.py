"""
Core geometry components for N-dimensional hypercube projection.

This package contains the pure geometry: hypercube lattice construction,
rotation-plane generators and the rotation engine, and the projection
pipeline that maps rotated points to the 2D plane.
"""

# Shared types and errors
from .common import (
    NCubeError, DimensionError, RotationParameterError,
    ProjectionMode, ProjectionSpec, RotationStyle, RotationPlane
)

# Lattice structures
from .lattice import Edge, HypercubeLattice, build_hypercube, hypercube_vertices, hypercube_edges

# Mathematical utilities
from .utils import n_choose_r, rotation_plane_count, format_vector, lerp

# Rotations
from .rotation import RotationEngine, build_rotation_planes, plane_rotation_matrix, wrap_angles

# Projections
from .projection import (
    ProjectionPipeline, to_screen, projection_presets, view_position,
    isometric_matrix, average_matrix, MIN_VIEW_DEPTH
)

__all__ = [
    # Common
    'NCubeError', 'DimensionError', 'RotationParameterError',
    'ProjectionMode', 'ProjectionSpec', 'RotationStyle', 'RotationPlane',
    # Lattice
    'Edge', 'HypercubeLattice', 'build_hypercube', 'hypercube_vertices', 'hypercube_edges',
    # Utils
    'n_choose_r', 'rotation_plane_count', 'format_vector', 'lerp',
    # Rotation
    'RotationEngine', 'build_rotation_planes', 'plane_rotation_matrix', 'wrap_angles',
    # Projection
    'ProjectionPipeline', 'to_screen', 'projection_presets', 'view_position',
    'isometric_matrix', 'average_matrix', 'MIN_VIEW_DEPTH'
]
