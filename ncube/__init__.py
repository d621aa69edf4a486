"""NCube - N-dimensional hypercube rotation and projection engine."""

__version__ = "0.1.0"

# Core geometry
from .core_geometry import (
    NCubeError, DimensionError, RotationParameterError,
    ProjectionMode, ProjectionSpec, RotationStyle, RotationPlane,
    Edge, HypercubeLattice, build_hypercube,
    RotationEngine, build_rotation_planes,
    ProjectionPipeline, to_screen, projection_presets, lerp
)

# Engine runtime
from .engine_runtime import (
    Transition, TransitionController,
    HypercubeEngine, EngineState, Frame
)

# Observability
from .observability import (
    setup_logging,
    MetricsCollector, SeedManager,
    EventBus
)

__all__ = [
    # Core geometry
    'NCubeError', 'DimensionError', 'RotationParameterError',
    'ProjectionMode', 'ProjectionSpec', 'RotationStyle', 'RotationPlane',
    'Edge', 'HypercubeLattice', 'build_hypercube',
    'RotationEngine', 'build_rotation_planes',
    'ProjectionPipeline', 'to_screen', 'projection_presets', 'lerp',

    # Engine runtime
    'Transition', 'TransitionController',
    'HypercubeEngine', 'EngineState', 'Frame',

    # Observability
    'setup_logging', 'MetricsCollector', 'SeedManager', 'EventBus',
]
