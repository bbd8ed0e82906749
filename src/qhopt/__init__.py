"""
qhopt: quasi-hyperbolic Adam for decomposable objective functions.

The public API re-exports the pieces most callers need:

- `QHAdam`, the ready-to-use optimizer
- `SGD` and `QHAdamUpdate`, for composing the driver and the step rule
- the domain contracts and errors
"""

from .domain import (
    DriverState,
    EmptyObjectiveError,
    IDecomposableFunction,
    IGradientEvaluable,
    IOptimizer,
    IShuffleableFunction,
    IUpdatePolicy,
    OptimizerConfigurationError,
    ShapeMismatchError,
)
from .infrastructure import (
    OptimizationHistory,
    QHAdam,
    QHAdamUpdate,
    SGD,
    ShuffleSequencer,
)

__version__ = "1.0.0"

__all__ = [
    "DriverState",
    "EmptyObjectiveError",
    "IDecomposableFunction",
    "IGradientEvaluable",
    "IOptimizer",
    "IShuffleableFunction",
    "IUpdatePolicy",
    "OptimizerConfigurationError",
    "ShapeMismatchError",
    "OptimizationHistory",
    "QHAdam",
    "QHAdamUpdate",
    "SGD",
    "ShuffleSequencer",
]
