"""
Backend-agnostic contracts and errors for qhopt.
"""

from ._errors import (
    OptimizerConfigurationError,
    ShapeMismatchError,
    EmptyObjectiveError,
)
from ._function import (
    IDecomposableFunction,
    IGradientEvaluable,
    IShuffleableFunction,
)
from ._optimizers import DriverState, IOptimizer, IUpdatePolicy

__all__ = [
    "OptimizerConfigurationError",
    "ShapeMismatchError",
    "EmptyObjectiveError",
    "IDecomposableFunction",
    "IGradientEvaluable",
    "IShuffleableFunction",
    "DriverState",
    "IOptimizer",
    "IUpdatePolicy",
]
