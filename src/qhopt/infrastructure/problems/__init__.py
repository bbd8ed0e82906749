"""
Ready-made decomposable functions.

These implement the full decomposable interface, including `shuffle(order)`,
and are useful as documentation of the interface and as test objectives.
"""

from ._quadratic import QuadraticBowlFunction
from ._linear_regression import LinearRegressionFunction

__all__ = ["QuadraticBowlFunction", "LinearRegressionFunction"]
