"""
NumPy implementations of the qhopt contracts.
"""

from ._history import OptimizationHistory
from ._shuffle import ShuffleSequencer
from .update_policies import QHAdamUpdate
from .optimizers import SGD, QHAdam

__all__ = [
    "OptimizationHistory",
    "ShuffleSequencer",
    "QHAdamUpdate",
    "SGD",
    "QHAdam",
]
