from ._sgd import SGD
from ._qhadam import QHAdam

__all__ = ["SGD", "QHAdam"]
