"""
Quadratic bowl objective.

A sum of squared distances to a set of centers. The minimizer is the mean of
the centers, which makes this function convenient for checking that an
optimizer actually reaches a known point.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


class QuadraticBowlFunction:
    """
    ``f(x) = sum_i ||x - c_i||^2`` over centers ``c_i``.

    Parameters
    ----------
    centers : array-like
        Array of shape ``(n, *param_shape)``; one center per term. A 1-D
        array describes ``n`` scalar-valued terms for a ``(1,)`` iterate.
    """

    def __init__(self, centers) -> None:
        c = np.asarray(centers, dtype=np.float64)
        if c.ndim == 1:
            c = c.reshape(-1, 1)
        if c.ndim < 2:
            raise ValueError(f"centers must have at least 1 dimension, got {c.ndim}")
        self._centers = np.array(c, copy=True)

    @property
    def centers(self) -> np.ndarray:
        return self._centers

    def minimizer(self) -> np.ndarray:
        return self._centers.mean(axis=0)

    def size(self) -> int:
        return int(self._centers.shape[0])

    def evaluate(self, iterate: np.ndarray, begin: int, batch_size: int) -> float:
        diff = iterate[None, ...] - self._centers[begin : begin + batch_size]
        return float(np.sum(diff * diff))

    def gradient(
        self, iterate: np.ndarray, begin: int, gradient: np.ndarray, batch_size: int
    ) -> None:
        diff = iterate[None, ...] - self._centers[begin : begin + batch_size]
        gradient[...] = 2.0 * diff.sum(axis=0)

    def shuffle(self, order: Sequence[int]) -> None:
        self._centers = self._centers[np.asarray(order, dtype=np.intp)]
