"""
Least-squares linear regression objective.

Each row of the design matrix is one term of the decomposable function:

    f_i(w) = (x_i . w - y_i)^2

The function implements `evaluate_with_gradient` so that the residuals of a
batch are computed once per optimizer step.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


class LinearRegressionFunction:
    """
    Sum of squared residuals of a linear model.

    Parameters
    ----------
    predictors : array-like
        Design matrix of shape ``(n, d)``.
    responses : array-like
        Targets of shape ``(n,)``.

    Raises
    ------
    ValueError
        If the inputs have the wrong rank or disagree on ``n``.

    Notes
    -----
    The iterate is a weight vector of shape ``(d,)``. No intercept column is
    added; append a column of ones to `predictors` to fit one.
    """

    def __init__(self, predictors, responses) -> None:
        X = np.asarray(predictors, dtype=np.float64)
        y = np.asarray(responses, dtype=np.float64)
        if X.ndim != 2:
            raise ValueError(f"predictors must be 2-D, got shape {X.shape}")
        if y.ndim != 1:
            raise ValueError(f"responses must be 1-D, got shape {y.shape}")
        if X.shape[0] != y.shape[0]:
            raise ValueError(
                "predictors and responses must have the same number of rows, "
                f"got {X.shape[0]} and {y.shape[0]}"
            )
        self._X = np.array(X, copy=True)
        self._y = np.array(y, copy=True)

    @property
    def num_features(self) -> int:
        return int(self._X.shape[1])

    def size(self) -> int:
        return int(self._X.shape[0])

    def _residuals(self, iterate: np.ndarray, begin: int, batch_size: int):
        Xb = self._X[begin : begin + batch_size]
        yb = self._y[begin : begin + batch_size]
        if iterate.shape != (Xb.shape[1],):
            raise ValueError(
                f"iterate must have shape ({Xb.shape[1]},), got {iterate.shape}"
            )
        return Xb, Xb @ iterate - yb

    def evaluate(self, iterate: np.ndarray, begin: int, batch_size: int) -> float:
        _, r = self._residuals(iterate, begin, batch_size)
        return float(r @ r)

    def gradient(
        self, iterate: np.ndarray, begin: int, gradient: np.ndarray, batch_size: int
    ) -> None:
        Xb, r = self._residuals(iterate, begin, batch_size)
        gradient[...] = 2.0 * (Xb.T @ r)

    def evaluate_with_gradient(
        self, iterate: np.ndarray, begin: int, gradient: np.ndarray, batch_size: int
    ) -> float:
        Xb, r = self._residuals(iterate, begin, batch_size)
        gradient[...] = 2.0 * (Xb.T @ r)
        return float(r @ r)

    def shuffle(self, order: Sequence[int]) -> None:
        idx = np.asarray(order, dtype=np.intp)
        self._X = self._X[idx]
        self._y = self._y[idx]
