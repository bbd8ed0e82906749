"""
Domain-level contracts for decomposable objective functions.

A decomposable function is a sum of per-term objectives ``f(x) = sum_i f_i(x)``
over a dataset of ``size()`` terms. Optimizers only ever request values and
gradients over contiguous term ranges ``[begin, begin + batch_size)``, which
lets them estimate gradients from mini-batches of any size.

Notes
-----
- These protocols are backend-agnostic; infrastructure code passes NumPy
  arrays as iterates and gradient buffers.
- The optional capabilities (`IGradientEvaluable`, `IShuffleableFunction`) are
  discovered at runtime with `isinstance` checks.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IDecomposableFunction(Protocol):
    """
    Objective function that can be evaluated over ranges of its terms.

    Required methods
    ----------------
    - `size()` returns the number of decomposable terms.
    - `evaluate(...)` returns the summed objective over a term range.
    - `gradient(...)` writes the summed gradient over a term range into a
      caller-provided buffer.
    """

    def size(self) -> int:
        """
        Return the number of terms in the objective.
        """
        ...

    def evaluate(self, iterate: Any, begin: int, batch_size: int) -> float:
        """
        Evaluate the objective over terms ``[begin, begin + batch_size)``.

        Parameters
        ----------
        iterate : array-like
            Point at which to evaluate.
        begin : int
            Index of the first term of the batch.
        batch_size : int
            Number of terms in the batch.

        Returns
        -------
        float
            Sum of the per-term objectives over the batch.
        """
        ...

    def gradient(
        self, iterate: Any, begin: int, gradient: Any, batch_size: int
    ) -> None:
        """
        Compute the gradient over terms ``[begin, begin + batch_size)``.

        The result must be written into `gradient`, which has the same shape
        as `iterate`.
        """
        ...


@runtime_checkable
class IGradientEvaluable(Protocol):
    """
    Optional capability: evaluate the objective and its gradient in one call.

    Functions that share work between the two computations should implement
    this; optimizers prefer it over separate `evaluate` / `gradient` calls.
    """

    def evaluate_with_gradient(
        self, iterate: Any, begin: int, gradient: Any, batch_size: int
    ) -> float: ...


@runtime_checkable
class IShuffleableFunction(Protocol):
    """
    Optional capability: reorder the function's terms.

    `shuffle(order)` receives a permutation of ``range(size())``. After the
    call, the term previously stored at position ``order[k]`` must be visited
    at position ``k``.
    """

    def shuffle(self, order: Sequence[int]) -> None: ...
