"""
Generic mini-batch stochastic gradient descent driver.

`SGD` sequences the terms of a decomposable function into mini-batches,
requests a gradient for each batch, hands it to an update policy, and decides
when to stop. The step rule itself (plain, momentum, QHAdam, ...) lives
entirely in the update policy; this module contains no rule-specific math.

Design notes
------------
- The iterate is a caller-owned NumPy array and is modified in-place. If the
  objective raises, the error propagates unchanged and the iterate keeps the
  value it held after the last successful update.
- `max_iterations` counts processed *points* (terms), not batches or passes.
  ``0`` means no limit.
- Convergence is checked once per completed pass: the summed objective of the
  pass is compared with that of the previous pass using an absolute
  difference against `tolerance`.
- Per-pass objectives are accumulated from batch values computed at the point
  before each batch's update.
- With ``shuffle=True`` a new visitation order is generated at the start of
  every pass and handed to the function's `shuffle(order)` hook.
"""

from __future__ import annotations

import math
import warnings
from typing import Any, Dict, Optional

import numpy as np

from ...domain._errors import EmptyObjectiveError, OptimizerConfigurationError
from ...domain._function import (
    IDecomposableFunction,
    IGradientEvaluable,
    IShuffleableFunction,
)
from ...domain._optimizers import DriverState, IUpdatePolicy
from .._history import OptimizationHistory
from .._registry import policy_from_config, policy_to_config
from .._shuffle import ShuffleSequencer


def _check_step_size(value: float) -> float:
    value = float(value)
    if value <= 0.0:
        raise ValueError(f"step_size must be > 0, got {value}")
    return value


def _check_batch_size(value: int) -> int:
    if int(value) != value or int(value) < 1:
        raise ValueError(f"batch_size must be an integer >= 1, got {value}")
    return int(value)


def _check_max_iterations(value: int) -> int:
    if int(value) != value or int(value) < 0:
        raise ValueError(f"max_iterations must be an integer >= 0, got {value}")
    return int(value)


def _check_tolerance(value: float) -> float:
    value = float(value)
    if value < 0.0:
        raise ValueError(f"tolerance must be >= 0, got {value}")
    return value


def _check_iterate(iterate: Any) -> np.ndarray:
    if not isinstance(iterate, np.ndarray):
        raise TypeError(
            f"iterate must be a numpy.ndarray, got {type(iterate).__name__}"
        )
    if not np.issubdtype(iterate.dtype, np.floating):
        raise OptimizerConfigurationError(
            f"iterate must have a floating-point dtype, got {iterate.dtype}"
        )
    if not iterate.flags.writeable:
        raise OptimizerConfigurationError("iterate must be writeable")
    return iterate


def _full_objective(
    function: IDecomposableFunction, iterate: np.ndarray, n: int, batch_size: int
) -> float:
    """
    Sum the objective over all `n` terms, in batches of `batch_size`.
    """
    total = 0.0
    for begin in range(0, n, batch_size):
        effective = min(batch_size, n - begin)
        total += float(function.evaluate(iterate, begin, effective))
    return total


class SGD:
    """
    Mini-batch SGD driver, generic over its update policy.

    Parameters
    ----------
    update_policy : IUpdatePolicy
        Step rule applied to each mini-batch gradient. The driver owns it for
        its lifetime.
    step_size : float, optional
        Step size passed to the policy on every update. Must be > 0.
        Defaults to 0.01.
    batch_size : int, optional
        Number of terms per mini-batch. Must be >= 1. Defaults to 32.
    max_iterations : int, optional
        Maximum number of points to process; 0 means no limit.
        Defaults to 100000.
    tolerance : float, optional
        Absolute change in the per-pass objective below which the run is
        considered converged. Must be >= 0; 0 disables convergence, which
        is only allowed together with a non-zero `max_iterations`.
        Defaults to 1e-5.
    shuffle : bool, optional
        If True, visit terms in a new random order every pass.
        Defaults to True.
    reset_policy : bool, optional
        If True, the policy state is re-initialized at the start of every
        `optimize` call; otherwise it carries over between calls.
        Defaults to True.
    sequencer : ShuffleSequencer, optional
        Source of visitation orders. A fresh unseeded sequencer is used when
        omitted.
    verbose : int, optional
        If non-zero, print one summary line per pass and one on termination.
        Defaults to 0.

    Attributes
    ----------
    state : DriverState
        Outcome of the most recent `optimize` call.
    history : OptimizationHistory
        Per-pass record of the most recent `optimize` call.
    iterations_run : int
        Number of points processed by the most recent `optimize` call.
    """

    def __init__(
        self,
        update_policy: IUpdatePolicy,
        *,
        step_size: float = 0.01,
        batch_size: int = 32,
        max_iterations: int = 100000,
        tolerance: float = 1e-5,
        shuffle: bool = True,
        reset_policy: bool = True,
        sequencer: Optional[ShuffleSequencer] = None,
        verbose: int = 0,
    ) -> None:
        if not isinstance(update_policy, IUpdatePolicy):
            raise TypeError(
                "update_policy must implement initialize(), reset() and update(), "
                f"got {type(update_policy).__name__}"
            )
        self._update_policy = update_policy
        self._step_size = _check_step_size(step_size)
        self._batch_size = _check_batch_size(batch_size)
        self._max_iterations = _check_max_iterations(max_iterations)
        self._tolerance = _check_tolerance(tolerance)
        self._shuffle = bool(shuffle)
        self._reset_policy = bool(reset_policy)
        self._sequencer = sequencer if sequencer is not None else ShuffleSequencer()
        self.verbose = int(verbose)

        self._is_initialized = False
        self._state = DriverState.IDLE
        self._history = OptimizationHistory()
        self._iterations_run = 0

    # ------------------------------------------------------------------
    # Hyperparameters
    # ------------------------------------------------------------------
    @property
    def step_size(self) -> float:
        return self._step_size

    @step_size.setter
    def step_size(self, value: float) -> None:
        self._step_size = _check_step_size(value)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        self._batch_size = _check_batch_size(value)

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        self._max_iterations = _check_max_iterations(value)

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @tolerance.setter
    def tolerance(self, value: float) -> None:
        self._tolerance = _check_tolerance(value)

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @shuffle.setter
    def shuffle(self, value: bool) -> None:
        self._shuffle = bool(value)

    @property
    def reset_policy(self) -> bool:
        return self._reset_policy

    @reset_policy.setter
    def reset_policy(self, value: bool) -> None:
        self._reset_policy = bool(value)

    @property
    def update_policy(self) -> IUpdatePolicy:
        return self._update_policy

    @property
    def sequencer(self) -> ShuffleSequencer:
        return self._sequencer

    # ------------------------------------------------------------------
    # Run record
    # ------------------------------------------------------------------
    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def history(self) -> OptimizationHistory:
        return self._history

    @property
    def iterations_run(self) -> int:
        return self._iterations_run

    # ------------------------------------------------------------------
    # Optimization
    # ------------------------------------------------------------------
    def _step_batch(
        self,
        function: Any,
        iterate: np.ndarray,
        begin: int,
        gradient: np.ndarray,
        batch_size: int,
    ) -> float:
        """
        Return the batch objective at `iterate` and fill `gradient`.
        """
        gradient.fill(0.0)
        if isinstance(function, IGradientEvaluable):
            return float(
                function.evaluate_with_gradient(iterate, begin, gradient, batch_size)
            )
        value = float(function.evaluate(iterate, begin, batch_size))
        function.gradient(iterate, begin, gradient, batch_size)
        return value

    def _finish(self, state: DriverState, objective: float) -> float:
        self._state = state
        if self.verbose:
            print(
                " - ".join(
                    [
                        f"SGD: {state.value}",
                        f"objective: {objective:.6f}",
                        f"seen: {self._iterations_run}",
                    ]
                )
            )
        return objective

    def optimize(self, function: IDecomposableFunction, iterate: np.ndarray) -> float:
        """
        Optimize `function` starting from `iterate`.

        Parameters
        ----------
        function : IDecomposableFunction
            Objective exposing `size()`, `evaluate()` and `gradient()`.
        iterate : np.ndarray
            Starting point. Modified in-place to hold the final point.

        Returns
        -------
        float
            Objective value at termination. On convergence or divergence this
            is the summed objective of the last completed pass; when the
            iteration limit is reached it is the full objective re-evaluated
            at the final iterate.

        Raises
        ------
        TypeError
            If `function` does not implement the decomposable interface or
            `iterate` is not a NumPy array.
        EmptyObjectiveError
            If ``function.size() == 0``.
        OptimizerConfigurationError
            If `iterate` is not a writeable floating-point array, or if both
            `max_iterations` and `tolerance` are 0 (the run could not stop).
        ShapeMismatchError
            If the update policy state does not match `iterate`.
        """
        if not isinstance(function, IDecomposableFunction):
            raise TypeError(
                "function must implement size(), evaluate() and gradient(), "
                f"got {type(function).__name__}"
            )
        iterate = _check_iterate(iterate)

        n = int(function.size())
        if n < 1:
            raise EmptyObjectiveError(type(function).__name__)
        if self._max_iterations == 0 and self._tolerance == 0.0:
            raise OptimizerConfigurationError(
                "max_iterations=0 (no limit) requires tolerance > 0; "
                "with tolerance=0 the run only stops on divergence."
            )

        self._state = DriverState.RUNNING
        self._history = OptimizationHistory()
        self._iterations_run = 0

        if self._reset_policy or not self._is_initialized:
            self._update_policy.initialize(iterate.shape, iterate.dtype)
            self._is_initialized = True

        batch_size = self._batch_size
        limit = self._max_iterations if self._max_iterations > 0 else None
        can_shuffle = isinstance(function, IShuffleableFunction)
        warned = False

        def _new_pass() -> None:
            nonlocal warned
            if not self._shuffle:
                return
            if can_shuffle:
                function.shuffle(self._sequencer.order(n, shuffle=True))
            elif not warned:
                warnings.warn(
                    f"{type(function).__name__} does not implement shuffle(order); "
                    "terms are visited in linear order.",
                    RuntimeWarning,
                    stacklevel=3,
                )
                warned = True

        _new_pass()

        overall_objective = 0.0
        last_objective = math.inf

        gradient = np.zeros_like(iterate)
        current = 0
        processed = 0
        pass_idx = 0

        while limit is None or processed < limit:
            if current == n:
                pass_idx += 1
                self._history.append_pass(pass_idx, overall_objective, processed)
                if self.verbose:
                    print(
                        " - ".join(
                            [
                                f"Pass {pass_idx}",
                                f"objective: {overall_objective:.6f}",
                                f"seen: {processed}",
                            ]
                        )
                    )

                if not math.isfinite(overall_objective):
                    warnings.warn(
                        f"SGD: converged to {overall_objective}; terminating with "
                        "failure. Try a smaller step size?",
                        RuntimeWarning,
                        stacklevel=2,
                    )
                    return self._finish(DriverState.DIVERGED, overall_objective)

                if abs(last_objective - overall_objective) < self._tolerance:
                    return self._finish(DriverState.CONVERGED, overall_objective)

                last_objective = overall_objective
                overall_objective = 0.0
                current = 0
                _new_pass()

            # clip to the pass end and to the remaining budget
            effective = min(batch_size, n - current)
            if limit is not None:
                effective = min(effective, limit - processed)

            overall_objective += self._step_batch(
                function, iterate, current, gradient, effective
            )
            self._update_policy.update(iterate, self._step_size, gradient)

            processed += effective
            current += effective
            self._iterations_run = processed

        return self._finish(
            DriverState.ITERATION_LIMIT_REACHED,
            _full_objective(function, iterate, n, batch_size),
        )

    def load_policy_state(self, state: Dict[str, Any]) -> None:
        """
        Restore update policy state saved with `state_dict()`.

        The restored state counts as initialized, so a following `optimize`
        call with ``reset_policy=False`` continues from it.
        """
        self._update_policy.load_state_dict(state)  # type: ignore[attr-defined]
        self._is_initialized = True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        return {
            "step_size": self._step_size,
            "batch_size": self._batch_size,
            "max_iterations": self._max_iterations,
            "tolerance": self._tolerance,
            "shuffle": self._shuffle,
            "reset_policy": self._reset_policy,
            "seed": self._sequencer.seed,
            "update_policy": policy_to_config(self._update_policy),
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SGD":
        cfg = dict(cfg)
        policy = policy_from_config(cfg.pop("update_policy"))
        seed = cfg.pop("seed", None)
        return cls(policy, sequencer=ShuffleSequencer(seed), **cfg)
