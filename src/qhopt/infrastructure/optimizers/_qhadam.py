"""
QHAdam optimizer.

`QHAdam` pairs the generic mini-batch `SGD` driver with a `QHAdamUpdate`
policy and exposes every hyperparameter of both under one object. It holds no
logic of its own: each accessor forwards to the driver or the policy, and
`optimize` forwards to the driver.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ...domain._function import IDecomposableFunction
from ...domain._optimizers import DriverState
from .._history import OptimizationHistory
from .._shuffle import ShuffleSequencer
from ..update_policies._qhadam_update import QHAdamUpdate
from ._sgd import SGD

_FORMAT = "qhopt.json.optimizer.v1"


class QHAdam:
    """
    Quasi-hyperbolic Adam optimizer for decomposable functions.

    QHAdam is sensitive to its hyperparameters; the defaults are a reasonable
    starting point but will not suit every problem.

    Parameters
    ----------
    step_size : float, optional
        Step size for each update. Defaults to 0.001.
    batch_size : int, optional
        Number of points processed per update. Defaults to 32.
    v1 : float, optional
        First quasi-hyperbolic term. Defaults to 0.7.
    v2 : float, optional
        Second quasi-hyperbolic term. Defaults to 1.0.
    beta1 : float, optional
        Exponential decay rate of the first moment estimates. Defaults to 0.9.
    beta2 : float, optional
        Exponential decay rate of the second moment estimates.
        Defaults to 0.999.
    epsilon : float, optional
        Value added to the update denominator. Defaults to 1e-8.
    max_iterations : int, optional
        Maximum number of points to process (one iteration is one point, not
        one pass); 0 means no limit. Defaults to 100000.
    tolerance : float, optional
        Maximum absolute change of the per-pass objective at which the run
        terminates. Defaults to 1e-5.
    shuffle : bool, optional
        If True, terms are visited in a new random order each pass;
        otherwise in linear order. Defaults to True.
    reset_policy : bool, optional
        If True, moment estimates are reset before every `optimize` call;
        otherwise they are retained. Defaults to True.
    seed : int, optional
        Seed for the visitation-order generator.
    verbose : int, optional
        If non-zero, print a summary line per pass. Defaults to 0.

    Examples
    --------
    >>> opt = QHAdam(step_size=0.01, batch_size=16)
    >>> final_objective = opt.optimize(function, x0)  # x0 now holds the result
    """

    def __init__(
        self,
        step_size: float = 0.001,
        batch_size: int = 32,
        v1: float = 0.7,
        v2: float = 1.0,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
        max_iterations: int = 100000,
        tolerance: float = 1e-5,
        shuffle: bool = True,
        reset_policy: bool = True,
        *,
        seed: Optional[int] = None,
        verbose: int = 0,
    ) -> None:
        self._optimizer = SGD(
            QHAdamUpdate(epsilon=epsilon, beta1=beta1, beta2=beta2, v1=v1, v2=v2),
            step_size=step_size,
            batch_size=batch_size,
            max_iterations=max_iterations,
            tolerance=tolerance,
            shuffle=shuffle,
            reset_policy=reset_policy,
            sequencer=ShuffleSequencer(seed),
            verbose=verbose,
        )

    def optimize(self, function: IDecomposableFunction, iterate: np.ndarray) -> float:
        """
        Optimize `function` with QHAdam.

        `iterate` is modified in-place to hold the final point, and the
        objective value at that point is returned.
        """
        return self._optimizer.optimize(function, iterate)

    @property
    def optimizer(self) -> SGD:
        """The underlying SGD driver."""
        return self._optimizer

    @property
    def update_policy(self) -> QHAdamUpdate:
        return self._optimizer.update_policy  # type: ignore[return-value]

    # driver hyperparameters
    @property
    def step_size(self) -> float:
        return self._optimizer.step_size

    @step_size.setter
    def step_size(self, value: float) -> None:
        self._optimizer.step_size = value

    @property
    def batch_size(self) -> int:
        return self._optimizer.batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        self._optimizer.batch_size = value

    @property
    def max_iterations(self) -> int:
        return self._optimizer.max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        self._optimizer.max_iterations = value

    @property
    def tolerance(self) -> float:
        return self._optimizer.tolerance

    @tolerance.setter
    def tolerance(self, value: float) -> None:
        self._optimizer.tolerance = value

    @property
    def shuffle(self) -> bool:
        return self._optimizer.shuffle

    @shuffle.setter
    def shuffle(self, value: bool) -> None:
        self._optimizer.shuffle = value

    @property
    def reset_policy(self) -> bool:
        return self._optimizer.reset_policy

    @reset_policy.setter
    def reset_policy(self, value: bool) -> None:
        self._optimizer.reset_policy = value

    @property
    def verbose(self) -> int:
        return self._optimizer.verbose

    @verbose.setter
    def verbose(self, value: int) -> None:
        self._optimizer.verbose = int(value)

    # policy hyperparameters
    @property
    def beta1(self) -> float:
        return self.update_policy.beta1

    @beta1.setter
    def beta1(self, value: float) -> None:
        self.update_policy.beta1 = value

    @property
    def beta2(self) -> float:
        return self.update_policy.beta2

    @beta2.setter
    def beta2(self, value: float) -> None:
        self.update_policy.beta2 = value

    @property
    def epsilon(self) -> float:
        return self.update_policy.epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        self.update_policy.epsilon = value

    @property
    def v1(self) -> float:
        return self.update_policy.v1

    @v1.setter
    def v1(self, value: float) -> None:
        self.update_policy.v1 = value

    @property
    def v2(self) -> float:
        return self.update_policy.v2

    @v2.setter
    def v2(self, value: float) -> None:
        self.update_policy.v2 = value

    # run record
    @property
    def state(self) -> DriverState:
        return self._optimizer.state

    @property
    def history(self) -> OptimizationHistory:
        return self._optimizer.history

    @property
    def iterations_run(self) -> int:
        return self._optimizer.iterations_run

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        cfg = self._optimizer.get_config()
        cfg.pop("update_policy")
        cfg.update(self.update_policy.get_config())
        return cfg

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "QHAdam":
        return cls(**cfg)

    def save_json(self, path: str | Path) -> None:
        """
        Save hyperparameters and moment state into a single JSON file.

        Format
        ------
        {
          "format": "qhopt.json.optimizer.v1",
          "config": {...},
          "state": {"t": ..., "first_moment": {...}, "second_moment": {...}}
        }

        Notes
        -----
        A loaded optimizer only continues from the saved moments if
        `reset_policy` is False; otherwise the state is discarded at the next
        `optimize` call.
        """
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "format": _FORMAT,
            "config": self.get_config(),
            "state": self.update_policy.state_dict(),
        }
        p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    @classmethod
    def load_json(cls, path: str | Path) -> "QHAdam":
        """
        Load an optimizer saved by `save_json()`.

        Raises
        ------
        ValueError
            If the file format is unsupported.
        """
        p = Path(path)
        payload = json.loads(p.read_text(encoding="utf-8"))

        fmt = payload.get("format")
        if fmt != _FORMAT:
            raise ValueError(f"Unsupported optimizer format: {fmt!r}")

        opt = cls.from_config(payload["config"])
        opt.optimizer.load_policy_state(payload["state"])
        return opt
