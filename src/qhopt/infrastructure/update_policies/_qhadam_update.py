"""
QHAdam update policy implementation.

This module provides the quasi-hyperbolic Adam (QHAdam) step rule. The policy
owns the per-iterate first and second moment estimates and the step counter
used for bias correction, and applies each step to the iterate in-place.

Design notes
------------
- The blend coefficients ``v1`` and ``v2`` select the optimizer family without
  any branching: ``v1 = v2 = 0`` gives normalized gradient descent,
  ``v1 = v2 = 1`` gives Adam, and anything in between interpolates.
- Moment arrays are allocated lazily on the first update, or eagerly by
  `initialize()`. Once allocated, every iterate and gradient must match their
  shape.
- Bias correction uses ``1 - beta**t`` directly. For ``beta < 1`` the power
  underflows to 0.0 as ``t`` grows, so late iterations need no special case.

Reference: J. Ma and D. Yarats, "Quasi-hyperbolic momentum and Adam for deep
learning", ICLR 2019.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from ...domain._errors import ShapeMismatchError
from .._registry import register_update_policy
from ..encoding._b64 import ndarray_to_payload, payload_to_ndarray


def _check_beta(name: str, value: float) -> float:
    value = float(value)
    if not (0.0 <= value < 1.0):
        raise ValueError(f"{name} must be in [0, 1), got {value}")
    return value


def _check_epsilon(value: float) -> float:
    value = float(value)
    if value <= 0.0:
        raise ValueError(f"epsilon must be > 0, got {value}")
    return value


@register_update_policy()
class QHAdamUpdate:
    """
    Quasi-hyperbolic Adam update rule.

    Update rule
    -----------
    Let ``g`` be the gradient at step ``t``:

        m = beta1 * m + (1 - beta1) * g
        v = beta2 * v + (1 - beta2) * g**2

        m_hat = m / (1 - beta1^t)
        v_hat = v / (1 - beta2^t)

        num = (1 - v1) * g + v1 * m_hat
        den = sqrt((1 - v2) * g**2 + v2 * v_hat) + epsilon

        x <- x - step_size * num / den

    Parameters
    ----------
    epsilon : float, optional
        Value added to the denominator. Must be > 0. Defaults to 1e-8.
    beta1 : float, optional
        Decay rate of the first moment estimate, in [0, 1). Defaults to 0.9.
    beta2 : float, optional
        Decay rate of the second moment estimate, in [0, 1). Defaults to 0.999.
    v1 : float, optional
        Quasi-hyperbolic weight of the first moment. Defaults to 0.7.
    v2 : float, optional
        Quasi-hyperbolic weight of the second moment. Defaults to 1.0.

    Notes
    -----
    ``v1`` and ``v2`` are usually within [0, 1] but are not range-checked.
    """

    def __init__(
        self,
        epsilon: float = 1e-8,
        beta1: float = 0.9,
        beta2: float = 0.999,
        v1: float = 0.7,
        v2: float = 1.0,
    ) -> None:
        self._epsilon = _check_epsilon(epsilon)
        self._beta1 = _check_beta("beta1", beta1)
        self._beta2 = _check_beta("beta2", beta2)
        self._v1 = float(v1)
        self._v2 = float(v2)

        self._m: Optional[np.ndarray] = None
        self._v: Optional[np.ndarray] = None
        self._t = 0

    # ------------------------------------------------------------------
    # Hyperparameters
    # ------------------------------------------------------------------
    @property
    def epsilon(self) -> float:
        return self._epsilon

    @epsilon.setter
    def epsilon(self, value: float) -> None:
        self._epsilon = _check_epsilon(value)

    @property
    def beta1(self) -> float:
        return self._beta1

    @beta1.setter
    def beta1(self, value: float) -> None:
        self._beta1 = _check_beta("beta1", value)

    @property
    def beta2(self) -> float:
        return self._beta2

    @beta2.setter
    def beta2(self, value: float) -> None:
        self._beta2 = _check_beta("beta2", value)

    @property
    def v1(self) -> float:
        return self._v1

    @v1.setter
    def v1(self, value: float) -> None:
        self._v1 = float(value)

    @property
    def v2(self) -> float:
        return self._v2

    @v2.setter
    def v2(self, value: float) -> None:
        self._v2 = float(value)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def first_moment(self) -> Optional[np.ndarray]:
        """
        Exponential moving average of gradients, or None before allocation.
        """
        return self._m

    @property
    def second_moment(self) -> Optional[np.ndarray]:
        """
        Exponential moving average of squared gradients, or None before
        allocation.
        """
        return self._v

    @property
    def t(self) -> int:
        """
        Number of updates applied since the last initialize/reset.
        """
        return self._t

    @property
    def shape(self) -> Optional[Tuple[int, ...]]:
        return None if self._m is None else tuple(self._m.shape)

    def initialize(self, shape: Tuple[int, ...], dtype: Any = None) -> None:
        """
        Allocate zeroed moment arrays for iterates of `shape`.

        Any previously held state is discarded, including its shape.
        """
        dt = np.float64 if dtype is None else np.dtype(dtype)
        self._m = np.zeros(tuple(shape), dtype=dt)
        self._v = np.zeros(tuple(shape), dtype=dt)
        self._t = 0

    def reset(self) -> None:
        """
        Zero the moment estimates and the step counter.

        The moment arrays keep their shape. Calling `reset()` repeatedly is
        equivalent to calling it once.
        """
        if self._m is not None:
            self._m.fill(0.0)
        if self._v is not None:
            self._v.fill(0.0)
        self._t = 0

    def _check_shape(self, name: str, arr: np.ndarray) -> None:
        expected = self.shape
        if expected is None or arr.shape != expected:
            raise ShapeMismatchError(
                f"qhadam_update({name})", expected or (), arr.shape
            )

    def update(self, iterate: np.ndarray, step_size: float, gradient: Any) -> None:
        """
        Apply one QHAdam step to `iterate` in-place.

        Parameters
        ----------
        iterate : np.ndarray
            Point being optimized. Modified in-place.
        step_size : float
            Step size for this update.
        gradient : array-like
            Gradient at `iterate`; must have the same shape.

        Raises
        ------
        ShapeMismatchError
            If `iterate` or `gradient` does not match the moment state.
        """
        g = np.asarray(gradient)
        if self._m is None or self._v is None:
            self.initialize(iterate.shape, iterate.dtype)
        self._check_shape("iterate", iterate)
        self._check_shape("gradient", g)

        b1, b2 = self._beta1, self._beta2
        m, v = self._m, self._v

        self._t += 1
        t = self._t

        g_sq = g * g

        # m = b1*m + (1-b1)*g
        # v = b2*v + (1-b2)*g^2
        m *= b1
        m += (1.0 - b1) * g
        v *= b2
        v += (1.0 - b2) * g_sq

        # bias correction; b**t underflows to 0.0 for large t
        m_hat = m / (1.0 - b1**t)
        v_hat = v / (1.0 - b2**t)

        num = ((1.0 - self._v1) * g) + (self._v1 * m_hat)
        den = np.sqrt(((1.0 - self._v2) * g_sq) + (self._v2 * v_hat)) + self._epsilon

        iterate -= step_size * (num / den)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        return {
            "epsilon": self._epsilon,
            "beta1": self._beta1,
            "beta2": self._beta2,
            "v1": self._v1,
            "v2": self._v2,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "QHAdamUpdate":
        return cls(**cfg)

    def state_dict(self) -> Dict[str, Any]:
        """
        Return the moment state as a JSON-serializable mapping.

        Moment arrays are stored as base64 payloads; unallocated state is
        stored as None.
        """
        return {
            "t": self._t,
            "first_moment": ndarray_to_payload(self._m),
            "second_moment": ndarray_to_payload(self._v),
        }

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """
        Restore moment state produced by `state_dict()`.

        Raises
        ------
        ShapeMismatchError
            If the stored first and second moments disagree in shape.
        """
        m = payload_to_ndarray(state.get("first_moment"))
        v = payload_to_ndarray(state.get("second_moment"))
        if (m is None) != (v is None):
            raise ValueError("first_moment and second_moment must both be present")
        if m is not None and v is not None and m.shape != v.shape:
            raise ShapeMismatchError("qhadam_load_state", m.shape, v.shape)

        self._m = m
        self._v = v
        self._t = int(state.get("t", 0))
