"""
Domain-level optimizer contracts for qhopt.

This module defines:

- `IUpdatePolicy`, the per-step rule that turns a gradient into an in-place
  change of the iterate while owning any state it needs across steps.
- `IOptimizer`, the entry point that drives an update policy over a
  decomposable function.
- `DriverState`, the lifecycle of a single optimization run.

Notes
-----
Domain contracts are backend-agnostic and must not depend on NumPy or
infrastructure implementations.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Tuple, runtime_checkable


class DriverState(Enum):
    """
    Lifecycle of a driver's most recent `optimize` call.

    `IDLE` means no run has started. `RUNNING` is reported while the loop
    executes, and is left in place if the objective raised and aborted the
    run. The remaining states are terminal; each corresponds to a normal
    return from `optimize`.
    """

    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    DIVERGED = "diverged"

    @property
    def is_terminal(self) -> bool:
        """
        True when the run completed and `optimize` returned normally.
        """
        return self not in (DriverState.IDLE, DriverState.RUNNING)


@runtime_checkable
class IUpdatePolicy(Protocol):
    """
    Update policy interface contract.

    Required methods
    ----------------
    - `initialize(shape, dtype)` allocates fresh state for iterates of the
      given shape.
    - `reset()` clears accumulated state without changing its shape.
    - `update(iterate, step_size, gradient)` applies one step in-place.
    """

    def initialize(self, shape: Tuple[int, ...], dtype: Any = None) -> None: ...

    def reset(self) -> None: ...

    def update(self, iterate: Any, step_size: float, gradient: Any) -> None: ...


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    An optimizer modifies `iterate` in place so that it holds the final point,
    and returns the objective value at that point.
    """

    def optimize(self, function: Any, iterate: Any) -> float: ...
