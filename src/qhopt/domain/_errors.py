"""
Configuration-related exceptions for qhopt.

This module defines the errors raised when an optimizer is used with an
objective or iterate it cannot operate on. These exceptions allow the
optimization loop to fail fast, before any update has been applied, or at the
first update whose operands disagree with the stored optimizer state.

Errors raised by user-supplied objective functions are never wrapped; they
propagate to the caller unchanged.
"""

from __future__ import annotations

from typing import Tuple


class OptimizerConfigurationError(ValueError):
    """
    Base class for optimizer usage errors.

    Raised when the combination of optimizer, objective and iterate is
    invalid. These errors are not recoverable by retrying the same call.
    """


class ShapeMismatchError(OptimizerConfigurationError):
    """
    Raised when an array does not match the shape of the stored moment state.

    Attributes
    ----------
    op : str
        The operation that detected the mismatch (e.g., "qhadam_update").
    expected : tuple[int, ...]
        Shape of the optimizer state.
    actual : tuple[int, ...]
        Shape of the offending array.
    """

    def __init__(
        self, op: str, expected: Tuple[int, ...], actual: Tuple[int, ...]
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            Name of the operation that detected the mismatch.
        expected : tuple[int, ...]
            Shape held by the optimizer state.
        actual : tuple[int, ...]
            Shape that was supplied.
        """
        super().__init__(
            f"{op}: shape mismatch, expected {tuple(expected)} but got {tuple(actual)}."
        )
        self.op = op
        self.expected = tuple(expected)
        self.actual = tuple(actual)


class EmptyObjectiveError(OptimizerConfigurationError):
    """
    Raised when a decomposable function reports zero terms.
    """

    def __init__(self, function_name: str) -> None:
        super().__init__(
            f"{function_name}.size() returned 0; "
            "a decomposable function must have at least one term."
        )
        self.function_name = function_name
