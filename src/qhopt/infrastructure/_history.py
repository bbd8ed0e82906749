"""
Optimization history utilities.

This module defines a lightweight record of how an optimization run
progressed, one entry per completed pass over the decomposable function.
It is the optimizer-side counterpart of a Keras-style training `History`.

Design goals
------------
- Minimal surface area: no dependency on arrays, functions or policies
- Deterministic ordering and explicit pass indexing
- Human-readable and debugger-friendly representation
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class OptimizationHistory:
    """
    Container for per-pass optimization records.

    Attributes
    ----------
    passes : List[int]
        One-based indices of completed passes.
    objective : List[float]
        Summed objective accumulated over each pass. Each batch contributes
        its value at the point *before* that batch's update was applied.
    points_seen : List[int]
        Total number of points processed when each pass completed.

    Notes
    -----
    Only completed passes are recorded. A run that stops on its iteration
    limit partway through a pass leaves that partial pass unrecorded.
    """

    passes: List[int] = field(default_factory=list)
    objective: List[float] = field(default_factory=list)
    points_seen: List[int] = field(default_factory=list)

    def append_pass(self, pass_idx: int, objective: float, points_seen: int) -> None:
        """
        Append the record of a completed pass.
        """
        self.passes.append(int(pass_idx))
        self.objective.append(float(objective))
        self.points_seen.append(int(points_seen))

    def __len__(self) -> int:
        return len(self.passes)

    def last(self) -> Optional[Dict[str, float]]:
        """
        Return the most recent pass record, or None if no pass completed.
        """
        if not self.passes:
            return None
        return {
            "pass": float(self.passes[-1]),
            "objective": self.objective[-1],
            "points_seen": float(self.points_seen[-1]),
        }
