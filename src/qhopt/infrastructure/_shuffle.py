"""
Visitation order generation for decomposable functions.

`ShuffleSequencer` decides in which order the terms of a decomposable
function are visited during one pass. Optimizers request a new order once per
pass; the sequencer itself holds no per-pass state beyond its random
generator.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class ShuffleSequencer:
    """
    Produce identity or uniformly permuted index orderings.

    Parameters
    ----------
    seed : int, optional
        Seed for a private `numpy.random.Generator`. Ignored when `rng` is
        given. When both are None, the generator is seeded from OS entropy.
    rng : numpy.random.Generator, optional
        Generator to draw permutations from. Passing a shared generator lets
        several components consume the same entropy stream.

    Notes
    -----
    Two sequencers built with the same seed produce the same sequence of
    orderings.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.seed = None if seed is None else int(seed)
        self._rng = rng if rng is not None else np.random.default_rng(self.seed)

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def order(self, n: int, shuffle: bool = True) -> np.ndarray:
        """
        Return the visitation order for one pass over `n` terms.

        Parameters
        ----------
        n : int
            Number of terms. Must be >= 0.
        shuffle : bool, optional
            If True, return a uniformly random permutation of ``range(n)``;
            otherwise return ``range(n)`` in order. Defaults to True.

        Returns
        -------
        np.ndarray
            Integer index array of length `n`.

        Raises
        ------
        ValueError
            If ``n < 0``.
        """
        n = int(n)
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        if not shuffle:
            return np.arange(n, dtype=np.intp)
        return self._rng.permutation(n).astype(np.intp, copy=False)
