"""
Deterministic pseudo-random source used by the ``random`` tensor factory.

The generator is the Park-Miller "minimal standard" linear congruential
generator: ``state = 16807 * state mod (2**31 - 1)``. It is reproducible from
a seed and cheap enough to fill test tensors without pulling NumPy's global
random state into graph construction.
"""

from __future__ import annotations

import secrets
from typing import Iterator, Optional

MODULUS = 0x7FFFFFFF
MULTIPLIER = 16807


class LinearCongruentialGenerator:
    """
    Stateful LCG producing floats in ``[minimum, maximum)``.

    Parameters
    ----------
    seed : Optional[int]
        Initial state. Reduced modulo ``2**31 - 1``. When omitted, a seed is
        drawn from system entropy.

    Notes
    -----
    A seed that is a multiple of the modulus collapses the state to zero and
    the generator then yields `minimum` forever.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        if seed is None:
            seed = secrets.randbelow(MODULUS - 1) + 1
        self._state = int(seed) % MODULUS

    @property
    def state(self) -> int:
        return self._state

    def next_int(self) -> int:
        """Advance the generator and return the raw state."""
        self._state = (MULTIPLIER * self._state) % MODULUS
        return self._state

    def uniform(self, minimum: float = 0.0, maximum: float = 1.0) -> float:
        """Advance the generator and map the new state into ``[minimum, maximum)``."""
        return (maximum - minimum) / MODULUS * self.next_int() + minimum

    def stream(self, minimum: float = 0.0, maximum: float = 1.0) -> Iterator[float]:
        while True:
            yield self.uniform(minimum, maximum)
