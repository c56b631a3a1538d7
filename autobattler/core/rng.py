"""
Seeded pseudo-random number generator.

Every stochastic decision of an encounter draws from a single SeededRNG, so a
battle replays exactly from its seed. The generator is Mulberry32 with 32-bit
wrapping arithmetic.
"""

from typing import Sequence, TypeVar

from .error_handling import ensure_int_in_range

T = TypeVar("T")

_MASK_32 = 0xFFFFFFFF
_GOLDEN_GAMMA = 0x6D2B79F5


def _to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    value &= _MASK_32
    return value - 0x100000000 if value & 0x80000000 else value


class SeededRNG:
    """
    Deterministic random number generator.

    Attributes:
        state (int): The signed 32-bit internal state.

    """

    def __init__(self, seed: int) -> None:
        """
        Initialize the generator.

        Args:
            seed (int): The seed, wrapped to a signed 32-bit integer.

        """
        self._state = _to_int32(int(seed))

    @property
    def state(self) -> int:
        """The internal state, a single signed 32-bit integer."""
        return self._state

    @classmethod
    def from_state(cls, state: int) -> "SeededRNG":
        """
        Resume a generator from a previously exported state.

        Args:
            state (int): A value previously read from `state`.

        Returns:
            SeededRNG: A generator continuing the exact same sequence.

        """
        rng = cls(0)
        rng._state = _to_int32(int(state))
        return rng

    def next(self) -> float:
        """Returns a float in [0, 1)."""
        self._state = _to_int32(self._state + _GOLDEN_GAMMA)
        s = self._state & _MASK_32
        t = ((s ^ (s >> 15)) * (1 | s)) & _MASK_32
        t = ((t + (((t ^ (t >> 7)) * (61 | t)) & _MASK_32)) & _MASK_32) ^ t
        return ((t ^ (t >> 14)) & _MASK_32) / 4294967296

    def next_int(self, min_value: int, max_value: int) -> int:
        """Returns an integer in [min_value, max_value], both inclusive."""
        return int(self.next() * (max_value - min_value + 1)) + min_value

    def next_float(self, min_value: float, max_value: float) -> float:
        """Returns a float in [min_value, max_value)."""
        return self.next() * (max_value - min_value) + min_value

    def chance(self, probability: float) -> bool:
        """Returns True with the given probability (0-1)."""
        return self.next() < probability

    def shuffle(self, items: list[T]) -> list[T]:
        """
        Shuffle a list in place (Fisher-Yates, walking from the end).

        Args:
            items (list[T]): The list to shuffle.

        Returns:
            list[T]: The same list, shuffled.

        """
        for i in range(len(items) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def pick(self, items: Sequence[T]) -> T | None:
        """Pick one element, or None when the sequence is empty."""
        if not items:
            return None
        return items[int(self.next() * len(items))]

    def pick_n(self, items: Sequence[T], n: int) -> list[T]:
        """
        Pick up to n distinct elements.

        Args:
            items (Sequence[T]): The pool to pick from.
            n (int): How many elements to pick.

        Returns:
            list[T]: A shuffled copy of the pool truncated to n elements.

        """
        n = ensure_int_in_range(n, "pick count", 0, len(items))
        pool = list(items)
        self.shuffle(pool)
        return pool[:n]

    def weighted_pick(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Pick an element with probability proportional to its weight.

        Args:
            items (Sequence[T]): The candidates.
            weights (Sequence[float]): One weight per candidate.

        Returns:
            T: The chosen element; the last one absorbs rounding fall-through.

        """
        assert items, "weighted_pick needs at least one item"
        assert len(items) == len(weights), "items and weights must align"
        roll = self.next() * sum(weights)
        for item, weight in zip(items, weights):
            roll -= weight
            if roll <= 0:
                return item
        return items[-1]
