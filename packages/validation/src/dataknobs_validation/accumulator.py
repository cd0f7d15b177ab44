"""Error accumulation strategies.

An ``ErrorAccumulator`` defines how two error containers are merged when
several independent checks fail. ``combine`` must be associative so that the
grouping of a long accumulation never changes its outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Generic, TypeVar

E = TypeVar("E")


class ErrorAccumulator(ABC, Generic[E]):
    """Associative combine operation over error containers."""

    @abstractmethod
    def combine(self, e1: E, e2: E) -> E:
        """Combine two error containers into one.

        Args:
            e1: The first (left) errors
            e2: The second (right) errors

        Returns:
            A container holding the information of both inputs
        """


class TupleAccumulator(ErrorAccumulator[tuple]):
    """Concatenates tuples, keeping order and duplicates.

    This is the accumulator used throughout the engine.
    """

    def combine(self, e1: tuple, e2: tuple) -> tuple:
        return e1 + e2


class ListAccumulator(ErrorAccumulator[list]):
    """Concatenates lists into a new list."""

    def combine(self, e1: list, e2: list) -> list:
        return [*e1, *e2]


class SetAccumulator(ErrorAccumulator[frozenset]):
    """Unions sets. Duplicates collapse and order is not preserved."""

    def combine(self, e1: frozenset, e2: frozenset) -> frozenset:
        return frozenset(e1) | frozenset(e2)


DEFAULT_ACCUMULATOR: ErrorAccumulator[tuple] = TupleAccumulator()


def combine_all(accumulator: ErrorAccumulator[E], items: Iterable[E], empty: E) -> E:
    """Fold ``items`` left to right with ``accumulator``, starting from ``empty``."""
    combined = empty
    for item in items:
        combined = accumulator.combine(combined, item)
    return combined
