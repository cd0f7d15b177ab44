"""Minimal effect interface shared by the sync and async validator families.

Collection and map validation are written once against ``ValidationEffect``
(see ``logic``). ``SyncEffect`` runs everything immediately; ``AsyncEffect``
works with awaitables and fans ``traverse`` out with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any


class ValidationEffect(ABC):
    """How a validation step is run: immediately or as a suspended computation."""

    @abstractmethod
    def pure(self, value: Any) -> Any:
        """Lift a plain value into the effect."""

    @abstractmethod
    def map(self, fa: Any, f: Callable[[Any], Any]) -> Any:
        """Apply a plain function to the effect's eventual value."""

    @abstractmethod
    def flat_map(self, fa: Any, f: Callable[[Any], Any]) -> Any:
        """Chain an effectful function onto the effect's eventual value."""

    @abstractmethod
    def traverse(self, items: Iterable[Any], f: Callable[[Any], Any]) -> Any:
        """Apply ``f`` to every item, yielding the list of results in item order."""


class SyncEffect(ValidationEffect):
    """Identity effect: every value is already available."""

    def pure(self, value: Any) -> Any:
        return value

    def map(self, fa: Any, f: Callable[[Any], Any]) -> Any:
        return f(fa)

    def flat_map(self, fa: Any, f: Callable[[Any], Any]) -> Any:
        return f(fa)

    def traverse(self, items: Iterable[Any], f: Callable[[Any], Any]) -> list[Any]:
        return [f(item) for item in items]


class AsyncEffect(ValidationEffect):
    """Awaitable effect.

    ``traverse`` launches all element computations at once and joins them,
    so the resulting list follows item order regardless of completion order.
    """

    def pure(self, value: Any) -> Awaitable[Any]:
        async def _pure() -> Any:
            return value

        return _pure()

    def map(self, fa: Awaitable[Any], f: Callable[[Any], Any]) -> Awaitable[Any]:
        async def _map() -> Any:
            return f(await fa)

        return _map()

    def flat_map(self, fa: Awaitable[Any], f: Callable[[Any], Awaitable[Any]]) -> Awaitable[Any]:
        async def _flat_map() -> Any:
            return await f(await fa)

        return _flat_map()

    def traverse(self, items: Iterable[Any], f: Callable[[Any], Awaitable[Any]]) -> Awaitable[list[Any]]:
        async def _traverse() -> list[Any]:
            pending: list[Awaitable[Any]] = []
            try:
                for item in items:
                    pending.append(f(item))
            except BaseException:
                # close coroutines that were created but never scheduled
                for awaitable in pending:
                    if inspect.iscoroutine(awaitable):
                        awaitable.close()
                raise
            return list(await asyncio.gather(*pending))

        return _traverse()


SYNC = SyncEffect()
ASYNC = AsyncEffect()
