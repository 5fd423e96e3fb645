"""Dense first-occurrence numbering of identities."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping
from functools import reduce
from typing import Generic, TypeVar


__all__ = ["IdentityTable"]


K = TypeVar("K", bound=Hashable)


class IdentityTable(Generic[K]):
    """Immutable mapping from identity keys to numbers ``1..n``.

    Numbers follow the order in which keys were first seen and are never
    reassigned. Tables are built with :meth:`build`, a left fold where each step
    returns a new table.
    """

    __slots__ = ("_numbers",)

    def __init__(self, numbers: Mapping[K, int] | None = None) -> None:
        self._numbers: dict[K, int] = dict(numbers or {})

    @classmethod
    def build(cls, keys: Iterable[K]) -> IdentityTable[K]:
        return reduce(IdentityTable.assign, keys, cls())

    def assign(self, key: K) -> IdentityTable[K]:
        """Return a table where ``key`` is numbered, reusing the number if already seen."""
        if key in self._numbers:
            return self
        return IdentityTable({**self._numbers, key: len(self._numbers) + 1})

    def number(self, key: K) -> int:
        return self._numbers[key]

    def get(self, key: K) -> int | None:
        return self._numbers.get(key)

    def items(self) -> Iterator[tuple[K, int]]:
        """Yield ``(key, number)`` pairs in ascending number order."""
        yield from self._numbers.items()

    def __contains__(self, key: object) -> bool:
        return key in self._numbers

    def __iter__(self) -> Iterator[K]:
        return iter(self._numbers)

    def __len__(self) -> int:
        return len(self._numbers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentityTable):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __hash__(self) -> int:
        return hash(tuple(self.items()))

    def __repr__(self) -> str:
        return f"IdentityTable({dict(self._numbers)!r})"
