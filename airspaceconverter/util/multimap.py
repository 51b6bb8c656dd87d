"""Ordered multi-valued collection keyed by category.

Entries sharing a key stay contiguous and are iterated in ascending key
order; within a key, insertion order is preserved so that output is
deterministic.
"""

from collections import defaultdict
from typing import Callable, Dict, Generic, Iterator, List, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class CategoryMultiMap(Generic[K, V]):
    """Owning container of entries grouped by a sortable key.

    Example:
        m = CategoryMultiMap()
        m.add(2, "b"); m.add(1, "a"); m.add(2, "c")
        list(m)  # ['a', 'b', 'c']
    """

    def __init__(self):
        self._entries: Dict[K, List[V]] = defaultdict(list)
        self._count = 0

    def add(self, key: K, value: V) -> None:
        self._entries[key].append(value)
        self._count += 1

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    def __iter__(self) -> Iterator[V]:
        for _, value in self.items():
            yield value

    def items(self) -> Iterator[Tuple[K, V]]:
        for key in sorted(self._entries):
            for value in self._entries[key]:
                yield key, value

    def keys(self) -> List[K]:
        return sorted(k for k, values in self._entries.items() if values)

    def get(self, key: K) -> List[V]:
        return list(self._entries.get(key, []))

    def count(self, key: K) -> int:
        return len(self._entries.get(key, []))

    def remove_if(self, predicate: Callable[[V], bool]) -> int:
        """Drop every entry matching predicate, returns how many were dropped."""
        removed = 0
        for key in list(self._entries):
            kept = [v for v in self._entries[key] if not predicate(v)]
            removed += len(self._entries[key]) - len(kept)
            if kept:
                self._entries[key] = kept
            else:
                del self._entries[key]
        self._count -= removed
        return removed

    def clear(self) -> None:
        self._entries.clear()
        self._count = 0
