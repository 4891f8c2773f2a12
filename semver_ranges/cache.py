from typing import Generic, Hashable, Protocol, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Memoizer(Protocol[K, V]):
    """Store consulted by ``VersionParser`` and ``VersionRange``.

    Implementations need not be thread-safe: every consumer holds its own lock
    around ``try_get`` and ``insert``.
    """

    def try_get(self, key: K) -> "V | None":
        ...

    def insert(self, key: K, value: V) -> None:
        ...


class DictMemoizer(Generic[K, V]):
    def __init__(self) -> None:
        self.entries: dict[K, V] = {}

    def try_get(self, key: K) -> "V | None":
        return self.entries.get(key)

    def insert(self, key: K, value: V) -> None:
        self.entries[key] = value

    def __contains__(self, key: K) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)
