"""Registration keys: inferred types, contracts, explicit names.

This module demonstrates:

1. Registering a class under its own name.
2. Registering an implementation under a protocol with ``for_type``.
3. Registering a second builder under an explicit ``as_name``.
4. Resolving a named key through ``Annotated[T, Named(...)]``.
"""

from __future__ import annotations

from typing import Annotated, Protocol, TypeAlias

from diregistry import DependencyContainer, Named


class Cache(Protocol):
    def get(self, key: str) -> str | None: ...


class MemoryCache:
    def __init__(self) -> None:
        self.data = {"greeting": "hello"}

    def get(self, key: str) -> str | None:
        return self.data.get(key)


class Database:
    def __init__(self, dsn: str = "sqlite://") -> None:
        self.dsn = dsn


ReplicaDatabase: TypeAlias = Annotated[Database, Named("replica")]


def main() -> None:
    container = DependencyContainer()
    container.register(MemoryCache, for_type=Cache)
    container.register(Database)
    container.register(lambda: Database("postgresql://replica"), as_name="replica")

    cache = container.resolve(Cache)
    print(f"cache_hit={cache.get('greeting')}")  # => cache_hit=hello

    primary = container.resolve(Database)
    replica = container.resolve(ReplicaDatabase)
    print(f"primary={primary.dsn}")  # => primary=sqlite://
    print(f"replica={replica.dsn}")  # => replica=postgresql://replica

    by_name = container.resolve(Database, name="replica") is replica
    print(f"by_name={by_name}")  # => by_name=True

    print(f"keys={container.all_keys()}")  # => keys=['Cache', 'Database', 'replica']


if __name__ == "__main__":
    main()
