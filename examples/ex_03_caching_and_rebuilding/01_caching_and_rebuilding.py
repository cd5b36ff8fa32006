"""Caching versus rebuilding containers.

``DependencyContainer`` builds a key once and keeps the instance until the key
is registered again or the container is cleared.
``RebuildingDependencyContainer`` invokes the builder on every resolution.
"""

from __future__ import annotations

from diregistry import DependencyContainer, RebuildingDependencyContainer


class RequestContext:
    created = 0

    def __init__(self) -> None:
        RequestContext.created += 1
        self.number = RequestContext.created


def main() -> None:
    caching = DependencyContainer()
    caching.register(RequestContext)

    first = caching.resolve(RequestContext)
    second = caching.resolve(RequestContext)
    print(f"caching_same={first is second}")  # => caching_same=True
    print(f"built={RequestContext.created}")  # => built=1

    rebuilding = RebuildingDependencyContainer()
    rebuilding.register(RequestContext)
    numbers = [rebuilding.resolve(RequestContext).number for _ in range(3)]
    print(f"rebuilt_numbers={numbers}")  # => rebuilt_numbers=[2, 3, 4]

    caching.register(RequestContext)
    rebuilt_after_register = caching.resolve(RequestContext) is not first
    print(f"rebuilt_after_register={rebuilt_after_register}")  # => rebuilt_after_register=True

    caching.clear()
    print(f"keys_after_clear={caching.all_keys()}")  # => keys_after_clear=[]


if __name__ == "__main__":
    main()
