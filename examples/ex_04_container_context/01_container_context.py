"""ContainerContext: the shared, process-wide container.

This module demonstrates:

1. Lazy creation of the default ``DependencyContainer``.
2. ``@container_context.inject`` resolving from whatever container is current.
3. Binding another container with ``set_current`` and restoring the previous one.
4. ``clear()`` to start a fresh usage epoch.
"""

from __future__ import annotations

from diregistry import Injected, RebuildingDependencyContainer, container_context


class Settings:
    greeting = "hello"


class LoudSettings(Settings):
    greeting = "HELLO"


@container_context.inject
def greet(name: str, settings: Injected[Settings]) -> str:
    return f"{settings.greeting}, {name}"


def main() -> None:
    container_context.register(Settings)
    print(greet("world"))  # => hello, world

    default_kind = type(container_context.get_current()).__name__
    print(f"default_container={default_kind}")  # => default_container=DependencyContainer

    rebuilding = RebuildingDependencyContainer()
    rebuilding.register(LoudSettings, for_type=Settings)
    previous = container_context.set_current(rebuilding)
    print(greet("world"))  # => HELLO, world

    assert previous is not None
    restored = container_context.set_current(previous) is rebuilding
    print(f"restored={restored}")  # => restored=True

    container_context.clear()
    print(f"keys={container_context.all_keys()}")  # => keys=[]


if __name__ == "__main__":
    main()
