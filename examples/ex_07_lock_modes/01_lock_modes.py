"""Lock modes for the caching container.

This module demonstrates:

1. Default ``LockMode.THREAD``: concurrent resolvers share one build.
2. ``LockMode.NONE``: no locking, for containers confined to one thread.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from diregistry import DependencyContainer, LockMode


class Connection:
    pass


def _concurrent_build_stats(container: DependencyContainer, workers: int) -> tuple[int, bool]:
    calls = 0
    calls_lock = threading.Lock()
    barrier = threading.Barrier(workers)

    def connect() -> Connection:
        nonlocal calls
        with calls_lock:
            calls += 1
        time.sleep(0.05)
        return Connection()

    container.register(connect)

    def resolve() -> Connection:
        barrier.wait()
        return container.resolve(Connection)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(lambda _: resolve(), range(workers)))

    return calls, all(result is results[0] for result in results)


def main() -> None:
    threaded = DependencyContainer()
    print(f"default_mode={threaded.lock_mode.value}")  # => default_mode=thread

    calls, same_instance = _concurrent_build_stats(threaded, workers=8)
    print(f"thread_calls={calls}")  # => thread_calls=1
    print(f"thread_same_instance={same_instance}")  # => thread_same_instance=True

    single_threaded = DependencyContainer(lock_mode=LockMode.NONE)
    single_threaded.register(Connection)
    cached = single_threaded.resolve(Connection) is single_threaded.resolve(Connection)
    print(f"none_mode={single_threaded.lock_mode.value}")  # => none_mode=none
    print(f"none_cached={cached}")  # => none_cached=True


if __name__ == "__main__":
    main()
