"""Errors raised by registration and resolution.

This module demonstrates:

1. ``DIRegistryInstanceNotAvailableError`` for a missing key.
2. A failing builder reported with its original exception as ``cause``.
3. The key staying registered so a later resolution retries the builder.
4. ``DIRegistryTypeMismatchError`` when the requested type does not fit.
5. ``DIRegistryInvalidRegistrationError`` when no key can be inferred.
"""

from __future__ import annotations

from diregistry import (
    DependencyContainer,
    DIRegistryInstanceNotAvailableError,
    DIRegistryInvalidRegistrationError,
    DIRegistryTypeMismatchError,
)


class Database:
    pass


class Cache:
    pass


def main() -> None:
    container = DependencyContainer()

    try:
        container.resolve(Database)
    except DIRegistryInstanceNotAvailableError as error:
        print(error)  # => Instance with key 'Database' not found.

    attempts: list[int] = []

    def connect() -> Database:
        attempts.append(len(attempts) + 1)
        if len(attempts) == 1:
            msg = "database is starting"
            raise ConnectionError(msg)
        return Database()

    container.register(connect)
    try:
        container.resolve(Database)
    except DIRegistryInstanceNotAvailableError as error:
        print(f"cause={error.cause!r}")  # => cause=ConnectionError('database is starting')

    recovered = isinstance(container.resolve(Database), Database)
    print(f"recovered={recovered}")  # => recovered=True
    print(f"attempts={len(attempts)}")  # => attempts=2

    container.register(Cache, as_name="store")
    try:
        container.resolve(Database, name="store")
    except DIRegistryTypeMismatchError as error:
        print(error)  # => Instance with key 'store' has type 'Cache', which is not assignable to 'Database'.

    try:
        container.register(lambda: Cache())
    except DIRegistryInvalidRegistrationError as error:
        print(type(error).__name__)  # => DIRegistryInvalidRegistrationError


if __name__ == "__main__":
    main()
