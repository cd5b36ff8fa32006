from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Any

from diregistry.builders import Builder, BuiltInstance
from diregistry.container_interface import IContainer
from diregistry.exceptions import (
    DIRegistryInstanceNotAvailableError,
    DIRegistryInvalidRegistrationError,
)
from diregistry.lock_mode import LockMode
from diregistry.resolution_stack import invoke_builder

logger = logging.getLogger(__name__)


class _BuildGate:
    """Shared/exclusive gate between in-flight builds and ``clear``.

    Builds enter shared: any number of threads may build at once, and a thread
    that is already building re-enters without waiting, so nested resolutions
    never block on a pending clear. ``clear`` enters exclusive: it stops new
    outermost builds from starting and waits until every other thread has left
    its builds. Threads that are themselves clearing from inside a builder are
    not waited for.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        # Build depth per thread ident.
        self._building: dict[int, int] = {}
        self._clearing: dict[int, int] = {}

    @contextmanager
    def build(self) -> Iterator[None]:
        ident = threading.get_ident()
        with self._condition:
            if ident not in self._building:
                while self._clearing and ident not in self._clearing:
                    self._condition.wait()
            self._building[ident] = self._building.get(ident, 0) + 1
        try:
            yield
        finally:
            with self._condition:
                self._leave(self._building, ident)

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        ident = threading.get_ident()
        with self._condition:
            self._clearing[ident] = self._clearing.get(ident, 0) + 1
            try:
                while self._has_foreign_builds(ident):
                    self._condition.wait()
            except BaseException:
                self._leave(self._clearing, ident)
                raise
        try:
            yield
        finally:
            with self._condition:
                self._leave(self._clearing, ident)

    def _has_foreign_builds(self, ident: int) -> bool:
        return any(
            other != ident and other not in self._clearing for other in self._building
        )

    def _leave(self, depths: dict[int, int], ident: int) -> None:
        remaining = depths[ident] - 1
        if remaining:
            depths[ident] = remaining
            return
        del depths[ident]
        self._condition.notify_all()


class _BuilderStore(IContainer):
    """Shared builder bookkeeping for the container variants."""

    def __init__(self, *, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._lock_mode = lock_mode
        self._builders: dict[str, Builder] = {}
        # Guards every read and write of the store dictionaries.
        self._store_lock = self._new_lock()

    @property
    def lock_mode(self) -> LockMode:
        """Locking strategy selected at construction."""
        return self._lock_mode

    def _new_lock(self) -> AbstractContextManager[Any]:
        if self._lock_mode is LockMode.NONE:
            return nullcontext()
        return threading.RLock()

    def _validate_builder(self, builder: Builder, key: str) -> None:
        if not callable(builder):
            msg = f"Builder for key '{key}' must be callable, got {builder!r}."
            raise DIRegistryInvalidRegistrationError(msg)


class DependencyContainer(_BuilderStore):
    """Container that builds each dependency once and caches the result.

    A key moves from *registered* (a pending builder) to *cached* (a built
    instance) on its first successful resolution; the builder is then dropped
    and never invoked again. A builder that raises leaves the key registered,
    so the next resolution tries again. Registering the key again replaces the
    builder and discards the cached instance.

    Resolution is linearizable per key: concurrent resolvers of a registered
    key invoke its builder at most once and all receive the same instance.
    Builders run under a reentrant per-key lock, so a builder may resolve other
    dependencies from the same container.
    ``clear`` waits for builds on other threads to finish before emptying the
    store.

    Examples:
        .. code-block:: python

            container = DependencyContainer()
            container.register(Database)

            first = container.resolve(Database)
            assert container.resolve(Database) is first

    """

    def __init__(self, *, lock_mode: LockMode = LockMode.THREAD) -> None:
        """Initialize an empty caching container.

        Args:
            lock_mode: ``LockMode.THREAD`` (default) guards builds and store
                access with reentrant thread locks. ``LockMode.NONE`` disables
                locking for single-threaded use.

        """
        super().__init__(lock_mode=lock_mode)
        self._instances: dict[str, BuiltInstance] = {}
        self._key_locks: dict[str, AbstractContextManager[Any]] = {}
        self._gate = _BuildGate() if lock_mode is LockMode.THREAD else None
        # Bumped by clear() so builds started before it never publish afterwards.
        self._generation = 0

    def set(self, builder: Builder, key: str) -> None:
        """Store a builder for a key and drop any instance cached under it.

        Waits for an in-flight build of the same key to finish first.

        Args:
            builder: Zero-argument callable invoked on first resolution.
            key: Registration key.

        Raises:
            DIRegistryInvalidRegistrationError: If ``builder`` is not callable.

        """
        self._validate_builder(builder, key)
        with self._get_key_lock(key), self._store_lock:
            invalidated = self._instances.pop(key, None) is not None
            replaced = key in self._builders
            self._builders[key] = builder
        logger.debug(
            "Registered builder for key '%s' (replaced=%s, invalidated_instance=%s)",
            key,
            replaced,
            invalidated,
        )

    def clear(self) -> None:
        """Remove every builder and cached instance.

        Blocks until builds running on other threads have finished, and holds off
        new builds until the store is empty. A builder may call ``clear`` itself:
        its own build then returns the value to its caller without caching it.
        """
        with self._exclusive(), self._store_lock:
            self._builders.clear()
            self._instances.clear()
            self._generation += 1
        logger.debug("Cleared %s", type(self).__name__)

    def all_keys(self) -> list[str]:
        """Return the sorted keys of pending builders and cached instances."""
        with self._store_lock:
            return sorted(self._builders.keys() | self._instances.keys())

    def _building(self) -> AbstractContextManager[Any]:
        return nullcontext() if self._gate is None else self._gate.build()

    def _exclusive(self) -> AbstractContextManager[Any]:
        return nullcontext() if self._gate is None else self._gate.exclusive()

    def _get_key_lock(self, key: str) -> AbstractContextManager[Any]:
        with self._store_lock:
            key_lock = self._key_locks.get(key)
            if key_lock is None:
                key_lock = self._new_lock()
                self._key_locks[key] = key_lock
            return key_lock

    def _materialize(self, key: str) -> BuiltInstance:
        with self._store_lock:
            instance = self._instances.get(key)
            if instance is not None:
                return instance
            if key not in self._builders:
                raise DIRegistryInstanceNotAvailableError(key)

        with self._building(), self._get_key_lock(key):
            # Double-check: another resolver may have built it while we waited.
            with self._store_lock:
                instance = self._instances.get(key)
                if instance is not None:
                    return instance
                builder = self._builders.get(key)
                generation = self._generation
            if builder is None:
                raise DIRegistryInstanceNotAvailableError(key)

            instance = invoke_builder(key, builder)

            with self._store_lock:
                if self._generation == generation and self._builders.get(key) is builder:
                    del self._builders[key]
                    self._instances[key] = instance
            return instance


class RebuildingDependencyContainer(_BuilderStore):
    """Container that invokes the builder on every resolution.

    Nothing is cached: each ``resolve`` call returns whatever the builder
    produces at that moment, which is a fresh instance for class builders.
    Builders stay registered until replaced with ``set`` or removed by
    ``clear``. Builders run outside any lock, so concurrent resolutions build
    independently.

    Examples:
        .. code-block:: python

            container = RebuildingDependencyContainer()
            container.register(RequestContext)

            assert container.resolve(RequestContext) is not container.resolve(RequestContext)

    """

    def set(self, builder: Builder, key: str) -> None:
        """Store a builder for a key, replacing any previous one.

        Args:
            builder: Zero-argument callable invoked on every resolution.
            key: Registration key.

        Raises:
            DIRegistryInvalidRegistrationError: If ``builder`` is not callable.

        """
        self._validate_builder(builder, key)
        with self._store_lock:
            replaced = key in self._builders
            self._builders[key] = builder
        logger.debug("Registered builder for key '%s' (replaced=%s)", key, replaced)

    def clear(self) -> None:
        """Remove every builder."""
        with self._store_lock:
            self._builders.clear()
        logger.debug("Cleared %s", type(self).__name__)

    def all_keys(self) -> list[str]:
        """Return the sorted keys of registered builders."""
        with self._store_lock:
            return sorted(self._builders)

    def _materialize(self, key: str) -> BuiltInstance:
        with self._store_lock:
            builder = self._builders.get(key)
        if builder is None:
            raise DIRegistryInstanceNotAvailableError(key)
        return invoke_builder(key, builder)


__all__ = ["DependencyContainer", "RebuildingDependencyContainer"]
