from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Final, TypeVar, overload

from diregistry.builders import Builder, BuilderReturnTypeExtractor, BuiltInstance
from diregistry.exceptions import (
    DIRegistryInstanceNotAvailableError,
    DIRegistryTypeMismatchError,
)
from diregistry.keys import derive_key

T = TypeVar("T")
B = TypeVar("B", bound=Builder)
InjectableF = TypeVar("InjectableF", bound=Callable[..., Any])


class _Infer:
    def __repr__(self) -> str:
        return "INFER"


INFER: Final = _Infer()
"""Sentinel telling ``register`` to infer the contract type from the builder."""

_RETURN_TYPE_EXTRACTOR = BuilderReturnTypeExtractor()


class IContainer(ABC):
    """Interface for dependency containers.

    Implementations own the underlying builder store and decide how values are
    produced from it. The interface supplies the typed ``register``/``resolve``
    facade on top of the four storage primitives, so a custom container only
    implements ``set``, ``clear``, ``all_keys`` and ``_materialize``.

    Start from ``DependencyContainer`` (build once, cache forever) or
    ``RebuildingDependencyContainer`` (build on every resolution) and implement
    this interface only when custom storage behavior is needed.
    """

    @abstractmethod
    def set(self, builder: Builder, key: str) -> None:
        """Store a builder for a key, replacing any previous builder or instance.

        Args:
            builder: Zero-argument callable invoked when the key is resolved.
            key: Registration key.

        """

    @abstractmethod
    def clear(self) -> None:
        """Remove every builder and built instance from the container."""

    @abstractmethod
    def all_keys(self) -> list[str]:
        """Return the sorted, duplicate-free list of registered keys."""

    @abstractmethod
    def _materialize(self, key: str) -> BuiltInstance:
        """Produce the instance for a key or raise ``DIRegistryInstanceNotAvailableError``."""

    def lookup(self, key: str) -> BuiltInstance | None:
        """Return the type-erased instance for a key, or ``None`` when unavailable.

        A missing key and a failing builder both produce ``None``; use
        ``resolve`` to get the failure cause.

        Args:
            key: Registration key.

        """
        try:
            return self._materialize(key)
        except DIRegistryInstanceNotAvailableError:
            return None

    @overload
    def register(
        self,
        builder: B,
        /,
        *,
        for_type: Any = ...,
        as_name: str | None = ...,
    ) -> B: ...

    @overload
    def register(
        self,
        builder: None = None,
        /,
        *,
        for_type: Any = ...,
        as_name: str | None = ...,
    ) -> Callable[[B], B]: ...

    def register(
        self,
        builder: B | None = None,
        /,
        *,
        for_type: Any = INFER,
        as_name: str | None = None,
    ) -> B | Callable[[B], B]:
        """Register a builder under an explicit or inferred key.

        Without ``as_name`` the key is derived from ``for_type``. When
        ``for_type`` is omitted the builder's own result type is used: the class
        itself for class builders, the return annotation for function builders.
        Pass a base class or protocol as ``for_type`` to expose the built value
        under that contract instead of its concrete type.

        Re-registering a key replaces the previous builder and drops any cached
        instance.

        Args:
            builder: Zero-argument callable. When omitted, a decorator is
                returned.
            for_type: Contract type the key is derived from.
            as_name: Explicit key; takes precedence over ``for_type``.

        Returns:
            The builder itself, so the method can be used as a decorator.

        Raises:
            DIRegistryInvalidRegistrationError: If the builder is not callable or
                its result type cannot be inferred.

        Examples:
            .. code-block:: python

                container.register(Database)
                container.register(PostgresRepository, for_type=Repository)
                container.register(lambda: Cache(size=10), as_name="cache")


                @container.register
                def make_client() -> Client:
                    return Client(timeout=5)

        """
        if builder is None:

            def decorator(decorated: B) -> B:
                return self.register(decorated, for_type=for_type, as_name=as_name)

            return decorator

        if as_name is not None:
            key = as_name
        elif for_type is INFER:
            key = derive_key(_RETURN_TYPE_EXTRACTOR.extract(builder))
        else:
            key = derive_key(for_type)

        self.set(builder, key)
        return builder

    @overload
    def resolve(self, dependency: type[T], /, name: str | None = None) -> T: ...

    @overload
    def resolve(self, dependency: Any, /, name: str | None = None) -> Any: ...

    def resolve(self, dependency: Any, /, name: str | None = None) -> Any:
        """Resolve a typed instance for a dependency.

        The key is ``name`` when given, otherwise it is derived from
        ``dependency`` the same way ``register`` derives it. The produced value
        is checked against ``dependency`` before it is returned.

        Args:
            dependency: Requested static type.
            name: Optional explicit key used at registration.

        Returns:
            The resolved value.

        Raises:
            DIRegistryInstanceNotAvailableError: If nothing is registered for
                the key or the builder raised.
            DIRegistryTypeMismatchError: If a value exists but is not assignable
                to ``dependency``.

        Examples:
            .. code-block:: python

                database = container.resolve(Database)
                cache = container.resolve(Cache, name="cache")

        """
        key = derive_key(dependency, name)
        instance = self._materialize(key)
        if not instance.is_assignable_to(dependency):
            raise DIRegistryTypeMismatchError(key, dependency, instance.value_type)
        return instance.value

    def is_registered(self, dependency: Any, /, name: str | None = None) -> bool:
        """Return whether a builder or instance exists for the derived key."""
        return derive_key(dependency, name) in self.all_keys()

    def inject(self, func: InjectableF) -> InjectableF:
        """Wrap a callable so its ``Injected[...]`` parameters resolve from this container.

        Args:
            func: Callable with ``Injected[...]`` parameters.

        """
        from diregistry.injection import inject  # noqa: PLC0415

        return inject(func, container=self)

    def __contains__(self, key: object) -> bool:
        return key in self.all_keys()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} keys={self.all_keys()!r}>"
