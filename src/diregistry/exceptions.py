from __future__ import annotations

from typing import Any

from diregistry.keys import describe_type


class DIRegistryError(Exception):
    """Represent a base class for all diregistry-specific failures.

    Catch this type when you want to handle any diregistry error path without
    matching each concrete exception class individually.
    """


class DIRegistryInvalidRegistrationError(DIRegistryError):
    """Signal invalid registration or injection configuration.

    Raised by ``set`` when the builder is not callable, by ``register`` when no
    key can be derived for the builder, and by ``Resolved`` when the attribute
    type cannot be determined.

    Typical fixes include annotating the builder's return type, passing
    ``for_type=...`` or ``as_name=...`` explicitly, or registering a callable.
    """


class DIRegistryInstanceNotAvailableError(DIRegistryError):
    """Signal that no instance can be produced for a key.

    Raised by ``resolve`` when neither a builder nor a cached instance exists for
    the key, and also when the registered builder raised while building. In the
    second case the builder's exception is available as ``cause`` and chained as
    ``__cause__``.

    Typical fixes include registering the dependency before resolving it,
    resolving with the same ``name`` used at registration, or fixing the
    failing builder.
    """

    def __init__(
        self,
        key: str,
        cause: BaseException | None = None,
        *,
        message: str | None = None,
    ) -> None:
        self.key = key
        self.cause = cause
        super().__init__(message or f"Instance with key '{key}' not found.")


class DIRegistryTypeMismatchError(DIRegistryError):
    """Signal that a built instance is incompatible with the requested type.

    Raised by ``resolve`` when a value exists for the key but its runtime type
    is not assignable to the type passed to ``resolve``.

    Typical fixes include resolving with the contract type used at
    registration or registering under a distinct ``as_name``.
    """

    def __init__(self, key: str, expected: Any, actual: type[Any]) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Instance with key '{key}' has type '{actual.__qualname__}', "
            f"which is not assignable to '{describe_type(expected)}'.",
        )


class DIRegistryCircularDependencyError(DIRegistryInstanceNotAvailableError):
    """Signal that a builder resolved its own key while building it.

    Raised when a builder, directly or through other builders on the same
    thread, resolves the key it is currently building. It subclasses
    ``DIRegistryInstanceNotAvailableError`` because the instance cannot be
    produced; ``chain`` lists the keys being built, outermost first.

    Typical fix is breaking the cycle, for example by resolving one side lazily
    inside a method instead of inside the builder.
    """

    def __init__(self, key: str, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__(
            key,
            message=f"Circular dependency while building '{key}': {' -> '.join(chain)}.",
        )
