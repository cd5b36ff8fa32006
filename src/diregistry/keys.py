from __future__ import annotations

import types
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Literal,
    ParamSpec,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from diregistry.markers import find_named

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def derive_key(dependency: Any, name: str | None = None) -> str:
    """Return the registration key for a dependency.

    An explicit ``name`` always wins and is returned verbatim. Otherwise the key
    is derived from the type descriptor with :func:`describe_type`. Explicit and
    derived keys share one namespace, so ``name="Service"`` and the class
    ``Service`` address the same slot.

    Args:
        dependency: Type descriptor the key is derived from when ``name`` is
            omitted.
        name: Optional explicit key.

    Examples:
        .. code-block:: python

            derive_key(Service) == "Service"
            derive_key(type[Service]) == "Service"
            derive_key(Service, name="primary") == "primary"

    """
    if name is not None:
        return name
    return describe_type(dependency)


def describe_type(descriptor: Any) -> str:  # noqa: C901, PLR0911
    """Return the canonical, human-readable key for a type descriptor.

    A type and its metatype wrapper describe identically: ``Service``,
    ``type[Service]`` and ``typing.Type[Service]`` all produce ``"Service"``.
    Classes describe by ``__name__`` only, so same-named classes declared in
    different modules share a key.

    Args:
        descriptor: Class, typing construct, forward-reference string, or any
            other object (described by its runtime type).

    """
    if descriptor is Any:
        return "Any"
    if descriptor is None or descriptor is types.NoneType:
        return "None"
    if descriptor is Ellipsis:
        return "..."
    if isinstance(descriptor, str):
        return descriptor
    if isinstance(descriptor, ForwardRef):
        return descriptor.__forward_arg__
    if isinstance(descriptor, list):
        return "[" + ", ".join(describe_type(item) for item in descriptor) + "]"
    if isinstance(descriptor, (TypeVar, ParamSpec)):
        return descriptor.__name__
    if getattr(descriptor, "__supertype__", None) is not None:
        # typing.NewType
        return str(descriptor.__name__)

    origin = get_origin(descriptor)
    if origin is not None:
        return _describe_parameterized(descriptor, origin)

    if isinstance(descriptor, type):
        return descriptor.__name__

    return describe_type(type(descriptor))


def _describe_parameterized(descriptor: Any, origin: Any) -> str:
    args = get_args(descriptor)
    if origin is Annotated:
        named = find_named(descriptor)
        if named is not None:
            return named.value
        return describe_type(args[0])
    if origin is type and len(args) == 1:
        return describe_type(args[0])
    if origin in _UNION_ORIGINS:
        return " | ".join(describe_type(arg) for arg in args)
    if origin is Literal:
        return "Literal[" + ", ".join(repr(arg) for arg in args) + "]"
    if not args:
        return describe_type(origin)
    return describe_type(origin) + "[" + ", ".join(describe_type(arg) for arg in args) + "]"


__all__ = ["derive_key", "describe_type"]
