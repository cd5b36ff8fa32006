from __future__ import annotations

import types
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Literal,
    ParamSpec,
    TypeGuard,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from typing_extensions import get_protocol_members, is_protocol

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_assignable(value: Any, expected: Any) -> bool:  # noqa: C901, PLR0911, PLR0912
    """Return whether a runtime value satisfies a requested static type.

    Generic parameters are erased at runtime, so ``list[int]`` only checks that
    the value is a ``list``. Protocols that are not ``@runtime_checkable`` are
    checked structurally against their members. Typing constructs that carry no
    runtime information (for example ``Callable`` parameters or ``ParamSpec``)
    are accepted.

    Args:
        value: The built instance.
        expected: Type descriptor passed to ``resolve``.

    """
    if expected is Any or expected is object:
        return True
    if expected is None or expected is types.NoneType:
        return value is None
    if isinstance(expected, (str, ForwardRef)):
        name = expected if isinstance(expected, str) else expected.__forward_arg__
        return any(cls.__name__ == name for cls in type(value).__mro__)
    if isinstance(expected, TypeVar):
        if expected.__bound__ is not None:
            return is_assignable(value, expected.__bound__)
        if expected.__constraints__:
            return any(is_assignable(value, item) for item in expected.__constraints__)
        return True
    if isinstance(expected, ParamSpec):
        return True
    supertype = getattr(expected, "__supertype__", None)
    if supertype is not None:
        # typing.NewType
        return is_assignable(value, supertype)

    origin = get_origin(expected)
    if origin is not None:
        args = get_args(expected)
        if origin is Annotated:
            return is_assignable(value, args[0])
        if origin in _UNION_ORIGINS:
            return any(is_assignable(value, arg) for arg in args)
        if origin is Literal:
            return value in args
        if origin is type:
            return is_runtime_class(value) and (
                not args or args[0] is Any or _is_subclass(value, args[0])
            )
        return is_assignable(value, origin)

    if not is_runtime_class(expected):
        return True
    if _is_structural_protocol(expected):
        return all(hasattr(value, member) for member in get_protocol_members(expected))
    return isinstance(value, expected)


def _is_subclass(candidate: type[Any], expected: Any) -> bool:
    if not is_runtime_class(expected):
        return True
    if _is_structural_protocol(expected):
        return all(hasattr(candidate, member) for member in get_protocol_members(expected))
    return issubclass(candidate, expected)


def _is_structural_protocol(expected: type[Any]) -> bool:
    return is_protocol(expected) and not getattr(expected, "_is_runtime_protocol", False)


__all__ = ["is_assignable", "is_runtime_class"]
