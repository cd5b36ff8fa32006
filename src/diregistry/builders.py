from __future__ import annotations

import functools
import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias, get_type_hints

from diregistry.exceptions import DIRegistryInvalidRegistrationError
from diregistry.type_checks import is_assignable, is_runtime_class

Builder: TypeAlias = Callable[[], Any]
"""A zero-argument, possibly raising factory producing a value of any type."""

_MISSING_ANNOTATION = object()


@dataclass(frozen=True, slots=True)
class BuiltInstance:
    """A built value tagged with its key and the runtime type captured at build time.

    Containers store and return these wrappers instead of bare values so that a
    builder returning ``None`` is distinguishable from a missing key, and so that
    the assignability check against the requested type is explicit.
    """

    key: str
    value: Any
    value_type: type[Any] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value_type", type(self.value))

    def is_assignable_to(self, expected: Any) -> bool:
        """Return whether the wrapped value satisfies ``expected``.

        Args:
            expected: Type descriptor requested by the caller.

        """
        return is_assignable(self.value, expected)


@dataclass(slots=True)
class BuilderReturnTypeExtractor:
    """Extracts the natural result type of a builder for key inference."""

    def extract(self, builder: Builder) -> Any:
        """Return the type a builder produces.

        Classes produce themselves. Functions produce their resolved return
        annotation. ``functools.partial`` objects are unwrapped first.

        Args:
            builder: Builder callable to inspect.

        Raises:
            DIRegistryInvalidRegistrationError: If the builder has no usable
                return annotation.

        """
        target: Any = builder
        while isinstance(target, functools.partial):
            target = target.func

        if is_runtime_class(target):
            return target

        return_annotation, annotation_error = self._resolved_return_annotation(target)
        if return_annotation in (_MISSING_ANNOTATION, None, types.NoneType):
            msg = (
                f"Unable to infer result type for builder '{self._builder_name(builder)}'. "
                "Add a return type annotation or pass for_type= or as_name= explicitly."
            )
            raise DIRegistryInvalidRegistrationError(msg) from annotation_error

        return return_annotation

    def _resolved_return_annotation(
        self,
        builder: Callable[..., Any],
    ) -> tuple[Any, Exception | None]:
        try:
            return_type_hints = get_type_hints(builder, include_extras=True)
            annotation_error: Exception | None = None
        except (AttributeError, NameError, TypeError) as error:
            return_type_hints = {}
            annotation_error = error

        resolved_return_annotation = return_type_hints.get("return", _MISSING_ANNOTATION)
        if resolved_return_annotation is not _MISSING_ANNOTATION:
            return resolved_return_annotation, annotation_error

        try:
            raw_return_annotation = inspect.signature(builder).return_annotation
        except (TypeError, ValueError) as error:
            if annotation_error is None:
                annotation_error = error
            return _MISSING_ANNOTATION, annotation_error

        if raw_return_annotation is inspect.Signature.empty:
            return _MISSING_ANNOTATION, annotation_error

        return raw_return_annotation, annotation_error

    def _builder_name(self, builder: Callable[..., Any]) -> str:
        return getattr(builder, "__qualname__", repr(builder))


__all__ = ["Builder", "BuilderReturnTypeExtractor", "BuiltInstance"]
