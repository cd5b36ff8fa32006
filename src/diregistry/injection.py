from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, get_type_hints, overload

from diregistry.container_context import container_context
from diregistry.container_interface import IContainer
from diregistry.exceptions import DIRegistryInvalidRegistrationError
from diregistry.markers import is_injected_annotation, strip_injected_annotation

InjectableF = TypeVar("InjectableF", bound=Callable[..., Any])
INJECT_WRAPPER_MARKER = "__diregistry_inject_wrapper__"


@dataclass(frozen=True, slots=True)
class InjectedParameter:
    """Injected parameter metadata for callable wrapper generation."""

    name: str
    dependency: Any


@dataclass(frozen=True, slots=True)
class InjectedCallableInspection:
    """Injection metadata derived from a callable signature and annotations."""

    signature: inspect.Signature
    injected_parameters: tuple[InjectedParameter, ...]
    public_signature: inspect.Signature


@dataclass(slots=True)
class InjectedCallableInspector:
    """Inspect callables for Injected[...] parameters and public signature filtering."""

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> InjectedCallableInspection:
        """Build injection metadata and a public signature for a callable."""
        signature = inspect.signature(callable_obj)
        injected_parameters = self.extract_injected_parameters(
            callable_obj=callable_obj,
            signature=signature,
        )
        public_signature = self.build_public_injected_signature(
            signature=signature,
            hidden_parameter_names={parameter.name for parameter in injected_parameters},
        )
        return InjectedCallableInspection(
            signature=signature,
            injected_parameters=injected_parameters,
            public_signature=public_signature,
        )

    def extract_injected_parameters(
        self,
        *,
        callable_obj: Callable[..., Any],
        signature: inspect.Signature,
    ) -> tuple[InjectedParameter, ...]:
        """Extract injected parameter metadata from a callable."""
        resolved_annotations = self.resolved_annotations_for_injection(callable_obj=callable_obj)
        injected_parameters: list[InjectedParameter] = []
        for parameter in signature.parameters.values():
            annotation = resolved_annotations.get(parameter.name, parameter.annotation)
            if not is_injected_annotation(annotation):
                continue
            if parameter.kind not in (
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
                inspect.Parameter.KEYWORD_ONLY,
            ):
                msg = (
                    f"Injected parameter '{parameter.name}' of "
                    f"'{getattr(callable_obj, '__qualname__', callable_obj)!r}' must be "
                    "passable by keyword."
                )
                raise DIRegistryInvalidRegistrationError(msg)
            injected_parameters.append(
                InjectedParameter(
                    name=parameter.name,
                    dependency=strip_injected_annotation(annotation),
                ),
            )

        return tuple(injected_parameters)

    def resolved_annotations_for_injection(
        self,
        *,
        callable_obj: Callable[..., Any],
    ) -> dict[str, Any]:
        """Resolve callable annotations with extras, falling back to an empty mapping."""
        try:
            return get_type_hints(callable_obj, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}

    def build_public_injected_signature(
        self,
        *,
        signature: inspect.Signature,
        hidden_parameter_names: set[str],
    ) -> inspect.Signature:
        """Build a signature that hides injected parameters."""
        filtered_parameters = [
            parameter
            for parameter in signature.parameters.values()
            if parameter.name not in hidden_parameter_names
        ]
        return signature.replace(parameters=filtered_parameters)


_INJECTED_CALLABLE_INSPECTOR = InjectedCallableInspector()


@dataclass(frozen=True, slots=True)
class _InjectedCall:
    """Rebuild call arguments for a wrapped callable, adding resolved dependencies."""

    inspection: InjectedCallableInspection
    container_getter: Callable[[], IContainer]

    def arguments(
        self,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        # Explicitly passed injected arguments override resolution.
        injected_values = {
            parameter.name: kwargs.pop(parameter.name)
            for parameter in self.inspection.injected_parameters
            if parameter.name in kwargs
        }
        bound = self.inspection.public_signature.bind(*args, **kwargs)

        container: IContainer | None = None
        for parameter in self.inspection.injected_parameters:
            if parameter.name in injected_values:
                continue
            if container is None:
                container = self.container_getter()
            injected_values[parameter.name] = container.resolve(parameter.dependency)

        return self._merge(bound.arguments, injected_values)

    def _merge(
        self,
        bound_arguments: dict[str, Any],
        injected_values: dict[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        parameters = self.inspection.signature.parameters.values()
        # Parameters ahead of *args must stay positional.
        positional_phase = any(
            parameter.kind is inspect.Parameter.VAR_POSITIONAL for parameter in parameters
        )
        call_args: list[Any] = []
        call_kwargs: dict[str, Any] = {}
        for parameter in parameters:
            name = parameter.name
            if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                call_args.extend(bound_arguments.get(name, ()))
                positional_phase = False
                continue
            if parameter.kind is inspect.Parameter.VAR_KEYWORD:
                call_kwargs.update(bound_arguments.get(name, {}))
                continue

            if name in injected_values:
                value = injected_values[name]
            elif name in bound_arguments:
                value = bound_arguments[name]
            elif positional_phase and parameter.kind is not inspect.Parameter.KEYWORD_ONLY:
                value = parameter.default
            else:
                continue

            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY or positional_phase:
                call_args.append(value)
            else:
                call_kwargs[name] = value
        return call_args, call_kwargs


def _shared_container() -> IContainer:
    return container_context.get_current()


@overload
def inject(
    func: InjectableF,
    /,
    *,
    container: IContainer | None = None,
    container_getter: Callable[[], IContainer] | None = None,
) -> InjectableF: ...


@overload
def inject(
    func: None = None,
    /,
    *,
    container: IContainer | None = None,
    container_getter: Callable[[], IContainer] | None = None,
) -> Callable[[InjectableF], InjectableF]: ...


def inject(
    func: InjectableF | None = None,
    /,
    *,
    container: IContainer | None = None,
    container_getter: Callable[[], IContainer] | None = None,
) -> InjectableF | Callable[[InjectableF], InjectableF]:
    """Wrap a callable so its ``Injected[...]`` parameters are resolved on each call.

    Injected parameters are removed from the wrapper's public ``__signature__``;
    callers pass only the remaining arguments. Passing an injected parameter
    explicitly by keyword overrides resolution for that call. Resolution errors
    propagate unchanged to the caller.

    Without ``container`` or ``container_getter``, dependencies resolve from
    ``container_context`` at call time.

    Args:
        func: Callable to wrap. When omitted, a decorator is returned.
        container: Fixed container to resolve from.
        container_getter: Zero-argument callable returning the container to
            resolve from, evaluated on each call.

    Raises:
        DIRegistryInvalidRegistrationError: If both ``container`` and
            ``container_getter`` are given, or an injected parameter is
            positional-only or variadic.

    Examples:
        .. code-block:: python

            @inject
            def handle(order_id: int, repository: Injected[OrderRepository]) -> Order:
                return repository.get(order_id)


            order = handle(42)

    """
    if container is not None and container_getter is not None:
        msg = "inject() accepts either 'container' or 'container_getter', not both."
        raise DIRegistryInvalidRegistrationError(msg)

    if func is None:

        def decorator(decorated: InjectableF) -> InjectableF:
            return inject(decorated, container=container, container_getter=container_getter)

        return decorator

    if container is not None:
        fixed_container = container

        def _fixed() -> IContainer:
            return fixed_container

        getter: Callable[[], IContainer] = _fixed
    else:
        getter = container_getter or _shared_container

    inspection = _INJECTED_CALLABLE_INSPECTOR.inspect_callable(func)
    injected_call = _InjectedCall(inspection=inspection, container_getter=getter)

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def _async_injected(*args: Any, **kwargs: Any) -> Any:
            call_args, call_kwargs = injected_call.arguments(args, kwargs)
            return await func(*call_args, **call_kwargs)

        wrapper: Any = _async_injected
    else:

        @functools.wraps(func)
        def _sync_injected(*args: Any, **kwargs: Any) -> Any:
            call_args, call_kwargs = injected_call.arguments(args, kwargs)
            return func(*call_args, **call_kwargs)

        wrapper = _sync_injected

    wrapper.__signature__ = inspection.public_signature
    setattr(wrapper, INJECT_WRAPPER_MARKER, True)
    return wrapper  # type: ignore[no-any-return]


__all__ = [
    "INJECT_WRAPPER_MARKER",
    "InjectedCallableInspection",
    "InjectedCallableInspector",
    "InjectedParameter",
    "inject",
]
