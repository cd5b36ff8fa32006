from __future__ import annotations

import inspect
from typing import Any, Generic, TypeVar, get_type_hints, overload

from diregistry.container_context import container_context
from diregistry.container_interface import IContainer
from diregistry.exceptions import DIRegistryError, DIRegistryInvalidRegistrationError

T = TypeVar("T")

_MISSING: Any = object()


class Resolved(Generic[T]):
    """Attribute descriptor that resolves a dependency on first access.

    The dependency type comes from the explicit ``dependency`` argument or,
    when omitted, from the owner class annotation of the attribute. The value
    is resolved once per owner instance and stored in the instance ``__dict__``
    under the attribute name, so later reads are plain attribute lookups.
    Instances without a ``__dict__`` (owners that declare ``__slots__``) get a
    fresh resolution on every access instead.

    When resolution fails with a ``DIRegistryError`` the descriptor returns
    ``default`` if one was given and re-raises otherwise.

    Examples:
        .. code-block:: python

            class CheckoutService:
                repository: OrderRepository = Resolved()
                cache: Cache = Resolved(name="checkout-cache")
                metrics: Metrics = Resolved(default=None)

    """

    def __init__(
        self,
        dependency: Any = None,
        *,
        name: str | None = None,
        container: IContainer | None = None,
        default: Any = _MISSING,
    ) -> None:
        """Configure how the attribute resolves.

        Args:
            dependency: Requested type. Defaults to the class annotation of the
                attribute.
            name: Optional explicit registration key.
            container: Container to resolve from. Defaults to the shared
                ``container_context`` container at access time.
            default: Value returned when resolution fails.

        """
        self._dependency = dependency
        self._name = name
        self._container = container
        self._default = default
        self._attribute_name: str | None = None

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self._attribute_name = name
        if self._dependency is not None:
            return
        try:
            annotation = get_type_hints(owner, include_extras=True).get(name)
        except NameError:
            annotation = inspect.get_annotations(owner).get(name)
        if annotation is None:
            msg = (
                f"Resolved attribute '{owner.__qualname__}.{name}' needs a class annotation "
                "or an explicit dependency type."
            )
            raise DIRegistryInvalidRegistrationError(msg)
        self._dependency = annotation

    @overload
    def __get__(self, obj: None, objtype: type[Any] | None = None) -> Resolved[T]: ...

    @overload
    def __get__(self, obj: object, objtype: type[Any] | None = None) -> T: ...

    def __get__(self, obj: object | None, objtype: type[Any] | None = None) -> Any:
        if obj is None:
            return self
        value = self._resolve()
        instance_dict = getattr(obj, "__dict__", None)
        if self._attribute_name is not None and instance_dict is not None:
            instance_dict[self._attribute_name] = value
        return value

    def _resolve(self) -> Any:
        container = self._container
        if container is None:
            container = container_context.get_current()
        try:
            return container.resolve(self._dependency, self._name)
        except DIRegistryError:
            if self._default is _MISSING:
                raise
            return self._default

    def __repr__(self) -> str:
        return f"Resolved({self._dependency!r}, name={self._name!r})"


__all__ = ["Resolved"]
