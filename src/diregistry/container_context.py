from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, TypeVar, overload

from diregistry.builders import Builder, BuiltInstance
from diregistry.container import DependencyContainer
from diregistry.container_interface import INFER, IContainer

T = TypeVar("T")
B = TypeVar("B", bound=Builder)
InjectableF = TypeVar("InjectableF", bound=Callable[..., Any])


class ContainerContext:
    """Holder of one shared, process-wide container.

    The active container binding is process-global for this
    ``ContainerContext`` instance. It is not task-local or thread-local. A
    default ``DependencyContainer`` is created on first use; bind a different
    one with ``set_current``.

    Nothing resets the shared container automatically. Call ``clear()`` between
    independent usage epochs (for example between test cases), or use the
    ``diregistry.integrations.pytest_plugin`` plugin which does it for you.
    """

    def __init__(self) -> None:
        self._container: IContainer | None = None
        self._lock = threading.Lock()

    def get_current(self) -> IContainer:
        """Return the shared container, creating the default one on first use."""
        container = self._container
        if container is not None:
            return container
        with self._lock:
            if self._container is None:
                self._container = DependencyContainer()
            return self._container

    def set_current(self, container: IContainer) -> IContainer | None:
        """Bind ``container`` as the shared container.

        Args:
            container: Container that subsequent proxy calls use.

        Returns:
            The previously bound container, or ``None`` when none was bound.

        """
        with self._lock:
            previous = self._container
            self._container = container
        return previous

    def reset(self) -> None:
        """Unbind the shared container; the next use creates a fresh default one."""
        with self._lock:
            self._container = None

    # region Proxies

    def set(self, builder: Builder, key: str) -> None:
        """Proxy ``set`` to the shared container."""
        self.get_current().set(builder, key)

    def clear(self) -> None:
        """Proxy ``clear`` to the shared container."""
        self.get_current().clear()

    def all_keys(self) -> list[str]:
        """Proxy ``all_keys`` to the shared container."""
        return self.get_current().all_keys()

    def lookup(self, key: str) -> BuiltInstance | None:
        """Proxy ``lookup`` to the shared container."""
        return self.get_current().lookup(key)

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
        """Proxy ``register`` to the shared container.

        The decorator form binds to whatever container is current when the
        decorator is applied.
        """
        return self.get_current().register(builder, for_type=for_type, as_name=as_name)

    @overload
    def resolve(self, dependency: type[T], /, name: str | None = None) -> T: ...

    @overload
    def resolve(self, dependency: Any, /, name: str | None = None) -> Any: ...

    def resolve(self, dependency: Any, /, name: str | None = None) -> Any:
        """Proxy ``resolve`` to the shared container."""
        return self.get_current().resolve(dependency, name)

    def inject(self, func: InjectableF) -> InjectableF:
        """Wrap ``func`` so ``Injected[...]`` parameters resolve from the current container."""
        from diregistry.injection import inject  # noqa: PLC0415

        return inject(func, container_getter=self.get_current)

    # endregion Proxies

    def __repr__(self) -> str:
        return f"<ContainerContext current={self._container!r}>"


container_context = ContainerContext()
"""The standard shared container holder."""


__all__ = ["ContainerContext", "container_context"]
