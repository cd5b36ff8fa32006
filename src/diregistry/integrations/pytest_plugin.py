from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from diregistry.container import DependencyContainer
from diregistry.container_context import container_context
from diregistry.container_interface import IContainer


@contextmanager
def bind_shared_container(container: IContainer) -> Iterator[IContainer]:
    """Bind ``container`` as the shared container for the duration of the block.

    On exit the container is cleared and the previous binding is restored, so
    nothing registered inside the block leaks into later code.

    Args:
        container: Container that ``container_context`` proxies to inside the block.

    Yields:
        The bound container.

    """
    previous = container_context.set_current(container)
    try:
        yield container
    finally:
        container.clear()
        if previous is None:
            container_context.reset()
        else:
            container_context.set_current(previous)


@pytest.fixture()
def diregistry_container() -> IContainer:
    """Create the container bound as the shared container for one test.

    Override the fixture to pre-register test doubles or to switch to a
    ``RebuildingDependencyContainer``.

    Returns:
        A new ``DependencyContainer`` instance.

    """
    return DependencyContainer()


@pytest.fixture(autouse=True)
def _diregistry_shared_container(diregistry_container: IContainer) -> Iterator[IContainer]:
    """Route ``container_context`` to the per-test container, then clear it."""
    with bind_shared_container(diregistry_container) as container:
        yield container
