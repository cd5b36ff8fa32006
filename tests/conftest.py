"""Shared pytest fixtures for diregistry tests."""

from collections.abc import Iterator

import pytest

from diregistry.container import DependencyContainer, RebuildingDependencyContainer
from diregistry.container_context import container_context


@pytest.fixture()
def container() -> DependencyContainer:
    """Caching container with default thread locking."""
    return DependencyContainer()


@pytest.fixture()
def rebuilding_container() -> RebuildingDependencyContainer:
    """Container that invokes builders on every resolution."""
    return RebuildingDependencyContainer()


@pytest.fixture(autouse=True)
def _reset_container_context() -> Iterator[None]:
    yield
    container_context.reset()
