from __future__ import annotations

import logging
from contextvars import ContextVar

from diregistry.builders import Builder, BuiltInstance
from diregistry.exceptions import (
    DIRegistryCircularDependencyError,
    DIRegistryInstanceNotAvailableError,
)

logger = logging.getLogger(__name__)

# Keys whose builders are running in the current thread or task, outermost first.
_building_keys: ContextVar[tuple[str, ...]] = ContextVar("building_keys", default=())


def invoke_builder(key: str, builder: Builder) -> BuiltInstance:
    """Run a builder and wrap its result, converting failures into typed errors.

    Any ``Exception`` raised by the builder becomes
    ``DIRegistryInstanceNotAvailableError`` chained to the original error.
    Re-entering a key already being built in the current context raises
    ``DIRegistryCircularDependencyError`` instead of recursing.

    Args:
        key: Key the builder is registered under.
        builder: Builder to invoke.

    """
    building = _building_keys.get()
    if key in building:
        raise DIRegistryCircularDependencyError(key, (*building, key))

    token = _building_keys.set((*building, key))
    try:
        logger.debug("Invoking builder for key '%s'", key)
        value = builder()
    except Exception as error:
        logger.debug("Builder for key '%s' failed", key, exc_info=True)
        raise DIRegistryInstanceNotAvailableError(key, cause=error) from error
    finally:
        _building_keys.reset(token)

    return BuiltInstance(key=key, value=value)


def get_building_keys() -> tuple[str, ...]:
    """Return the keys currently being built in this context, outermost first."""
    return _building_keys.get()
