import logging

from diregistry.builders import Builder, BuiltInstance
from diregistry.container import DependencyContainer, RebuildingDependencyContainer
from diregistry.container_context import ContainerContext, container_context
from diregistry.container_interface import INFER, IContainer
from diregistry.descriptors import Resolved
from diregistry.exceptions import (
    DIRegistryCircularDependencyError,
    DIRegistryError,
    DIRegistryInstanceNotAvailableError,
    DIRegistryInvalidRegistrationError,
    DIRegistryTypeMismatchError,
)
from diregistry.injection import inject
from diregistry.keys import derive_key
from diregistry.lock_mode import LockMode
from diregistry.markers import Injected, Named

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "INFER",
    "Builder",
    "BuiltInstance",
    "ContainerContext",
    "DIRegistryCircularDependencyError",
    "DIRegistryError",
    "DIRegistryInstanceNotAvailableError",
    "DIRegistryInvalidRegistrationError",
    "DIRegistryTypeMismatchError",
    "DependencyContainer",
    "IContainer",
    "Injected",
    "LockMode",
    "Named",
    "RebuildingDependencyContainer",
    "Resolved",
    "container_context",
    "derive_key",
    "inject",
]
