from __future__ import annotations

from typing import TypeVar

from pydantic_settings import BaseSettings

from diregistry.container_interface import IContainer
from diregistry.exceptions import DIRegistryInvalidRegistrationError
from diregistry.type_checks import is_runtime_class

SettingsT = TypeVar("SettingsT")


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a ``pydantic_settings.BaseSettings`` subclass.

    Instances and non-class objects return ``False``.

    Args:
        candidate: Object to test.

    """
    if not is_runtime_class(candidate):
        return False
    return issubclass(candidate, BaseSettings)


def register_settings(
    container: IContainer,
    settings_type: type[SettingsT],
    *,
    as_name: str | None = None,
) -> type[SettingsT]:
    """Register a settings model so it is read from the environment on first resolution.

    The settings class itself is the builder: resolving it instantiates the
    model, which loads values from environment variables and dotenv files as
    configured on the model. A caching container keeps the loaded settings for
    the rest of its lifetime; a validation error while loading surfaces as
    ``DIRegistryInstanceNotAvailableError`` with the ``ValidationError`` as its
    cause.

    Args:
        container: Container to register into.
        settings_type: ``BaseSettings`` subclass.
        as_name: Optional explicit key.

    Raises:
        DIRegistryInvalidRegistrationError: If ``settings_type`` is not a
            pydantic settings model.

    Examples:
        .. code-block:: python

            class AppSettings(BaseSettings):
                database_url: str = "sqlite://"


            register_settings(container, AppSettings)
            settings = container.resolve(AppSettings)

    """
    if not is_pydantic_settings_subclass(settings_type):
        msg = (
            f"register_settings() expects a pydantic BaseSettings subclass, "
            f"got {settings_type!r}."
        )
        raise DIRegistryInvalidRegistrationError(msg)
    return container.register(settings_type, as_name=as_name)


__all__ = [
    "is_pydantic_settings_subclass",
    "register_settings",
]
