"""Pydantic settings as cached dependencies.

``register_settings`` registers a ``BaseSettings`` model as its own builder:
the environment is read on first resolution and the loaded settings are then
cached by the container.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from diregistry import DependencyContainer
from diregistry.integrations.pydantic_settings import register_settings


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DIREGISTRY_EXAMPLE_")

    database_url: str = "sqlite://"
    debug: bool = False


def main() -> None:
    container = DependencyContainer()
    register_settings(container, AppSettings)

    os.environ["DIREGISTRY_EXAMPLE_DEBUG"] = "true"
    settings = container.resolve(AppSettings)
    print(f"database_url={settings.database_url}")  # => database_url=sqlite://
    print(f"debug={settings.debug}")  # => debug=True

    os.environ["DIREGISTRY_EXAMPLE_DEBUG"] = "false"
    cached = container.resolve(AppSettings) is settings
    print(f"cached={cached}")  # => cached=True


if __name__ == "__main__":
    main()
