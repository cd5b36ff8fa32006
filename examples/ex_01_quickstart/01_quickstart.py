"""Quickstart: register builders under keys and resolve typed instances.

Register a class and a factory function, resolve them by type, and see that
the default container builds each dependency once.
"""

from __future__ import annotations

from diregistry import DependencyContainer


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


def main() -> None:
    container = DependencyContainer()
    container.register(Database)

    @container.register
    def make_repository() -> UserRepository:
        return UserRepository(container.resolve(Database))

    repository = container.resolve(UserRepository)
    print(f"db_host={repository.database.host}")  # => db_host=localhost

    same_repository = container.resolve(UserRepository) is repository
    print(f"same_repository={same_repository}")  # => same_repository=True

    shared_database = repository.database is container.resolve(Database)
    print(f"shared_database={shared_database}")  # => shared_database=True

    print(f"keys={container.all_keys()}")  # => keys=['Database', 'UserRepository']


if __name__ == "__main__":
    main()
