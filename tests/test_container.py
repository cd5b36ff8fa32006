"""Tests for the caching and rebuilding containers."""

from __future__ import annotations

from typing import Annotated, Protocol

import pytest

from diregistry.builders import BuiltInstance
from diregistry.container import DependencyContainer, RebuildingDependencyContainer
from diregistry.exceptions import (
    DIRegistryCircularDependencyError,
    DIRegistryInstanceNotAvailableError,
    DIRegistryInvalidRegistrationError,
    DIRegistryTypeMismatchError,
)
from diregistry.lock_mode import LockMode
from diregistry.markers import Named


class Database:
    pass


class Repository(Protocol):
    def get(self, key: str) -> str: ...


class InMemoryRepository:
    def get(self, key: str) -> str:
        return key


class ServiceA:
    pass


class ServiceB:
    pass


class CountingBuilder:
    """Builder that records how often it was invoked."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> Database:
        self.calls += 1
        return Database()


class TestCachingResolution:
    def test_resolve_builds_once_and_returns_cached_instance(
        self,
        container: DependencyContainer,
    ) -> None:
        builder = CountingBuilder()
        container.register(builder, for_type=Database)

        first = container.resolve(Database)
        second = container.resolve(Database)

        assert isinstance(first, Database)
        assert first is second
        assert builder.calls == 1

    def test_resolve_unregistered_key_raises_not_available(
        self,
        container: DependencyContainer,
    ) -> None:
        with pytest.raises(DIRegistryInstanceNotAvailableError) as exc_info:
            container.resolve(Database)

        assert exc_info.value.key == "Database"
        assert exc_info.value.cause is None
        assert str(exc_info.value) == "Instance with key 'Database' not found."

    def test_named_registration_resolves_by_name_only(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(Database, as_name="primary")

        assert isinstance(container.resolve(Database, name="primary"), Database)
        with pytest.raises(DIRegistryInstanceNotAvailableError):
            container.resolve(Database)

    def test_annotated_named_resolves_like_explicit_name(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(Database, as_name="replica")

        replica = container.resolve(Annotated[Database, Named("replica")])

        assert replica is container.resolve(Database, name="replica")

    def test_contract_registration_resolves_by_contract_only(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(InMemoryRepository, for_type=Repository)

        repository = container.resolve(Repository)

        assert isinstance(repository, InMemoryRepository)
        with pytest.raises(DIRegistryInstanceNotAvailableError):
            container.resolve(InMemoryRepository)

    def test_metatype_registration_shares_key_with_type(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(Database, for_type=type[Database])

        assert container.all_keys() == ["Database"]
        assert isinstance(container.resolve(Database), Database)

    def test_reregistering_drops_cached_instance(self, container: DependencyContainer) -> None:
        container.register(Database)
        first = container.resolve(Database)

        container.register(Database)
        second = container.resolve(Database)

        assert first is not second
        assert container.resolve(Database) is second

    def test_failed_builder_stays_registered_until_it_succeeds(
        self,
        container: DependencyContainer,
    ) -> None:
        attempts: list[int] = []

        def flaky_database() -> Database:
            attempts.append(len(attempts))
            if len(attempts) == 1:
                msg = "connection refused"
                raise RuntimeError(msg)
            return Database()

        container.register(flaky_database)

        with pytest.raises(DIRegistryInstanceNotAvailableError) as exc_info:
            container.resolve(Database)

        assert isinstance(exc_info.value.cause, RuntimeError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert container.all_keys() == ["Database"]

        instance = container.resolve(Database)

        assert container.resolve(Database) is instance
        assert len(attempts) == 2

    def test_builder_returning_none_is_not_missing(self, container: DependencyContainer) -> None:
        container.register(lambda: None, as_name="nothing")

        instance = container.lookup("nothing")

        assert instance is not None
        assert instance.value is None
        assert container.resolve(None, name="nothing") is None

    def test_builder_may_resolve_other_dependencies(self, container: DependencyContainer) -> None:
        container.register(Database)

        def make_repository() -> InMemoryRepository:
            container.resolve(Database)
            return InMemoryRepository()

        container.register(make_repository, for_type=Repository)

        assert isinstance(container.resolve(Repository), InMemoryRepository)
        assert container.all_keys() == ["Database", "Repository"]

    def test_circular_builders_raise_instead_of_recursing(
        self,
        container: DependencyContainer,
    ) -> None:
        def make_a() -> ServiceA:
            container.resolve(ServiceB)
            return ServiceA()

        def make_b() -> ServiceB:
            container.resolve(ServiceA)
            return ServiceB()

        container.register(make_a)
        container.register(make_b)

        with pytest.raises(DIRegistryInstanceNotAvailableError) as exc_info:
            container.resolve(ServiceA)

        inner = exc_info.value.cause
        assert exc_info.value.key == "ServiceA"
        assert isinstance(inner, DIRegistryInstanceNotAvailableError)
        assert inner.key == "ServiceB"
        assert isinstance(inner.cause, DIRegistryCircularDependencyError)
        assert inner.cause.chain == ("ServiceA", "ServiceB", "ServiceA")
        assert container.all_keys() == ["ServiceA", "ServiceB"]

    def test_clear_during_build_does_not_publish_instance(
        self,
        container: DependencyContainer,
    ) -> None:
        def make_database() -> Database:
            container.clear()
            return Database()

        container.register(make_database)

        assert isinstance(container.resolve(Database), Database)
        assert container.all_keys() == []

    def test_lock_mode_none_resolves_and_caches(self) -> None:
        container = DependencyContainer(lock_mode=LockMode.NONE)
        container.register(Database)

        assert container.lock_mode is LockMode.NONE
        assert container.resolve(Database) is container.resolve(Database)


class TestTypeMismatch:
    def test_incompatible_requested_type_raises_type_mismatch(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(lambda: 42, as_name="answer")

        with pytest.raises(DIRegistryTypeMismatchError) as exc_info:
            container.resolve(str, name="answer")

        assert exc_info.value.key == "answer"
        assert exc_info.value.expected is str
        assert exc_info.value.actual is int
        assert "answer" in str(exc_info.value)

    def test_mismatch_keeps_instance_cached(self, container: DependencyContainer) -> None:
        builder = CountingBuilder()
        container.set(builder, "service")

        with pytest.raises(DIRegistryTypeMismatchError):
            container.resolve(InMemoryRepository, name="service")

        assert isinstance(container.resolve(Database, name="service"), Database)
        assert builder.calls == 1

    def test_structural_protocol_mismatch(self, container: DependencyContainer) -> None:
        container.register(Database, for_type=Repository)

        with pytest.raises(DIRegistryTypeMismatchError):
            container.resolve(Repository)


class TestBuilderStore:
    def test_all_keys_is_sorted_and_duplicate_free(self, container: DependencyContainer) -> None:
        container.register(lambda: 1, as_name="b")
        container.register(lambda: 2, as_name="a")
        container.resolve(int, name="a")
        container.register(lambda: 3, as_name="a")

        assert container.all_keys() == ["a", "b"]

    def test_clear_removes_builders_and_instances(self, container: DependencyContainer) -> None:
        container.register(Database)
        container.register(InMemoryRepository)
        container.resolve(Database)

        container.clear()

        assert container.all_keys() == []
        with pytest.raises(DIRegistryInstanceNotAvailableError):
            container.resolve(Database)
        with pytest.raises(DIRegistryInstanceNotAvailableError):
            container.resolve(InMemoryRepository)

    def test_lookup_returns_tagged_instance(self, container: DependencyContainer) -> None:
        container.register(Database)

        instance = container.lookup("Database")

        assert isinstance(instance, BuiltInstance)
        assert instance.key == "Database"
        assert instance.value_type is Database
        assert container.lookup("Database") is instance

    def test_lookup_returns_none_for_missing_or_failing_builders(
        self,
        container: DependencyContainer,
    ) -> None:
        def broken() -> Database:
            raise ValueError

        container.register(broken)

        assert container.lookup("Missing") is None
        assert container.lookup("Database") is None

    def test_set_rejects_non_callable_builder(self, container: DependencyContainer) -> None:
        with pytest.raises(DIRegistryInvalidRegistrationError, match="must be callable"):
            container.set(42, "answer")  # type: ignore[arg-type]

    def test_contains_and_repr(self, container: DependencyContainer) -> None:
        container.register(Database)

        assert "Database" in container
        assert "Missing" not in container
        assert repr(container) == "<DependencyContainer keys=['Database']>"

    def test_is_registered(self, container: DependencyContainer) -> None:
        container.register(Database, as_name="primary")

        assert container.is_registered(Database, name="primary")
        assert not container.is_registered(Database)


class TestRegisterForms:
    def test_register_returns_builder(self, container: DependencyContainer) -> None:
        assert container.register(Database) is Database

    def test_register_as_decorator_on_factory(self, container: DependencyContainer) -> None:
        @container.register
        def make_database() -> Database:
            return Database()

        assert callable(make_database)
        assert container.is_registered(Database)

    def test_register_as_decorator_with_contract(self, container: DependencyContainer) -> None:
        @container.register(for_type=Repository)
        class UpperRepository:
            def get(self, key: str) -> str:
                return key.upper()

        assert container.resolve(Repository).get("id") == "ID"

    def test_register_without_inferable_type_raises(self, container: DependencyContainer) -> None:
        with pytest.raises(DIRegistryInvalidRegistrationError, match="Unable to infer"):
            container.register(lambda: Database())

    def test_register_with_explicit_name_skips_inference(
        self,
        container: DependencyContainer,
    ) -> None:
        container.register(lambda: Database(), as_name="database")

        assert isinstance(container.resolve(Database, name="database"), Database)


class TestRebuildingResolution:
    def test_each_resolution_invokes_builder(
        self,
        rebuilding_container: RebuildingDependencyContainer,
    ) -> None:
        builder = CountingBuilder()
        rebuilding_container.register(builder, for_type=Database)

        first = rebuilding_container.resolve(Database)
        second = rebuilding_container.resolve(Database)

        assert first is not second
        assert builder.calls == 2

    def test_unregistered_key_raises_not_available(
        self,
        rebuilding_container: RebuildingDependencyContainer,
    ) -> None:
        with pytest.raises(DIRegistryInstanceNotAvailableError):
            rebuilding_container.resolve(Database)

    def test_failing_builder_raises_and_stays_registered(
        self,
        rebuilding_container: RebuildingDependencyContainer,
    ) -> None:
        def broken() -> Database:
            msg = "unavailable"
            raise OSError(msg)

        rebuilding_container.register(broken)

        for _ in range(2):
            with pytest.raises(DIRegistryInstanceNotAvailableError) as exc_info:
                rebuilding_container.resolve(Database)
            assert isinstance(exc_info.value.cause, OSError)

        assert rebuilding_container.all_keys() == ["Database"]

    def test_set_replaces_builder(
        self,
        rebuilding_container: RebuildingDependencyContainer,
    ) -> None:
        rebuilding_container.set(lambda: 1, "value")
        rebuilding_container.set(lambda: 2, "value")

        assert rebuilding_container.resolve(int, name="value") == 2

    def test_clear_and_all_keys(
        self,
        rebuilding_container: RebuildingDependencyContainer,
    ) -> None:
        rebuilding_container.register(InMemoryRepository)
        rebuilding_container.register(Database)

        assert rebuilding_container.all_keys() == ["Database", "InMemoryRepository"]

        rebuilding_container.clear()

        assert rebuilding_container.all_keys() == []
        assert rebuilding_container.lookup("Database") is None

    def test_type_mismatch(self, rebuilding_container: RebuildingDependencyContainer) -> None:
        rebuilding_container.register(lambda: "text", as_name="value")

        with pytest.raises(DIRegistryTypeMismatchError):
            rebuilding_container.resolve(int, name="value")
