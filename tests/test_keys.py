"""Tests for key derivation from names and type descriptors."""

import typing
from collections.abc import Callable
from typing import Annotated, Any, ForwardRef, Generic, Literal, NewType, Optional, TypeVar, Union

import pytest

from diregistry.keys import derive_key, describe_type
from diregistry.markers import Named

T = TypeVar("T")
UserId = NewType("UserId", int)


class Service:
    pass


class Box(Generic[T]):
    pass


def _make_same_named_service() -> type[Any]:
    class Service:
        pass

    return Service


class TestDeriveKey:
    def test_explicit_name_is_returned_verbatim(self) -> None:
        assert derive_key(Service, "primary") == "primary"
        assert derive_key(int, "Service") == "Service"

    def test_empty_name_is_still_explicit(self) -> None:
        assert derive_key(Service, "") == ""

    def test_type_and_metatype_share_key(self) -> None:
        assert derive_key(Service) == "Service"
        assert derive_key(type[Service]) == derive_key(Service)
        assert derive_key(typing.Type[Service]) == derive_key(Service)  # noqa: UP006

    def test_same_named_classes_collide(self) -> None:
        assert derive_key(_make_same_named_service()) == derive_key(Service)

    def test_annotated_named_uses_marker_value(self) -> None:
        assert derive_key(Annotated[Service, Named("replica")]) == "replica"

    def test_explicit_name_wins_over_annotated_named(self) -> None:
        assert derive_key(Annotated[Service, Named("replica")], "primary") == "primary"


class TestDescribeType:
    @pytest.mark.parametrize(
        ("descriptor", "expected"),
        [
            (Any, "Any"),
            (None, "None"),
            (type(None), "None"),
            (int, "int"),
            (Service, "Service"),
            (UserId, "UserId"),
            (T, "T"),
            ("Service", "Service"),
            (ForwardRef("Service"), "Service"),
            (Annotated[Service, "metadata"], "Service"),
            (Optional[int], "int | None"),  # noqa: UP007
            (Union[int, str], "int | str"),  # noqa: UP007
            (int | str, "int | str"),
            (Literal["a", 1], "Literal['a', 1]"),
            (list[int], "list[int]"),
            (typing.List[int], "list[int]"),  # noqa: UP006
            (dict[str, list[Service]], "dict[str, list[Service]]"),
            (tuple[int, ...], "tuple[int, ...]"),
            (Callable[[int, str], bool], "Callable[[int, str], bool]"),
            (Box[int], "Box[int]"),
            (type[Box[int]], "Box[int]"),
        ],
    )
    def test_descriptor_descriptions(self, descriptor: Any, expected: str) -> None:
        assert describe_type(descriptor) == expected

    def test_non_type_objects_are_described_by_runtime_type(self) -> None:
        assert describe_type(Service()) == "Service"
        assert describe_type(42) == "int"
