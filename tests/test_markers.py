from __future__ import annotations

from typing import Annotated, get_args, get_origin

from diregistry.markers import (
    Injected,
    InjectedMarker,
    Named,
    find_named,
    is_injected_annotation,
    strip_injected_annotation,
)


class Database:
    pass


def test_named_marker_is_value_based_and_hashable() -> None:
    marker = Named("primary")

    assert marker.value == "primary"
    assert marker == Named("primary")
    assert marker != Named("replica")

    mapping = {marker: "database"}
    assert mapping[Named("primary")] == "database"


def test_injected_builds_annotated_with_marker() -> None:
    annotation = Injected[Database]

    assert get_origin(annotation) is Annotated
    args = get_args(annotation)
    assert args[0] is Database
    assert isinstance(args[1], InjectedMarker)
    assert is_injected_annotation(annotation)


def test_injected_preserves_existing_metadata() -> None:
    annotation = Injected[Annotated[Database, Named("replica")]]

    stripped = strip_injected_annotation(annotation)

    assert get_origin(stripped) is Annotated
    assert get_args(stripped) == (Database, Named("replica"))
    assert find_named(annotation) == Named("replica")


def test_strip_returns_plain_type_without_other_metadata() -> None:
    assert strip_injected_annotation(Injected[Database]) is Database
    assert strip_injected_annotation(Database) is Database


def test_plain_annotations_are_not_injected() -> None:
    assert not is_injected_annotation(Database)
    assert not is_injected_annotation(Annotated[Database, Named("primary")])
    assert find_named(Database) is None
