from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class Named(NamedTuple):
    """Bind an ``Annotated`` dependency to an explicit registration key.

    ``Annotated[Database, Named("replica")]`` resolves exactly like
    ``container.resolve(Database, name="replica")``: the key is ``"replica"`` and
    the resolved value is checked against ``Database``.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Database: ...


            ReplicaDb: TypeAlias = Annotated[Database, Named("replica")]

            container.register(Database, as_name="replica")
            replica = container.resolve(ReplicaDb)

    """

    value: str


class InjectedMarker:
    """A marker used to indicate a parameter should be resolved from a container.

    Used to identify parameters that need to be removed from callable signatures
    when injecting dependencies.
    """


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a parameter for container-driven injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.
    ``inject`` wrappers hide these parameters from the public callable signature.

    Examples:
        .. code-block:: python

            @inject
            def run(service: Injected[Service], value: int) -> str:
                return service.handle(value)
    """

else:

    class Injected:
        """Mark a parameter for container-driven injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.

        Examples:
            .. code-block:: python

                @inject
                def run(service: Injected[Service], value: int) -> str:
                    return service.handle(value)

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated((inner, *metadata, InjectedMarker()))
            return build_annotated((item, InjectedMarker()))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    return any(isinstance(item, InjectedMarker) for item in annotation_args[1:])


def strip_injected_annotation(annotation: Any) -> Any:
    """Strip the Injected marker while preserving other Annotated metadata."""
    if not is_injected_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = tuple(item for item in annotation_args[1:] if not isinstance(item, InjectedMarker))
    if not metadata:
        return parameter_type
    return build_annotated((parameter_type, *metadata))


def find_named(annotation: Any) -> Named | None:
    """Return the ``Named`` metadata attached to an Annotated dependency, if any."""
    if get_origin(annotation) is not Annotated:
        return None
    return next(
        (item for item in get_args(annotation)[1:] if isinstance(item, Named)),
        None,
    )


def build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
