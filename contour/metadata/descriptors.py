"""Reading property descriptors off destination types."""

import collections.abc
import dataclasses
import types
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from ..exceptions import ConfigurationError
from ..hints import ConvertWith, Ignore, Lazy, ResolveWith, type_converter_hint

# Annotation origins treated as "sequence of T", mapped to the container
# used when re-materializing converted values.
SEQUENCE_CONTAINERS: dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``T`` and its metadata."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], tuple(args[1:])
    return annotation, ()


def unwrap_optional(annotation: Any) -> Any:
    """Turn ``T | None`` into ``T``. Other unions are returned unchanged."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def sequence_parts(annotation: Any) -> tuple[type, Any] | None:
    """Get the container and element type of a sequence annotation.

    Returns:
        ``(container, element_type)``, or None when the annotation is not a
        parameterized sequence. ``str`` and ``bytes`` are never sequences.
    """
    origin = get_origin(annotation)
    if origin not in SEQUENCE_CONTAINERS:
        return None
    args = get_args(annotation)
    if not args:
        return None
    # Only homogeneous tuples (tuple[T, ...]) qualify
    if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
        return None
    return SEQUENCE_CONTAINERS[origin], args[0]


@dataclass(frozen=True)
class PropertyDescriptor:
    """Structural facts about one writable property of a destination type.

    Attributes:
        name: Attribute name on the destination type.
        declared_type: The declared type with ``Annotated`` and ``Optional``
            stripped.
        owner: The destination type the property was read from.
        lazy: Whether the property asked to be resolved lazily.
        ignore: Whether the property is excluded from projection.
        resolver: Property level resolver hint.
        converter: Property level converter hint.
        is_property: True for ``property`` objects with a setter.
    """

    name: str
    declared_type: Any
    owner: type
    lazy: bool = False
    ignore: bool = False
    resolver: ResolveWith | None = None
    converter: ConvertWith | None = None
    is_property: bool = False

    @property
    def sequence(self) -> tuple[type, Any] | None:
        return sequence_parts(self.declared_type)

    @property
    def is_sequence(self) -> bool:
        return self.sequence is not None

    @property
    def element_type(self) -> Any | None:
        parts = self.sequence
        return parts[1] if parts else None

    def converter_hint(self) -> ConvertWith | None:
        """Find the converter hint for this property.

        The property itself is checked first, then the element type of a
        sequence, otherwise the declared type.
        """
        if self.converter is not None:
            return self.converter
        parts = self.sequence
        if parts is not None:
            return type_converter_hint(unwrap_optional(parts[1]))
        return type_converter_hint(self.declared_type)


def describe(owner: type, name: str, annotation: Any, is_property: bool = False) -> PropertyDescriptor:
    declared, metadata = split_annotated(annotation)
    declared = unwrap_optional(declared)
    # Optional[Annotated[T, ...]] keeps its metadata one level down
    declared, inner = split_annotated(declared)
    metadata = metadata + inner

    resolver = next((m for m in metadata if isinstance(m, ResolveWith)), None)
    converter = next((m for m in metadata if isinstance(m, ConvertWith)), None)
    return PropertyDescriptor(
        name=name,
        declared_type=declared,
        owner=owner,
        lazy=not is_property and any(m is Lazy for m in metadata),
        ignore=any(m is Ignore for m in metadata),
        resolver=resolver,
        converter=converter,
        is_property=is_property,
    )


def collect_properties(cls: type) -> list[PropertyDescriptor]:
    """Enumerate the public, instance level, writable properties of a type.

    Annotated class attributes are collected across the MRO, followed by
    ``property`` objects that define a setter.

    Raises:
        ConfigurationError: If the annotations of the type cannot be
            evaluated.
    """
    try:
        hints = _field_annotations(cls)
    except (NameError, TypeError) as exc:
        raise ConfigurationError(
            f"Could not read the annotations of {cls.__qualname__}: {exc}"
        ) from exc

    descriptors: list[PropertyDescriptor] = []
    seen: set[str] = set()

    if not _is_frozen(cls):
        for name, annotation in hints.items():
            if name.startswith("_") or _is_class_level(annotation):
                continue
            if isinstance(getattr(cls, name, None), property):
                continue
            seen.add(name)
            descriptors.append(describe(cls, name, annotation))

    for klass in cls.__mro__:
        for name, value in vars(klass).items():
            if name in seen or name.startswith("_") or not isinstance(value, property):
                continue
            seen.add(name)
            if value.fset is None:
                continue
            try:
                annotation = get_type_hints(value.fget, include_extras=True).get("return", Any)
            except (NameError, TypeError):
                annotation = Any
            descriptors.append(describe(cls, name, annotation, is_property=True))

    return descriptors


def _field_annotations(cls: type) -> dict[str, Any]:
    if issubclass(cls, BaseModel):
        # Pydantic has already evaluated its fields; hints live in metadata
        return {
            name: Annotated[(info.annotation, *info.metadata)] if info.metadata else info.annotation
            for name, info in cls.model_fields.items()
        }
    return get_type_hints(cls, include_extras=True)


def _is_class_level(annotation: Any) -> bool:
    return (
        annotation is ClassVar
        or get_origin(annotation) is ClassVar
        or isinstance(annotation, dataclasses.InitVar)
    )


def _is_frozen(cls: type) -> bool:
    if dataclasses.is_dataclass(cls):
        return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if issubclass(cls, BaseModel):
        return bool(cls.model_config.get("frozen", False))
    return False
