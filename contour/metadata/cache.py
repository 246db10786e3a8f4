"""Process-wide memoization of destination type metadata."""

import enum
import inspect
import logging
from dataclasses import dataclass
from typing import NamedTuple

from pydantic import BaseModel

from ..content import accepts_content_node
from ..exceptions import ConfigurationError
from .descriptors import PropertyDescriptor, collect_properties, unwrap_optional

LOGGER = logging.getLogger(__name__)


class ConstructorKind(enum.Enum):
    PARAMETERLESS = "parameterless"
    CONTENT_NODE = "content_node"


@dataclass(frozen=True)
class ConstructorSignature:
    """How to construct a destination type.

    Attributes:
        kind: Whether the constructor takes no arguments or the content node.
        parameter: Name of the content node parameter, if any.
        keyword_only: Whether the content node must be passed by keyword.
    """

    kind: ConstructorKind
    parameter: str | None = None
    keyword_only: bool = False

    @classmethod
    def parameterless(cls) -> "ConstructorSignature":
        return cls(ConstructorKind.PARAMETERLESS)

    @classmethod
    def content_node(cls, parameter: str, keyword_only: bool = False) -> "ConstructorSignature":
        return cls(ConstructorKind.CONTENT_NODE, parameter, keyword_only)


class PropertyPartition(NamedTuple):
    """Writable properties split by when they are materialized."""

    lazy: tuple[PropertyDescriptor, ...]
    eager: tuple[PropertyDescriptor, ...]


def select_constructor(destination_type: type) -> ConstructorSignature:
    """Work out the constructor shape of a destination type.

    Required parameters decide the shape; those with defaults, ``*args``
    and ``**kwargs`` can be left out. A constructor whose only required
    parameter is the content node takes it, and so does one with no required
    parameters but a single optional parameter typed as the content node
    (``content: ContentNode | None = None``).

    Raises:
        ConfigurationError: If the constructor needs anything other than
            nothing at all or a single content node.
    """
    try:
        signature = inspect.signature(destination_type, eval_str=True)
    except (ValueError, TypeError, NameError) as exc:
        raise ConfigurationError.invalid_constructor(destination_type, str(exc)) from exc

    required = [
        parameter
        for parameter in signature.parameters.values()
        if parameter.default is inspect.Parameter.empty
        and parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]

    if not required:
        optional = [
            parameter
            for parameter in signature.parameters.values()
            if parameter.kind
            not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
            and accepts_content_node(unwrap_optional(parameter.annotation))
        ]
        if len(optional) == 1:
            return _content_node_signature(optional[0])
        return ConstructorSignature.parameterless()

    if len(required) > 1:
        names = ", ".join(parameter.name for parameter in required)
        raise ConfigurationError.invalid_constructor(
            destination_type, f"expected no arguments or a single content node, got ({names})"
        )

    parameter = required[0]
    if not accepts_content_node(parameter.annotation):
        raise ConfigurationError.invalid_constructor(
            destination_type,
            f"parameter '{parameter.name}' must be annotated with the content node type",
        )
    return _content_node_signature(parameter)


def _content_node_signature(parameter: inspect.Parameter) -> ConstructorSignature:
    return ConstructorSignature.content_node(
        parameter.name, keyword_only=parameter.kind is inspect.Parameter.KEYWORD_ONLY
    )


def supports_interception(destination_type: type) -> bool:
    """Check whether instances of a type can have lazy properties.

    Interception needs a per-instance ``__dict__``. Pydantic models manage
    their own attribute storage and are always populated eagerly.
    """
    return getattr(destination_type, "__dictoffset__", 0) != 0 and not issubclass(
        destination_type, BaseModel
    )


def partition_properties(destination_type: type) -> PropertyPartition:
    properties = collect_properties(destination_type)
    interceptable = supports_interception(destination_type)
    lazy = tuple(p for p in properties if p.lazy and interceptable)
    eager = tuple(p for p in properties if not (p.lazy and interceptable))
    return PropertyPartition(lazy=lazy, eager=eager)


class TypeMetadataCache:
    """Append-only cache of constructor and property metadata per type.

    Reads and first writes are safe from multiple threads without any
    locking by callers. Metadata is computed outside of any lock; when two
    threads race on the same type the first insert wins and the other
    result is discarded.

    Ignored properties stay in the cached partition. Skipping them is left
    to the projection itself.

    Examples:
        >>> cache = TypeMetadataCache()
        >>> cache.get_constructor_signature(Article).kind
        <ConstructorKind.PARAMETERLESS: 'parameterless'>
        >>> lazy, eager = cache.get_property_partition(Article)
    """

    def __init__(self) -> None:
        self._constructors: dict[type, ConstructorSignature] = {}
        self._partitions: dict[type, PropertyPartition] = {}

    def __contains__(self, destination_type: object) -> bool:
        return destination_type in self._constructors or destination_type in self._partitions

    def get_constructor_signature(self, destination_type: type) -> ConstructorSignature:
        try:
            return self._constructors[destination_type]
        except KeyError:
            pass

        signature = select_constructor(destination_type)
        LOGGER.debug(
            "Cached constructor signature",
            extra={"destination_type": destination_type.__qualname__, "kind": signature.kind.value},
        )
        # setdefault is atomic: a lost race keeps the first writer's entry
        return self._constructors.setdefault(destination_type, signature)

    def get_property_partition(self, destination_type: type) -> PropertyPartition:
        try:
            return self._partitions[destination_type]
        except KeyError:
            pass

        partition = partition_properties(destination_type)
        LOGGER.debug(
            "Cached property partition",
            extra={
                "destination_type": destination_type.__qualname__,
                "lazy": [p.name for p in partition.lazy],
                "eager": [p.name for p in partition.eager],
            },
        )
        return self._partitions.setdefault(destination_type, partition)
