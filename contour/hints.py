"""Declarative hints attached to destination properties and types.

Hints are placed in ``typing.Annotated`` metadata:

    >>> class Article:
    ...     title: str = ""
    ...     body: Annotated[Markup, Lazy] = Markup("")
    ...     tags: Annotated[list[str], ConvertWith(CommaSeparatedConverter)] = []
    ...     views: Annotated[int, ResolveWith(ViewCountResolver)] = 0
    ...     cache_key: Annotated[str, Ignore] = ""

``ConvertWith`` can also decorate a class so that every property declared
as that type (or as a sequence of it) is converted with it:

    >>> @ConvertWith(AuthorConverter)
    ... class Author:
    ...     ...
"""

from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from .resolution.converters import TypeConverter
    from .resolution.resolvers import ValueResolver

T = TypeVar("T")

# Attribute storing a type level converter hint
_CONVERTER_ATTR = "__contour_converter__"


class Marker:
    """A flag-style hint that carries no arguments."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


# Resolve the property on first read instead of while building
Lazy = Marker("Lazy")

# Never resolve, convert or assign the property
Ignore = Marker("Ignore")


class ResolveWith:
    """Name the resolver used to fetch the raw value of a property.

    Args:
        resolver: A ``ValueResolver`` subclass or instance. Classes are
            obtained from the projector's dependency container.
    """

    __slots__ = ("resolver",)

    def __init__(self, resolver: "type[ValueResolver] | ValueResolver"):
        self.resolver = resolver

    def __repr__(self) -> str:
        return f"ResolveWith({_describe(self.resolver)})"


class ConvertWith:
    """Name the converter used to turn a raw value into the declared type.

    Args:
        converter: A ``TypeConverter`` subclass or instance. Classes are
            obtained from the projector's dependency container.
    """

    __slots__ = ("converter",)

    def __init__(self, converter: "type[TypeConverter] | TypeConverter"):
        self.converter = converter

    def __call__(self, cls: type[T]) -> type[T]:
        """Attach this hint to a type."""
        setattr(cls, _CONVERTER_ATTR, self)
        return cls

    def __repr__(self) -> str:
        return f"ConvertWith({_describe(self.converter)})"


def type_converter_hint(tp: Any) -> ConvertWith | None:
    """Get the converter hint attached to a type, including inherited ones."""
    hint = getattr(tp, _CONVERTER_ATTR, None)
    return hint if isinstance(hint, ConvertWith) else None


def _describe(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return type(target).__name__ + "()"
