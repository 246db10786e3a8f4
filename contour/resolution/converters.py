"""Converters turn raw content values into destination typed values."""

from abc import ABC, abstractmethod
from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, get_origin

from markupsafe import Markup
from pydantic import ConfigDict, PydanticUserError, TypeAdapter, ValidationError

if TYPE_CHECKING:
    from .resolvers import ResolutionContext

_LAX = ConfigDict(coerce_numbers_to_str=True)


@dataclass(frozen=True)
class Converted:
    """A successfully converted value.

    Conversion steps return ``Converted(value)`` when they produced a value
    and None when they did not. Producing no value is a normal outcome, not
    an error: the property simply keeps its default.
    """

    value: Any


class TypeConverter(ABC):
    """Strategy converting a raw value into a destination typed value.

    Converters are named with ``ConvertWith`` on a property, on the element
    type of a sequence property, or on the property's type itself.

    Example:
        >>> class CommaSeparatedConverter(TypeConverter):
        ...     def can_convert_from(self, context, source_type):
        ...         return source_type is str
        ...
        ...     def convert_from(self, context, culture, value):
        ...         return [part.strip() for part in value.split(",") if part.strip()]
    """

    def can_convert_from(self, context: "ResolutionContext", source_type: type | None) -> bool:
        """Check if this converter can handle a raw value.

        Override this method to decline some values; declined values move on
        to the next conversion step.

        Args:
            context: The current resolution context.
            source_type: Runtime type of the raw value, None for a None value.
        """
        return True

    @abstractmethod
    def convert_from(self, context: "ResolutionContext", culture: str, value: Any) -> Any:
        """Convert the raw value.

        Returns:
            The converted value. None means no value was produced.
        """
        ...


class MarkupConverter(TypeConverter):
    """Converts rich text content into ``markupsafe.Markup``.

    Properties declared as ``Markup`` use this converter without a hint.
    Content values are treated as trusted HTML and are not escaped.
    """

    def can_convert_from(self, context: "ResolutionContext", source_type: type | None) -> bool:
        return source_type is not None

    def convert_from(self, context: "ResolutionContext", culture: str, value: Any) -> Any:
        if value is None:
            return None
        if hasattr(value, "__html__"):
            return Markup(value.__html__())
        return Markup(str(value))


def is_collection(value: Any) -> bool:
    """Whether a value is a sequence for the purpose of reshaping.

    Strings, bytes and mappings are never sequences.
    """
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, (Collection, Iterator))


def is_instance_of(value: Any, declared_type: Any) -> bool:
    """Check a value against a declared type without converting it.

    Parameterized generics always report False so that their items still
    get validated by the generic conversion.
    """
    if declared_type is Any or declared_type is object:
        return True
    if isinstance(declared_type, type) and get_origin(declared_type) is None:
        return isinstance(value, declared_type)
    return False


@lru_cache(maxsize=512)
def _adapter(declared_type: Any) -> TypeAdapter[Any] | None:
    # None is cached too, so unsupported types are only tried once
    try:
        return TypeAdapter(declared_type, config=_LAX)
    except PydanticUserError:
        pass
    try:
        # Models and dataclasses carry their own config
        return TypeAdapter(declared_type)
    except PydanticUserError:
        return None


def convert_generic(value: Any, declared_type: Any) -> Converted | None:
    """Convert a value with pydantic's lax validation.

    Covers string parsing, numeric and boolean coercion, nested models from
    dictionaries and typed collections.

    Returns:
        The converted value, or None when the value cannot be converted or
        the declared type is not supported.
    """
    try:
        adapter = _adapter(declared_type)
    except TypeError:
        # Unhashable declared type
        return None
    if adapter is None:
        return None
    try:
        return Converted(adapter.validate_python(value))
    except ValidationError:
        return None
