"""Value resolution: resolvers, converters and the pipeline tying them together."""

from .converters import (
    Converted,
    MarkupConverter,
    TypeConverter,
    convert_generic,
    is_collection,
    is_instance_of,
)
from .pipeline import ValueResolutionPipeline
from .resolvers import (
    CallableResolver,
    ContentPropertyResolver,
    ResolutionContext,
    ValueResolver,
    camelize,
)

__all__ = [
    "CallableResolver",
    "ContentPropertyResolver",
    "Converted",
    "MarkupConverter",
    "ResolutionContext",
    "TypeConverter",
    "ValueResolutionPipeline",
    "ValueResolver",
    "camelize",
    "convert_generic",
    "is_collection",
    "is_instance_of",
]
