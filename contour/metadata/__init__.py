"""Destination type metadata: constructors and property partitions."""

from .cache import (
    ConstructorKind,
    ConstructorSignature,
    PropertyPartition,
    TypeMetadataCache,
    partition_properties,
    select_constructor,
    supports_interception,
)
from .descriptors import PropertyDescriptor, collect_properties, describe, sequence_parts

__all__ = [
    "ConstructorKind",
    "ConstructorSignature",
    "PropertyDescriptor",
    "PropertyPartition",
    "TypeMetadataCache",
    "collect_properties",
    "describe",
    "partition_properties",
    "select_constructor",
    "sequence_parts",
    "supports_interception",
]
