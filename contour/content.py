"""The content node capability consumed by projections."""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field
from ulid import ULID


@runtime_checkable
class ContentNode(Protocol):
    """A loosely-typed, culture-aware content item.

    Content nodes are owned by the content backend. Projections only ever
    read from them through this contract.

    Attributes:
        id: Identifier of the node within its backend.
        type_alias: Alias of the document type the node was created from.
    """

    id: Any
    type_alias: str

    def get_property(self, alias: str, culture: str | None = None) -> Any | None:
        """Get the raw value of a named property for a culture.

        Args:
            alias: The property alias. Matching is case-insensitive.
            culture: The culture to read the value for.

        Returns:
            The raw value, or None if the node has no such property.
        """
        ...


def accepts_content_node(annotation: Any) -> bool:
    """Check whether an annotation describes the content node capability.

    The capability is structural, so besides ``ContentNode`` itself any class
    exposing a callable ``get_property`` qualifies.
    """
    if annotation is ContentNode:
        return True
    return isinstance(annotation, type) and callable(getattr(annotation, "get_property", None))


class InMemoryContentNode(BaseModel):
    """Content node backed by plain dictionaries.

    Values are stored per culture. The ``None`` culture holds invariant
    values which are used when a culture has no value of its own.

    Examples:
        >>> node = InMemoryContentNode(
        ...     type_alias="article",
        ...     name="Hello",
        ...     properties={"title": "Hello", "bodyText": "<p>Hi</p>"},
        ...     variants={"fr-FR": {"title": "Bonjour"}},
        ... )
        >>> node.get_property("Title", "fr-FR")
        'Bonjour'
        >>> node.get_property("BODYTEXT", "fr-FR")
        '<p>Hi</p>'
    """

    id: ULID = Field(default_factory=ULID, description="Identifier of the node")
    type_alias: str = Field(description="Document type alias of the node")
    name: str = ""
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Invariant property values keyed by alias",
    )
    variants: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Culture specific property values keyed by culture then alias",
    )

    def get_property(self, alias: str, culture: str | None = None) -> Any | None:
        if culture is not None:
            for variant_culture, values in self.variants.items():
                if variant_culture.casefold() == culture.casefold():
                    value = _lookup(values, alias)
                    if value is not None:
                        return value
        return _lookup(self.properties, alias)


def _lookup(values: dict[str, Any], alias: str) -> Any | None:
    if alias in values:
        return values[alias]
    folded = alias.casefold()
    for key, value in values.items():
        if key.casefold() == folded:
            return value
    return None
