"""Resolvers fetch the raw value of a property from a content node."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..content import ContentNode
from ..metadata import PropertyDescriptor


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a resolver or converter knows about the current property.

    A context is created for each property resolution and never stored.

    Attributes:
        content: The content node being projected.
        culture: The culture the projection runs in.
        property: The destination property being resolved.
        instance: The destination instance under construction.
    """

    content: ContentNode
    culture: str
    property: PropertyDescriptor
    instance: Any


class ValueResolver(ABC):
    """Strategy extracting a raw value for a property from a content node.

    Example:
        >>> class ViewCountResolver(ValueResolver):
        ...     def __init__(self, stats: StatsService):
        ...         self.stats = stats
        ...
        ...     def resolve(self, context: ResolutionContext) -> Any:
        ...         return self.stats.views(context.content.id)
    """

    @abstractmethod
    def resolve(self, context: ResolutionContext) -> Any:
        """Resolve the raw value.

        Args:
            context: The current resolution context.

        Returns:
            The raw value, or None when there is nothing to resolve.
        """
        ...


def camelize(name: str) -> str:
    """Turn a snake_case attribute name into a camelCase alias."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class ContentPropertyResolver(ValueResolver):
    """Fetch the content property matching the destination property.

    Without an explicit alias the property name is tried as written and
    then in camelCase, so ``body_text`` matches a ``bodyText`` alias. Alias
    matching itself is case-insensitive and is done by the content node.
    When the node has no such content property, a public attribute of the
    node with the same name (``id``, ``name``, ...) is used instead.

    Args:
        alias: Content property alias to read instead of the property name.
        alt_alias: Alias tried when the first lookup yields nothing.
        default: Value returned when nothing could be found.
    """

    def __init__(
        self,
        alias: str | None = None,
        alt_alias: str | None = None,
        default: Any = None,
    ):
        self.alias = alias
        self.alt_alias = alt_alias
        self.default = default

    def aliases(self, property_name: str) -> list[str]:
        if self.alias is not None:
            aliases = [self.alias]
        else:
            aliases = [property_name, camelize(property_name)]
        if self.alt_alias is not None:
            aliases.append(self.alt_alias)
        # dict.fromkeys keeps order while dropping duplicates
        return list(dict.fromkeys(aliases))

    def resolve(self, context: ResolutionContext) -> Any:
        content = context.content
        aliases = self.aliases(context.property.name)

        for alias in aliases:
            value = content.get_property(alias, context.culture)
            if value is not None:
                return value

        for alias in aliases:
            if alias.startswith("_"):
                continue
            value = getattr(content, alias, None)
            if value is not None and not callable(value):
                return value

        return self.default


class CallableResolver(ValueResolver):
    """Resolve values with a plain function.

    Example:
        >>> url = ResolveWith(CallableResolver(lambda ctx: f"/{ctx.content.id}"))
    """

    def __init__(self, func: Callable[[ResolutionContext], Any]):
        self.func = func

    def resolve(self, context: ResolutionContext) -> Any:
        return self.func(context)
