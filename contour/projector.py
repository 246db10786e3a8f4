"""Projection of content nodes onto typed destination instances."""

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache, partial
from typing import Any, TypeVar

from .config import ProjectionSettings
from .container import DependencyContainer
from .content import ContentNode
from .context import get_culture
from .diagnostics import Timings
from .exceptions import ConversionFailure
from .factory import InstanceFactory
from .hooks import (
    ConvertedEvent,
    ConvertedHandler,
    ConvertingEvent,
    ConvertingHandler,
    Decision,
    ProjectionHooks,
    hooks as global_hooks,
)
from .lazy import LazyPropertyInterceptor
from .metadata import PropertyDescriptor, TypeMetadataCache
from .resolution import Converted, ValueResolutionPipeline

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Shared by every projector unless one is given its own
_METADATA = TypeMetadataCache()
_INTERCEPTOR = LazyPropertyInterceptor()


class Projector:
    """Projects content nodes onto instances of destination types.

    A projection runs through these steps, stopping at the first exit:

    1. Converting hooks: process-wide handlers, then the caller's
       callback. Either can cancel, in which case None is returned and
       nothing is built.
    2. The destination type is instantiated from its cached constructor
       signature.
    3. Lazy properties are attached as deferred computations; eager
       properties are resolved, converted and assigned straight away.
       Ignored properties are left alone.
    4. Converted hooks: the caller's callback, then process-wide handlers.
       Either may replace the result.

    Unsupported constructors and failing constructors raise. Failures to
    resolve or convert a single property only leave that property at its
    default.

    Examples:
        >>> projector = Projector()
        >>> article = projector.project(node, Article)
        >>> article.title
        'Hello'

        Projecting a sequence of nodes lazily, keeping only articles:

        >>> for article in projector.project_many(nodes, Article, type_alias="article"):
        ...     print(article.title)
    """

    def __init__(
        self,
        settings: ProjectionSettings | None = None,
        container: DependencyContainer | None = None,
        hooks: ProjectionHooks | None = None,
        metadata: TypeMetadataCache | None = None,
        interceptor: LazyPropertyInterceptor | None = None,
        factory: InstanceFactory | None = None,
    ):
        self.settings = settings or ProjectionSettings()
        self.container = container or DependencyContainer()
        self.hooks = hooks if hooks is not None else global_hooks
        self.metadata = metadata or _METADATA
        self.interceptor = interceptor or _INTERCEPTOR
        self.factory = factory or InstanceFactory()
        self.timings = Timings(self.settings.log_timings, self.settings.timing_level)
        self.pipeline = ValueResolutionPipeline(self.container, self.timings)

    def resolve_culture(self, culture: str | None = None) -> str:
        """Pick the culture of a projection.

        An explicit culture wins, then the ambient request culture, then the
        configured default.
        """
        return culture or get_culture() or self.settings.default_culture

    def project(
        self,
        content: ContentNode | None,
        destination_type: type[T],
        converting: ConvertingHandler | None = None,
        converted: ConvertedHandler | None = None,
        culture: str | None = None,
    ) -> T | None:
        """Project a content node onto a new instance of a type.

        Args:
            content: The node to project. None projects to None.
            destination_type: The type to build.
            converting: Callback fired before building, may cancel.
            converted: Callback fired after building, may replace the result.
            culture: The culture to read values in.

        Returns:
            The projected instance, whatever a converted hook replaced it
            with, or None when the projection was cancelled.

        Raises:
            ConfigurationError: If the type has an unsupported constructor.
            InstanceCreationError: If the constructor raised.
        """
        if content is None:
            return None

        with self.timings.timed(
            "project",
            destination_type=destination_type.__qualname__,
            content_id=str(content.id),
        ):
            converting_event = ConvertingEvent(content=content, destination_type=destination_type)
            decision = self.hooks.converting(converting_event)
            if decision is Decision.PROCEED and converting is not None:
                decision = converting(converting_event) or Decision.PROCEED

            if decision is Decision.CANCEL:
                LOGGER.debug(
                    "Projection cancelled",
                    extra={
                        "destination_type": destination_type.__qualname__,
                        "content_id": str(content.id),
                    },
                )
                return None

            instance = self.build(content, destination_type, self.resolve_culture(culture))

            converted_event = ConvertedEvent(
                content=content, converted=instance, destination_type=destination_type
            )
            if converted is not None:
                converted(converted_event)
            self.hooks.converted(converted_event)
            return converted_event.converted  # type: ignore[no-any-return]

    def project_many(
        self,
        contents: Iterable[ContentNode],
        destination_type: type[T],
        type_alias: str | None = None,
        converting: ConvertingHandler | None = None,
        converted: ConvertedHandler | None = None,
        culture: str | None = None,
    ) -> Iterator[T | None]:
        """Lazily project a sequence of content nodes.

        Args:
            contents: The nodes to project.
            destination_type: The type to build for every node.
            type_alias: Only project nodes with this type alias
                (case-insensitive).
            converting: Callback fired before building each node.
            converted: Callback fired after building each node.
            culture: The culture to read values in.

        Returns:
            An iterator of projections in input order. Nodes are projected
            as the iterator advances and it can only be consumed once.
        """
        resolved_culture = self.resolve_culture(culture)
        wanted = type_alias.casefold() if type_alias else None
        return self._project_each(
            contents, destination_type, wanted, converting, converted, resolved_culture
        )

    def _project_each(
        self,
        contents: Iterable[ContentNode],
        destination_type: type[T],
        wanted: str | None,
        converting: ConvertingHandler | None,
        converted: ConvertedHandler | None,
        culture: str,
    ) -> Iterator[T | None]:
        for content in contents:
            if wanted is not None and content.type_alias.casefold() != wanted:
                continue
            yield self.project(content, destination_type, converting, converted, culture)

    def build(self, content: ContentNode, destination_type: type[T], culture: str) -> T:
        """Build and populate an instance without firing any hooks."""
        signature = self.metadata.get_constructor_signature(destination_type)
        lazy, eager = self.metadata.get_property_partition(destination_type)

        instance = self.factory.create(destination_type, signature, content)

        computations = {
            descriptor.name: partial(
                self.pipeline.materialize, content, culture, descriptor, instance
            )
            for descriptor in lazy
            if not descriptor.ignore
        }
        instance = self.interceptor.intercept(instance, computations)

        for descriptor in eager:
            if descriptor.ignore:
                continue
            outcome = self.pipeline.materialize(content, culture, descriptor, instance)
            self._assign(content, instance, descriptor, outcome)

        return instance

    def _assign(
        self,
        content: ContentNode,
        instance: Any,
        descriptor: PropertyDescriptor,
        outcome: Converted | None,
    ) -> None:
        try:
            if outcome is not None:
                setattr(instance, descriptor.name, outcome.value)
            elif not descriptor.is_property and not hasattr(instance, descriptor.name):
                setattr(instance, descriptor.name, None)
        except Exception as exc:
            failure = ConversionFailure(descriptor.name, exc)
            LOGGER.warning(
                str(failure),
                exc_info=exc,
                extra={"content_id": str(content.id), "property": descriptor.name},
            )


@lru_cache(maxsize=None)
def default_projector() -> Projector:
    """The projector used by the module level ``project`` functions."""
    return Projector()


def project(
    content: ContentNode | None,
    destination_type: type[T],
    converting: ConvertingHandler | None = None,
    converted: ConvertedHandler | None = None,
    culture: str | None = None,
) -> T | None:
    """Project a content node with the default projector."""
    return default_projector().project(content, destination_type, converting, converted, culture)


def project_many(
    contents: Iterable[ContentNode],
    destination_type: type[T],
    type_alias: str | None = None,
    converting: ConvertingHandler | None = None,
    converted: ConvertedHandler | None = None,
    culture: str | None = None,
) -> Iterator[T | None]:
    """Lazily project content nodes with the default projector."""
    return default_projector().project_many(
        contents, destination_type, type_alias, converting, converted, culture
    )
