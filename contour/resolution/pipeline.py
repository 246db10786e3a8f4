"""Resolution and conversion of a single destination property."""

import logging
from typing import Any, TypeVar

from markupsafe import Markup

from ..container import DependencyContainer
from ..content import ContentNode
from ..diagnostics import Timings
from ..exceptions import ConfigurationError, ConversionFailure, ResolutionFailure
from ..metadata import PropertyDescriptor
from .converters import (
    Converted,
    MarkupConverter,
    TypeConverter,
    convert_generic,
    is_collection,
    is_instance_of,
)
from .resolvers import ContentPropertyResolver, ResolutionContext, ValueResolver

LOGGER = logging.getLogger(__name__)

S = TypeVar("S")


class ValueResolutionPipeline:
    """Turns a content node property into a destination typed value.

    Resolution fetches the raw value with the property's resolver, or with
    the default ``ContentPropertyResolver``. Conversion then applies the
    first applicable step:

    1. The converter named by a ``ConvertWith`` hint, when it accepts the
       raw value. Its output is reshaped to fit sequence or scalar
       properties.
    2. ``MarkupConverter`` for properties declared as ``Markup``.
    3. The raw value itself when it already has the declared type.
    4. Generic conversion through pydantic.

    Exceptions raised by resolvers and converters are logged and absorbed:
    the property keeps its default value instead of failing the whole
    projection. Hints naming a resolver or converter that cannot be
    obtained are configuration errors and are raised.

    The pipeline holds no per-call state and can be shared between threads.
    """

    def __init__(
        self,
        container: DependencyContainer | None = None,
        timings: Timings | None = None,
        default_resolver: ValueResolver | None = None,
    ):
        self.container = container or DependencyContainer()
        self.timings = timings or Timings()
        self.default_resolver = default_resolver or ContentPropertyResolver()

    def resolve_raw(
        self,
        content: ContentNode,
        culture: str,
        descriptor: PropertyDescriptor,
        instance: Any,
    ) -> Any:
        """Fetch the raw value of a property.

        Returns:
            The raw value, or None when the resolver failed or found nothing.

        Raises:
            ConfigurationError: If the hinted resolver cannot be obtained.
        """
        if descriptor.resolver is not None:
            resolver = self._obtain(descriptor.resolver.resolver, ValueResolver, descriptor)
        else:
            resolver = self.default_resolver

        context = ResolutionContext(content, culture, descriptor, instance)
        try:
            with self.timings.timed(
                "resolve",
                resolver=type(resolver).__name__,
                content_id=str(content.id),
                property=descriptor.name,
            ):
                return resolver.resolve(context)
        except Exception as exc:
            failure = ResolutionFailure(descriptor.name, exc)
            LOGGER.warning(
                str(failure),
                exc_info=exc,
                extra={"content_id": str(content.id), "property": descriptor.name},
            )
            return None

    def convert(
        self,
        content: ContentNode,
        culture: str,
        descriptor: PropertyDescriptor,
        raw_value: Any,
        instance: Any,
    ) -> Converted | None:
        """Convert a raw value into the declared type of a property.

        Returns:
            ``Converted`` holding the typed value, or None when no value was
            produced.

        Raises:
            ConfigurationError: If the hinted converter cannot be obtained.
        """
        context = ResolutionContext(content, culture, descriptor, instance)
        source_type = type(raw_value) if raw_value is not None else None
        declared_type = descriptor.declared_type

        hint = descriptor.converter_hint()
        if hint is not None:
            converter = self._obtain(hint.converter, TypeConverter, descriptor)
            if self._accepts(converter, context, source_type):
                converted = self._run(converter, context, raw_value)
                return None if converted is None else self._reshape(descriptor, converted.value)

        if declared_type is Markup:
            converter = self._obtain(MarkupConverter, TypeConverter, descriptor)
            if self._accepts(converter, context, source_type):
                return self._run(converter, context, raw_value)

        if raw_value is None:
            return None

        if is_instance_of(raw_value, declared_type):
            return Converted(raw_value)

        try:
            with self.timings.timed(
                "convert.generic", content_id=str(content.id), property=descriptor.name
            ):
                return convert_generic(raw_value, declared_type)
        except Exception as exc:
            # Validators of nested models may raise more than ValidationError
            self._log_failure(context, exc)
            return None

    def materialize(
        self,
        content: ContentNode,
        culture: str,
        descriptor: PropertyDescriptor,
        instance: Any,
    ) -> Converted | None:
        """Resolve and convert a property in one go."""
        raw_value = self.resolve_raw(content, culture, descriptor, instance)
        return self.convert(content, culture, descriptor, raw_value, instance)

    def _obtain(self, target: Any, base: type[S], descriptor: PropertyDescriptor) -> S:
        if not isinstance(target, type):
            obtained = target
        else:
            try:
                obtained = self.container.resolve_or_create(target)
            except Exception as exc:
                raise ConfigurationError(
                    f"Could not obtain {target.__name__} for "
                    f"{descriptor.owner.__qualname__}.{descriptor.name}: {exc}"
                ) from exc

        if not isinstance(obtained, base):
            raise ConfigurationError(
                f"{type(obtained).__name__} named by {descriptor.owner.__qualname__}."
                f"{descriptor.name} is not a {base.__name__}"
            )
        return obtained

    def _accepts(
        self, converter: TypeConverter, context: ResolutionContext, source_type: type | None
    ) -> bool:
        try:
            return bool(converter.can_convert_from(context, source_type))
        except Exception as exc:
            self._log_failure(context, exc)
            return False

    def _run(
        self, converter: TypeConverter, context: ResolutionContext, raw_value: Any
    ) -> Converted | None:
        try:
            with self.timings.timed(
                "convert",
                converter=type(converter).__name__,
                content_id=str(context.content.id),
                property=context.property.name,
            ):
                converted = converter.convert_from(context, context.culture, raw_value)
        except Exception as exc:
            self._log_failure(context, exc)
            return None
        return None if converted is None else Converted(converted)

    def _reshape(self, descriptor: PropertyDescriptor, converted: Any) -> Converted | None:
        sequence = descriptor.sequence
        if sequence is not None:
            container, _ = sequence
            if is_collection(converted):
                return Converted(container(converted))
            # A single item where a sequence is wanted, e.g. one picked image
            return Converted(container([converted]))

        if is_collection(converted) and not is_instance_of(converted, descriptor.declared_type):
            first = next(iter(converted), None)
            return None if first is None else Converted(first)

        return Converted(converted)

    def _log_failure(self, context: ResolutionContext, exc: Exception) -> None:
        failure = ConversionFailure(context.property.name, exc)
        LOGGER.warning(
            str(failure),
            exc_info=exc,
            extra={"content_id": str(context.content.id), "property": context.property.name},
        )
