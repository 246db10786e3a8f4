"""Hooks fired before and after a content node is projected."""

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .content import ContentNode

LOGGER = logging.getLogger(__name__)


class Decision(enum.Enum):
    """Outcome of a pre-conversion hook."""

    PROCEED = "proceed"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ConvertingEvent:
    """Payload of the pre-conversion hook.

    Attributes:
        content: The content node about to be projected.
        destination_type: The type it is about to be projected to.
    """

    content: ContentNode
    destination_type: type


@dataclass
class ConvertedEvent:
    """Payload of the post-conversion hook.

    Handlers may replace ``converted``; the value left there once every
    handler ran is what the projection returns.

    Attributes:
        content: The projected content node.
        converted: The projected instance.
        destination_type: The type the node was projected to.
    """

    content: ContentNode
    converted: Any
    destination_type: type


ConvertingHandler = Callable[[ConvertingEvent], Decision | None]
ConvertedHandler = Callable[[ConvertedEvent], None]


class ProjectionHooks:
    """Registry of process-wide conversion handlers.

    Converting handlers return ``Decision.CANCEL`` to stop a projection
    before anything is built; returning None proceeds. Handlers run in
    registration order and the first cancellation short-circuits the rest.

    Examples:
        >>> @hooks.on_converting
        ... def skip_drafts(event: ConvertingEvent) -> Decision | None:
        ...     if event.content.get_property("isDraft"):
        ...         return Decision.CANCEL
        ...     return None

        >>> @hooks.on_converted
        ... def audit(event: ConvertedEvent) -> None:
        ...     audit_log.append(event.content.id)
    """

    def __init__(self) -> None:
        self._converting: list[ConvertingHandler] = []
        self._converted: list[ConvertedHandler] = []
        self._lock = threading.Lock()

    def on_converting(self, handler: ConvertingHandler) -> ConvertingHandler:
        with self._lock:
            self._converting = [*self._converting, handler]
        return handler

    def on_converted(self, handler: ConvertedHandler) -> ConvertedHandler:
        with self._lock:
            self._converted = [*self._converted, handler]
        return handler

    def remove(self, handler: Callable[..., Any]) -> None:
        with self._lock:
            self._converting = [h for h in self._converting if h is not handler]
            self._converted = [h for h in self._converted if h is not handler]

    def clear(self) -> None:
        with self._lock:
            self._converting = []
            self._converted = []

    def converting(self, event: ConvertingEvent) -> Decision:
        # Handler lists are replaced, never mutated, so iterating a
        # snapshot needs no lock.
        for handler in self._converting:
            if handler(event) is Decision.CANCEL:
                return Decision.CANCEL
        return Decision.PROCEED

    def converted(self, event: ConvertedEvent) -> None:
        for handler in self._converted:
            handler(event)


# Process-wide handlers, fired for every projection
hooks = ProjectionHooks()
