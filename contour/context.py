"""Ambient culture for the current request or task.

Hosting layers (web frameworks, workers) set the culture of the request
being served; projections that are not given an explicit culture read it
from here before falling back to the configured default.
"""

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

# Context variable holding the culture of the current request
_culture: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "contour_culture", default=None
)


def get_culture() -> str | None:
    """Get the ambient culture, or None when no request culture is set.

    Example:
        >>> set_culture("da-DK")
        >>> get_culture()
        'da-DK'
    """
    return _culture.get()


def set_culture(culture: str | None) -> None:
    """Set the ambient culture.

    Args:
        culture: A locale string such as "en-GB".
    """
    _culture.set(culture)


def clear_culture() -> None:
    """Clear the ambient culture.

    This is useful for cleanup or testing.
    """
    _culture.set(None)


@contextmanager
def culture_scope(culture: str) -> Iterator[str]:
    """Use a culture for the duration of a block.

    Example:
        >>> with culture_scope("fr-FR"):
        ...     page = project(node, Page)
    """
    token = _culture.set(culture)
    try:
        yield culture
    finally:
        _culture.reset(token)
