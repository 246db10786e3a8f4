"""Timing of individual projection steps."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

LOGGER = logging.getLogger(__name__)


class Timings:
    """Switch and level for timing records.

    Attributes:
        enabled: Whether timed steps are logged at all.
        level: The numeric logging level of timing records.
    """

    __slots__ = ("enabled", "level")

    def __init__(self, enabled: bool = False, level: int = logging.DEBUG):
        self.enabled = enabled
        self.level = level

    @contextmanager
    def timed(self, step: str, **extra: Any) -> Iterator[None]:
        """Time a block and log its duration when enabled.

        The duration is logged whether the block succeeds or raises.

        Example:
            >>> with timings.timed("resolve", property="title"):
            ...     value = resolver.resolve(context)
        """
        if not self.enabled or not LOGGER.isEnabledFor(self.level):
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            LOGGER.log(
                self.level,
                "%s complete",
                step,
                extra={**extra, "step": step, "elapsed_ms": round(elapsed_ms, 3)},
            )
