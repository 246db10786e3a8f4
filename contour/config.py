"""Projection configuration using pydantic-settings."""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings


class ProjectionSettings(BaseSettings):
    """Process level projection settings.

    All settings can be configured via environment variables with the
    CONTOUR_ prefix. For example:
    - CONTOUR_DEFAULT_CULTURE=da-DK
    - CONTOUR_LOG_TIMINGS=true
    - CONTOUR_TIMING_LOG_LEVEL=INFO

    Attributes:
        default_culture: Culture used when neither the caller nor the
            ambient request context supply one.
        log_timings: Whether resolution and conversion steps log how long
            they took.
        timing_log_level: Level of the timing log records. Case-insensitive.
    """

    default_culture: str = "en-US"
    log_timings: bool = False
    timing_log_level: str = "DEBUG"

    model_config = {"env_prefix": "CONTOUR_"}

    @field_validator("timing_log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if not isinstance(getattr(logging, value.upper(), None), int):
            raise ValueError(f"Unknown logging level: {value}")
        return value.upper()

    @property
    def timing_level(self) -> int:
        """The numeric logging level for timing records."""
        return int(getattr(logging, self.timing_log_level))
