"""Tests for ProjectionSettings."""

import logging

import pytest
from pydantic import ValidationError

from contour import ProjectionSettings


def test_defaults(monkeypatch):
    for name in ("CONTOUR_DEFAULT_CULTURE", "CONTOUR_LOG_TIMINGS", "CONTOUR_TIMING_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = ProjectionSettings()

    assert settings.default_culture == "en-US"
    assert settings.log_timings is False
    assert settings.timing_level == logging.DEBUG


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("CONTOUR_DEFAULT_CULTURE", "da-DK")
    monkeypatch.setenv("CONTOUR_LOG_TIMINGS", "true")
    monkeypatch.setenv("CONTOUR_TIMING_LOG_LEVEL", "warning")

    settings = ProjectionSettings()

    assert settings.default_culture == "da-DK"
    assert settings.log_timings is True
    assert settings.timing_log_level == "WARNING"
    assert settings.timing_level == logging.WARNING


def test_unknown_log_level():
    with pytest.raises(ValidationError, match="Unknown logging level"):
        ProjectionSettings(timing_log_level="chatty")
