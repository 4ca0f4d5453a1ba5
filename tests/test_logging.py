"""
Tests for structured log output.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from tenant_commons.core.config import Settings, settings
from tenant_commons.core.logging import CustomJsonFormatter, component_for


def _record(name: str, message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(name, logging.WARNING, __file__, 1, message, None, None)


@pytest.mark.parametrize(
    "logger_name,component",
    [
        ("tenant_commons.services.forum_service", "services"),
        ("tenant_commons.api.deps", "api"),
        ("tenant_commons", "tenant_commons"),
        ("uvicorn.error", "uvicorn"),
    ],
)
def test_component_for(logger_name: str, component: str) -> None:
    assert component_for(logger_name) == component


def test_json_lines_carry_service_fields() -> None:
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    line = json.loads(formatter.format(_record("tenant_commons.services.access_policy", "Denied view_forum")))

    assert line["message"] == "Denied view_forum"
    assert line["service"] == settings.PROJECT_NAME
    assert line["version"] == settings.VERSION
    assert line["level"] == "WARNING"
    assert line["component"] == "services"


def test_log_level_is_normalised() -> None:
    assert Settings(SECRET_KEY="x", LOG_LEVEL=" warning ").LOG_LEVEL == "WARNING"


def test_unknown_log_level_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="x", LOG_LEVEL="chatty")
