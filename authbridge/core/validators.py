"""Blank checks and configuration assertions shared by every client."""
from __future__ import annotations

from typing import Any, Optional

from .exceptions import ConfigurationError


def is_blank(value: Optional[str]) -> bool:
    """Return True for None, empty or whitespace-only strings."""
    return value is None or not str(value).strip()


def is_not_blank(value: Optional[str]) -> bool:
    return not is_blank(value)


def assert_not_blank(name: str, value: Optional[str]) -> str:
    """Validate a required text setting.

    Args:
        name: Setting name for error messages (e.g., "callback_url")
        value: Setting value

    Returns:
        The value unchanged

    Raises:
        ConfigurationError: If the value is blank
    """
    if is_blank(value):
        raise ConfigurationError(f"{name} cannot be blank")
    return value


def assert_not_none(name: str, value: Any) -> Any:
    if value is None:
        raise ConfigurationError(f"{name} cannot be None")
    return value


def assert_not_negative(name: str, value: int) -> int:
    if value is None or value < 0:
        raise ConfigurationError(f"{name} must be zero or a positive number of milliseconds")
    return value


def assert_http_url(name: str, value: Optional[str]) -> str:
    """Validate a required absolute http(s) URL setting."""
    assert_not_blank(name, value)
    if not value.lower().startswith(("http://", "https://")):
        raise ConfigurationError(f"{name} must be an absolute http(s) URL")
    return value
