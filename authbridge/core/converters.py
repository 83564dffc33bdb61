"""Typed attribute values and the converters that build them.

Providers return attributes as JSON scalars or XML text. Each profile class
declares an ``AttributesDefinition`` mapping attribute names to converters,
so that ``profile.add_attribute("created_at", "Fri Feb 10 11:10:24 +0000 2012")``
stores a ``datetime`` rather than the raw string.

Converters return None for values they cannot convert.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

Converter = Callable[[Any], Any]


class Gender(enum.Enum):
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class Locale:
    language: str
    country: str = ""

    def __str__(self) -> str:
        return f"{self.language}_{self.country}" if self.country else self.language


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int

    def __str__(self) -> str:
        return f"{self.red:02X}{self.green:02X}{self.blue:02X}"


def convert_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def convert_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    return None


def convert_integer(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


_LOCALE_PATTERN = re.compile(r"^([a-zA-Z]{2,3})(?:[_-]([a-zA-Z]{2}|\d{3}))?$")


def convert_locale(value: Any) -> Optional[Locale]:
    """Convert ``fr``, ``fr_FR`` or ``fr-FR`` into a Locale."""
    if isinstance(value, Locale):
        return value
    if not isinstance(value, str):
        return None
    match = _LOCALE_PATTERN.match(value.strip())
    if not match:
        return None
    language, country = match.groups()
    return Locale(language.lower(), (country or "").upper())


def convert_color(value: Any) -> Optional[Color]:
    """Convert a ``RRGGBB`` hex string (``#`` optional) into a Color."""
    if isinstance(value, Color):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lstrip("#")
    if len(text) != 6:
        return None
    try:
        return Color(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return None


class DateConverter:
    """Parse dates with a strptime format, falling back to ISO 8601."""

    def __init__(self, fmt: Optional[str] = None):
        self.fmt = fmt

    def __call__(self, value: Any) -> Optional[datetime]:
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            return None
        if self.fmt:
            try:
                return datetime.strptime(value, self.fmt)
            except ValueError:
                pass
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Cannot parse date '{value}' with format {self.fmt or 'ISO 8601'}")
            return None


class GenderConverter:
    """Map provider-specific gender labels onto Gender."""

    def __init__(self, male_text: str = "male", female_text: str = "female"):
        self.male_text = male_text.lower()
        self.female_text = female_text.lower()

    def __call__(self, value: Any) -> Optional[Gender]:
        if isinstance(value, Gender):
            return value
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        if lowered == self.male_text:
            return Gender.MALE
        if lowered == self.female_text:
            return Gender.FEMALE
        if lowered in {gender.value for gender in Gender}:
            return Gender(lowered)
        return Gender.UNSPECIFIED


convert_date = DateConverter()
convert_gender = GenderConverter()


class AttributesDefinition(Mapping[str, Converter]):
    """Ordered attribute schema: attribute name -> converter."""

    def __init__(self, converters: Optional[Mapping[str, Converter]] = None, **more: Converter):
        self._converters: dict[str, Converter] = dict(converters or {})
        self._converters.update(more)

    def __getitem__(self, name: str) -> Converter:
        return self._converters[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    def extend(self, converters: Mapping[str, Converter]) -> "AttributesDefinition":
        """Return a new definition with extra (or overriding) attributes."""
        merged = dict(self._converters)
        merged.update(converters)
        return AttributesDefinition(merged)

    def convert(self, name: str, value: Any) -> Any:
        """Convert a value; attributes outside the schema pass through."""
        converter = self._converters.get(name)
        if converter is None or value is None:
            return value
        return converter(value)
