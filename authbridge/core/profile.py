"""User profiles: the uniform result of every authentication protocol.

A profile has an identifier, a typed identifier ``<ProfileType>#<id>`` and
an ordered mapping of typed attributes. Every concrete profile class is
registered under its type name so that a profile saved in session as
``(typed_id, attributes)`` can be rebuilt with ``build_profile()``.
"""
from __future__ import annotations

import enum
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional

from .converters import (
    AttributesDefinition,
    Color,
    Gender,
    Locale,
    convert_gender,
    convert_locale,
    convert_string,
)

logger = logging.getLogger(__name__)

SEPARATOR = "#"
ACCESS_TOKEN = "access_token"

_PROFILE_CLASSES: dict[str, type["UserProfile"]] = {}


class UserProfile:
    """Identifier plus attributes, roles and permissions of a user."""

    attributes_definition: ClassVar[AttributesDefinition] = AttributesDefinition()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        _PROFILE_CLASSES[cls.__name__] = cls

    def __init__(self, id: Optional[str] = None, attributes: Optional[Mapping[str, Any]] = None):
        self._id: Optional[str] = None
        self._attributes: dict[str, Any] = {}
        self.roles: list[str] = []
        self.permissions: list[str] = []
        self.remembered = False
        if id is not None:
            self.set_id(id)
        if attributes:
            self.add_attributes(attributes)

    @classmethod
    def profile_type(cls) -> str:
        return cls.__name__

    @property
    def id(self) -> Optional[str]:
        return self._id

    def set_id(self, id: Any) -> None:
        """Set the identifier, stripping a ``<ProfileType>#`` prefix if present."""
        if id is None:
            return
        text = str(id)
        prefix = self.profile_type() + SEPARATOR
        if text.startswith(prefix):
            text = text[len(prefix):]
        logger.debug(f"identifier: {text}")
        self._id = text

    @property
    def typed_id(self) -> str:
        return f"{self.profile_type()}{SEPARATOR}{self._id}"

    @property
    def attributes(self) -> Mapping[str, Any]:
        return MappingProxyType(self._attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def add_attribute(self, name: str, value: Any) -> None:
        """Add an attribute, converted by the class's attribute schema."""
        if value is None:
            return
        converted = self.attributes_definition.convert(name, value)
        if converted is not None:
            self._attributes[name] = converted

    def add_attributes(self, attributes: Mapping[str, Any]) -> None:
        for name, value in attributes.items():
            self.add_attribute(name, value)

    def add_role(self, role: str) -> None:
        if role not in self.roles:
            self.roles.append(role)

    def add_permission(self, permission: str) -> None:
        if permission not in self.permissions:
            self.permissions.append(permission)

    def to_session(self) -> dict[str, Any]:
        """Plain-data form of the profile, safe for any session serializer."""
        return {
            "typed_id": self.typed_id,
            "attributes": {name: _plain(value) for name, value in self._attributes.items()},
            "roles": list(self.roles),
            "permissions": list(self.permissions),
            "remembered": self.remembered,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserProfile):
            return NotImplemented
        return self.typed_id == other.typed_id and self._attributes == other._attributes

    def __repr__(self) -> str:
        names = ", ".join(name for name in self._attributes if name != ACCESS_TOKEN)
        return f"<{self.profile_type()} id={self._id!r} attributes=[{names}]>"


_PROFILE_CLASSES[UserProfile.__name__] = UserProfile


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (Locale, Color)):
        return str(value)
    return value


class CommonProfile(UserProfile):
    """Profile exposing the attributes most providers have in common.

    Subclasses map provider-specific attribute names onto these accessors by
    overriding the ``*_attribute`` class variables.
    """

    email_attribute: ClassVar[str] = "email"
    first_name_attribute: ClassVar[str] = "first_name"
    family_name_attribute: ClassVar[str] = "family_name"
    display_name_attribute: ClassVar[str] = "display_name"
    username_attribute: ClassVar[str] = "username"
    gender_attribute: ClassVar[str] = "gender"
    locale_attribute: ClassVar[str] = "locale"
    picture_url_attribute: ClassVar[str] = "picture_url"
    profile_url_attribute: ClassVar[str] = "profile_url"
    location_attribute: ClassVar[str] = "location"

    attributes_definition = AttributesDefinition(
        email=convert_string,
        first_name=convert_string,
        family_name=convert_string,
        display_name=convert_string,
        username=convert_string,
        gender=convert_gender,
        locale=convert_locale,
        picture_url=convert_string,
        profile_url=convert_string,
        location=convert_string,
    )

    @property
    def email(self) -> Optional[str]:
        return self.get_attribute(self.email_attribute)

    @property
    def first_name(self) -> Optional[str]:
        return self.get_attribute(self.first_name_attribute)

    @property
    def family_name(self) -> Optional[str]:
        return self.get_attribute(self.family_name_attribute)

    @property
    def display_name(self) -> Optional[str]:
        return self.get_attribute(self.display_name_attribute)

    @property
    def username(self) -> Optional[str]:
        return self.get_attribute(self.username_attribute)

    @property
    def gender(self) -> Gender:
        return self.get_attribute(self.gender_attribute, Gender.UNSPECIFIED)

    @property
    def locale(self) -> Optional[Locale]:
        return self.get_attribute(self.locale_attribute)

    @property
    def picture_url(self) -> Optional[str]:
        return self.get_attribute(self.picture_url_attribute)

    @property
    def profile_url(self) -> Optional[str]:
        return self.get_attribute(self.profile_url_attribute)

    @property
    def location(self) -> Optional[str]:
        return self.get_attribute(self.location_attribute)


class OAuthProfile(CommonProfile):
    """Profile returned by a delegated-token provider; carries the access token."""

    @property
    def access_token(self) -> Optional[str]:
        return self.get_attribute(ACCESS_TOKEN)

    @access_token.setter
    def access_token(self, token: str) -> None:
        self._attributes[ACCESS_TOKEN] = token


def is_typed_id_of(typed_id: Optional[str], profile_class: type[UserProfile]) -> bool:
    return bool(typed_id) and typed_id.startswith(profile_class.profile_type() + SEPARATOR)


def build_profile(typed_id: str, attributes: Optional[Mapping[str, Any]] = None) -> Optional[UserProfile]:
    """Rebuild a profile from its typed id and saved attributes.

    Returns None when the typed id is malformed or names an unknown profile
    type.
    """
    if not typed_id or SEPARATOR not in typed_id:
        return None
    profile_type, _, id = typed_id.partition(SEPARATOR)
    profile_class = _PROFILE_CLASSES.get(profile_type)
    if profile_class is None:
        logger.warning(f"Unknown profile type: {profile_type}")
        return None
    return profile_class(id=id, attributes=attributes)


def profile_from_session(data: Optional[Mapping[str, Any]]) -> Optional[UserProfile]:
    """Inverse of ``UserProfile.to_session()``."""
    if not data:
        return None
    profile = build_profile(data.get("typed_id", ""), data.get("attributes"))
    if profile is None:
        return None
    for role in data.get("roles", []):
        profile.add_role(role)
    for permission in data.get("permissions", []):
        profile.add_permission(permission)
    profile.remembered = bool(data.get("remembered"))
    return profile
