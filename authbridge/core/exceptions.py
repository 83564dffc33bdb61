"""Authentication exceptions for error handling."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional


class AuthError(Exception):
    """Base exception for all authentication client operations."""

    def __init__(self, message: str):
        self._message = message
        super().__init__(message)

    @property
    def message(self) -> str:
        return self._message


class ConfigurationError(AuthError):
    """A client is missing a required setting or was reconfigured after init."""
    pass


class CredentialsError(AuthError):
    """Credentials read from the request do not have the expected shape.

    The caller can re-prompt the user.
    """
    pass


class ProtocolError(AuthError):
    """The identity provider returned an error instead of a credential.

    Attributes:
        errors: Read-only mapping of every error parameter reported by the
            provider, in the order they were found
    """

    def __init__(self, message: str, errors: Optional[Mapping[str, str] | Iterable[tuple[str, str]]] = None):
        super().__init__(message)
        self._errors = MappingProxyType(dict(errors or {}))

    @property
    def errors(self) -> Mapping[str, str]:
        return self._errors


class AuthChallengeError(AuthError):
    """No credential was sent; the caller must challenge the user agent.

    Attributes:
        realm_name: Realm announced in the ``WWW-Authenticate`` header
    """

    def __init__(self, message: str, realm_name: str):
        super().__init__(message)
        self._realm_name = realm_name

    @property
    def realm_name(self) -> str:
        return self._realm_name

    @property
    def www_authenticate(self) -> str:
        return f'Basic realm="{self._realm_name}"'


class CommunicationError(AuthError):
    """Network failure, timeout or unexpected response from a provider.

    Attributes:
        status_code: HTTP status code, when a response was received
        body: Response body, when a response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        if status_code is not None:
            message = f"[{status_code}] {message}"
        super().__init__(message)
        self._status_code = status_code
        self._body = body

    @property
    def status_code(self) -> Optional[int]:
        return self._status_code

    @property
    def body(self) -> Optional[str]:
        return self._body
