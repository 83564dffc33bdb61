"""Generic client protocol shared by every authentication client.

Every client goes through the same three phases:

1. ``redirection_target(context)``: where the browser must be sent
   (login page, provider authorization URL, or the callback itself)
2. ``extract_credentials(context)``: read the callback request
3. ``resolve_profile(credentials)``: turn the credentials into a profile

Each phase initializes the client first. Configuration is an immutable
dataclass; a client can be shared by concurrent requests because anything
request-scoped (HTTP sessions, timeouts) is built fresh for every call.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from authbridge.core.context import WebContext
from authbridge.core.credentials import Credentials
from authbridge.core.exceptions import CommunicationError, ConfigurationError
from authbridge.core.lifecycle import InitializableObject
from authbridge.core.profile import UserProfile
from authbridge.core.validators import assert_not_blank, is_blank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every client.

    Attributes:
        name: Logical client name (defaults to the client class name)
        callback_url: URL the provider sends the user back to
    """
    name: str = ""
    callback_url: str = ""


def http_timeouts(connect_timeout: int, read_timeout: int) -> tuple[Optional[float], Optional[float]]:
    """Convert millisecond timeouts into a requests ``(connect, read)`` tuple.

    A value of 0 disables the timeout for that phase.
    """
    return (
        connect_timeout / 1000 if connect_timeout else None,
        read_timeout / 1000 if read_timeout else None,
    )


class BaseClient(InitializableObject):
    """Base class of all clients.

    Subclasses set ``config_class`` and implement ``retrieve_redirection_url``,
    ``retrieve_credentials`` and ``retrieve_user_profile``.
    """

    config_class: ClassVar[type[ClientConfig]] = ClientConfig

    def __init__(self, config: Optional[ClientConfig] = None, **settings: Any):
        super().__init__()
        if config is None:
            config = self.config_class(**settings)
        elif settings:
            config = dataclasses.replace(config, **settings)
        if not isinstance(config, self.config_class):
            raise ConfigurationError(
                f"{type(self).__name__} expects a {self.config_class.__name__}, got {type(config).__name__}"
            )
        self._config = config

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name or type(self).__name__

    @property
    def callback_url(self) -> str:
        return self._config.callback_url

    def configure(self, **changes: Any) -> None:
        """Replace configuration values before first use.

        Raises:
            ConfigurationError: If the client is already initialized
        """
        if self.initialized:
            raise ConfigurationError(f"{self.name} is already initialized; its configuration cannot change")
        self._config = dataclasses.replace(self._config, **changes)

    def clone(self, **changes: Any) -> "BaseClient":
        """Return a new, uninitialized client of the same type with a copied config."""
        config = dataclasses.replace(self._config, **changes)
        return self._new_client(config)

    def _new_client(self, config: ClientConfig) -> "BaseClient":
        return type(self)(config)

    def internal_init(self) -> None:
        assert_not_blank("callback_url", self._config.callback_url)

    # ─────────────────────────────────────────────────────────────────────
    # Three-phase protocol
    # ─────────────────────────────────────────────────────────────────────
    def redirection_target(self, context: WebContext) -> str:
        self.ensure_initialized()
        url = self.retrieve_redirection_url(context)
        logger.debug(f"{self.name} redirection url: {url}")
        return url

    def extract_credentials(self, context: WebContext) -> Optional[Credentials]:
        self.ensure_initialized()
        return self.retrieve_credentials(context)

    def resolve_profile(self, credentials: Credentials) -> UserProfile:
        self.ensure_initialized()
        profile = self.retrieve_user_profile(credentials)
        if profile is None or is_blank(profile.id):
            raise CommunicationError(f"{self.name} resolved a profile without identifier")
        logger.debug(f"{self.name} resolved profile {profile.typed_id}")
        return profile

    def retrieve_redirection_url(self, context: WebContext) -> str:
        raise NotImplementedError

    def retrieve_credentials(self, context: WebContext) -> Optional[Credentials]:
        raise NotImplementedError

    def retrieve_user_profile(self, credentials: Credentials) -> UserProfile:
        raise NotImplementedError

    def shutdown(self) -> None:
        """Stop background work owned by the client (none by default)."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} callback_url={self.callback_url!r}>"
