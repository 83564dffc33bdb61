"""Username/password clients: HTML login form and HTTP Basic authentication.

Both read a username and a password from the request, check them with a
``UsernamePasswordAuthenticator`` and build an ``HttpProfile`` with a
``ProfileCreator``.
"""
from __future__ import annotations

import abc
import base64
import binascii
import hmac
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from authbridge.core.context import WebContext
from authbridge.core.credentials import UsernamePasswordCredentials
from authbridge.core.exceptions import AuthChallengeError, CredentialsError
from authbridge.core.profile import CommonProfile
from authbridge.core.validators import assert_http_url, assert_not_blank, assert_not_none, is_not_blank

from .base import BaseClient, ClientConfig

logger = logging.getLogger(__name__)

BASIC_AUTH_HEADER_NAME = "Authorization"
BASIC_AUTH_PREFIX = "Basic "


class HttpProfile(CommonProfile):
    """Profile of a user authenticated by username and password."""


# ─────────────────────────────────────────────────────────────────────────────
# Authenticators and profile creators
# ─────────────────────────────────────────────────────────────────────────────
class UsernamePasswordAuthenticator(abc.ABC):
    """Check a username/password pair."""

    @abc.abstractmethod
    def validate(self, credentials: UsernamePasswordCredentials) -> None:
        """Raise CredentialsError when the pair is not valid."""


class SimpleTestUsernamePasswordAuthenticator(UsernamePasswordAuthenticator):
    """Accept any pair where the password equals the username (demo only)."""

    def validate(self, credentials: UsernamePasswordCredentials) -> None:
        if not credentials.username or credentials.username != credentials.password:
            logger.warning(f"Invalid demo credentials for username {credentials.username!r}")
            raise CredentialsError(f"Username '{credentials.username}' does not match password")


class DictUsernamePasswordAuthenticator(UsernamePasswordAuthenticator):
    """Check pairs against a static username -> password table."""

    def __init__(self, users: Mapping[str, str]):
        self._users = dict(users)

    def validate(self, credentials: UsernamePasswordCredentials) -> None:
        expected = self._users.get(credentials.username)
        if expected is None or not hmac.compare_digest(
            expected.encode("utf-8"), credentials.password.encode("utf-8")
        ):
            logger.warning(f"Invalid password for username {credentials.username!r}")
            raise CredentialsError("Invalid username or password")


class ProfileCreator(abc.ABC):
    """Build the profile of an authenticated username."""

    @abc.abstractmethod
    def create(self, username: str) -> HttpProfile:
        ...


class UsernameProfileCreator(ProfileCreator):
    def create(self, username: str) -> HttpProfile:
        profile = HttpProfile(id=username)
        profile.add_attribute("username", username)
        return profile


# ─────────────────────────────────────────────────────────────────────────────
# Clients
# ─────────────────────────────────────────────────────────────────────────────
class BaseHttpClient(BaseClient):
    """Shared validation and profile creation for username/password clients."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        authenticator: Optional[UsernamePasswordAuthenticator] = None,
        profile_creator: Optional[ProfileCreator] = None,
        **settings,
    ):
        super().__init__(config, **settings)
        self.authenticator = authenticator
        self.profile_creator = profile_creator or UsernameProfileCreator()

    def _new_client(self, config: ClientConfig) -> "BaseHttpClient":
        return type(self)(config, authenticator=self.authenticator, profile_creator=self.profile_creator)

    def internal_init(self) -> None:
        super().internal_init()
        assert_not_none("authenticator", self.authenticator)
        assert_not_none("profile_creator", self.profile_creator)

    def retrieve_user_profile(self, credentials: UsernamePasswordCredentials) -> HttpProfile:
        self.authenticator.validate(credentials)
        return self.profile_creator.create(credentials.username)


@dataclass(frozen=True)
class FormClientConfig(ClientConfig):
    login_url: str = ""
    username_parameter: str = "username"
    password_parameter: str = "password"


class FormClient(BaseHttpClient):
    """Username and password posted from an HTML login form."""

    config_class = FormClientConfig

    def internal_init(self) -> None:
        super().internal_init()
        assert_http_url("login_url", self.config.login_url)
        assert_not_blank("username_parameter", self.config.username_parameter)
        assert_not_blank("password_parameter", self.config.password_parameter)

    def retrieve_redirection_url(self, context: WebContext) -> str:
        return self.config.login_url

    def retrieve_credentials(self, context: WebContext) -> UsernamePasswordCredentials:
        username = context.get_request_parameter(self.config.username_parameter)
        password = context.get_request_parameter(self.config.password_parameter)
        if is_not_blank(username) and is_not_blank(password):
            credentials = UsernamePasswordCredentials(username, password, client_name=self.name)
            logger.debug(f"Form credentials: {credentials}")
            return credentials
        message = "Username and password cannot be blank"
        logger.error(message)
        raise CredentialsError(message)


@dataclass(frozen=True)
class BasicAuthClientConfig(ClientConfig):
    realm_name: str = "authentication required"


class BasicAuthClient(BaseHttpClient):
    """Username and password sent in an ``Authorization: Basic`` header."""

    config_class = BasicAuthClientConfig

    def internal_init(self) -> None:
        super().internal_init()
        assert_not_blank("realm_name", self.config.realm_name)

    def retrieve_redirection_url(self, context: WebContext) -> str:
        return self.callback_url

    def retrieve_credentials(self, context: WebContext) -> UsernamePasswordCredentials:
        header = context.get_request_header(BASIC_AUTH_HEADER_NAME)
        if header is None or not header.startswith(BASIC_AUTH_PREFIX):
            raise AuthChallengeError("No basic auth header found", self.config.realm_name)

        token = header[len(BASIC_AUTH_PREFIX):].strip()
        try:
            decoded = base64.b64decode(token, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise CredentialsError("Bad format of the basic auth header") from exc

        username, delimiter, password = decoded.partition(":")
        if not delimiter:
            raise CredentialsError("Bad format of the basic auth header")

        credentials = UsernamePasswordCredentials(username, password, client_name=self.name)
        logger.debug(f"Basic auth credentials: {credentials}")
        return credentials
