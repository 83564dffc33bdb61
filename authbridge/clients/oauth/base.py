"""Delegated-token pipeline shared by OAuth 1.0a and OAuth 2.0 clients.

From a callback request to a profile:

1. look for provider error parameters and fail with ProtocolError before
   anything else (no token exchange is attempted)
2. read the protocol-specific credentials
3. exchange them for an access token through an authlib session
4. fetch the provider's profile document with the access token, within
   the configured connect/read timeouts
5. map the document onto the provider's profile class and attach the
   access token

Token requests and signatures are handled by authlib; the client only
decides which endpoints to call and how to read the results.
"""
from __future__ import annotations

import contextlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, Mapping, Optional

import requests
from authlib.integrations.base_client import OAuthError

from authbridge.clients.base import BaseClient, ClientConfig, http_timeouts
from authbridge.core.context import WebContext
from authbridge.core.credentials import OAuthCredentials
from authbridge.core.exceptions import CommunicationError, ProtocolError
from authbridge.core.profile import OAuthProfile
from authbridge.core.validators import assert_not_blank, assert_not_negative, assert_not_none, is_blank

from .providers import OAuthProvider

logger = logging.getLogger(__name__)

# Parameters a provider may send back instead of a credential
ERROR_PARAMETERS = (
    "error",
    "error_reason",
    "error_description",
    "error_uri",
    "oauth_problem",
    "denied",
)


@dataclass(frozen=True)
class OAuthClientConfig(ClientConfig):
    """Delegated-token client settings.

    Timeouts are in milliseconds; 0 disables the timeout for that phase.
    """
    key: str = ""
    secret: str = field(default="", repr=False)
    scope: Optional[str] = None
    connect_timeout: int = 500
    read_timeout: int = 3000
    proxy_host: Optional[str] = None
    proxy_port: int = 8080


@dataclass(frozen=True)
class AccessToken:
    token: str = field(repr=False)
    secret: Optional[str] = field(default=None, repr=False)
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


class BaseOAuthClient(BaseClient):
    """Base class of the delegated-token clients.

    The provider strategy (endpoints, profile class, extra headers) is a class
    attribute on provider-specific subclasses, or passed to the constructor.
    """

    config_class = OAuthClientConfig
    provider: ClassVar[Optional[OAuthProvider]] = None

    def __init__(self, config: Optional[OAuthClientConfig] = None, provider: Optional[OAuthProvider] = None, **settings):
        super().__init__(config, **settings)
        if provider is not None:
            self.provider = provider

    def _new_client(self, config: OAuthClientConfig) -> "BaseOAuthClient":
        return type(self)(config, provider=self.provider)

    def internal_init(self) -> None:
        super().internal_init()
        assert_not_blank("key", self.config.key)
        assert_not_blank("secret", self.config.secret)
        assert_not_none("provider", self.provider)
        assert_not_negative("connect_timeout", self.config.connect_timeout)
        assert_not_negative("read_timeout", self.config.read_timeout)

    # ─────────────────────────────────────────────────────────────────────
    # Per-call request settings
    # ─────────────────────────────────────────────────────────────────────
    @property
    def scope(self) -> Optional[str]:
        return self.config.scope or self.provider.default_scope

    @property
    def timeouts(self) -> tuple[Optional[float], Optional[float]]:
        return http_timeouts(self.config.connect_timeout, self.config.read_timeout)

    @property
    def proxies(self) -> Optional[dict[str, str]]:
        if is_blank(self.config.proxy_host):
            return None
        proxy_url = f"http://{self.config.proxy_host}:{self.config.proxy_port}"
        return {"http": proxy_url, "https": proxy_url}

    @property
    def request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self.timeouts}
        if self.proxies:
            kwargs["proxies"] = self.proxies
        return kwargs

    def new_session(self, access_token: Optional[AccessToken] = None, **kwargs):
        """Build a fresh authlib session for a single call."""
        raise NotImplementedError

    # ─────────────────────────────────────────────────────────────────────
    # Credentials
    # ─────────────────────────────────────────────────────────────────────
    def retrieve_credentials(self, context: WebContext) -> OAuthCredentials:
        errors = []
        for name in ERROR_PARAMETERS:
            value = context.get_request_parameter(name)
            if value is not None:
                errors.append((name, value))
        if errors:
            message = "; ".join(f"{name} : '{value}'" for name, value in errors)
            logger.error(f"{self.name} callback carries error parameters: {message}")
            raise ProtocolError("Failed to retrieve OAuth credentials, error parameters found", errors)
        return self.get_oauth_credentials(context)

    def get_oauth_credentials(self, context: WebContext) -> OAuthCredentials:
        raise NotImplementedError

    # ─────────────────────────────────────────────────────────────────────
    # Profile
    # ─────────────────────────────────────────────────────────────────────
    def retrieve_user_profile(self, credentials: OAuthCredentials) -> OAuthProfile:
        access_token = self.get_access_token(credentials)
        return self.retrieve_user_profile_from_token(access_token)

    def resolve_profile_from_access_token(self, access_token: str | AccessToken) -> OAuthProfile:
        """Resolve a profile for an access token obtained elsewhere."""
        self.ensure_initialized()
        if isinstance(access_token, str):
            access_token = self.access_token_from_string(access_token)
        profile = self.retrieve_user_profile_from_token(access_token)
        if is_blank(profile.id):
            raise CommunicationError(f"{self.name} resolved a profile without identifier")
        return profile

    def access_token_from_string(self, token: str) -> AccessToken:
        return AccessToken(token)

    def get_access_token(self, credentials: OAuthCredentials) -> AccessToken:
        raise NotImplementedError

    def retrieve_user_profile_from_token(self, access_token: AccessToken) -> OAuthProfile:
        body = self.send_request_for_data(access_token, self.provider.profile_url)
        if not body:
            raise CommunicationError(f"No data found for {self.name} access token")
        profile = self.extract_user_profile(body)
        self.add_access_token_to_profile(profile, access_token)
        return profile

    def send_request_for_data(self, access_token: AccessToken, data_url: str) -> str:
        """GET a provider resource with the access token.

        Raises:
            CommunicationError: On timeout, network failure or non-200 status
        """
        session = self.new_session(access_token)
        started = time.monotonic()
        try:
            response = session.get(data_url, headers=dict(self.provider.headers), **self.request_kwargs)
        except requests.Timeout as exc:
            logger.error(f"Timed out fetching {data_url}")
            raise CommunicationError(f"Timed out fetching {data_url}") from exc
        except requests.RequestException as exc:
            logger.error(f"Failed to fetch {data_url}: {exc}")
            raise CommunicationError(f"Failed to fetch {data_url}: {exc}") from exc

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.debug(f"Request took {elapsed_ms} ms for: {data_url}")
        code = response.status_code
        body = response.text
        logger.debug(f"Response code: {code}")
        if code != 200:
            logger.error(f"Failed to get user data, code: {code} / body: {body}")
            raise CommunicationError("Failed to get user data", status_code=code, body=body)
        return body

    def extract_user_profile(self, body: str) -> OAuthProfile:
        try:
            return self.provider.extract_profile(body)
        except ValueError as exc:
            raise CommunicationError(f"Cannot parse {self.name} profile document", status_code=200, body=body) from exc

    def add_access_token_to_profile(self, profile: Optional[OAuthProfile], access_token: AccessToken) -> None:
        if profile is not None:
            logger.debug(f"Adding access token to {profile.typed_id}")
            profile.access_token = access_token.token

    @contextlib.contextmanager
    def provider_errors(self) -> Iterator[None]:
        """Translate authlib/requests failures during token requests."""
        try:
            yield
        except OAuthError as exc:
            errors = {"error": exc.error}
            if exc.description:
                errors["error_description"] = exc.description
            logger.error(f"{self.name} token request rejected: {exc.error}")
            raise ProtocolError(f"{self.name} token request rejected", errors) from exc
        except requests.Timeout as exc:
            raise CommunicationError(f"Timed out talking to {self.name} provider") from exc
        except requests.RequestException as exc:
            raise CommunicationError(f"Failed to talk to {self.name} provider: {exc}") from exc
