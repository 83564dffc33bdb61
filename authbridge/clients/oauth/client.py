"""OAuth 2.0 and OAuth 1.0a clients built on authlib's requests sessions."""
from __future__ import annotations

import logging
from typing import Optional

from authlib.integrations.requests_client import OAuth1Session, OAuth2Session

from authbridge.core.context import WebContext
from authbridge.core.credentials import OAuthCredentials
from authbridge.core.exceptions import CredentialsError, ProtocolError
from authbridge.core.validators import assert_not_blank, is_blank

from .base import AccessToken, BaseOAuthClient
from .providers import FACEBOOK, GITHUB, GOOGLE, LINKEDIN, TWITTER, WORDPRESS

logger = logging.getLogger(__name__)

REQUEST_TOKEN_SESSION_SUFFIX = "#oauthRequestToken"


class OAuth20Client(BaseOAuthClient):
    """Authorization code flow."""

    def new_session(self, access_token: Optional[AccessToken] = None, **kwargs) -> OAuth2Session:
        token = dict(access_token.raw) if access_token is not None else None
        return OAuth2Session(
            client_id=self.config.key,
            client_secret=self.config.secret,
            scope=self.scope,
            redirect_uri=self.callback_url,
            token=token,
            token_endpoint_auth_method=self.provider.token_endpoint_auth_method,
            **kwargs,
        )

    def access_token_from_string(self, token: str) -> AccessToken:
        return AccessToken(token, raw={"access_token": token, "token_type": "Bearer"})

    def retrieve_redirection_url(self, context: WebContext) -> str:
        url, _state = self.new_session().create_authorization_url(self.provider.authorization_url)
        return url

    def get_oauth_credentials(self, context: WebContext) -> OAuthCredentials:
        code = context.get_request_parameter("code")
        if is_blank(code):
            message = "No authorization code found in callback"
            logger.error(message)
            raise CredentialsError(message)
        return OAuthCredentials(code, client_name=self.name)

    def get_access_token(self, credentials: OAuthCredentials) -> AccessToken:
        session = self.new_session()
        with self.provider_errors():
            token = session.fetch_token(self.provider.access_token_url, code=credentials.verifier, **self.request_kwargs)
        access_token = token.get("access_token")
        if is_blank(access_token):
            raise ProtocolError(f"{self.name} token response carries no access token")
        return AccessToken(access_token, raw=dict(token))


class OAuth10Client(BaseOAuthClient):
    """Three-legged OAuth 1.0a.

    The request token obtained while building the redirection URL is kept in
    the user session and checked against the one echoed on the callback.
    """

    def internal_init(self) -> None:
        super().internal_init()
        assert_not_blank("request_token_url", self.provider.request_token_url)

    @property
    def request_token_session_name(self) -> str:
        return f"{self.name}{REQUEST_TOKEN_SESSION_SUFFIX}"

    def new_session(self, access_token: Optional[AccessToken] = None, **kwargs) -> OAuth1Session:
        if access_token is not None:
            kwargs.setdefault("token", access_token.token)
            kwargs.setdefault("token_secret", access_token.secret)
        return OAuth1Session(
            self.config.key,
            self.config.secret,
            redirect_uri=self.callback_url,
            **kwargs,
        )

    def retrieve_redirection_url(self, context: WebContext) -> str:
        session = self.new_session()
        with self.provider_errors():
            request_token = session.fetch_request_token(self.provider.request_token_url, **self.request_kwargs)
        token = request_token.get("oauth_token")
        if is_blank(token):
            raise ProtocolError(f"{self.name} request token response carries no token")
        context.set_session_attribute(
            self.request_token_session_name,
            {"token": token, "secret": request_token.get("oauth_token_secret")},
        )
        return session.create_authorization_url(self.provider.authorization_url, token)

    def get_oauth_credentials(self, context: WebContext) -> OAuthCredentials:
        token = context.get_request_parameter("oauth_token")
        verifier = context.get_request_parameter("oauth_verifier")
        if is_blank(token) or is_blank(verifier):
            message = "No credential found"
            logger.error(message)
            raise CredentialsError(message)

        stored = context.get_session_attribute(self.request_token_session_name)
        if not stored:
            message = "Cannot get the request token from the session"
            logger.error(message)
            raise CredentialsError(message)
        if stored.get("token") != token:
            message = "Token received does not match the request token in session"
            logger.error(message)
            raise CredentialsError(message)

        return OAuthCredentials(verifier, token=token, token_secret=stored.get("secret"), client_name=self.name)

    def get_access_token(self, credentials: OAuthCredentials) -> AccessToken:
        session = self.new_session(
            token=credentials.token,
            token_secret=credentials.token_secret,
            verifier=credentials.verifier,
        )
        with self.provider_errors():
            token = session.fetch_access_token(self.provider.access_token_url, **self.request_kwargs)
        access_token = token.get("oauth_token")
        if is_blank(access_token):
            raise ProtocolError(f"{self.name} token response carries no access token")
        return AccessToken(access_token, secret=token.get("oauth_token_secret"), raw=dict(token))


# ─────────────────────────────────────────────────────────────────────────────
# Provider clients
# ─────────────────────────────────────────────────────────────────────────────
class GitHubClient(OAuth20Client):
    provider = GITHUB


class GoogleClient(OAuth20Client):
    provider = GOOGLE


class FacebookClient(OAuth20Client):
    provider = FACEBOOK


class WordPressClient(OAuth20Client):
    provider = WORDPRESS


class TwitterClient(OAuth10Client):
    provider = TWITTER


class LinkedInClient(OAuth20Client):
    provider = LINKEDIN
