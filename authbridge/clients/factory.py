"""Build the clients registry from application settings."""
from __future__ import annotations

from typing import Optional

from authbridge.config.settings import AppConfig

from .base import BaseClient
from .cas import CasClient, CasProxyReceptor
from .http import (
    BasicAuthClient,
    DictUsernamePasswordAuthenticator,
    FormClient,
    SimpleTestUsernamePasswordAuthenticator,
    UsernamePasswordAuthenticator,
)
from .oauth import FacebookClient, GitHubClient, GoogleClient, LinkedInClient, TwitterClient, WordPressClient
from .registry import Clients

OAUTH_CLIENT_CLASSES = {
    "github": GitHubClient,
    "google": GoogleClient,
    "facebook": FacebookClient,
    "wordpress": WordPressClient,
    "twitter": TwitterClient,
    "linkedin": LinkedInClient,
}


def _authenticator(cfg: AppConfig) -> Optional[UsernamePasswordAuthenticator]:
    if cfg.form_users:
        return DictUsernamePasswordAuthenticator(cfg.form_users)
    if cfg.demo_mode:
        return SimpleTestUsernamePasswordAuthenticator()
    return None


def build_clients(cfg: AppConfig) -> Clients:
    """Create every client the settings enable.

    Username/password clients need FORM_USERS (or demo mode); OAuth clients
    need both key and secret; CAS needs a login or prefix URL.
    """
    clients: list[BaseClient] = []

    authenticator = _authenticator(cfg)
    if authenticator is None:
        print("[flask_app] FORM_USERS not set; form and basic-auth clients disabled")
    else:
        if cfg.form_login_url:
            clients.append(FormClient(authenticator=authenticator, login_url=cfg.form_login_url))
        clients.append(BasicAuthClient(authenticator=authenticator, realm_name=cfg.basic_auth_realm))

    for provider, credentials in cfg.oauth_providers.items():
        client_class = OAUTH_CLIENT_CLASSES[provider]
        clients.append(
            client_class(
                key=credentials.key,
                secret=credentials.secret,
                connect_timeout=cfg.oauth_connect_timeout_ms,
                read_timeout=cfg.oauth_read_timeout_ms,
                proxy_host=cfg.oauth_proxy_host,
                proxy_port=cfg.oauth_proxy_port,
            )
        )

    if cfg.cas_enabled:
        receptor = None
        if cfg.cas_proxy_enabled:
            receptor = CasProxyReceptor(millis_between_cleanups=cfg.cas_proxy_millis_between_cleanups)
            clients.append(receptor)
        clients.append(
            CasClient(
                proxy_receptor=receptor,
                cas_login_url=cfg.cas_login_url,
                cas_prefix_url=cfg.cas_prefix_url,
            )
        )

    return Clients(cfg.callback_url, clients)
