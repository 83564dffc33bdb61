"""Credentials read from a callback request, one type per protocol family."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """Base credentials; ``client_name`` names the client that read them."""
    client_name: str = field(default="", kw_only=True)


@dataclass(frozen=True)
class UsernamePasswordCredentials(Credentials):
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class OAuthCredentials(Credentials):
    """Delegated-token credentials.

    OAuth 1.0a: ``token`` is the request token, ``token_secret`` its secret
    (kept in session between redirect and callback) and ``verifier`` the
    ``oauth_verifier`` parameter.
    OAuth 2.0: ``verifier`` is the authorization code; ``token`` is unset.
    """
    verifier: str = field(repr=False)
    token: Optional[str] = None
    token_secret: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class CasCredentials(Credentials):
    service_ticket: str = field(repr=False)
