"""Authentication clients: form, Basic, OAuth 1.0a/2.0, CAS."""
from .base import BaseClient, ClientConfig
from .cas import CasClient, CasClientConfig, CasProfile, CasProxyProfile, CasProxyReceptor, CasProxyReceptorConfig
from .http import (
    BasicAuthClient,
    BasicAuthClientConfig,
    DictUsernamePasswordAuthenticator,
    FormClient,
    FormClientConfig,
    HttpProfile,
    SimpleTestUsernamePasswordAuthenticator,
)
from .registry import Clients

__all__ = [
    "BaseClient",
    "ClientConfig",
    "FormClient",
    "FormClientConfig",
    "BasicAuthClient",
    "BasicAuthClientConfig",
    "HttpProfile",
    "DictUsernamePasswordAuthenticator",
    "SimpleTestUsernamePasswordAuthenticator",
    "CasClient",
    "CasClientConfig",
    "CasProfile",
    "CasProxyProfile",
    "CasProxyReceptor",
    "CasProxyReceptorConfig",
    "Clients",
]
