"""Delegated-token (OAuth 1.0a / 2.0) clients."""
from .base import ERROR_PARAMETERS, AccessToken, BaseOAuthClient, OAuthClientConfig
from .client import (
    FacebookClient,
    GitHubClient,
    GoogleClient,
    LinkedInClient,
    OAuth10Client,
    OAuth20Client,
    TwitterClient,
    WordPressClient,
)
from .providers import (
    FACEBOOK,
    GITHUB,
    GOOGLE,
    LINKEDIN,
    PROVIDERS,
    TWITTER,
    WORDPRESS,
    FacebookProfile,
    GitHubProfile,
    GoogleProfile,
    LinkedInProfile,
    OAuthProvider,
    TwitterProfile,
    WordPressProfile,
)

__all__ = [
    "ERROR_PARAMETERS",
    "AccessToken",
    "BaseOAuthClient",
    "OAuthClientConfig",
    "OAuthProvider",
    "OAuth10Client",
    "OAuth20Client",
    "GitHubClient",
    "GoogleClient",
    "FacebookClient",
    "WordPressClient",
    "TwitterClient",
    "LinkedInClient",
    "GitHubProfile",
    "GoogleProfile",
    "FacebookProfile",
    "WordPressProfile",
    "TwitterProfile",
    "LinkedInProfile",
    "GITHUB",
    "GOOGLE",
    "FACEBOOK",
    "WORDPRESS",
    "TWITTER",
    "LINKEDIN",
    "PROVIDERS",
]
