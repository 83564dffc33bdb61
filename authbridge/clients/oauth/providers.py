"""Provider strategies: endpoints, attribute schema and profile class per provider."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from authbridge.core.converters import (
    DateConverter,
    GenderConverter,
    convert_boolean,
    convert_color,
    convert_integer,
    convert_locale,
    convert_string,
)
from authbridge.core.profile import OAuthProfile


@dataclass(frozen=True)
class OAuthProvider:
    """Everything that differs from one delegated-token provider to another.

    Attributes:
        name: Short provider name (e.g., "github")
        profile_class: Profile class built from the profile document
        authorization_url: Where the user grants access
        access_token_url: Token endpoint
        profile_url: Profile document of the authenticated user
        request_token_url: OAuth 1.0a request token endpoint
        default_scope: Scope requested when the client sets none
        id_attribute: Document field holding the user identifier
        headers: Extra headers sent with profile requests
        token_endpoint_auth_method: How OAuth 2.0 client credentials reach
            the token endpoint
    """
    name: str
    profile_class: type[OAuthProfile]
    authorization_url: str
    access_token_url: str
    profile_url: str
    request_token_url: str = ""
    default_scope: Optional[str] = None
    id_attribute: str = "id"
    headers: tuple[tuple[str, str], ...] = ()
    token_endpoint_auth_method: str = "client_secret_basic"

    def extract_profile(self, body: str) -> OAuthProfile:
        """Build a profile from a JSON profile document.

        Raises:
            ValueError: If the body is not a JSON object
        """
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("profile document is not a JSON object")
        profile = self.profile_class()
        profile.set_id(data.get(self.id_attribute))
        for name in self.profile_class.attributes_definition:
            if name in data:
                profile.add_attribute(name, data[name])
        return profile


# ─────────────────────────────────────────────────────────────────────────────
# Profiles
# ─────────────────────────────────────────────────────────────────────────────
class GitHubProfile(OAuthProfile):
    username_attribute = "login"
    display_name_attribute = "name"
    picture_url_attribute = "avatar_url"
    profile_url_attribute = "html_url"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "login": convert_string,
        "name": convert_string,
        "company": convert_string,
        "blog": convert_string,
        "bio": convert_string,
        "avatar_url": convert_string,
        "html_url": convert_string,
        "type": convert_string,
        "public_repos": convert_integer,
        "followers": convert_integer,
        "following": convert_integer,
        "created_at": DateConverter("%Y-%m-%dT%H:%M:%SZ"),
    })


class GoogleProfile(OAuthProfile):
    first_name_attribute = "given_name"
    display_name_attribute = "name"
    picture_url_attribute = "picture"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "email_verified": convert_boolean,
        "name": convert_string,
        "given_name": convert_string,
        "picture": convert_string,
        "hd": convert_string,
    })


class FacebookProfile(OAuthProfile):
    family_name_attribute = "last_name"
    display_name_attribute = "name"
    profile_url_attribute = "link"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "name": convert_string,
        "last_name": convert_string,
        "link": convert_string,
        "gender": GenderConverter("male", "female"),
        "updated_time": DateConverter("%Y-%m-%dT%H:%M:%S%z"),
        "verified": convert_boolean,
        "timezone": convert_integer,
    })


class WordPressProfile(OAuthProfile):
    picture_url_attribute = "avatar_URL"
    profile_url_attribute = "profile_URL"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "primary_blog": convert_integer,
        "avatar_URL": convert_string,
        "profile_URL": convert_string,
        "verified": convert_boolean,
        "email_verified": convert_boolean,
    })


class TwitterProfile(OAuthProfile):
    username_attribute = "screen_name"
    display_name_attribute = "name"
    locale_attribute = "lang"
    picture_url_attribute = "profile_image_url"
    profile_url_attribute = "url"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "screen_name": convert_string,
        "name": convert_string,
        "description": convert_string,
        "url": convert_string,
        "lang": convert_locale,
        "time_zone": convert_string,
        "utc_offset": convert_integer,
        "created_at": DateConverter("%a %b %d %H:%M:%S %z %Y"),
        "contributors_enabled": convert_boolean,
        "default_profile": convert_boolean,
        "protected": convert_boolean,
        "verified": convert_boolean,
        "followers_count": convert_integer,
        "friends_count": convert_integer,
        "statuses_count": convert_integer,
        "profile_image_url": convert_string,
        "profile_background_color": convert_color,
        "profile_link_color": convert_color,
        "profile_text_color": convert_color,
    })


class LinkedInProfile(OAuthProfile):
    first_name_attribute = "given_name"
    display_name_attribute = "name"
    picture_url_attribute = "picture"

    attributes_definition = OAuthProfile.attributes_definition.extend({
        "name": convert_string,
        "given_name": convert_string,
        "picture": convert_string,
        "email_verified": convert_boolean,
    })


# ─────────────────────────────────────────────────────────────────────────────
# Providers
# ─────────────────────────────────────────────────────────────────────────────
GITHUB = OAuthProvider(
    name="github",
    profile_class=GitHubProfile,
    authorization_url="https://github.com/login/oauth/authorize",
    access_token_url="https://github.com/login/oauth/access_token",
    profile_url="https://api.github.com/user",
    default_scope="read:user user:email",
    headers=(
        ("Accept", "application/vnd.github+json"),
        ("X-GitHub-Api-Version", "2022-11-28"),
    ),
)

GOOGLE = OAuthProvider(
    name="google",
    profile_class=GoogleProfile,
    authorization_url="https://accounts.google.com/o/oauth2/v2/auth",
    access_token_url="https://oauth2.googleapis.com/token",
    profile_url="https://openidconnect.googleapis.com/v1/userinfo",
    default_scope="openid email profile",
    id_attribute="sub",
)

FACEBOOK = OAuthProvider(
    name="facebook",
    profile_class=FacebookProfile,
    authorization_url="https://www.facebook.com/v19.0/dialog/oauth",
    access_token_url="https://graph.facebook.com/v19.0/oauth/access_token",
    profile_url=(
        "https://graph.facebook.com/v19.0/me"
        "?fields=id,name,first_name,last_name,email,link,gender,locale,updated_time,verified,timezone"
    ),
    default_scope="email public_profile",
)

WORDPRESS = OAuthProvider(
    name="wordpress",
    profile_class=WordPressProfile,
    authorization_url="https://public-api.wordpress.com/oauth2/authorize",
    access_token_url="https://public-api.wordpress.com/oauth2/token",
    profile_url="https://public-api.wordpress.com/rest/v1/me/",
    id_attribute="ID",
)

TWITTER = OAuthProvider(
    name="twitter",
    profile_class=TwitterProfile,
    request_token_url="https://api.twitter.com/oauth/request_token",
    authorization_url="https://api.twitter.com/oauth/authenticate",
    access_token_url="https://api.twitter.com/oauth/access_token",
    profile_url="https://api.twitter.com/1.1/account/verify_credentials.json",
)

LINKEDIN = OAuthProvider(
    name="linkedin",
    profile_class=LinkedInProfile,
    authorization_url="https://www.linkedin.com/oauth/v2/authorization",
    access_token_url="https://www.linkedin.com/oauth/v2/accessToken",
    profile_url="https://api.linkedin.com/v2/userinfo",
    default_scope="openid profile email",
    id_attribute="sub",
    token_endpoint_auth_method="client_secret_post",
)

PROVIDERS = {provider.name: provider for provider in (GITHUB, GOOGLE, FACEBOOK, WORDPRESS, TWITTER, LINKEDIN)}
