"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

OAUTH_PROVIDERS = ("github", "google", "facebook", "wordpress", "twitter", "linkedin")


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            print(f"[settings] ✓ Loaded {env_var} from environment (fallback)")
            return secret_value

    return None


@dataclass(frozen=True)
class OAuthCredentialsSetting:
    key: str
    secret: str = field(repr=False)


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Flask
    secret_key: str = field(repr=False)
    session_type: str = "filesystem"
    session_cookie_secure: bool = True

    # Clients registry
    callback_url: str = ""

    # Form / Basic auth
    form_login_url: str = ""
    form_users: dict[str, str] = field(default_factory=dict, repr=False)
    basic_auth_realm: str = "authentication required"

    # OAuth providers (name -> key/secret), only configured ones
    oauth_providers: dict[str, OAuthCredentialsSetting] = field(default_factory=dict)
    oauth_connect_timeout_ms: int = 500
    oauth_read_timeout_ms: int = 3000
    oauth_proxy_host: Optional[str] = None
    oauth_proxy_port: int = 8080

    # CAS
    cas_login_url: str = ""
    cas_prefix_url: str = ""
    cas_proxy_enabled: bool = False
    cas_proxy_millis_between_cleanups: int = 60000

    @property
    def cas_enabled(self) -> bool:
        return bool(self.cas_login_url or self.cas_prefix_url)


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default/generate."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        os.environ[var_name] = demo_default
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def _get_bool(var_name: str, default: bool = False) -> bool:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    return raw.lower() == "true"


def _get_int(var_name: str, default: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise RuntimeError(f"Environment variable {var_name} must not be negative.")
    return value


def _parse_users(raw: str) -> dict[str, str]:
    """Parse ``user:password,user2:password2``."""
    users = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        username, delimiter, password = item.partition(":")
        if not delimiter or not username:
            raise RuntimeError("FORM_USERS entries must look like 'username:password'")
        users[username] = password
    return users


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _get_bool("DEMO_MODE")

    # ─────────────────────────────────────────────────────────────────────────
    # Secrets: /run/secrets first, environment variables as fallback
    # ─────────────────────────────────────────────────────────────────────────
    secret_key = _load_secret_from_file("flask_secret_key", "FLASK_SECRET_KEY")
    if not secret_key:
        if demo_mode:
            secret_key = secrets.token_urlsafe(48)
            os.environ["FLASK_SECRET_KEY"] = secret_key
            print("[demo-mode] Generated temporary FLASK_SECRET_KEY")
        else:
            raise RuntimeError("FLASK_SECRET_KEY not found in /run/secrets or environment")

    oauth_providers = {}
    for provider in OAUTH_PROVIDERS:
        key = os.environ.get(f"{provider.upper()}_KEY", "").strip()
        secret = _load_secret_from_file(f"{provider}_secret", f"{provider.upper()}_SECRET")
        if key and secret:
            oauth_providers[provider] = OAuthCredentialsSetting(key=key, secret=secret)
        elif key or secret:
            print(f"[settings] ⚠️ {provider.upper()}_KEY and {provider.upper()}_SECRET must both be set; {provider} disabled")

    form_users_raw = _load_secret_from_file("form_users", "FORM_USERS") or ""
    form_users = _parse_users(form_users_raw)

    # ─────────────────────────────────────────────────────────────────────────
    # Plain settings
    # ─────────────────────────────────────────────────────────────────────────
    session_type = os.environ.get("FLASK_SESSION_TYPE") or "filesystem"
    session_cookie_secure = _get_bool("FLASK_SESSION_COOKIE_SECURE", default=not demo_mode)

    callback_url = _get_or_generate(
        "AUTH_CALLBACK_URL",
        demo_default="http://localhost:5000/callback",
        demo_mode=demo_mode,
    )
    form_login_url = _get_or_generate(
        "FORM_LOGIN_URL",
        demo_default="http://localhost:5000/login-form",
        required=False,
        demo_mode=demo_mode,
    )
    basic_auth_realm = os.environ.get("BASIC_AUTH_REALM") or "authentication required"

    oauth_proxy_host = os.environ.get("OAUTH_PROXY_HOST", "").strip() or None

    cas_login_url = os.environ.get("CAS_LOGIN_URL", "").strip()
    cas_prefix_url = os.environ.get("CAS_PREFIX_URL", "").strip()

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    enabled = ", ".join(sorted(oauth_providers)) or "none"
    print(f"[settings] Mode={mode_label}; callback={callback_url}; oauth providers={enabled}")

    if demo_mode and not form_users:
        print("[settings] WARNING: Demo authenticator in use (password == username). Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        secret_key=secret_key,
        session_type=session_type,
        session_cookie_secure=session_cookie_secure,
        callback_url=callback_url,
        form_login_url=form_login_url,
        form_users=form_users,
        basic_auth_realm=basic_auth_realm,
        oauth_providers=oauth_providers,
        oauth_connect_timeout_ms=_get_int("OAUTH_CONNECT_TIMEOUT_MS", 500),
        oauth_read_timeout_ms=_get_int("OAUTH_READ_TIMEOUT_MS", 3000),
        oauth_proxy_host=oauth_proxy_host,
        oauth_proxy_port=_get_int("OAUTH_PROXY_PORT", 8080),
        cas_login_url=cas_login_url,
        cas_prefix_url=cas_prefix_url,
        cas_proxy_enabled=_get_bool("CAS_PROXY_ENABLED"),
        cas_proxy_millis_between_cleanups=_get_int("CAS_PROXY_MILLIS_BETWEEN_CLEANUPS", 60000),
    )
