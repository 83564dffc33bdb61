"""CAS 2.0 single sign-on: ticket validation and proxy granting ticket delivery.

``CasClient`` redirects to the CAS login page and validates the service
ticket it gets back. When a ``CasProxyReceptor`` is attached, validation asks
the CAS server for a proxy granting ticket (PGT): the server calls the
receptor's URL with ``pgtIou``/``pgtId``, the receptor stores the pair, and
the validation response names the IOU that lets the client pick the PGT up.
"""
from __future__ import annotations

import logging
import threading
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

import requests

from authbridge.core.context import WebContext
from authbridge.core.credentials import CasCredentials
from authbridge.core.exceptions import CommunicationError, ConfigurationError, CredentialsError, ProtocolError
from authbridge.core.profile import CommonProfile
from authbridge.core.ticket_store import PeriodicCleaner, ProxyGrantingTicketStore
from authbridge.core.validators import assert_http_url, assert_not_blank, assert_not_negative, is_blank

from .base import BaseClient, ClientConfig, http_timeouts

logger = logging.getLogger(__name__)

CAS_NAMESPACE = "http://www.yale.edu/tp/cas"
PROXY_SUCCESS_RESPONSE = (
    '<?xml version="1.0"?>'
    '<casClient:proxySuccess xmlns:casClient="http://www.yale.edu/tp/casClient" />'
)
PARAM_PROXY_GRANTING_TICKET_IOU = "pgtIou"
PARAM_PROXY_GRANTING_TICKET = "pgtId"


def _cas(tag: str) -> str:
    return f"{{{CAS_NAMESPACE}}}{tag}"


# ─────────────────────────────────────────────────────────────────────────────
# Profiles
# ─────────────────────────────────────────────────────────────────────────────
class CasProfile(CommonProfile):
    """Profile built from a CAS validation response."""


class CasProxyProfile(CasProfile):
    """CAS profile holding the proxy granting ticket of the authentication.

    The ticket is kept out of the attributes, so it never reaches the user
    session.
    """

    def __init__(self, id: Optional[str] = None, attributes=None, proxy_granting_ticket: Optional[str] = None):
        super().__init__(id, attributes)
        self.proxy_granting_ticket = proxy_granting_ticket


# ─────────────────────────────────────────────────────────────────────────────
# Proxy receptor
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CasProxyReceptorConfig(ClientConfig):
    """Proxy receptor settings.

    Attributes:
        millis_between_cleanups: Sweep interval of expired tickets; 0 disables
            the sweep
    """
    millis_between_cleanups: int = 60000


class CasProxyReceptor(BaseClient):
    """Endpoint the CAS server calls to deliver proxy granting tickets.

    It never redirects anywhere and never produces a profile: it only writes
    the acknowledgement the CAS server expects.
    """

    config_class = CasProxyReceptorConfig

    def __init__(
        self,
        config: Optional[CasProxyReceptorConfig] = None,
        store: Optional[ProxyGrantingTicketStore] = None,
        **settings: Any,
    ):
        super().__init__(config, **settings)
        self.store = store if store is not None else ProxyGrantingTicketStore()
        self._cleaner: Optional[PeriodicCleaner] = None

    def _new_client(self, config: CasProxyReceptorConfig) -> "CasProxyReceptor":
        return type(self)(config, store=self.store)

    @property
    def cleaner_running(self) -> bool:
        return self._cleaner is not None and self._cleaner.running

    def internal_init(self) -> None:
        super().internal_init()
        assert_not_negative("millis_between_cleanups", self.config.millis_between_cleanups)
        # Entries live for one sweep interval; 0 keeps them until consumed
        self.store.max_age_millis = self.config.millis_between_cleanups
        self._stop_cleaner()
        if self.config.millis_between_cleanups > 0:
            self._cleaner = PeriodicCleaner(self.store, self.config.millis_between_cleanups)
            self._cleaner.start()

    def retrieve_redirection_url(self, context: WebContext) -> str:
        raise NotImplementedError("Not supported by the CAS proxy receptor")

    def retrieve_credentials(self, context: WebContext) -> None:
        iou = context.get_request_parameter(PARAM_PROXY_GRANTING_TICKET_IOU)
        ticket = context.get_request_parameter(PARAM_PROXY_GRANTING_TICKET)
        if is_blank(iou) or is_blank(ticket):
            logger.debug("Proxy callback without pgtIou/pgtId, nothing stored")
            context.write_response("")
            return None

        logger.debug(f"Received proxy granting ticket for IOU {iou}")
        self.store.save(iou, ticket)
        context.write_response(PROXY_SUCCESS_RESPONSE)
        return None

    def resolve_profile(self, credentials: CasCredentials):
        raise NotImplementedError("Not supported by the CAS proxy receptor")

    def retrieve_user_profile(self, credentials: CasCredentials):
        raise NotImplementedError("Not supported by the CAS proxy receptor")

    def shutdown(self) -> None:
        with self._init_lock:
            self._stop_cleaner()

    def _stop_cleaner(self) -> None:
        if self._cleaner is not None:
            self._cleaner.stop()
            self._cleaner = None


# ─────────────────────────────────────────────────────────────────────────────
# CAS client
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CasClientConfig(ClientConfig):
    """CAS client settings.

    Attributes:
        cas_login_url: CAS login page (e.g., https://cas.example.org/cas/login)
        cas_prefix_url: CAS server root, derived from the login URL when unset
        renew: Force the user to authenticate again
        gateway: Do not prompt the user if not already authenticated
        connect_timeout: Validation connect timeout in ms (0 disables it)
        read_timeout: Validation read timeout in ms (0 disables it)
    """
    cas_login_url: str = ""
    cas_prefix_url: str = ""
    renew: bool = False
    gateway: bool = False
    connect_timeout: int = 500
    read_timeout: int = 3000


class CasClient(BaseClient):
    config_class = CasClientConfig

    def __init__(
        self,
        config: Optional[CasClientConfig] = None,
        proxy_receptor: Optional[CasProxyReceptor] = None,
        **settings: Any,
    ):
        super().__init__(config, **settings)
        self.proxy_receptor = proxy_receptor

    def _new_client(self, config: CasClientConfig) -> "CasClient":
        return type(self)(config, proxy_receptor=self.proxy_receptor)

    def internal_init(self) -> None:
        super().internal_init()
        if is_blank(self.config.cas_login_url) and is_blank(self.config.cas_prefix_url):
            raise ConfigurationError("cas_login_url and cas_prefix_url cannot be both blank")
        assert_http_url("cas_login_url", self.login_url)
        assert_http_url("cas_prefix_url", self.prefix_url)
        assert_not_negative("connect_timeout", self.config.connect_timeout)
        assert_not_negative("read_timeout", self.config.read_timeout)
        if self.proxy_receptor is not None:
            assert_not_blank("proxy_receptor.callback_url", self.proxy_receptor.callback_url)

    @property
    def prefix_url(self) -> str:
        prefix = self.config.cas_prefix_url
        if is_blank(prefix):
            prefix = self.config.cas_login_url
            if prefix.endswith("login"):
                prefix = prefix[: -len("login")]
        if not prefix.endswith("/"):
            prefix += "/"
        return prefix

    @property
    def login_url(self) -> str:
        if not is_blank(self.config.cas_login_url):
            return self.config.cas_login_url
        return self.prefix_url + "login"

    def retrieve_redirection_url(self, context: WebContext) -> str:
        params = {"service": self.callback_url}
        if self.config.renew:
            params["renew"] = "true"
        if self.config.gateway:
            params["gateway"] = "true"
        separator = "&" if "?" in self.login_url else "?"
        return f"{self.login_url}{separator}{urlencode(params)}"

    def retrieve_credentials(self, context: WebContext) -> CasCredentials:
        ticket = context.get_request_parameter("ticket")
        if is_blank(ticket):
            message = "No service ticket found in callback"
            logger.error(message)
            raise CredentialsError(message)
        credentials = CasCredentials(ticket, client_name=self.name)
        logger.debug(f"CAS credentials: {credentials}")
        return credentials

    def retrieve_user_profile(self, credentials: CasCredentials) -> CasProfile:
        params = {"service": self.callback_url, "ticket": credentials.service_ticket}
        if self.config.renew:
            params["renew"] = "true"
        endpoint = "serviceValidate"
        if self.proxy_receptor is not None:
            endpoint = "proxyValidate"
            params["pgtUrl"] = self.proxy_receptor.callback_url

        root = self._call_cas(endpoint, params)
        failure = root.find(_cas("authenticationFailure"))
        if failure is not None:
            code = failure.get("code", "UNKNOWN")
            message = (failure.text or "").strip()
            logger.error(f"CAS ticket validation failed: {code}")
            raise ProtocolError("CAS ticket validation failed", {code: message})

        success = root.find(_cas("authenticationSuccess"))
        if success is None:
            raise CommunicationError("Unexpected CAS validation response", status_code=200)

        user = (success.findtext(_cas("user")) or "").strip()
        attributes = self._read_attributes(success.find(_cas("attributes")))

        if self.proxy_receptor is None:
            return CasProfile(id=user, attributes=attributes)

        profile = CasProxyProfile(id=user, attributes=attributes)
        iou = (success.findtext(_cas("proxyGrantingTicket")) or "").strip()
        if iou:
            profile.proxy_granting_ticket = self.proxy_receptor.store.retrieve(iou)
            if profile.proxy_granting_ticket is None:
                logger.warning(f"No proxy granting ticket delivered for IOU {iou}")
        return profile

    def request_proxy_ticket(self, profile: CasProxyProfile, target_service: str) -> str:
        """Obtain a proxy ticket for a back-end service on behalf of the user.

        Raises:
            CredentialsError: If the profile holds no proxy granting ticket
            ProtocolError: If the CAS server refuses to issue the ticket
        """
        self.ensure_initialized()
        pgt = getattr(profile, "proxy_granting_ticket", None)
        if is_blank(pgt):
            raise CredentialsError("No proxy granting ticket available for this profile")

        root = self._call_cas("proxy", {"pgt": pgt, "targetService": target_service})
        failure = root.find(_cas("proxyFailure"))
        if failure is not None:
            code = failure.get("code", "UNKNOWN")
            raise ProtocolError("CAS proxy ticket request failed", {code: (failure.text or "").strip()})
        ticket = root.findtext(f"{_cas('proxySuccess')}/{_cas('proxyTicket')}")
        if is_blank(ticket):
            raise CommunicationError("Unexpected CAS proxy response", status_code=200)
        return ticket.strip()

    def _call_cas(self, endpoint: str, params: dict[str, str]) -> ET.Element:
        url = self.prefix_url + endpoint
        try:
            response = requests.get(
                url,
                params=params,
                timeout=http_timeouts(self.config.connect_timeout, self.config.read_timeout),
            )
        except requests.Timeout as exc:
            raise CommunicationError(f"Timed out calling {url}") from exc
        except requests.RequestException as exc:
            raise CommunicationError(f"Failed to call {url}: {exc}") from exc

        if response.status_code != 200:
            logger.error(f"CAS {endpoint} returned {response.status_code}")
            raise CommunicationError(f"CAS {endpoint} failed", status_code=response.status_code, body=response.text)
        try:
            return ET.fromstring(response.text)
        except ET.ParseError as exc:
            raise CommunicationError(f"Cannot parse CAS {endpoint} response", status_code=200, body=response.text) from exc

    @staticmethod
    def _read_attributes(element: Optional[ET.Element]) -> dict[str, Any]:
        attributes: dict[str, Any] = {}
        if element is None:
            return attributes
        for child in element:
            name = child.tag.split("}", 1)[-1]
            value = (child.text or "").strip()
            if name in attributes:
                existing = attributes[name]
                attributes[name] = (existing if isinstance(existing, list) else [existing]) + [value]
            else:
                attributes[name] = value
        return attributes
