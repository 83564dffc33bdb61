"""Clients registry: one shared callback URL, client selected by request parameter."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional
from urllib.parse import urlencode

from authbridge.core.context import WebContext
from authbridge.core.exceptions import ConfigurationError
from authbridge.core.lifecycle import InitializableObject
from authbridge.core.validators import assert_http_url, assert_not_blank, is_blank

from .base import BaseClient

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_NAME_PARAMETER = "client_name"


class Clients(InitializableObject):
    """Set of clients sharing one callback endpoint.

    On initialization every client without its own callback URL receives
    ``<callback_url>?client_name=<client name>``; the callback endpoint then
    finds the right client back with ``find_client(context)``.
    """

    def __init__(
        self,
        callback_url: str,
        clients: Iterable[BaseClient] = (),
        client_name_parameter: str = DEFAULT_CLIENT_NAME_PARAMETER,
    ):
        super().__init__()
        self.callback_url = callback_url
        self.client_name_parameter = client_name_parameter
        self._clients: list[BaseClient] = list(clients)

    def internal_init(self) -> None:
        assert_http_url("callback_url", self.callback_url)
        assert_not_blank("client_name_parameter", self.client_name_parameter)
        names: set[str] = set()
        for client in self._clients:
            if client.name in names:
                raise ConfigurationError(f"Duplicate client name: {client.name}")
            names.add(client.name)
            if is_blank(client.callback_url) and not client.initialized:
                client.configure(callback_url=self.client_callback_url(client.name))
        logger.info(f"Clients registry ready: {', '.join(sorted(names)) or '(none)'}")

    def client_callback_url(self, name: str) -> str:
        separator = "&" if "?" in self.callback_url else "?"
        return f"{self.callback_url}{separator}{urlencode({self.client_name_parameter: name})}"

    def find_client(self, context: WebContext) -> BaseClient:
        """Return the client named by the request's client name parameter.

        Raises:
            ConfigurationError: If the parameter is missing or names no client
        """
        name = context.get_request_parameter(self.client_name_parameter)
        if is_blank(name):
            raise ConfigurationError(f"No {self.client_name_parameter} parameter in request")
        return self.find_client_by_name(name)

    def find_client_by_name(self, name: str) -> BaseClient:
        self.ensure_initialized()
        client = self.get(name)
        if client is None:
            raise ConfigurationError(f"No client found for name: {name}")
        return client

    def get(self, name: str) -> Optional[BaseClient]:
        for client in self._clients:
            if client.name == name:
                return client
        return None

    def find_all_clients(self) -> list[BaseClient]:
        self.ensure_initialized()
        return list(self._clients)

    def shutdown(self) -> None:
        """Stop background work (e.g., proxy ticket sweeps) of every client."""
        for client in self._clients:
            client.shutdown()

    def __iter__(self) -> Iterator[BaseClient]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)
