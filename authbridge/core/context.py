"""Request/session access consumed by the authentication clients.

Clients never touch the web framework directly: they read parameters,
headers and session attributes, and write response data, through a
``WebContext``. ``FlaskWebContext`` binds it to the current Flask request.
"""
from __future__ import annotations

import abc
from typing import Any, Optional

from flask import request as flask_request, session as flask_session


class WebContext(abc.ABC):
    """Abstract request/response/session capability."""

    @abc.abstractmethod
    def get_request_parameter(self, name: str) -> Optional[str]:
        """Return a query string or form parameter, or None."""

    @abc.abstractmethod
    def get_request_parameters(self) -> dict[str, list[str]]:
        """Return every request parameter with all of its values."""

    @abc.abstractmethod
    def get_request_header(self, name: str) -> Optional[str]:
        """Return a request header, or None."""

    @abc.abstractmethod
    def get_request_method(self) -> str:
        """Return the request method: GET, POST..."""

    @abc.abstractmethod
    def get_session_attribute(self, name: str) -> Any:
        """Return an attribute saved in session, or None."""

    @abc.abstractmethod
    def set_session_attribute(self, name: str, value: Any) -> None:
        """Save an attribute in session."""

    @abc.abstractmethod
    def invalidate_session(self) -> None:
        """Drop every session attribute."""

    @abc.abstractmethod
    def write_response(self, data: str) -> None:
        """Append data to the response body."""


class FlaskWebContext(WebContext):
    """WebContext backed by the Flask request and session proxies.

    Written data is buffered; the view turns ``response_body`` into the
    actual response.

    Usage:
        context = FlaskWebContext()
        credentials = client.extract_credentials(context)
        return Response(context.response_body, mimetype="text/xml")
    """

    def __init__(self, request=None, session=None):
        self._request = request if request is not None else flask_request
        self._session = session if session is not None else flask_session
        self._chunks: list[str] = []

    def get_request_parameter(self, name: str) -> Optional[str]:
        return self._request.values.get(name)

    def get_request_parameters(self) -> dict[str, list[str]]:
        return self._request.values.to_dict(flat=False)

    def get_request_header(self, name: str) -> Optional[str]:
        return self._request.headers.get(name)

    def get_request_method(self) -> str:
        return self._request.method

    def get_session_attribute(self, name: str) -> Any:
        return self._session.get(name)

    def set_session_attribute(self, name: str, value: Any) -> None:
        self._session[name] = value

    def invalidate_session(self) -> None:
        self._session.clear()

    def write_response(self, data: str) -> None:
        self._chunks.append(data)

    @property
    def response_written(self) -> bool:
        return bool(self._chunks)

    @property
    def response_body(self) -> str:
        return "".join(self._chunks)
