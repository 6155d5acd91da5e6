# plugins/context.py
"""
Request Context for Strategy Plugins
====================================

Strategies never reach into the web framework directly. Everything they need
from the current request is handed to them through a RequestContext:

- fetch_params(): the incoming request parameters (query string and form)
- fetch_session(): the mutable session mapping for this browser
- default_callback_url(callback_path): the absolute callback URL the host
  would use when the caller did not ask for a specific one

Two implementations are provided. StarletteRequestContext wraps a
FastAPI/Starlette Request that has passed through SessionMiddleware.
StaticRequestContext holds plain dictionaries and is what tests and scripts
use to drive a strategy without a running application.
"""

import logging
from typing import Any, Dict, Mapping, MutableMapping, Optional

from starlette.requests import Request

logger = logging.getLogger(__name__)


class RequestContext:
    """
    Base class for the request-scoped collaborator of a strategy.

    Subclasses must implement all three capabilities. Implementations are
    expected to be cheap to call repeatedly; strategies do not cache the
    results.
    """

    def fetch_params(self) -> Mapping[str, Any]:
        """
        Get the request parameters.

        Returns:
            Mapping[str, Any]: Parameter names to values
        """
        raise NotImplementedError("Subclasses must implement fetch_params")

    def fetch_session(self) -> MutableMapping[str, Any]:
        """
        Get the session for the current browser.

        Returns:
            MutableMapping[str, Any]: The session, mutations are persisted
        """
        raise NotImplementedError("Subclasses must implement fetch_session")

    def default_callback_url(self, callback_path: str) -> str:
        """
        Build the host's default callback URL for a callback path.

        Args:
            callback_path (str): Path the provider should redirect back to

        Returns:
            str: Absolute callback URL
        """
        raise NotImplementedError("Subclasses must implement default_callback_url")


class StaticRequestContext(RequestContext):
    """In-memory request context."""

    def __init__(
        self,
        params: Optional[Dict[str, Any]] = None,
        session: Optional[Dict[str, Any]] = None,
        base_url: str = "http://localhost:8000",
        query_string: str = "",
    ):
        self.params = params if params is not None else {}
        self.session = session if session is not None else {}
        self.base_url = base_url.rstrip("/")
        self.query_string = query_string

    def fetch_params(self) -> Mapping[str, Any]:
        return self.params

    def fetch_session(self) -> MutableMapping[str, Any]:
        return self.session

    def default_callback_url(self, callback_path: str) -> str:
        url = self.base_url + callback_path
        if self.query_string:
            url = f"{url}?{self.query_string}"
        return url


class StarletteRequestContext(RequestContext):
    """
    Request context backed by a Starlette Request.

    Form fields, when supplied, override query parameters of the same name.
    The request must have been processed by SessionMiddleware, otherwise
    fetch_session() raises the AssertionError Starlette uses for that case.
    """

    def __init__(self, request: Request, form: Optional[Mapping[str, Any]] = None):
        self.request = request
        self._params: Dict[str, Any] = dict(request.query_params)
        if form:
            self._params.update(form)

    def fetch_params(self) -> Mapping[str, Any]:
        return self._params

    def fetch_session(self) -> MutableMapping[str, Any]:
        return self.request.session

    def default_callback_url(self, callback_path: str) -> str:
        # base_url already carries the ASGI root_path
        url = str(self.request.base_url).rstrip("/") + callback_path
        query = self.request.url.query
        if query:
            url = f"{url}?{query}"
        logger.debug(f"Default callback URL resolved to {url}")
        return url
