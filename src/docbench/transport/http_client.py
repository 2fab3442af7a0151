"""Blocking HTTP client built on aiohttp, one event loop per instance."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING, Protocol

import aiohttp

from docbench._internal.errors import TransportError
from docbench._internal.logging import get_logger

if TYPE_CHECKING:
    from docbench._internal.types import Headers

logger = get_logger("transport.http_client")

JSON_CONTENT_TYPE = "application/json"


class HttpSender(Protocol):
    """The single outbound call the benchmark core depends on."""

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Headers | None = None,
        body: str | None = None,
    ) -> int:
        """Send one request and return its status code.

        Raises:
            TransportError: If no response was received.
        """
        ...


def basic_auth_header(username: str, password: str) -> Headers:
    """Build a pre-encoded HTTP Basic ``Authorization`` header.

    Args:
        username: Account name.
        password: Account password.

    Returns:
        A headers dict with a single ``Authorization`` entry.
    """
    return {"Authorization": aiohttp.BasicAuth(username, password).encode()}


def _new_event_loop() -> asyncio.AbstractEventLoop:
    """Create a private event loop, using uvloop when it is available.

    Falls back to the default asyncio loop on Windows or when uvloop is
    not installed.
    """
    if sys.platform != "win32":
        try:
            import uvloop

            return uvloop.new_event_loop()
        except ImportError:
            logger.debug("uvloop not available, using default asyncio event loop")
    return asyncio.new_event_loop()


class HttpClient:
    """Blocking HTTP client wrapping ``aiohttp.ClientSession``.

    Each instance owns a private event loop and session, so one client
    must be used from a single thread at a time. Workers each build their
    own client. ``send`` blocks the calling thread until the response body
    has been read or the request failed.

    Code already running on an event loop can use ``async with`` and
    ``asend`` instead; the private loop is then never created.

    Attributes:
        headers: Headers applied to every request, e.g. a pre-built
            ``Authorization`` header.
    """

    def __init__(
        self,
        headers: Headers | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            headers: Default headers applied to every request.
            timeout: Total per-request timeout in seconds.
        """
        self.headers: Headers = dict(headers or {})
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._session: aiohttp.ClientSession | None = None

    def __enter__(self) -> HttpClient:
        """Create the event loop and open the aiohttp session."""
        self._loop = _new_event_loop()
        self._session = self._loop.run_until_complete(self._open_session())
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the session and the event loop."""
        if self._loop is None:
            return
        if self._session is not None:
            self._loop.run_until_complete(self._session.close())
            self._session = None
        self._loop.close()
        self._loop = None

    async def __aenter__(self) -> HttpClient:
        """Open the aiohttp session on the running event loop."""
        self._session = await self._open_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the session opened by ``__aenter__``."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _open_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=self._timeout)

    def send(
        self,
        method: str,
        url: str,
        *,
        headers: Headers | None = None,
        body: str | None = None,
    ) -> int:
        """Send a request and block until it completes.

        Any status code counts as a completed request; only the absence of
        a response is an error.

        Args:
            method: HTTP method (GET, PUT, DELETE, POST).
            url: Absolute request URL.
            headers: Extra headers for this request only.
            body: Optional request body, sent as UTF-8.

        Returns:
            The HTTP status code of the response.

        Raises:
            TransportError: If the request could not be completed.
            RuntimeError: If the client is used outside its context manager.
        """
        if self._loop is None or self._session is None:
            msg = "HttpClient must be used as a context manager"
            raise RuntimeError(msg)
        return self._loop.run_until_complete(
            self.asend(method, url, headers=headers, body=body)
        )

    async def asend(
        self,
        method: str,
        url: str,
        *,
        headers: Headers | None = None,
        body: str | None = None,
    ) -> int:
        """Coroutine form of ``send`` for callers already on an event loop.

        Usable inside ``async with HttpClient()`` or, via ``send``, inside
        the blocking context manager.

        Raises:
            TransportError: If the request could not be completed.
            RuntimeError: If no session is open.
        """
        if self._session is None:
            msg = "HttpClient session is not open"
            raise RuntimeError(msg)
        merged_headers = {**self.headers, **(headers or {})}
        try:
            data = body.encode("utf-8") if body is not None else None
        except UnicodeEncodeError as exc:
            raise TransportError(type(exc).__name__, str(exc)) from exc

        try:
            async with self._session.request(
                method, url, headers=merged_headers, data=data
            ) as resp:
                await resp.read()
                return resp.status
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TransportError(type(exc).__name__, str(exc)) from exc
