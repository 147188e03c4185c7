"""
HTTP transport for grid requests.

The controller only needs ``await transport.request(method, url, params)``
returning a decoded body or raising TransportError. HttpTransport does that
over aiohttp; tests substitute any object with the same coroutine.
"""

import asyncio
import json
from typing import Any, Mapping, Optional, Protocol

import aiohttp

from shared.logging import get_logger

from .errors import TransportError

log = get_logger("transport", "http")


class Transport(Protocol):
    async def request(self, method: str, url: str, params: Mapping[str, Any]) -> Any:
        ...


def encode_params(params: Mapping[str, Any]) -> dict[str, str]:
    """Flatten parameter values to strings; None becomes empty."""
    encoded = {}
    for key, value in params.items():
        if value is None:
            encoded[key] = ""
        elif isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif hasattr(value, "value") and isinstance(value.value, str):
            encoded[key] = value.value
        else:
            encoded[key] = str(value)
    return encoded


class HttpTransport:
    """
    aiohttp-backed transport.

    GET sends parameters as the query string; other methods send them as a
    form body. Requests are never retried: a retry is a new fetch cycle
    driven by the user.

    Usage:
        transport = HttpTransport(timeout_seconds=10)
        body = await transport.request("GET", "https://example.org/rows", {"offset": 0})
        await transport.close()
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        headers: Optional[dict[str, str]] = None,
    ):
        self._timeout_seconds = timeout_seconds
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._http_session: Optional[aiohttp.ClientSession] = None

    async def _get_http_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession(headers=self._headers)
        return self._http_session

    async def close(self):
        """Close HTTP session."""
        if self._http_session and not self._http_session.closed:
            await self._http_session.close()
            self._http_session = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def request(self, method: str, url: str, params: Mapping[str, Any]) -> Any:
        """
        Perform one request and decode its JSON body.

        Raises:
            TransportError: non-2xx status, timeout, connection failure or
                a body that is not JSON
        """
        method = method.upper()
        encoded = encode_params(params)
        kwargs: dict[str, Any] = {"timeout": aiohttp.ClientTimeout(total=self._timeout_seconds)}
        if method == "GET":
            kwargs["params"] = encoded
        else:
            kwargs["data"] = encoded

        log.debug("transport.http.request", method=method, url=url, params=encoded)

        try:
            session = await self._get_http_session()
            async with session.request(method, url, **kwargs) as resp:
                if resp.status < 200 or resp.status >= 300:
                    text = await resp.text()
                    log.warning("transport.http.bad_status",
                                url=url, status=resp.status, body=text[:200])
                    raise TransportError(f"HTTP {resp.status}", status=resp.status, url=url)

                try:
                    return await resp.json(content_type=None)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise TransportError(f"Response is not JSON: {e}", status=resp.status, url=url) from e

        except asyncio.TimeoutError as e:
            log.warning("transport.http.timeout", url=url, timeout_seconds=self._timeout_seconds)
            raise TransportError(f"Request timed out after {self._timeout_seconds} seconds", url=url) from e

        except aiohttp.ClientError as e:
            log.warning("transport.http.connection_error", url=url, error=str(e))
            raise TransportError(str(e), url=url) from e
