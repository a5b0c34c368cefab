"""HTTP transport for UniFi controller endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Protocol

import aiohttp

from .errors import (
    UnifiConnectionError,
    UnifiResponseError,
    UnifiTimeout,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class UnifiResponse:
    """Outcome of a single successful HTTP exchange."""

    status: int
    body: Any
    raw: Any = None


class UnifiTransport(Protocol):
    """Performs one HTTP exchange with the controller.

    Implementations raise UnifiResponseError when the controller answered
    with a non-2xx status, and UnifiConnectionError or UnifiTimeout when no
    response was obtained at all.
    """

    async def exchange(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        base_url: str,
        body: Any = None,
    ) -> UnifiResponse: ...


def join_url(base_url: str, path: str) -> str:
    """Join a controller base address and a request path."""
    if path.startswith(("http://", "https://")):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{base_url.rstrip('/')}{path}"


async def _on_request_start(
    session: aiohttp.ClientSession,
    context: SimpleNamespace,
    params: aiohttp.TraceRequestStartParams,
) -> None:
    _LOGGER.debug("Starting request: %s %s %s", params.method, params.url, dict(params.headers))


async def _on_request_end(
    session: aiohttp.ClientSession,
    context: SimpleNamespace,
    params: aiohttp.TraceRequestEndParams,
) -> None:
    _LOGGER.debug(
        "Response: %s %s -> %s", params.method, params.url, params.response.status
    )


def _net_trace_config() -> aiohttp.TraceConfig:
    trace_config = aiohttp.TraceConfig()
    trace_config.on_request_start.append(_on_request_start)
    trace_config.on_request_end.append(_on_request_end)
    return trace_config


class UnifiHttpTransport:
    """aiohttp-backed transport keeping the controller session cookie."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        verify_ssl: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        debug_net: bool = False,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._verify_ssl = verify_ssl
        self._timeout = timeout
        self._debug_net = debug_net

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            # Controllers are usually addressed by IP; the default jar drops
            # cookies for IP hosts.
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.CookieJar(unsafe=True),
                trace_configs=[_net_trace_config()] if self._debug_net else None,
            )
        return self._session

    async def exchange(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        base_url: str,
        body: Any = None,
    ) -> UnifiResponse:
        """Send one request and return its status and raw text body."""
        session = self._ensure_session()
        target = join_url(base_url, url)
        kwargs: dict[str, Any] = {
            "headers": dict(headers),
            "ssl": self._verify_ssl,
            "timeout": aiohttp.ClientTimeout(total=self._timeout),
        }
        if body is not None:
            kwargs["json"] = body
        try:
            async with session.request(method, target, **kwargs) as resp:
                text = await resp.text(errors="replace")
                if not 200 <= resp.status < 300:
                    raise UnifiResponseError(
                        resp.status,
                        f"{method} {url} failed with status {resp.status}",
                        body=text,
                    )
                return UnifiResponse(status=resp.status, body=text, raw=resp)
        except TimeoutError as err:
            raise UnifiTimeout(f"{method} {url} timed out") from err
        except aiohttp.ClientError as err:
            raise UnifiConnectionError(f"{method} {url} failed: {err}") from err

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
