"""Pytest configuration and fixtures for unifi_request tests."""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from collections.abc import Mapping
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from unifi_request import (
    UnifiRequest,
    UnifiRequestExecutor,
    UnifiResponse,
    UnifiResponseError,
    UnifiSession,
)
from unifi_request.protocol import DEFAULT_HEADERS

BASE_URL = "https://10.0.0.1:8443"


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: dict[str, Any] | None = None,
    text_data: str | None = None,
) -> AsyncMock:
    """Create a configured mock aiohttp response.

    Args:
        status: HTTP status code
        json_data: Data serialized into the text() result
        text_data: Data to return from text() call

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        text_data = json.dumps(json_data)
    response.text.return_value = text_data if text_data is not None else ""

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def ok_response(body: Mapping[str, Any] | None = None, status: int = 200) -> UnifiResponse:
    """Build a transport response carrying a JSON body."""
    payload = body if body is not None else {"meta": {"rc": "ok"}}
    return UnifiResponse(status=status, body=json.dumps(payload))


def error_response(status: int, body: Any = None) -> UnifiResponseError:
    """Build the error a transport raises for a non-2xx answer."""
    text = json.dumps(body) if isinstance(body, Mapping) else body
    return UnifiResponseError(status, f"Request failed with status {status}", body=text)


class FakeTransport:
    """Scripted transport recording every exchange it performs."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self._scripts: dict[str, list[Any]] = defaultdict(list)
        self._gates: dict[str, asyncio.Event] = {}

    def script(self, url: str, *outcomes: Any) -> None:
        """Queue responses or exceptions for the given path."""
        self._scripts[url].extend(outcomes)

    def hold(self, url: str) -> asyncio.Event:
        """Block exchanges for url until the returned event is set."""
        gate = asyncio.Event()
        self._gates[url] = gate
        return gate

    def calls_to(self, url: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["url"] == url]

    async def exchange(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        base_url: str,
        body: Any = None,
    ) -> UnifiResponse:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(headers),
                "base_url": base_url,
                "body": body,
            }
        )
        gate = self._gates.get(url)
        if gate is not None:
            await gate.wait()
        if not self._scripts[url]:
            raise AssertionError(f"Unexpected exchange for {method} {url}")
        outcome = self._scripts[url].pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def executor(transport: FakeTransport) -> UnifiRequestExecutor:
    return UnifiRequestExecutor(transport, BASE_URL, DEFAULT_HEADERS)


@pytest.fixture
def unifi_session(executor: UnifiRequestExecutor) -> UnifiSession:
    return UnifiSession(executor, username="admin", password="pw")


@pytest.fixture
def client(transport: FakeTransport) -> UnifiRequest:
    return UnifiRequest(
        transport=transport,
        base_url=BASE_URL,
        username="admin",
        password="pw",
    )


class FakeController:
    """Minimal cookie-session controller served over real HTTP."""

    COOKIE = "unifises"

    def __init__(self) -> None:
        self.logins = 0
        self.raw_bodies: dict[str, tuple[int, bytes]] = {}
        self.app = web.Application()
        self.app.router.add_post("/api/login", self._login)
        self.app.router.add_get("/logout", self._logout)
        self.app.router.add_get("/api/s/default/stat/sta", self._stations)
        self.app.router.add_get("/raw/{name}", self._raw)

    async def _login(self, request: web.Request) -> web.Response:
        self.logins += 1
        response = web.json_response({"meta": {"rc": "ok"}, "data": []})
        response.set_cookie(self.COOKIE, f"session-{self.logins}")
        return response

    async def _logout(self, request: web.Request) -> web.Response:
        response = web.json_response({"meta": {"rc": "ok"}, "data": []})
        response.del_cookie(self.COOKIE)
        return response

    async def _stations(self, request: web.Request) -> web.Response:
        if self.COOKIE not in request.cookies:
            return web.json_response(
                {"meta": {"rc": "error", "msg": "api.err.LoginRequired"}, "data": []},
                status=401,
            )
        return web.json_response(
            {"meta": {"rc": "ok"}, "data": [{"mac": "00:11:22:33:44:55"}]}
        )

    async def _raw(self, request: web.Request) -> web.Response:
        status, body = self.raw_bodies[request.match_info["name"]]
        return web.Response(
            status=status, body=body, content_type="application/json", charset="utf-8"
        )


@pytest.fixture
def controller() -> FakeController:
    return FakeController()


@pytest.fixture
async def controller_url(controller: FakeController):
    """Serve the fake controller on a local port and yield its base URL."""
    server = TestServer(controller.app)
    await server.start_server()
    try:
        yield f"http://{server.host}:{server.port}"
    finally:
        await server.close()
