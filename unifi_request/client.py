"""Authenticated request engine for UniFi controllers.

UnifiRequest is the canonical entry point: every controller call goes through
request(), which makes sure a session exists, performs the call, and when
the controller reports that the session expired, logs in again and repeats
the call exactly once.

Usage:
    async with UnifiRequest(base_url="https://10.0.0.1:8443", password="pw") as unifi:
        clients = await unifi.request("/api/s/default/stat/sta")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from .config import UnifiOptions
from .errors import (
    UnifiApiError,
    UnifiClientError,
    UnifiResponseError,
    UnifiSessionExpiredError,
)
from .executor import UnifiRequestExecutor
from .http import UnifiHttpTransport, UnifiResponse, UnifiTransport
from .protocol import (
    RequestDescriptor,
    decode_body,
    error_code,
    is_ok_envelope,
    mentions_login_required,
    try_decode_body,
)
from .session import UnifiSession

_LOGGER = logging.getLogger(__name__)

_PACKAGE_LOGGER = logging.getLogger(__package__ or "unifi_request")


def is_session_expired(err: Exception) -> bool:
    """Return True when err signals that the controller session expired.

    Only errors carrying a controller answer qualify; a failure without any
    response is never treated as an expired session.
    """
    if isinstance(err, UnifiResponseError):
        return err.status == 401 or mentions_login_required(err.body)
    if isinstance(err, UnifiApiError):
        return mentions_login_required(err.envelope)
    return False


def unwrap_envelope(response: UnifiResponse) -> dict[str, Any]:
    """Decode a response and return it when its envelope reports success.

    Raises:
        UnifiApiError: If the body is malformed or the result code is not ok.
    """
    envelope = decode_body(response.body)
    if is_ok_envelope(envelope):
        return envelope
    code = error_code(envelope)
    raise UnifiApiError(
        f"API error: {code}" if code else "API error",
        envelope=envelope,
        body=response.body,
        status=response.status,
    )


class UnifiRequest:
    """Authenticated HTTP client for a UniFi controller."""

    def __init__(
        self,
        options: UnifiOptions | None = None,
        *,
        transport: UnifiTransport | None = None,
        session: aiohttp.ClientSession | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize client.

        Args:
            options: Base options; defaults apply when omitted.
            transport: Transport to use instead of the aiohttp one.
            session: aiohttp session for the default transport.
            **overrides: Individual UnifiOptions fields applied over options.
        """
        self.options = (options or UnifiOptions()).merged(overrides)

        self._owns_transport = transport is None
        if transport is None:
            transport = UnifiHttpTransport(
                session,
                verify_ssl=self.options.verify_ssl,
                timeout=self.options.timeout,
                debug_net=self.options.debug_net,
            )
        self._transport = transport
        self._executor = UnifiRequestExecutor(
            transport, self.options.base_url, self.options.headers
        )
        self._session = UnifiSession(
            self._executor,
            username=self.options.username,
            password=self.options.password,
        )

        if self.options.debug:
            self.debugging(True)
        _LOGGER.debug(
            "UniFi client initialized for %s as %s",
            self.options.base_url,
            self.options.username,
        )

    async def __aenter__(self) -> UnifiRequest:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def authenticated(self) -> bool:
        return self._session.authenticated

    @property
    def session(self) -> UnifiSession:
        return self._session

    def debugging(self, enabled: bool) -> None:
        """Enable or disable debug logging for the client package."""
        _PACKAGE_LOGGER.setLevel(logging.DEBUG if enabled else logging.NOTSET)
        _LOGGER.debug("Debug is %s", "enabled" if enabled else "disabled")

    async def login(
        self, username: str | None = None, password: str | None = None
    ) -> dict[str, Any]:
        """Log in to the controller; a no-op when already authenticated."""
        return await self._session.login(username, password)

    async def logout(self) -> Any:
        """Log out of the controller."""
        return await self._session.logout()

    async def request(
        self,
        url: str = "/",
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        method: str | None = None,
        base_url: str | None = None,
    ) -> dict[str, Any]:
        """Perform an authenticated call and return its ok envelope.

        Args:
            url: Path on the controller, e.g. "/api/s/default/stat/sta".
            json: Optional JSON body; its presence makes the default method POST.
            headers: Per-call headers merged over the client defaults.
            method: Explicit HTTP method.
            base_url: Override of the configured controller address.

        Raises:
            UnifiAuthenticationError: If logging in failed.
            UnifiSessionExpiredError: If the session was still expired after
                logging in again.
            UnifiApiError: If the controller answered with a non-ok envelope.
            UnifiResponseError: If the controller answered with an error status.
            UnifiConnectionError: If the controller could not be reached.
            UnifiTimeout: If the controller did not answer in time.
        """
        descriptor = RequestDescriptor.build(url, json, headers, method, base_url)

        await self._session.login()
        try:
            return await self._attempt(descriptor)
        except UnifiClientError as err:
            if not is_session_expired(err):
                raise
            _LOGGER.debug(
                "Session expired on %s %s, authenticating again",
                descriptor.method,
                descriptor.url,
            )

        self._session.invalidate()
        await self._session.login()
        try:
            return await self._attempt(descriptor)
        except UnifiClientError as err:
            if not is_session_expired(err):
                raise
            message = f"Session still expired after re-authenticating: {err}"
            if isinstance(err, UnifiApiError):
                # Envelope-level expiry on a 2xx answer is reported as 401.
                raise UnifiSessionExpiredError(
                    401, message, body=err.body, envelope=err.envelope
                ) from err
            raise UnifiSessionExpiredError(
                err.status,
                message,
                body=err.body,
                envelope=try_decode_body(err.body),
            ) from err

    async def _attempt(self, descriptor: RequestDescriptor) -> dict[str, Any]:
        response = await self._executor.execute(descriptor)
        return unwrap_envelope(response)

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, UnifiHttpTransport):
            await self._transport.close()
