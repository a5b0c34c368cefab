"""Login state for a UniFi controller client.

UnifiSession owns the authenticated flag and the credentials, and makes sure
that concurrent callers never trigger more than one login exchange: the
first caller starts the exchange, every caller arriving while it is
outstanding waits for it, and all of them settle with its single outcome.
"""

from __future__ import annotations

import logging
from typing import Any, Final

from .errors import UnifiAuthenticationError, UnifiClientError, UnifiResponseError
from .executor import UnifiRequestExecutor
from .protocol import (
    LOGIN_PATH,
    LOGOUT_PATH,
    RequestDescriptor,
    is_ok_envelope,
    ok_envelope,
    try_decode_body,
)
from .singleflight import SingleFlight

_LOGGER = logging.getLogger(__name__)

_LOGIN_KEY: Final = "login"


class UnifiSession:
    """Session coordinator for cookie-based controller authentication."""

    def __init__(
        self,
        executor: UnifiRequestExecutor,
        *,
        username: str,
        password: str,
    ) -> None:
        self._executor = executor
        self._username = username
        self._password = password
        self._authenticated = False
        self._logins: SingleFlight[dict[str, Any]] = SingleFlight()

    @property
    def authenticated(self) -> bool:
        """Return True between a successful login and a logout or expiry."""
        return self._authenticated

    @property
    def login_in_progress(self) -> bool:
        return self._logins.in_flight(_LOGIN_KEY)

    @property
    def username(self) -> str:
        return self._username

    def invalidate(self) -> None:
        """Forget the current login so the next call authenticates again."""
        self._authenticated = False

    async def login(
        self, username: str | None = None, password: str | None = None
    ) -> dict[str, Any]:
        """Log in, or join the login already in progress.

        Returns immediately with a synthetic ok envelope when the session is
        already authenticated.

        Raises:
            UnifiAuthenticationError: If the controller rejected the login or
                the login exchange failed.
        """
        if self._authenticated:
            return ok_envelope()
        if self.login_in_progress:
            _LOGGER.debug("Waiting for the login in progress to complete")
        return await self._logins.do(
            _LOGIN_KEY, lambda: self._perform_login(username, password)
        )

    async def _perform_login(
        self, username: str | None, password: str | None
    ) -> dict[str, Any]:
        user = username or self._username
        secret = password or self._password
        _LOGGER.debug("Trying to log in with username: %s", user)

        descriptor = RequestDescriptor.build(
            LOGIN_PATH, {"username": user, "password": secret}
        )
        try:
            response = await self._executor.execute(descriptor)
        except UnifiResponseError as err:
            self._authenticated = False
            raise UnifiAuthenticationError(
                f"Authentication error: {err}",
                envelope=try_decode_body(err.body),
                status=err.status,
                body=err.body,
            ) from err
        except UnifiClientError as err:
            self._authenticated = False
            raise UnifiAuthenticationError(f"Authentication error: {err}") from err

        envelope = try_decode_body(response.body)
        if not is_ok_envelope(envelope):
            _LOGGER.warning("Authentication rejected: %s", envelope)
            self._authenticated = False
            raise UnifiAuthenticationError(
                "Authentication error",
                envelope=envelope,
                status=response.status,
                body=response.body,
            )

        _LOGGER.debug("Successfully logged in as %s", user)
        self._username = user
        self._password = secret
        self._authenticated = True
        return envelope

    async def logout(self) -> Any:
        """Log out of the controller.

        The local session is cleared only once the controller acknowledged
        the logout; failures are raised unchanged.
        """
        response = await self._executor.execute(RequestDescriptor.build(LOGOUT_PATH))
        self._authenticated = False
        _LOGGER.debug("Logged out")
        return try_decode_body(response.body)
