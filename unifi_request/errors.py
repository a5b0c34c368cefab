"""Client error types for UniFi controller interactions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class UnifiClientError(Exception):
    """Base error for UniFi client failures."""


class UnifiTimeout(UnifiClientError):
    """Timeout while communicating with the controller."""


class UnifiConnectionError(UnifiClientError):
    """Network connection to the controller failed."""


class UnifiResponseError(UnifiClientError):
    """HTTP response error from the controller."""

    def __init__(self, status: int, message: str, *, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class UnifiSessionExpiredError(UnifiResponseError):
    """Session stayed expired after re-authenticating."""

    def __init__(
        self, status: int, message: str, *, body: Any = None, envelope: Any = None
    ) -> None:
        super().__init__(status, message, body=body)
        self.envelope = envelope


class UnifiAuthenticationError(UnifiClientError):
    """Login was rejected or could not be performed."""

    def __init__(
        self,
        message: str = "Authentication error",
        *,
        envelope: Any = None,
        status: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.envelope = envelope
        self.status = status
        self.body = body


class UnifiApiError(UnifiClientError):
    """Controller answered but the envelope did not report success."""

    def __init__(
        self,
        message: str,
        *,
        envelope: Any = None,
        body: Any = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.envelope = envelope
        self.body = body
        self.status = status

    @property
    def meta(self) -> Mapping[str, Any]:
        if isinstance(self.envelope, Mapping):
            meta = self.envelope.get("meta")
            if isinstance(meta, Mapping):
                return meta
        return {}

    @property
    def rc(self) -> str | None:
        return self.meta.get("rc")

    @property
    def msg(self) -> str | None:
        return self.meta.get("msg")
