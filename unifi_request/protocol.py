"""Protocol helpers for the UniFi controller REST API.

This module holds the wire constants, the per-call request descriptor and
the envelope decoding rules shared by the session and the request engine.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from .errors import UnifiApiError

LOGIN_PATH: Final = "/api/login"
LOGOUT_PATH: Final = "/logout"

RC_OK: Final = "ok"
LOGIN_REQUIRED: Final = "api.err.LoginRequired"

DEFAULT_HEADERS: Final[Mapping[str, str]] = {
    "Content-type": "application/json",
    "Referer": "/login",
}


def resolve_method(method: str | None, body: Any) -> str:
    """Return the HTTP method, defaulting to GET without a body, POST with one."""
    if method:
        return method.upper()
    return "GET" if body is None else "POST"


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """One logical call against the controller."""

    url: str
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    base_url: str | None = None

    @classmethod
    def build(
        cls,
        url: str = "/",
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        method: str | None = None,
        base_url: str | None = None,
    ) -> RequestDescriptor:
        """Build a descriptor, resolving the default method."""
        return cls(
            url=url,
            method=resolve_method(method, body),
            headers=dict(headers or {}),
            body=body,
            base_url=base_url,
        )


def ok_envelope() -> dict[str, Any]:
    """Return a synthetic success envelope."""
    return {"meta": {"rc": RC_OK}}


def is_ok_envelope(value: Any) -> bool:
    """Return True when value is an envelope whose result code is ok."""
    if not isinstance(value, Mapping):
        return False
    meta = value.get("meta")
    return isinstance(meta, Mapping) and meta.get("rc") == RC_OK


def decode_body(body: Any) -> Any:
    """Decode a raw response body into a structured value.

    Mappings and lists pass through untouched, text and bytes are parsed as
    JSON. Empty bodies decode to None.

    Raises:
        UnifiApiError: If the body is text that is not valid JSON.
    """
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return body
    text = body.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError as err:
        raise UnifiApiError("Malformed response body", body=body) from err


def try_decode_body(body: Any) -> Any:
    """Decode body like decode_body, returning it unchanged when malformed."""
    try:
        return decode_body(body)
    except UnifiApiError:
        return body


def error_code(payload: Any) -> str | None:
    """Return the meta.msg error code of an envelope, if any."""
    if isinstance(payload, Mapping):
        meta = payload.get("meta")
        if isinstance(meta, Mapping):
            msg = meta.get("msg")
            return msg if isinstance(msg, str) else None
    return None


def mentions_login_required(payload: Any) -> bool:
    """Return True when an error payload carries the login-required code."""
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        return LOGIN_REQUIRED in payload
    return error_code(payload) == LOGIN_REQUIRED
