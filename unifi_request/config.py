"""Client options for UniFi controller connections."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any

from .http import DEFAULT_TIMEOUT
from .protocol import DEFAULT_HEADERS


@dataclass(frozen=True)
class UnifiOptions:
    """Connection settings fixed for the lifetime of a client."""

    username: str = "unifi"
    password: str = "unifi"
    base_url: str = "https://127.0.0.1:8443"
    headers: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_HEADERS), hash=False
    )
    debug: bool = False
    debug_net: bool = False
    verify_ssl: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None = None) -> UnifiOptions:
        """Merge a partial mapping of options over the defaults.

        Headers are merged key by key over the default headers instead of
        replacing them.

        Raises:
            ValueError: If the mapping names an unknown option.
        """
        return cls().merged(values or {})

    def merged(self, values: Mapping[str, Any]) -> UnifiOptions:
        """Return a copy with values applied on top of these options."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown UniFi client options: {', '.join(unknown)}")

        updates = dict(values)
        if "headers" in updates:
            updates["headers"] = {**self.headers, **(updates["headers"] or {})}
        if "base_url" in updates:
            updates["base_url"] = str(updates["base_url"]).rstrip("/")
        return replace(self, **updates)
