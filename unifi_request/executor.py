"""Raw request execution against a UniFi transport."""

from __future__ import annotations

from collections.abc import Mapping

import aiohttp

from .errors import (
    UnifiClientError,
    UnifiConnectionError,
    UnifiTimeout,
)
from .http import UnifiResponse, UnifiTransport
from .protocol import RequestDescriptor


class UnifiRequestExecutor:
    """Adapts a RequestDescriptor into a single transport exchange.

    The executor neither retries nor looks at body contents. Its only job is
    to apply the client defaults and make sure every failure leaves as one
    of the typed client errors: UnifiResponseError when the controller
    answered, UnifiConnectionError or UnifiTimeout when it did not.
    """

    def __init__(
        self,
        transport: UnifiTransport,
        base_url: str,
        headers: Mapping[str, str],
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._headers = dict(headers)

    @property
    def base_url(self) -> str:
        return self._base_url

    def merged_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Merge per-call headers over the defaults; per-call keys win."""
        return {**self._headers, **headers}

    async def execute(self, descriptor: RequestDescriptor) -> UnifiResponse:
        """Perform one exchange for the descriptor."""
        try:
            return await self._transport.exchange(
                descriptor.method,
                descriptor.url,
                headers=self.merged_headers(descriptor.headers),
                base_url=descriptor.base_url or self._base_url,
                body=descriptor.body,
            )
        except UnifiClientError:
            raise
        except TimeoutError as err:
            raise UnifiTimeout(f"{descriptor.method} {descriptor.url} timed out") from err
        except (aiohttp.ClientError, OSError) as err:
            raise UnifiConnectionError(
                f"{descriptor.method} {descriptor.url} failed: {err}"
            ) from err
