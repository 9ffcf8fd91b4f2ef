"""Async HTTP client for the VM gateway.

Unwraps the response envelope of ``GET /vms`` and consumes the
streamed ``POST /vms/{alias}`` body incrementally, one JSON document
per line.
"""

from __future__ import annotations

import json
import logging
from typing import AsyncIterator

import httpx
from pydantic import ValidationError

from vmgateway.domain.models import StreamRecord

logger = logging.getLogger(__name__)


class GatewayClient:
    """Talks to a running vmgateway server.

    Example usage::

        async with GatewayClient(base_url="http://localhost:10100") as gw:
            for name in await gw.list_vms():
                async for record in gw.stream_records(name):
                    print(record.H, record.W)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:10100",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.debug("Gateway client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client. Safe to call more than once."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list_vms(self) -> list[str]:
        """Return the VM names reported by ``GET /vms``.

        Raises:
            GatewayClientError: On transport failure or an error envelope.
        """
        client = self._require_client()
        try:
            resp = await client.get("/vms")
        except httpx.HTTPError as e:
            raise GatewayClientError(f"GET /vms failed: {e}") from e

        body = _decode_json(resp)
        if resp.is_error or "error" in body:
            raise GatewayClientError(
                body.get("error", f"HTTP {resp.status_code}"), status_code=resp.status_code,
            )
        return list(body.get("response", []))

    async def stream_records(self, alias: str) -> AsyncIterator[StreamRecord]:
        """Yield records from ``POST /vms/{alias}`` as each line arrives.

        Raises:
            GatewayClientError: On transport failure, a non-200 status, or
                a line that is not a valid record.
        """
        client = self._require_client()
        try:
            async with client.stream("POST", f"/vms/{alias}") as resp:
                if resp.status_code != 200:
                    await resp.aread()
                    raise GatewayClientError(
                        _decode_json(resp).get("error", f"HTTP {resp.status_code}"),
                        status_code=resp.status_code,
                    )
                async for line in resp.aiter_lines():
                    if not line.strip():
                        continue
                    try:
                        yield StreamRecord.model_validate_json(line)
                    except ValidationError as e:
                        raise GatewayClientError(f"Malformed stream record {line!r}: {e}") from e
        except httpx.HTTPError as e:
            raise GatewayClientError(f"POST /vms/{alias} failed: {e}") from e

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise GatewayClientError("Not connected to gateway")
        return self._client

    async def __aenter__(self) -> GatewayClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()


def _decode_json(resp: httpx.Response) -> dict:
    try:
        body = resp.json()
    except json.JSONDecodeError:
        return {}
    return body if isinstance(body, dict) else {}


class GatewayClientError(Exception):
    """Raised when a gateway request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
