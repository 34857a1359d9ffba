from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from dabs_site.services.exceptions import DownstreamServiceError

logger = logging.getLogger(__name__)


class JsonForwarder:
    """Posts JSON payloads to absolute URLs (Apps Script endpoints, webhooks)."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def post(self, url: str, payload: Dict[str, Any]) -> None:
        client = await self._ensure_client()
        try:
            logger.debug("Forwarding payload to %s: %s", url, payload)
            response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.exception("Forward target returned error %s", exc.response.status_code)
            raise DownstreamServiceError(
                "Forward target returned an error response",
                status_code=exc.response.status_code,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.exception("Unable to reach forward target: %s", exc)
            raise DownstreamServiceError(
                "Unable to reach forward target", status_code=None, cause=exc
            ) from exc
