from __future__ import annotations

import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from dabs_site.services.exceptions import ConfigurationError, DownstreamServiceError

logger = logging.getLogger(__name__)


class SheetsClient:
    """Async client for the read-only Google Sheets ``values`` endpoint."""

    def __init__(
        self,
        sheet_id: str | None,
        api_key: str | None,
        *,
        base_url: str = "https://sheets.googleapis.com/v4",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._sheet_id = sheet_id
        self._api_key = api_key
        self._base_url = str(base_url).rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def configured(self) -> bool:
        return bool(self._sheet_id and self._api_key)

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Accept": "application/json"},
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

    async def get_values(self, sheet_name: str) -> List[List[str]]:
        """Return every row of ``sheet_name``, header row included."""

        if not self.configured:
            logger.error("Sheet id or API key not set; cannot read tab %s", sheet_name)
            raise ConfigurationError("Server not configured")

        client = await self._ensure_client()
        path = f"/spreadsheets/{quote(self._sheet_id, safe='')}/values/{quote(sheet_name, safe='')}"
        try:
            response = await client.get(path, params={"key": self._api_key})
            response.raise_for_status()
            data: Any = response.json()
        except httpx.HTTPStatusError as exc:
            logger.exception("Sheets API returned error %s", exc.response.status_code)
            raise DownstreamServiceError(
                "Sheets API returned an error response",
                status_code=exc.response.status_code,
                cause=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.exception("Unable to reach Sheets API: %s", exc)
            raise DownstreamServiceError(
                "Unable to reach Sheets API", status_code=None, cause=exc
            ) from exc
        except ValueError as exc:
            logger.exception("Sheets API returned a non-JSON body")
            raise DownstreamServiceError(
                "Sheets API returned an unreadable response", cause=exc
            ) from exc

        values = data.get("values") if isinstance(data, dict) else None
        if not values:
            return []
        return [[str(cell) for cell in row] for row in values]
