from __future__ import annotations

import logging
from typing import List

from dabs_site.clients.sheets import SheetsClient
from dabs_site.schemas.request import NOT_PROVIDED, RequestRecord
from dabs_site.services.exceptions import SchemaMismatchError
from dabs_site.services.sheet_schema import REQUEST_SCHEMA

logger = logging.getLogger(__name__)


class RequestListingService:
    """Reads submitted product requests back from the ProductRequests tab."""

    def __init__(self, client: SheetsClient, *, sheet_name: str = "ProductRequests") -> None:
        self._client = client
        self._sheet_name = sheet_name

    async def list_requests(self) -> List[RequestRecord]:
        logger.info("Loading product requests from tab %s", self._sheet_name)
        rows = await self._client.get_values(self._sheet_name)
        if len(rows) < 2:
            return []

        try:
            schema = REQUEST_SCHEMA.bind(rows[0])
        except SchemaMismatchError as exc:
            logger.error("Unexpected header in tab %s: %s", self._sheet_name, exc)
            raise
        return [
            RequestRecord(
                timestamp=record["timestamp"],
                city=record["city"],
                store=record["store"],
                product=record["product"],
                email=record["email"] or NOT_PROVIDED,
                instagram=record["instagram"] or NOT_PROVIDED,
                date=record["date"],
                status=record["status"] or "New",
            )
            for record in schema.project_all(rows[1:])
        ]
