from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from dabs_site.clients.sheets import SheetsClient
from dabs_site.schemas.store import StoreRecord
from dabs_site.services.exceptions import NotFoundError, SchemaMismatchError, ServiceError
from dabs_site.services.sheet_schema import STORE_SCHEMA

logger = logging.getLogger(__name__)


class StoreService:
    """Reads store locations from the Stores tab."""

    def __init__(self, client: SheetsClient, *, sheet_name: str = "Stores") -> None:
        self._client = client
        self._sheet_name = sheet_name

    async def list_stores(self) -> List[StoreRecord]:
        logger.info("Loading stores from tab %s", self._sheet_name)
        rows = await self._client.get_values(self._sheet_name)
        if len(rows) < 2:
            raise NotFoundError("No store data found")

        try:
            schema = STORE_SCHEMA.bind(rows[0])
        except SchemaMismatchError as exc:
            logger.error("Unexpected header in tab %s: %s", self._sheet_name, exc)
            raise
        stores: List[StoreRecord] = []
        for position, record in enumerate(schema.project_all(rows[1:]), start=2):
            lat = _parse_coordinate(record["lat"])
            lng = _parse_coordinate(record["lng"])
            if lat is None or lng is None:
                logger.warning(
                    "Skipping store row %s (%s): unusable coordinates %r, %r",
                    position,
                    record["name"],
                    record["lat"],
                    record["lng"],
                )
                continue
            stores.append(
                StoreRecord(
                    state=record["state"],
                    name=record["name"],
                    address=record["address"],
                    city=record["city"],
                    zip=record["zip"],
                    phone=record["phone"],
                    lat=lat,
                    lng=lng,
                )
            )
        if not stores:
            raise NotFoundError("No store data found")
        return stores


def _parse_coordinate(value: str) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class StoreDirectory:
    """Owns the store list shown by the locator and keeps it fresh.

    Refreshes are wholesale and are not de-duplicated: when a timed refresh
    overlaps another one, whichever finishes last wins.
    """

    def __init__(self, service: StoreService) -> None:
        self._service = service
        self._stores: List[StoreRecord] = []
        self._last_refreshed: Optional[datetime] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def stores(self) -> List[StoreRecord]:
        return list(self._stores)

    @property
    def last_refreshed(self) -> Optional[datetime]:
        return self._last_refreshed

    async def refresh(self) -> List[StoreRecord]:
        stores = await self._service.list_stores()
        self._stores = stores
        self._last_refreshed = datetime.now(timezone.utc)
        logger.info("Store directory refreshed with %s stores", len(stores))
        return self.stores

    async def ensure_loaded(self) -> List[StoreRecord]:
        if self._last_refreshed is None:
            return await self.refresh()
        return self.stores

    async def _refresh_quietly(self) -> None:
        try:
            await self.refresh()
        except ServiceError as exc:
            logger.error("Store refresh failed, keeping %s cached stores: %s", len(self._stores), exc)

    async def run_periodic_refresh(self, interval: float) -> None:
        while True:
            await self._refresh_quietly()
            await asyncio.sleep(interval)

    def start(self, interval: float) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_periodic_refresh(interval))
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Store refresh task ended with an error")
        finally:
            self._task = None
