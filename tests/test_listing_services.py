import asyncio
import logging
import os
import sys

import httpx
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dabs_site.clients.sheets import SheetsClient
from dabs_site.services.exceptions import (
    ConfigurationError,
    DownstreamServiceError,
    NotFoundError,
    SchemaMismatchError,
)
from dabs_site.services.requests import RequestListingService
from dabs_site.services.stores import StoreDirectory, StoreService

STORE_HEADER = ["State", "Name", "Address", "City", "Zip", "Phone", "Lat", "Lng"]
REQUEST_HEADER = ["Timestamp", "City", "Store", "Product", "Email", "Instagram", "Date", "Status"]


def sheets_client(tabs, *, status_code=200, calls=None) -> SheetsClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        tab = request.url.path.rsplit("/", 1)[-1]
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"message": "boom"}})
        values = tabs.get(tab)
        body = {"range": f"{tab}!A1:H10"}
        if values is not None:
            body["values"] = values
        return httpx.Response(200, json=body)

    return SheetsClient(
        "sheet-123",
        "api-key",
        base_url="https://sheets.test/v4",
        transport=httpx.MockTransport(handler),
    )


def test_sheets_client_builds_values_url_with_api_key() -> None:
    calls = []
    client = sheets_client({"Stores": [STORE_HEADER]}, calls=calls)

    rows = asyncio.run(client.get_values("Stores"))

    assert rows == [STORE_HEADER]
    assert calls[0].url.path == "/v4/spreadsheets/sheet-123/values/Stores"
    assert calls[0].url.params["key"] == "api-key"


def test_sheets_client_requires_sheet_id_and_key() -> None:
    client = SheetsClient(None, "api-key")

    with pytest.raises(ConfigurationError):
        asyncio.run(client.get_values("Stores"))


def test_sheets_client_wraps_non_success_status() -> None:
    client = sheets_client({}, status_code=403)

    with pytest.raises(DownstreamServiceError) as excinfo:
        asyncio.run(client.get_values("Stores"))

    assert excinfo.value.upstream_status == 403


def test_sheets_client_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = SheetsClient("sheet", "key", transport=httpx.MockTransport(handler))

    with pytest.raises(DownstreamServiceError):
        asyncio.run(client.get_values("Stores"))


def test_request_listing_returns_empty_list_for_header_only_tab() -> None:
    service = RequestListingService(sheets_client({"ProductRequests": [REQUEST_HEADER]}))

    assert asyncio.run(service.list_requests()) == []


def test_request_listing_returns_empty_list_for_empty_tab() -> None:
    service = RequestListingService(sheets_client({}))

    assert asyncio.run(service.list_requests()) == []


def test_request_listing_fills_defaults_for_blank_cells() -> None:
    rows = [
        REQUEST_HEADER,
        ["2026-10-02T18:00:00.000Z", "Portland", "Green Leaf", "Live Rosin", "", "", "10/2/2026"],
        ["2026-09-12T18:00:00.000Z", "Bend", "Mountain High", "Badder", "a@b.com", "dabfan", "9/12/2026", "Contacted"],
    ]
    service = RequestListingService(sheets_client({"ProductRequests": rows}))

    records = asyncio.run(service.list_requests())

    assert len(records) == 2
    assert records[0].email == "Not provided"
    assert records[0].instagram == "Not provided"
    assert records[0].status == "New"
    assert records[1].status == "Contacted"
    assert records[1].instagram == "dabfan"


def test_store_service_raises_not_found_for_header_only_tab() -> None:
    service = StoreService(sheets_client({"Stores": [STORE_HEADER]}))

    with pytest.raises(NotFoundError):
        asyncio.run(service.list_stores())


def test_store_service_parses_coordinates_and_skips_unusable_rows() -> None:
    rows = [
        STORE_HEADER,
        ["NM", "Green Leaf", "1 Main St", "Albuquerque", "87101", "505-555-0100", "35.08", "-106.65"],
        ["NM", "Broken Row", "2 Main St", "Santa Fe", "87501", "505-555-0101", "n/a", "-105.9"],
        ["CO", "Mile High", "3 Main St", "Denver", "80202", "", "39.74", "-104.99"],
    ]
    service = StoreService(sheets_client({"Stores": rows}))

    stores = asyncio.run(service.list_stores())

    assert [store.name for store in stores] == ["Green Leaf", "Mile High"]
    assert stores[0].lat == pytest.approx(35.08)
    assert stores[1].phone == ""


def test_store_service_reports_schema_mismatch() -> None:
    rows = [["State", "Name"], ["NM", "Green Leaf"]]
    service = StoreService(sheets_client({"Stores": rows}))

    with pytest.raises(SchemaMismatchError):
        asyncio.run(service.list_stores())


class FlakyStoreService:
    """Store service stub that fails after the first successful call."""

    def __init__(self, stores) -> None:
        self._stores = stores
        self.calls = 0

    async def list_stores(self):
        self.calls += 1
        if self.calls > 1:
            raise DownstreamServiceError("Sheets API returned an error response", status_code=500)
        return self._stores


def test_store_directory_keeps_previous_stores_when_refresh_fails() -> None:
    stores = asyncio.run(
        StoreService(
            sheets_client(
                {
                    "Stores": [
                        STORE_HEADER,
                        ["NM", "Green Leaf", "1 Main St", "Albuquerque", "87101", "", "35.08", "-106.65"],
                    ]
                }
            )
        ).list_stores()
    )
    service = FlakyStoreService(stores)
    directory = StoreDirectory(service)

    first = asyncio.run(directory.ensure_loaded())
    asyncio.run(directory._refresh_quietly())

    assert service.calls == 2
    assert [store.name for store in first] == ["Green Leaf"]
    assert [store.name for store in directory.stores] == ["Green Leaf"]
    assert directory.last_refreshed is not None


def test_store_directory_periodic_refresh_can_be_stopped() -> None:
    service = FlakyStoreService([])
    directory = StoreDirectory(service)

    async def run() -> None:
        directory.start(interval=0.01)
        await asyncio.sleep(0.05)
        await directory.stop()

    asyncio.run(run())

    assert service.calls >= 2


def test_store_service_without_usable_rows_is_not_found() -> None:
    rows = [
        STORE_HEADER,
        ["NM", "Broken Row", "2 Main St", "Santa Fe", "87501", "", "n/a", "-105.9"],
        ["NM", "No Coordinates", "4 Main St", "Taos", "87571", "", "", ""],
    ]
    service = StoreService(sheets_client({"Stores": rows}))

    with pytest.raises(NotFoundError):
        asyncio.run(service.list_stores())


class BrokenStoreService:
    """Store service stub failing with an error the refresh loop does not expect."""

    async def list_stores(self):
        raise RuntimeError("unexpected failure")


def test_store_directory_stop_survives_a_crashed_refresh_task(caplog) -> None:
    directory = StoreDirectory(BrokenStoreService())

    async def run() -> None:
        directory.start(interval=0.01)
        await asyncio.sleep(0.05)
        await directory.stop()

    with caplog.at_level(logging.ERROR, logger="dabs_site.services.stores"):
        asyncio.run(run())

    assert directory.stores == []
    assert any("refresh task ended" in record.getMessage() for record in caplog.records)
