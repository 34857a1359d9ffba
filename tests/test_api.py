import logging
import os
import sys

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dabs_site.clients.sheets import SheetsClient
from dabs_site.dependencies import services as dependencies
from dabs_site.main import app
from dabs_site.services.exceptions import ConfigurationError
from dabs_site.services.product_requests import ProductRequestService
from dabs_site.services.stores import StoreDirectory, StoreService
from dabs_site.services.submission import SheetProxyStrategy, SubmissionDispatcher

SCRIPT_URL = "https://script.test/macros/s/abc/exec"
STORE_HEADER = ["State", "Name", "Address", "City", "Zip", "Phone", "Lat", "Lng"]
REQUEST_HEADER = ["Timestamp", "City", "Store", "Product", "Email", "Instagram", "Date", "Status"]
STORE_ROWS = [
    STORE_HEADER,
    ["NM", "Green Leaf", "1 Central Ave", "Albuquerque", "87101", "(505) 555-0100", "35.08", "-106.65"],
    ["CO", "Mile High", "3 Colfax Ave", "Denver", "80202", "", "39.74", "-104.99"],
]


class RecordingForwarder:
    def __init__(self) -> None:
        self.sent = []

    async def post(self, url, payload):
        self.sent.append((url, payload))


def sheets_client(tabs, status_code=200) -> SheetsClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"message": "denied"}})
        tab = request.url.path.rsplit("/", 1)[-1]
        body = {"range": tab}
        if tab in tabs:
            body["values"] = tabs[tab]
        return httpx.Response(200, json=body)

    return SheetsClient("sheet-123", "api-key", transport=httpx.MockTransport(handler))


@pytest.fixture
def overrides():
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def forwarder(overrides):
    forwarder = RecordingForwarder()
    overrides[dependencies.get_product_request_service] = lambda: ProductRequestService(
        SubmissionDispatcher(SheetProxyStrategy(endpoint=SCRIPT_URL), forwarder)
    )
    return forwarder


# --- POST /api/request ---


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_request_endpoint_only_accepts_post(forwarder, method) -> None:
    response = TestClient(app).request(method, "/api/request")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert forwarder.sent == []


def test_request_with_missing_fields_is_rejected_without_forwarding(forwarder) -> None:
    response = TestClient(app).post("/api/request", json={"city": "Portland", "product": "Live Rosin"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: city, store, product"}
    assert forwarder.sent == []


def test_malformed_request_body_is_rejected(forwarder) -> None:
    response = TestClient(app).post(
        "/api/request", content="not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert forwarder.sent == []


def test_valid_request_is_forwarded(forwarder) -> None:
    response = TestClient(app).post(
        "/api/request",
        json={"city": "Portland", "store": "Green Leaf", "product": "Live Rosin", "instagram": "dabfan"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    url, payload = forwarder.sent[0]
    assert url == SCRIPT_URL
    assert payload["instagram"] == "dabfan"
    assert payload["email"] == "Not provided"


def test_unconfigured_submission_target_returns_server_error(overrides, monkeypatch) -> None:
    monkeypatch.setattr(
        dependencies, "get_request_strategy", lambda: ConfigurationError("Server not configured")
    )

    response = TestClient(app).post(
        "/api/request", json={"city": "Portland", "store": "Green Leaf", "product": "Live Rosin"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Server not configured"}


STRATEGY_CACHES = (
    dependencies.get_request_strategy,
    dependencies.get_contact_strategy,
    dependencies.get_email_capture_strategy,
)


@pytest.fixture
def fresh_strategies():
    for cached in STRATEGY_CACHES:
        cached.cache_clear()
    yield
    for cached in STRATEGY_CACHES:
        cached.cache_clear()


def test_submission_targets_are_selected_once_at_startup(fresh_strategies, monkeypatch) -> None:
    selections = []

    def nothing_configured(**kwargs):
        selections.append(kwargs["form"])
        raise ConfigurationError("Server not configured")

    monkeypatch.setattr(dependencies, "select_strategy", nothing_configured)
    body = {"city": "Portland", "store": "Green Leaf", "product": "Live Rosin"}

    with TestClient(app) as client:
        assert selections == ["product request", "contact", "email capture"]
        responses = [client.post("/api/request", json=body) for _ in range(3)]

    assert selections == ["product request", "contact", "email capture"]
    for response in responses:
        assert response.status_code == 500
        assert response.json() == {"error": "Server not configured"}


# --- GET /api/requests and /api/stores ---


def test_requests_header_only_returns_empty_list(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"ProductRequests": [REQUEST_HEADER]})

    response = TestClient(app).get("/api/requests")

    assert response.status_code == 200
    assert response.json() == []


def test_requests_upstream_failure_is_generic(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({}, status_code=403)

    response = TestClient(app).get("/api/requests")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch request data"}


def test_stores_returns_named_records(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"Stores": STORE_ROWS})

    response = TestClient(app).get("/api/stores")

    assert response.status_code == 200
    body = response.json()
    assert [store["name"] for store in body] == ["Green Leaf", "Mile High"]
    assert body[0]["lat"] == pytest.approx(35.08)


def test_stores_header_only_is_not_found(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"Stores": [STORE_HEADER]})

    response = TestClient(app).get("/api/stores")

    assert response.status_code == 404
    assert response.json() == {"error": "No store data found"}


def test_stores_upstream_failure_is_generic(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({}, status_code=500)

    response = TestClient(app).get("/api/stores")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch store data"}


def test_stores_without_credentials_is_misconfigured(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: SheetsClient(None, None)

    response = TestClient(app).get("/api/stores")

    assert response.status_code == 500
    assert response.json() == {"error": "Server not configured"}


def test_requests_with_unexpected_header_hide_column_names(overrides, caplog) -> None:
    rows = [["State", "Name"], ["NM", "Green Leaf"]]
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"ProductRequests": rows})

    with caplog.at_level(logging.ERROR, logger="dabs_site.services.requests"):
        response = TestClient(app).get("/api/requests")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch request data"}
    assert any("missing columns" in record.getMessage() for record in caplog.records)


def test_stores_with_unexpected_header_hide_column_names(overrides, caplog) -> None:
    rows = [["State", "Name"], ["NM", "Green Leaf"]]
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"Stores": rows})

    with caplog.at_level(logging.ERROR, logger="dabs_site.services.stores"):
        response = TestClient(app).get("/api/stores")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch store data"}
    assert any("missing columns" in record.getMessage() for record in caplog.records)


def test_stores_without_usable_coordinates_are_not_found(overrides) -> None:
    rows = [STORE_HEADER, ["NM", "Green Leaf", "1 Central Ave", "Albuquerque", "87101", "", "n/a", ""]]
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"Stores": rows})

    response = TestClient(app).get("/api/stores")

    assert response.status_code == 404
    assert response.json() == {"error": "No store data found"}


# --- GET /api/stores/locator ---


@pytest.fixture
def directory(overrides):
    directory = StoreDirectory(StoreService(sheets_client({"Stores": STORE_ROWS})))
    overrides[dependencies.get_store_directory] = lambda: directory
    return directory


def test_locator_filters_by_state(directory) -> None:
    response = TestClient(app).get("/api/stores/locator", params={"state": "CO"})

    body = response.json()
    assert response.status_code == 200
    assert body["count_label"] == "1 store"
    assert body["cards"][0]["store"]["name"] == "Mile High"
    assert body["last_refreshed"] is not None


def test_locator_rejects_bad_zip(directory) -> None:
    response = TestClient(app).get("/api/stores/locator", params={"zip": "123"})

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a valid 5-digit ZIP code"}


def test_locator_sorts_by_distance(directory) -> None:
    response = TestClient(app).get("/api/stores/locator", params={"lat": 39.7, "lng": -105.0})

    cards = response.json()["cards"]
    assert [card["store"]["name"] for card in cards] == ["Mile High", "Green Leaf"]
    assert cards[0]["distance_label"].endswith("miles away")


def test_locator_needs_both_coordinates(directory) -> None:
    response = TestClient(app).get("/api/stores/locator", params={"lat": 39.7})

    assert response.status_code == 400


# --- Dashboard ---


def test_dashboard_json_uses_demo_data_on_localhost(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({}, status_code=500)

    response = TestClient(app, base_url="http://localhost").get("/api/dashboard")

    body = response.json()
    assert response.status_code == 200
    assert body["demo"] is True
    assert body["stats"]["total_requests"] == 5
    assert body["charts"]["by_product"][0] == {"label": "Live Rosin", "count": 3, "width_percent": 100.0}


def test_dashboard_json_reads_sheet_on_public_host(overrides) -> None:
    rows = [
        REQUEST_HEADER,
        ["2026-10-02T18:00:00.000Z", "Bend", "Mountain High", "Badder", "", "dabfan", "10/2/2026", "New"],
    ]
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({"ProductRequests": rows})

    response = TestClient(app, base_url="http://dabs.example.com").get("/api/dashboard")

    body = response.json()
    assert body["demo"] is False
    assert body["rows"][0]["contact"] == ["@dabfan"]


def test_dashboard_page_renders_html(overrides) -> None:
    response = TestClient(app, base_url="http://localhost").get("/dashboard", params={"city": "Bend"})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Mountain High" in response.text
    assert "Total Requests" in response.text


def test_dashboard_page_shows_failure_row(overrides) -> None:
    overrides[dependencies.get_sheets_client] = lambda: sheets_client({}, status_code=500)

    response = TestClient(app, base_url="http://dabs.example.com").get("/dashboard")

    assert response.status_code == 500
    assert "Failed to load data" in response.text


# --- Catalog and health ---


def test_product_detail_and_missing_product() -> None:
    client = TestClient(app)

    assert client.get("/api/products/live-rosin").json()["title"] == "Live Rosin"
    assert len(client.get("/api/products").json()) == 3
    missing = client.get("/api/products/unknown")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Product not found"}


def test_strain_track_starts_on_first_real_slide() -> None:
    body = TestClient(app).get("/api/strains").json()

    assert body["frame"]["index"] == body["cards_per_view"]
    assert body["frame"]["real_index"] == 0
    assert len(body["slides"]) == 16


def test_health_reports_configuration() -> None:
    body = TestClient(app).get("/api/health").json()

    assert body["ok"] is True
    assert "sheets_configured" in body
