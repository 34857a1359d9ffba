from __future__ import annotations

from functools import lru_cache
from typing import Union

from fastapi import Depends, HTTPException

from dabs_site.clients.forwarder import JsonForwarder
from dabs_site.clients.sheets import SheetsClient
from dabs_site.config import Settings, get_settings
from dabs_site.services import (
    AgeGateService,
    ContactService,
    DashboardService,
    ProductRequestService,
    RequestListingService,
    StoreDirectory,
    StoreService,
)
from dabs_site.services.exceptions import ConfigurationError
from dabs_site.services.submission import (
    SubmissionDispatcher,
    SubmissionStrategy,
    select_strategy,
)


@lru_cache(maxsize=1)
def get_sheets_client_cached() -> SheetsClient:
    settings = get_settings()
    return SheetsClient(
        settings.sheet_id,
        settings.google_sheets_api_key,
        base_url=str(settings.sheets_api_base_url),
        timeout=settings.http_timeout,
    )


@lru_cache(maxsize=1)
def get_forwarder_cached() -> JsonForwarder:
    return JsonForwarder(timeout=get_settings().http_timeout)


@lru_cache(maxsize=1)
def get_store_directory_cached() -> StoreDirectory:
    settings = get_settings()
    service = StoreService(get_sheets_client_cached(), sheet_name=settings.store_sheet_name)
    return StoreDirectory(service)


# A target that cannot be selected is cached as its ConfigurationError.
StrategyOutcome = Union[SubmissionStrategy, ConfigurationError]


def _select(**kwargs) -> StrategyOutcome:
    try:
        return select_strategy(**kwargs)
    except ConfigurationError as exc:
        return exc


@lru_cache(maxsize=1)
def get_request_strategy() -> StrategyOutcome:
    settings = get_settings()
    return _select(
        webhook_url=settings.request_webhook_url,
        script_url=settings.request_script_url,
        dev_mode=settings.dev_mode,
        form="product request",
    )


@lru_cache(maxsize=1)
def get_contact_strategy() -> StrategyOutcome:
    settings = get_settings()
    return _select(
        webhook_url=settings.contact_webhook_url,
        dev_mode=settings.dev_mode,
        form="contact",
    )


@lru_cache(maxsize=1)
def get_email_capture_strategy() -> StrategyOutcome:
    settings = get_settings()
    return _select(
        webhook_url=settings.email_capture_webhook_url,
        script_url=settings.email_capture_script_url,
        dev_mode=settings.dev_mode,
        form="email capture",
    )


def resolve_submission_strategies() -> None:
    """Select every form's delivery target; called once from the lifespan."""

    get_request_strategy()
    get_contact_strategy()
    get_email_capture_strategy()


def _dispatcher(strategy_factory, form: str) -> SubmissionDispatcher:
    strategy = strategy_factory()
    if isinstance(strategy, ConfigurationError):
        raise HTTPException(status_code=500, detail=str(strategy))
    return SubmissionDispatcher(strategy, get_forwarder_cached(), form=form)


def get_sheets_client(settings: Settings = Depends(get_settings)) -> SheetsClient:
    return get_sheets_client_cached()


def get_store_service(
    client: SheetsClient = Depends(get_sheets_client),
    settings: Settings = Depends(get_settings),
) -> StoreService:
    return StoreService(client, sheet_name=settings.store_sheet_name)


def get_store_directory() -> StoreDirectory:
    return get_store_directory_cached()


def get_request_listing_service(
    client: SheetsClient = Depends(get_sheets_client),
    settings: Settings = Depends(get_settings),
) -> RequestListingService:
    return RequestListingService(client, sheet_name=settings.request_sheet_name)


def get_product_request_service() -> ProductRequestService:
    return ProductRequestService(_dispatcher(get_request_strategy, "product request"))


def get_contact_service(settings: Settings = Depends(get_settings)) -> ContactService:
    return ContactService(
        _dispatcher(get_contact_strategy, "contact"),
        recipient=settings.contact_recipient_email,
    )


def get_age_gate_service(settings: Settings = Depends(get_settings)) -> AgeGateService:
    return AgeGateService(
        cookie_days=settings.age_gate_cookie_days,
        consent_days=settings.consent_cookie_days,
    )


def get_email_capture_service(settings: Settings = Depends(get_settings)) -> AgeGateService:
    return AgeGateService(
        _dispatcher(get_email_capture_strategy, "email capture"),
        cookie_days=settings.age_gate_cookie_days,
        consent_days=settings.consent_cookie_days,
    )


def get_dashboard_service(
    listing: RequestListingService = Depends(get_request_listing_service),
    settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(listing, demo_mode=settings.dashboard_demo_mode)
