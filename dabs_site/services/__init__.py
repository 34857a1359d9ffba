"""Service package public API definitions.

Service implementations are imported lazily. The HTTP clients import
``dabs_site.services.exceptions``, which executes this module first; importing
the implementations eagerly here would pull the clients back in and create a
circular import.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AgeGateService",
    "ContactService",
    "DashboardService",
    "ProductRequestService",
    "RequestListingService",
    "StoreDirectory",
    "StoreService",
]

_SERVICE_MODULES = {
    "AgeGateService": "age_gate",
    "ContactService": "contact",
    "DashboardService": "dashboard",
    "ProductRequestService": "product_requests",
    "RequestListingService": "requests",
    "StoreDirectory": "stores",
    "StoreService": "stores",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .age_gate import AgeGateService as AgeGateService
    from .contact import ContactService as ContactService
    from .dashboard import DashboardService as DashboardService
    from .product_requests import ProductRequestService as ProductRequestService
    from .requests import RequestListingService as RequestListingService
    from .stores import StoreDirectory as StoreDirectory
    from .stores import StoreService as StoreService
