from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dabs_site.config import Settings, get_settings
from dabs_site.dependencies.services import get_store_directory, get_store_service
from dabs_site.schemas.store import StoreLocatorResponse, StoreRecord
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    SchemaMismatchError,
    ServiceError,
)
from dabs_site.services.locator import StoreLocator
from dabs_site.services.stores import StoreDirectory, StoreService

router = APIRouter()

FETCH_FAILED = "Failed to fetch store data"


def _http_error(exc: ServiceError) -> HTTPException:
    generic = isinstance(exc, (DownstreamServiceError, SchemaMismatchError))
    detail = FETCH_FAILED if generic else str(exc)
    return HTTPException(status_code=exc.status_code, detail=detail)


@router.get("/stores", response_model=List[StoreRecord])
async def list_stores(service: StoreService = Depends(get_store_service)):
    try:
        return await service.list_stores()
    except ServiceError as exc:
        raise _http_error(exc) from exc


@router.get("/stores/locator", response_model=StoreLocatorResponse)
async def locate_stores(
    state: Optional[str] = Query(None, description="Exact state/region match"),
    zip: Optional[str] = Query(None, description="Exact 5-digit ZIP code match"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    sort_by_distance: bool = Query(True),
    directory: StoreDirectory = Depends(get_store_directory),
    settings: Settings = Depends(get_settings),
):
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="Both lat and lng are required for distances")
    try:
        stores = await directory.ensure_loaded()
        locator = StoreLocator(
            stores,
            default_center=settings.default_map_center,
            default_zoom=settings.default_map_zoom,
            user_location=(lat, lng) if lat is not None else None,
        )
        response = locator.locate(state=state, zip_code=zip, sort_by_distance=sort_by_distance)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    if directory.last_refreshed is not None:
        response.last_refreshed = directory.last_refreshed.isoformat()
    return response
