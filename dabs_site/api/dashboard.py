from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from dabs_site.dependencies.services import get_dashboard_service
from dabs_site.schemas.dashboard import DashboardResponse
from dabs_site.services.dashboard import DashboardService
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    SchemaMismatchError,
    ServiceError,
)

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard_data(
    request: Request,
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    product: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service),
):
    try:
        return await service.build(
            request.url.hostname, search=search, city=city, product=product
        )
    except (DownstreamServiceError, SchemaMismatchError) as exc:
        raise HTTPException(status_code=500, detail="Failed to fetch request data") from exc
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
