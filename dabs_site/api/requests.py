from typing import List

from fastapi import APIRouter, Depends, HTTPException

from dabs_site.dependencies.services import (
    get_product_request_service,
    get_request_listing_service,
)
from dabs_site.schemas.request import (
    ProductRequestSubmission,
    RequestRecord,
    SubmissionResponse,
)
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    SchemaMismatchError,
    ServiceError,
)
from dabs_site.services.product_requests import ProductRequestService
from dabs_site.services.requests import RequestListingService

router = APIRouter()


@router.get("/requests", response_model=List[RequestRecord])
async def list_requests(
    service: RequestListingService = Depends(get_request_listing_service),
):
    try:
        return await service.list_requests()
    except (DownstreamServiceError, SchemaMismatchError) as exc:
        raise HTTPException(status_code=500, detail="Failed to fetch request data") from exc
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/request", response_model=SubmissionResponse)
async def submit_request(
    req: ProductRequestSubmission,
    service: ProductRequestService = Depends(get_product_request_service),
):
    try:
        await service.submit(req)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return SubmissionResponse(success=True)
