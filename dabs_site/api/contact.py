from fastapi import APIRouter, Depends, HTTPException

from dabs_site.dependencies.services import get_contact_service
from dabs_site.schemas.contact import ContactRequest, ContactResponse
from dabs_site.services.contact import ContactService
from dabs_site.services.exceptions import ServiceError

router = APIRouter()


@router.post("/contact", response_model=ContactResponse)
async def submit_contact(
    req: ContactRequest,
    service: ContactService = Depends(get_contact_service),
):
    try:
        await service.submit(req)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return ContactResponse(success=True)
