from fastapi import APIRouter, Depends, HTTPException, Request, Response

from dabs_site.api.cookies import apply_cookie_changes
from dabs_site.dependencies.services import get_age_gate_service, get_email_capture_service
from dabs_site.schemas.age_gate import (
    AgeGateStatus,
    AgeVerificationRequest,
    EmailCaptureRequest,
    EmailCaptureResponse,
)
from dabs_site.services.age_gate import AgeGateService
from dabs_site.services.exceptions import ServiceError

router = APIRouter()


@router.get("/age-gate", response_model=AgeGateStatus)
async def age_gate_status(
    request: Request,
    service: AgeGateService = Depends(get_age_gate_service),
):
    return service.status(request.cookies)


@router.post("/age-gate/verify", response_model=AgeGateStatus)
async def verify_age(
    req: AgeVerificationRequest,
    request: Request,
    response: Response,
    service: AgeGateService = Depends(get_age_gate_service),
):
    status, changes = service.verify(req.of_age, request.cookies)
    apply_cookie_changes(response, changes)
    return status


@router.post("/age-gate/reset")
async def reset_age_gate(
    response: Response,
    service: AgeGateService = Depends(get_age_gate_service),
):
    apply_cookie_changes(response, service.reset())
    return {"success": True}


@router.post("/email-capture", response_model=EmailCaptureResponse)
async def capture_email(
    req: EmailCaptureRequest,
    request: Request,
    response: Response,
    service: AgeGateService = Depends(get_email_capture_service),
):
    try:
        result, changes = await service.capture_email(req, request.cookies)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    apply_cookie_changes(response, changes)
    return result


@router.post("/email-capture/skip", response_model=EmailCaptureResponse)
async def skip_email_capture(
    request: Request,
    response: Response,
    service: AgeGateService = Depends(get_age_gate_service),
):
    apply_cookie_changes(response, service.skip(request.cookies))
    return EmailCaptureResponse()
