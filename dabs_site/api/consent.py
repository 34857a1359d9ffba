from fastapi import APIRouter, Depends, Request, Response

from dabs_site.api.cookies import apply_cookie_changes
from dabs_site.config import Settings, get_settings
from dabs_site.schemas.consent import ConsentStatus, ConsentUpdate
from dabs_site.services.consent import CookieConsent

router = APIRouter()


@router.get("/consent", response_model=ConsentStatus)
async def consent_status(request: Request, settings: Settings = Depends(get_settings)):
    return CookieConsent(request.cookies, days=settings.consent_cookie_days).status()


@router.post("/consent", response_model=ConsentStatus)
async def update_consent(
    req: ConsentUpdate,
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    consent = CookieConsent(request.cookies, days=settings.consent_cookie_days)
    apply_cookie_changes(response, consent.apply(req))
    return consent.status()
