# dabs_site/health.py
from fastapi import APIRouter, Depends

from dabs_site.config import Settings, get_settings

router = APIRouter()


@router.get("/api/health")
def health(settings: Settings = Depends(get_settings)):
    return {"ok": True, "sheets_configured": settings.sheets_configured}
