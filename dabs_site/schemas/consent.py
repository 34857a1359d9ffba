from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class ConsentState(BaseModel):
    """Categories stored in the ``dabs_cookie_consent`` cookie."""

    necessary: bool = True
    functional: bool = False
    analytics: bool = False


class ConsentUpdate(BaseModel):
    action: Literal["accept_all", "reject_non_essential", "save"]
    functional: Optional[bool] = None
    analytics: Optional[bool] = None


class ConsentStatus(BaseModel):
    show_banner: bool
    consent: Optional[ConsentState] = None
