from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

AgeGateStep = Literal["age", "email", "site", "under_age"]


class AgeGateStatus(BaseModel):
    age_verified: bool
    email_captured: Optional[str] = None
    next_step: AgeGateStep


class AgeVerificationRequest(BaseModel):
    of_age: bool = Field(..., description="True when the visitor confirmed they are 21+")


class EmailCaptureRequest(BaseModel):
    email: Optional[str] = None
    consent_marketing: bool = False


class EmailCaptureResponse(BaseModel):
    success: bool = True
    next_step: AgeGateStep = "site"
