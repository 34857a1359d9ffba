from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Mapping, Optional, Tuple

from dabs_site.schemas.age_gate import (
    AgeGateStatus,
    EmailCaptureRequest,
    EmailCaptureResponse,
)
from dabs_site.services.consent import CookieConsent
from dabs_site.services.cookies import (
    AGE_VERIFIED_COOKIE,
    EMAIL_CAPTURED_COOKIE,
    CookieChange,
    delete_cookie,
    set_cookie,
)
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    ServiceError,
    ValidationFailedError,
)
from dabs_site.services.product_requests import utc_iso
from dabs_site.services.submission import SubmissionDispatcher

logger = logging.getLogger(__name__)


class AgeGateService:
    """21+ confirmation followed by an optional email-capture step."""

    def __init__(
        self,
        dispatcher: Optional[SubmissionDispatcher] = None,
        *,
        cookie_days: int = 30,
        consent_days: int = 365,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._cookie_days = cookie_days
        self._consent_days = consent_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _consent(self, cookies: Mapping[str, str]) -> CookieConsent:
        return CookieConsent(cookies, days=self._consent_days)

    def _captured(self, cookies: Mapping[str, str]) -> Optional[str]:
        # The email-capture cookie is functional; ignore it without consent.
        if not self._consent(cookies).is_allowed("functional"):
            return None
        return cookies.get(EMAIL_CAPTURED_COOKIE) or None

    def status(self, cookies: Mapping[str, str]) -> AgeGateStatus:
        verified = cookies.get(AGE_VERIFIED_COOKIE) == "true"
        return AgeGateStatus(
            age_verified=verified,
            email_captured=self._captured(cookies),
            next_step="site" if verified else "age",
        )

    def verify(self, of_age: bool, cookies: Mapping[str, str]) -> Tuple[AgeGateStatus, List[CookieChange]]:
        if not of_age:
            logger.info("Visitor is under 21")
            return AgeGateStatus(age_verified=False, next_step="under_age"), []

        logger.info("Visitor confirmed 21+")
        captured = self._captured(cookies)
        status = AgeGateStatus(
            age_verified=True,
            email_captured=captured,
            next_step="site" if captured else "email",
        )
        return status, [set_cookie(AGE_VERIFIED_COOKIE, "true", self._cookie_days)]

    def _remember_capture(self, value: str, cookies: Mapping[str, str]) -> List[CookieChange]:
        if not self._consent(cookies).is_allowed("functional"):
            return []
        return [set_cookie(EMAIL_CAPTURED_COOKIE, value, self._cookie_days)]

    async def capture_email(
        self, request: EmailCaptureRequest, cookies: Mapping[str, str]
    ) -> Tuple[EmailCaptureResponse, List[CookieChange]]:
        email = (request.email or "").strip()
        if not email:
            raise ValidationFailedError("Please enter your email address.")
        if not request.consent_marketing:
            raise ValidationFailedError("Please check the consent box to subscribe.")
        if self._dispatcher is None:
            raise RuntimeError("Email capture dispatcher not configured")

        payload = {
            "email": email,
            "consentMarketing": True,
            "consentAge": True,
            "timestamp": utc_iso(self._clock()),
            "source": "age_gate",
        }
        try:
            await self._dispatcher.deliver(payload)
        except ServiceError as exc:
            raise DownstreamServiceError(
                "Sorry, there was an error. Please try again or continue to site.",
                cause=exc,
            ) from exc
        return EmailCaptureResponse(), self._remember_capture("true", cookies)

    def skip(self, cookies: Mapping[str, str]) -> List[CookieChange]:
        logger.info("Visitor skipped email capture")
        return self._remember_capture("skipped", cookies)

    @staticmethod
    def reset() -> List[CookieChange]:
        return [delete_cookie(AGE_VERIFIED_COOKIE), delete_cookie(EMAIL_CAPTURED_COOKIE)]
