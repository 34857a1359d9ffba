from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from dabs_site.schemas.consent import ConsentState, ConsentStatus, ConsentUpdate
from dabs_site.services.cookies import (
    CONSENT_COOKIE,
    NON_ESSENTIAL_COOKIES,
    CookieChange,
    decode_json_cookie,
    delete_cookie,
    encode_json_cookie,
    set_cookie,
)

logger = logging.getLogger(__name__)


class CookieConsent:
    """Consent categories recorded in a single JSON cookie.

    ``necessary`` covers the age-gate and consent cookies and is always
    allowed. ``functional`` covers the email-capture cookie. ``analytics`` is
    reserved for tracking.
    """

    def __init__(self, cookies: Mapping[str, str], *, days: int = 365) -> None:
        self._days = days
        self.consent = self._load(cookies.get(CONSENT_COOKIE))

    @staticmethod
    def _load(raw: Optional[str]) -> Optional[ConsentState]:
        data = decode_json_cookie(raw)
        if data is None:
            return None
        return ConsentState(
            necessary=True,
            functional=bool(data.get("functional")),
            analytics=bool(data.get("analytics")),
        )

    def is_allowed(self, category: str) -> bool:
        if category == "necessary":
            return True
        if self.consent is None:
            return False
        return bool(getattr(self.consent, category, False))

    def status(self) -> ConsentStatus:
        return ConsentStatus(show_banner=self.consent is None, consent=self.consent)

    def _save(self, consent: ConsentState) -> CookieChange:
        self.consent = consent
        return set_cookie(CONSENT_COOKIE, encode_json_cookie(consent.model_dump()), self._days)

    def accept_all(self) -> List[CookieChange]:
        return [self._save(ConsentState(functional=True, analytics=True))]

    def reject_non_essential(self) -> List[CookieChange]:
        changes = [self._save(ConsentState(functional=False, analytics=False))]
        changes.extend(self._remove_non_essential())
        return changes

    def save_preferences(self, functional: bool, analytics: bool) -> List[CookieChange]:
        changes = [self._save(ConsentState(functional=functional, analytics=analytics))]
        if not functional:
            changes.extend(self._remove_non_essential())
        return changes

    def apply(self, update: ConsentUpdate) -> List[CookieChange]:
        logger.info("Recording cookie consent: %s", update.action)
        if update.action == "accept_all":
            return self.accept_all()
        if update.action == "reject_non_essential":
            return self.reject_non_essential()
        return self.save_preferences(bool(update.functional), bool(update.analytics))

    @staticmethod
    def _remove_non_essential() -> List[CookieChange]:
        return [delete_cookie(name) for name in NON_ESSENTIAL_COOKIES]
