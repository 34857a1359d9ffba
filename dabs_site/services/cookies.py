from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60

AGE_VERIFIED_COOKIE = "dabs_age_verified"
EMAIL_CAPTURED_COOKIE = "dabs_email_captured"
CONSENT_COOKIE = "dabs_cookie_consent"
NON_ESSENTIAL_COOKIES = (EMAIL_CAPTURED_COOKIE,)


@dataclass(frozen=True)
class CookieChange:
    """A cookie to set (``value`` given) or expire (``value`` is None)."""

    name: str
    value: Optional[str] = None
    days: Optional[int] = None

    @property
    def max_age(self) -> Optional[int]:
        return self.days * DAY_SECONDS if self.days is not None else None

    @property
    def is_deletion(self) -> bool:
        return self.value is None


def set_cookie(name: str, value: str, days: int) -> CookieChange:
    return CookieChange(name=name, value=value, days=days)


def delete_cookie(name: str) -> CookieChange:
    return CookieChange(name=name)


def encode_json_cookie(data: Mapping[str, Any]) -> str:
    return quote(json.dumps(dict(data), separators=(",", ":")), safe="")


def decode_json_cookie(raw: Optional[str]) -> Optional[dict]:
    if not raw:
        return None
    try:
        value = json.loads(unquote(raw))
    except ValueError:
        logger.warning("Ignoring unreadable JSON cookie value")
        return None
    return value if isinstance(value, dict) else None
