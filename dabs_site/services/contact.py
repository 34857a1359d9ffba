from __future__ import annotations

import html
import logging
from datetime import datetime
from typing import Any, Callable, Dict

from dabs_site.schemas.contact import ContactRequest
from dabs_site.schemas.request import NOT_PROVIDED
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    ServiceError,
    ValidationFailedError,
)
from dabs_site.services.product_requests import utc_iso
from dabs_site.services.submission import SubmissionDispatcher

logger = logging.getLogger(__name__)

CONTACT_PAGE = "Main Website Contact Form"
_REQUIRED = ("name", "email", "subject", "message")


def display_datetime(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return (
        f"{moment.month}/{moment.day}/{moment.year}, "
        f"{hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"
    )


def render_contact_email(data: Dict[str, Any], recipient: str) -> str:
    """HTML body of the notification sent to the site owner."""

    e = {key: html.escape(str(value)) for key, value in data.items()}
    return f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background: #FFB700; color: #000; padding: 20px; text-align: center;">
                    <h1>New Contact Form Submission</h1>
                    <p>To: {html.escape(recipient)}</p>
                </div>
                <p><strong>Name:</strong> {e["name"]}</p>
                <p><strong>Email:</strong> <a href="mailto:{e["email"]}">{e["email"]}</a></p>
                <p><strong>Phone:</strong> {e["phone"]}</p>
                <p><strong>Subject:</strong> {e["subject"]}</p>
                <p><strong>Message:</strong></p>
                <p style="white-space: pre-wrap; border-left: 4px solid #FFB700; padding: 15px;">{e["message"]}</p>
                <p><strong>Submitted:</strong> {e["date"]}</p>
            </div>
        </body>
    </html>
    """


class ContactService:
    def __init__(
        self,
        dispatcher: SubmissionDispatcher,
        *,
        recipient: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._recipient = recipient
        self._clock = clock or (lambda: datetime.now().astimezone())

    def compose(self, request: ContactRequest) -> Dict[str, Any]:
        values = {name: (getattr(request, name) or "").strip() for name in _REQUIRED}
        if not all(values.values()):
            raise ValidationFailedError("Please fill in all required fields.")

        now = self._clock()
        return {
            **values,
            "phone": (request.phone or "").strip() or NOT_PROVIDED,
            "timestamp": utc_iso(now),
            "date": display_datetime(now),
            "page": CONTACT_PAGE,
        }

    async def submit(self, request: ContactRequest) -> Dict[str, Any]:
        payload = self.compose(request)
        logger.info("Contact form submission from %s: %s", payload["email"], payload["subject"])
        try:
            await self._dispatcher.deliver(
                payload, preview=render_contact_email(payload, self._recipient)
            )
        except ServiceError as exc:
            raise DownstreamServiceError(
                "Sorry, there was an error sending your message. "
                f"Please try emailing us directly at {self._recipient}",
                cause=exc,
            ) from exc
        return payload
