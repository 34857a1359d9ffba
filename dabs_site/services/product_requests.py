from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from dabs_site.schemas.request import NOT_PROVIDED, ProductRequestSubmission, RequestRecord
from dabs_site.services.exceptions import (
    DownstreamServiceError,
    ServiceError,
    ValidationFailedError,
)
from dabs_site.services.submission import SubmissionDispatcher

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("city", "store", "product")


class ProductRequestService:
    """Validates "request Dabs at your store" submissions and forwards them."""

    def __init__(
        self,
        dispatcher: SubmissionDispatcher,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def compose(self, submission: ProductRequestSubmission) -> RequestRecord:
        values = {name: _clean(getattr(submission, name)) for name in REQUIRED_FIELDS}
        if not all(values.values()):
            raise ValidationFailedError("Missing required fields: city, store, product")

        now = self._clock()
        return RequestRecord(
            timestamp=_clean(submission.timestamp) or utc_iso(now),
            city=values["city"],
            store=values["store"],
            product=values["product"],
            email=_clean(submission.email) or NOT_PROVIDED,
            instagram=_clean(submission.instagram) or NOT_PROVIDED,
            date=_clean(submission.date) or display_date(now),
            status="New",
        )

    async def submit(self, submission: ProductRequestSubmission) -> RequestRecord:
        record = self.compose(submission)
        logger.info("Forwarding product request for %s at %s", record.product, record.store)
        payload: Dict[str, Any] = record.model_dump()
        try:
            await self._dispatcher.deliver(payload)
        except ServiceError as exc:
            raise DownstreamServiceError("Failed to submit request", cause=exc) from exc
        return record


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def utc_iso(moment: datetime) -> str:
    # Millisecond precision with a Z suffix, e.g. 2026-10-18T04:30:00.000Z
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def display_date(moment: datetime) -> str:
    return f"{moment.month}/{moment.day}/{moment.year}"
