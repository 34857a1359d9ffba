from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from dabs_site.schemas.request import NOT_PROVIDED, RequestRecord
from dabs_site.services.product_requests import display_date, utc_iso

_DEMO_ROWS = [
    ("Portland", "Green Leaf Dispensary", "Live Rosin", "demo@test.com", "user1", "New"),
    ("Portland", "Green Leaf Dispensary", "All-In-One Vapes", NOT_PROVIDED, "user2", "New"),
    ("Eugene", "Herbal Connection", "Live Rosin", "demo2@test.com", NOT_PROVIDED, "New"),
    ("Bend", "Mountain High", "Badder", NOT_PROVIDED, "dabfan", "Contacted"),
    ("Portland", "Rose City Cannabis", "Live Rosin", "fan@test.com", NOT_PROVIDED, "New"),
]


def demo_requests(now: datetime | None = None) -> List[RequestRecord]:
    """Fixed product requests shown by the dashboard on local hosts."""

    now = now or datetime.now(timezone.utc)
    return [
        RequestRecord(
            timestamp=utc_iso(now),
            city=city,
            store=store,
            product=product,
            email=email,
            instagram=instagram,
            date=display_date(now),
            status=status,
        )
        for city, store, product, email, instagram, status in _DEMO_ROWS
    ]
