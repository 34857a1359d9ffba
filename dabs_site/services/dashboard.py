from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import dateparser

from dabs_site.schemas.dashboard import (
    ChartBar,
    DashboardCharts,
    DashboardResponse,
    DashboardRow,
    DashboardStats,
    EmailPreview,
    FilterOptions,
    RankedCount,
)
from dabs_site.schemas.request import NOT_PROVIDED, RequestRecord
from dabs_site.services.demo_data import demo_requests
from dabs_site.services.requests import RequestListingService

logger = logging.getLogger(__name__)

LOCAL_HOSTS = frozenset({"", "localhost", "127.0.0.1"})
CHART_LIMIT = 10
EMAIL_PREVIEW_LIMIT = 5
MIN_BAR_WIDTH = 8.0
SEARCH_FIELDS = ("city", "store", "product", "email", "instagram", "date")


def parse_moment(value: str) -> Optional[datetime]:
    """Parse an ISO timestamp or a display date; naive results are local time."""

    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = dateparser.parse(text, languages=["en"], settings={"DATE_ORDER": "MDY"})
    if parsed is None:
        return None
    return parsed.astimezone()


def request_moment(record: RequestRecord) -> Optional[datetime]:
    return parse_moment(record.timestamp) or parse_moment(record.date)


def count_by(records: Iterable[RequestRecord], field: str) -> List[RankedCount]:
    """Frequency table for ``field``, most common first.

    Empty values count as "Unknown". Equal counts keep the order in which the
    values were first seen.
    """

    counts = Counter(getattr(record, field) or "Unknown" for record in records)
    return [RankedCount(label=label, count=count) for label, count in counts.most_common()]


def chart_bars(ranked: Sequence[RankedCount], limit: int = CHART_LIMIT) -> List[ChartBar]:
    if not ranked:
        return []
    top = ranked[0].count
    return [
        ChartBar(
            label=entry.label,
            count=entry.count,
            width_percent=max(entry.count / top * 100, MIN_BAR_WIDTH),
        )
        for entry in ranked[:limit]
    ]


def first_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def count_this_month(records: Iterable[RequestRecord], now: datetime) -> int:
    start = first_of_month(now)
    total = 0
    for record in records:
        moment = request_moment(record)
        if moment is not None and moment >= start:
            total += 1
    return total


def compute_stats(records: Sequence[RequestRecord], now: datetime) -> DashboardStats:
    return DashboardStats(
        total_requests=len(records),
        this_month_requests=count_this_month(records, now),
        unique_stores=len({record.store for record in records}),
        unique_cities=len({record.city for record in records}),
    )


def filter_options(records: Sequence[RequestRecord]) -> FilterOptions:
    return FilterOptions(
        cities=sorted({record.city for record in records}),
        products=sorted({record.product for record in records}),
    )


def apply_filters(
    records: Iterable[RequestRecord],
    *,
    search: Optional[str] = None,
    city: Optional[str] = None,
    product: Optional[str] = None,
) -> List[RequestRecord]:
    needle = (search or "").lower()
    matched: List[RequestRecord] = []
    for record in records:
        if city and record.city != city:
            continue
        if product and record.product != product:
            continue
        if needle:
            haystack = " ".join(getattr(record, name) for name in SEARCH_FIELDS).lower()
            if needle not in haystack:
                continue
        matched.append(record)
    return matched


def newest_first(records: Iterable[RequestRecord]) -> List[RequestRecord]:
    def sort_key(record: RequestRecord) -> Tuple[int, float]:
        moment = request_moment(record)
        if moment is None:
            return (1, 0.0)
        return (0, -moment.timestamp())

    return sorted(records, key=sort_key)


def format_contact(email: str, instagram: str) -> List[str]:
    parts: List[str] = []
    if email and email != NOT_PROVIDED:
        parts.append(email)
    if instagram and instagram != NOT_PROVIDED:
        parts.append("@" + instagram.replace("@", ""))
    return parts


def email_preview(records: Sequence[RequestRecord], now: datetime) -> EmailPreview:
    lines = [
        f"{entry.label} - {entry.count} request{'' if entry.count == 1 else 's'}"
        for entry in count_by(records, "product")[:EMAIL_PREVIEW_LIMIT]
    ]
    return EmailPreview(product_lines=lines, this_month_count=count_this_month(records, now))


class DashboardService:
    """Builds the product-request dashboard from the listing or demo data."""

    def __init__(
        self,
        listing: RequestListingService | None,
        *,
        demo_mode: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._listing = listing
        self._demo_mode = demo_mode
        self._clock = clock or (lambda: datetime.now().astimezone())

    def uses_demo_data(self, host: Optional[str]) -> bool:
        return self._demo_mode or (host or "") in LOCAL_HOSTS

    async def load(self, host: Optional[str]) -> Tuple[List[RequestRecord], bool]:
        if self.uses_demo_data(host):
            logger.info("DEV MODE - using demo data for host %r", host)
            return demo_requests(self._clock()), True
        if self._listing is None:
            raise RuntimeError("Request listing not configured")
        return await self._listing.list_requests(), False

    def summarize(
        self,
        records: Sequence[RequestRecord],
        *,
        demo: bool = False,
        search: Optional[str] = None,
        city: Optional[str] = None,
        product: Optional[str] = None,
    ) -> DashboardResponse:
        now = self._clock()
        filtered = apply_filters(records, search=search, city=city, product=product)
        rows = [
            DashboardRow(
                record=record,
                contact=format_contact(record.email, record.instagram),
                status_class="status-new" if record.status == "New" else "status-contacted",
            )
            for record in newest_first(filtered)
        ]
        return DashboardResponse(
            demo=demo,
            stats=compute_stats(records, now),
            charts=DashboardCharts(
                by_store=chart_bars(count_by(records, "store")),
                by_city=chart_bars(count_by(records, "city")),
                by_product=chart_bars(count_by(records, "product")),
            ),
            filters=filter_options(records),
            rows=rows,
            email_preview=email_preview(records, now),
            search=search or None,
            city=city or None,
            product=product or None,
        )

    async def build(
        self,
        host: Optional[str],
        *,
        search: Optional[str] = None,
        city: Optional[str] = None,
        product: Optional[str] = None,
    ) -> DashboardResponse:
        records, demo = await self.load(host)
        return self.summarize(records, demo=demo, search=search, city=city, product=product)
