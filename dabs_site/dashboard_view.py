"""Server-rendered product request dashboard."""
from __future__ import annotations

import html
import logging
from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from dabs_site.dependencies.services import get_dashboard_service
from dabs_site.schemas.dashboard import ChartBar, DashboardResponse, DashboardRow
from dabs_site.services.dashboard import DashboardService
from dabs_site.services.exceptions import ServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

EMPTY_CHART = '<div class="empty-state"><div class="empty-state-icon">📭</div><p>No data yet</p></div>'
EMPTY_TABLE = (
    '<tr><td colspan="6" class="empty-state"><div class="empty-state-icon">📭</div>'
    "<p>No requests found</p></td></tr>"
)
FAILED_TABLE = '<tr><td colspan="6" class="empty-state">Failed to load data. Try refreshing.</td></tr>'

_STYLE = """
    body { font-family: Arial, sans-serif; margin: 2rem; background: #111; color: #fff; }
    h1 { text-align: center; }
    .stats { display: flex; gap: 1rem; margin-bottom: 2rem; }
    .stat { flex: 1; background: #1d1d1d; padding: 1rem; border-radius: 8px; text-align: center; }
    .stat strong { display: block; font-size: 2rem; color: #FFB700; }
    .charts { display: grid; grid-template-columns: repeat(3, 1fr); gap: 1rem; }
    .chart-bar { margin-bottom: 0.75rem; }
    .chart-bar-label { display: flex; justify-content: space-between; font-size: 0.9rem; }
    .chart-bar-fill { height: 8px; background: #FFB700; border-radius: 4px; }
    table { border-collapse: collapse; width: 100%; margin-top: 2rem; }
    th, td { border: 1px solid #333; padding: 0.5rem; text-align: left; }
    .status-badge { padding: 0.3rem 0.75rem; border-radius: 50px; font-size: 0.8rem; font-weight: 700; text-transform: uppercase; }
    .status-new { background: #FFB700; color: #000; }
    .status-contacted { background: rgba(76, 175, 80, 0.2); color: #4CAF50; border: 1px solid rgba(76, 175, 80, 0.4); }
    .contact-ig { color: #FFB700; }
    .contact-none { color: rgba(255,255,255,0.3); }
    .empty-state { text-align: center; color: rgba(255,255,255,0.6); }
"""


def _e(value: object) -> str:
    return html.escape(str(value))


def render_chart(title: str, bars: Iterable[ChartBar]) -> str:
    bar_list = list(bars)
    body = EMPTY_CHART
    if bar_list:
        body = "".join(
            '<div class="chart-bar">'
            f'<div class="chart-bar-label"><span>{_e(bar.label)}</span><span>{bar.count}</span></div>'
            f'<div class="chart-bar-fill" style="width: {bar.width_percent:g}%"></div>'
            "</div>"
            for bar in bar_list
        )
    return f"<section><h2>{_e(title)}</h2>{body}</section>"


def render_contact(row: DashboardRow) -> str:
    if not row.contact:
        return '<span class="contact-none">—</span>'
    parts = []
    for item in row.contact:
        css = "contact-ig" if item.startswith("@") else "contact-email"
        parts.append(f'<span class="{css}">{_e(item)}</span>')
    return "<br>".join(parts)


def render_rows(rows: List[DashboardRow]) -> str:
    if not rows:
        return EMPTY_TABLE
    return "".join(
        "<tr>"
        f"<td>{_e(row.record.date)}</td>"
        f"<td>{_e(row.record.city)}</td>"
        f"<td>{_e(row.record.store)}</td>"
        f"<td>{_e(row.record.product)}</td>"
        f"<td>{render_contact(row)}</td>"
        f'<td><span class="status-badge {row.status_class}">{_e(row.record.status)}</span></td>'
        "</tr>"
        for row in rows
    )


def _options(label: str, values: Iterable[str], selected: Optional[str]) -> str:
    options = [f'<option value="">{_e(label)}</option>']
    for value in values:
        marker = " selected" if value == selected else ""
        options.append(f'<option value="{_e(value)}"{marker}>{_e(value)}</option>')
    return "".join(options)


def render_dashboard(data: Optional[DashboardResponse]) -> str:
    if data is None:
        stats_html = charts_html = preview_html = filters_html = ""
        rows_html = FAILED_TABLE
    else:
        stats = data.stats
        stats_html = (
            '<div class="stats">'
            f'<div class="stat"><strong id="totalRequests">{stats.total_requests}</strong>Total Requests</div>'
            f'<div class="stat"><strong id="thisMonthRequests">{stats.this_month_requests}</strong>This Month</div>'
            f'<div class="stat"><strong id="uniqueStores">{stats.unique_stores}</strong>Stores</div>'
            f'<div class="stat"><strong id="uniqueCities">{stats.unique_cities}</strong>Cities</div>'
            "</div>"
        )
        charts_html = (
            '<div class="charts">'
            + render_chart("Requests by Store", data.charts.by_store)
            + render_chart("Requests by City", data.charts.by_city)
            + render_chart("Requests by Product", data.charts.by_product)
            + "</div>"
        )
        filters_html = (
            '<form method="get" action="/dashboard">'
            f'<input type="search" name="search" placeholder="Search requests" value="{_e(data.search or "")}">'
            f'<select name="city">{_options("All Cities", data.filters.cities, data.city)}</select>'
            f'<select name="product">{_options("All Products", data.filters.products, data.product)}</select>'
            '<button type="submit">Filter</button> <a href="/dashboard">Refresh</a>'
            "</form>"
        )
        lines = data.email_preview.product_lines or ["No requests yet"]
        preview_html = (
            "<section><h2>Store Email Preview</h2>"
            f'<p><span class="highlight-count">{data.email_preview.this_month_count}</span> requests this month</p>'
            "<ul>" + "".join(f"<li>{_e(line)}</li>" for line in lines) + "</ul></section>"
        )
        rows_html = render_rows(data.rows)

    banner = '<p class="empty-state">Demo data</p>' if data is not None and data.demo else ""
    return f"""
    <html>
        <head>
            <title>Dabs Product Requests</title>
            <style>{_STYLE}</style>
        </head>
        <body>
            <h1>Dabs Product Requests</h1>
            {banner}
            {stats_html}
            {charts_html}
            {filters_html}
            <table>
                <thead><tr><th>Date</th><th>City</th><th>Store</th><th>Product</th><th>Contact</th><th>Status</th></tr></thead>
                <tbody id="requestsTableBody">{rows_html}</tbody>
            </table>
            {preview_html}
        </body>
    </html>
    """


@router.get("/dashboard", response_class=HTMLResponse)
async def view_dashboard(
    request: Request,
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    product: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service),
) -> HTMLResponse:
    """Render stats, bar charts and the filtered request table."""
    try:
        data = await service.build(
            request.url.hostname, search=search, city=city, product=product
        )
    except ServiceError as exc:
        logger.error("Failed to load dashboard data: %s", exc)
        return HTMLResponse(content=render_dashboard(None), status_code=500)
    return HTMLResponse(content=render_dashboard(data))

