from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from dabs_site.schemas.request import RequestRecord


class RankedCount(BaseModel):
    label: str
    count: int


class ChartBar(RankedCount):
    width_percent: float


class DashboardStats(BaseModel):
    total_requests: int
    this_month_requests: int
    unique_stores: int
    unique_cities: int


class DashboardCharts(BaseModel):
    by_store: List[ChartBar] = Field(default_factory=list)
    by_city: List[ChartBar] = Field(default_factory=list)
    by_product: List[ChartBar] = Field(default_factory=list)


class FilterOptions(BaseModel):
    cities: List[str] = Field(default_factory=list)
    products: List[str] = Field(default_factory=list)


class DashboardRow(BaseModel):
    record: RequestRecord
    contact: List[str] = Field(default_factory=list)
    status_class: str


class EmailPreview(BaseModel):
    product_lines: List[str] = Field(default_factory=list)
    this_month_count: int


class DashboardResponse(BaseModel):
    demo: bool = False
    stats: DashboardStats
    charts: DashboardCharts
    filters: FilterOptions
    rows: List[DashboardRow] = Field(default_factory=list)
    email_preview: EmailPreview
    search: Optional[str] = None
    city: Optional[str] = None
    product: Optional[str] = None
