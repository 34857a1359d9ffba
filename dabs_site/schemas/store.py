from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class StoreRecord(BaseModel):
    """A retail location as listed in the Stores tab."""

    state: str = ""
    name: str = ""
    address: str = ""
    city: str = ""
    zip: str = ""
    phone: str = ""
    lat: float
    lng: float


class StoreCard(BaseModel):
    index: int
    store: StoreRecord
    distance_miles: Optional[float] = None
    distance_label: Optional[str] = None
    phone_href: str
    directions_url: str


class MapView(BaseModel):
    center: Tuple[float, float]
    zoom: Optional[int] = None
    bounds: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None


class StoreLocatorResponse(BaseModel):
    total: int
    count_label: str
    cards: List[StoreCard] = Field(default_factory=list)
    map: MapView
    notice: Optional[str] = None
    last_refreshed: Optional[str] = None
