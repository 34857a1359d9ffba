from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from dabs_site.schemas.store import MapView, StoreCard, StoreLocatorResponse, StoreRecord
from dabs_site.services.exceptions import ValidationFailedError

EARTH_RADIUS_MILES = 3959.0
ZIP_RESULT_ZOOM = 12
BOUNDS_PADDING = 0.1
NO_ZIP_MATCH_NOTICE = "No stores found in that ZIP code. Showing all stores."

_ZIP_PATTERN = re.compile(r"^\d{5}$")
_NON_DIGIT = re.compile(r"\D")


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in miles."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def phone_href(phone: str) -> str:
    return f"tel:{_NON_DIGIT.sub('', phone or '')}"


def directions_url(store: StoreRecord) -> str:
    return f"https://www.google.com/maps/dir/?api=1&destination={store.lat},{store.lng}"


def store_count_label(count: int) -> str:
    return f"{count} store{'' if count == 1 else 's'}"


@dataclass
class LocatorResult:
    stores: List[StoreRecord]
    notice: Optional[str] = None
    focus: Optional[StoreRecord] = None


class StoreLocator:
    """Filtering, distance and map-view logic over a snapshot of stores."""

    def __init__(
        self,
        stores: Sequence[StoreRecord],
        *,
        default_center: Tuple[float, float],
        default_zoom: int,
        user_location: Optional[Tuple[float, float]] = None,
    ) -> None:
        self._stores = list(stores)
        self._default_center = default_center
        self._default_zoom = default_zoom
        self._user_location = user_location

    @property
    def stores(self) -> List[StoreRecord]:
        return list(self._stores)

    def filter_by_state(self, state: Optional[str], stores: Optional[Sequence[StoreRecord]] = None) -> LocatorResult:
        pool = list(self._stores if stores is None else stores)
        if not state:
            return LocatorResult(stores=pool)
        return LocatorResult(stores=[store for store in pool if store.state == state])

    def search_by_zip(self, zip_code: Optional[str], stores: Optional[Sequence[StoreRecord]] = None) -> LocatorResult:
        zip_code = (zip_code or "").strip()
        if not _ZIP_PATTERN.match(zip_code):
            raise ValidationFailedError("Please enter a valid 5-digit ZIP code")

        pool = list(self._stores if stores is None else stores)
        matches = [store for store in pool if store.zip == zip_code]
        if not matches:
            return LocatorResult(stores=pool, notice=NO_ZIP_MATCH_NOTICE)
        return LocatorResult(stores=matches, focus=matches[0])

    def distance_to(self, store: StoreRecord) -> Optional[float]:
        if self._user_location is None:
            return None
        lat, lng = self._user_location
        return haversine_miles(lat, lng, store.lat, store.lng)

    def locate(
        self,
        *,
        state: Optional[str] = None,
        zip_code: Optional[str] = None,
        sort_by_distance: bool = True,
    ) -> StoreLocatorResponse:
        result = self.filter_by_state(state)
        if zip_code:
            result = self.search_by_zip(zip_code, result.stores)
        return self.render(result, sort_by_distance=sort_by_distance)

    def render(self, result: LocatorResult, *, sort_by_distance: bool = True) -> StoreLocatorResponse:
        annotated = [(store, self.distance_to(store)) for store in result.stores]
        if sort_by_distance and self._user_location is not None:
            annotated.sort(key=lambda item: item[1])

        cards = [
            StoreCard(
                index=index,
                store=store,
                distance_miles=distance,
                distance_label=f"{distance:.1f} miles away" if distance is not None else None,
                phone_href=phone_href(store.phone),
                directions_url=directions_url(store),
            )
            for index, (store, distance) in enumerate(annotated)
        ]
        return StoreLocatorResponse(
            total=len(cards),
            count_label=store_count_label(len(cards)),
            cards=cards,
            map=self.map_view(result),
            notice=result.notice,
        )

    def map_view(self, result: LocatorResult) -> MapView:
        if result.focus is not None:
            return MapView(center=(result.focus.lat, result.focus.lng), zoom=ZIP_RESULT_ZOOM)
        if not result.stores:
            return MapView(center=self._default_center, zoom=self._default_zoom)

        lats = [store.lat for store in result.stores]
        lngs = [store.lng for store in result.stores]
        south, north = min(lats), max(lats)
        west, east = min(lngs), max(lngs)
        lat_pad = (north - south) * BOUNDS_PADDING
        lng_pad = (east - west) * BOUNDS_PADDING
        bounds = ((south - lat_pad, west - lng_pad), (north + lat_pad, east + lng_pad))
        center = ((south + north) / 2, (west + east) / 2)
        return MapView(center=center, bounds=bounds)
