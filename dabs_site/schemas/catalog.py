from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ProductDetail(BaseModel):
    """Content shown in the product detail modal."""

    slug: str
    title: str
    badge: str
    description: str
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class StrainSlide(BaseModel):
    position: int
    strain_index: int
    name: str
    image: str
    fallback_image: str
    is_clone: bool = False


class CarouselFrame(BaseModel):
    index: int
    offset: float
    animate: bool
    real_index: int


class CarouselTrack(BaseModel):
    cards_per_view: int
    autoplay_interval_ms: int
    slides: List[StrainSlide] = Field(default_factory=list)
    frame: CarouselFrame
