from typing import List

from fastapi import APIRouter, HTTPException

from dabs_site.schemas.catalog import CarouselTrack, ProductDetail
from dabs_site.services.carousel import StrainCarousel
from dabs_site.services.catalog import get_product, list_products
from dabs_site.services.exceptions import ServiceError

router = APIRouter()


@router.get("/products", response_model=List[ProductDetail])
async def products():
    return list_products()


@router.get("/products/{slug}", response_model=ProductDetail)
async def product_detail(slug: str):
    try:
        return get_product(slug)
    except ServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.get("/strains", response_model=CarouselTrack)
async def strain_carousel():
    return StrainCarousel().track()
