from __future__ import annotations

from typing import Dict, List

from dabs_site.schemas.catalog import ProductDetail
from dabs_site.services.exceptions import NotFoundError

PRODUCTS: Dict[str, ProductDetail] = {
    "live-rosin": ProductDetail(
        slug="live-rosin",
        title="Live Rosin",
        badge="Premium Extract",
        description=(
            "Our signature Live Rosin is crafted from fresh-frozen cannabis flowers, "
            "preserving the full spectrum of cannabinoids and terpenes. Experience "
            "unmatched flavor and potency in every dab."
        ),
        features=[
            "Fresh-frozen whole plant extraction",
            "Solventless process - no chemicals",
            "Full-spectrum cannabinoid profile",
            "Rich terpene preservation",
            "Available in multiple strains",
            "Lab-tested for purity and potency",
        ],
        images=["assets/images/live_rosin.png", "assets/images/dabs_packaging.png"],
    ),
    "all-in-ones": ProductDetail(
        slug="all-in-ones",
        title="All-In-Ones",
        badge="Convenient & Portable",
        description=(
            "Premium live rosin in a convenient all-in-one vape. No setup, no mess - "
            "just pure, potent vapor on the go. Perfect for those who want quality "
            "without compromise."
        ),
        features=[
            "Pre-filled with live rosin concentrate",
            "Rechargeable battery included",
            "Draw-activated - no buttons",
            "Discreet and portable design",
            "1 gram capacity",
            "Multiple strain options available",
        ],
        images=["assets/images/aio.png"],
    ),
    "baller-jars": ProductDetail(
        slug="baller-jars",
        title="Live Rosin Baller Jars 14G",
        badge="Bulk Premium",
        description=(
            "For the serious concentrate connoisseur. Our 14-gram baller jars offer "
            "exceptional value without sacrificing quality. Stock up on your favorite "
            "strains and experience consistent, premium live rosin."
        ),
        features=[
            "Bulk 14-gram quantity",
            "Best value for regular consumers",
            "Same premium quality as smaller sizes",
            "Airtight preservation container",
            "Perfect for sharing or extended use",
            "Multiple strain selections",
        ],
        images=["assets/images/live_rosin2.png", "assets/images/dabs_packaging.png"],
    ),
}


def list_products() -> List[ProductDetail]:
    return list(PRODUCTS.values())


def get_product(slug: str) -> ProductDetail:
    product = PRODUCTS.get(slug.strip().lower())
    if product is None:
        raise NotFoundError("Product not found")
    return product
