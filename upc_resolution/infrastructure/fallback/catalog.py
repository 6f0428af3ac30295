"""
Static fallback catalog.

A small, read-only table of products known to be missing from the public
databases. Keyed by exact clean barcode; no I/O.
"""

from types import MappingProxyType
from typing import Mapping, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    NoMatch,
    NoMatchReason,
    NormalizedProduct,
    NutritionPer100,
    ProviderMatch,
    ResolutionRequest,
    SourceName,
    SourceOutcome,
)

logger = structlog.get_logger(__name__)


class FallbackProduct(BaseModel):
    """One curated catalog entry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    brand: str = ""
    category: CanonicalCategory = CanonicalCategory.OTHER
    nutrition: NutritionPer100 = Field(default_factory=NutritionPer100)
    quantity_text: str = ""


_ENCHILADA_SAUCE = FallbackProduct(
    name="Old El Paso Medium Red Enchilada Sauce",
    brand="Old El Paso",
    category=CanonicalCategory.CANNED_SAUCES,
    nutrition=NutritionPer100(
        energy_kcal=42, protein=1.0, carbohydrates=8.3, fat=0.8, sodium_mg=890
    ),
    quantity_text="10 oz",
)

DEFAULT_FALLBACK_PRODUCTS: Mapping[str, FallbackProduct] = MappingProxyType(
    {
        # Printed as UPC-A; also seen as a 13-digit scan
        "046000861210": _ENCHILADA_SAUCE,
        "0046000861210": _ENCHILADA_SAUCE,
        "071592007746": FallbackProduct(
            name="Pennsylvania Dutchman Mushrooms Stems and Pieces",
            brand="Pennsylvania Dutchman",
            category=CanonicalCategory.CANNED_VEGETABLES,
            nutrition=NutritionPer100(
                energy_kcal=22, protein=3.1, carbohydrates=3.3, fat=0.3, sodium_mg=400
            ),
        ),
        "193476002156": FallbackProduct(
            name="That's Smart! Fruit Cocktail in Light Syrup",
            brand="That's Smart!",
            category=CanonicalCategory.CANNED_FRUIT,
            nutrition=NutritionPer100(
                energy_kcal=60, protein=0.4, carbohydrates=15.0, fat=0.0, sodium_mg=10
            ),
        ),
        "0064144282432": FallbackProduct(
            name="Campbell's Condensed Tomato Soup",
            brand="Campbell's",
            category=CanonicalCategory.SOUPS,
            nutrition=NutritionPer100(
                energy_kcal=67, protein=1.8, carbohydrates=13.3, fat=0.9, sodium_mg=356
            ),
        ),
    }
)


class StaticFallbackCatalog:
    """Offline catalog implementing IProductSource.

    Example:
        >>> catalog = StaticFallbackCatalog()
        >>> assert "071592007746" in catalog
    """

    def __init__(self, products: Optional[Mapping[str, FallbackProduct]] = None) -> None:
        """Initialize catalog.

        Args:
            products: Entries keyed by clean barcode (defaults to the
                built-in table)
        """
        source = DEFAULT_FALLBACK_PRODUCTS if products is None else products
        self._products: Mapping[str, FallbackProduct] = MappingProxyType(dict(source))

    @property
    def name(self) -> SourceName:
        return SourceName.FALLBACK

    def __contains__(self, code: object) -> bool:
        return code in self._products

    def __len__(self) -> int:
        return len(self._products)

    async def resolve(self, request: ResolutionRequest) -> SourceOutcome:
        """Exact-code lookup in the catalog."""
        code = request.code.value
        product = self._products.get(code)

        if product is None:
            return NoMatch(
                source_name=self.name,
                reason=NoMatchReason.NOT_FOUND,
                detail="Not in fallback catalog",
            )

        logger.info("Product found in fallback catalog", barcode=code, name=product.name)

        return ProviderMatch(
            source_name=self.name,
            code=code,
            payload=product,
            category_signal=product.category.value,
        )

    def to_product(self, match: ProviderMatch, category: CanonicalCategory) -> NormalizedProduct:
        """Convert a catalog entry to the canonical product."""
        product: FallbackProduct = match.payload
        return NormalizedProduct(
            code=match.code,
            name=product.name,
            brand=product.brand,
            category=category,
            nutrition_per_100=product.nutrition,
            quantity_text=product.quantity_text,
            source_name=self.name,
        )
