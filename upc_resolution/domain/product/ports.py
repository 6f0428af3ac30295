"""
Ports (Interfaces) for product sources.

Every data source the resolution orchestrator queries implements
IProductSource. The orchestrator depends on this port only, never on a
concrete adapter.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import Protocol, runtime_checkable

from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    NormalizedProduct,
    ProviderMatch,
    ResolutionRequest,
    SourceName,
    SourceOutcome,
)


@runtime_checkable
class IProductSource(Protocol):
    """
    Port for a product data source.

    Implementations: OpenFoodFacts, USDA FoodData Central, static
    fallback catalog.
    """

    @property
    def name(self) -> SourceName:
        """Source identifier reported in results and diagnostics."""
        ...

    async def resolve(self, request: ResolutionRequest) -> SourceOutcome:
        """
        Look up one clean barcode.

        Args:
            request: Validated resolution request

        Returns:
            ProviderMatch with the provider-native payload, or a typed
            NoMatch (not found, unavailable, not configured)

        Transport failures are retried internally and never raised.
        """
        ...

    def to_product(self, match: ProviderMatch, category: CanonicalCategory) -> NormalizedProduct:
        """
        Convert this source's payload to the canonical product.

        Args:
            match: ProviderMatch previously returned by resolve()
            category: Canonical category mapped from match.category_signal

        Returns:
            NormalizedProduct
        """
        ...
