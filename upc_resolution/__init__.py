"""
Multi-source product resolution engine.

Resolves a scanned barcode (UPC/EAN/GTIN) into one canonical product record
by querying OpenFoodFacts, USDA FoodData Central and a static fallback
catalog in priority order.

Structure:
- domain/: Barcode rules, product models, provider mappers (no I/O)
- infrastructure/: Endpoint selection, retrying fetch, source adapters
- application/: Resolution orchestrator
- tests/: Test suite (unit)

Example:
    >>> from upc_resolution import build_resolution_service, ResolverSettings
    >>> service = build_resolution_service(ResolverSettings())
    >>> # result = await service.resolve("071592007746", region_hint="USD")
"""

from upc_resolution.application.factory import build_resolution_service
from upc_resolution.application.resolution_service import (
    ProductResolutionService,
)
from upc_resolution.config import ResolverSettings, load_settings
from upc_resolution.domain.product.models import (
    NormalizedProduct,
    ResolutionFailure,
)

__version__ = "1.0.0"

__all__ = [
    "ProductResolutionService",
    "build_resolution_service",
    "ResolverSettings",
    "load_settings",
    "NormalizedProduct",
    "ResolutionFailure",
]
