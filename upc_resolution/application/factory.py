"""Assembly of the default resolution pipeline."""

from typing import Optional

import aiohttp

from upc_resolution.application.resolution_service import ProductResolutionService
from upc_resolution.config import ResolverSettings
from upc_resolution.infrastructure.fallback.catalog import StaticFallbackCatalog
from upc_resolution.infrastructure.http.endpoints import EndpointSelector
from upc_resolution.infrastructure.openfoodfacts.source import OpenFoodFactsSource
from upc_resolution.infrastructure.usda.source import USDASource


def build_resolution_service(
    settings: Optional[ResolverSettings] = None,
    session: Optional[aiohttp.ClientSession] = None,
    fallback_catalog: Optional[StaticFallbackCatalog] = None,
) -> ProductResolutionService:
    """Build OpenFoodFacts -> USDA -> fallback catalog.

    Args:
        settings: Engine settings (defaults when omitted)
        session: Shared aiohttp session; sources open one per call otherwise
        fallback_catalog: Catalog override (built-in table by default)

    Returns:
        Ready-to-use ProductResolutionService
    """
    settings = settings or ResolverSettings()
    selector = EndpointSelector()

    sources = [
        OpenFoodFactsSource(
            endpoint_selector=selector,
            session=session,
            user_agent=settings.user_agent,
        ),
        USDASource(
            api_key=settings.usda_api_key,
            endpoint_selector=selector,
            session=session,
            user_agent=settings.user_agent,
            allow_approximate_match=settings.allow_approximate_usda_match,
        ),
        fallback_catalog or StaticFallbackCatalog(),
    ]

    return ProductResolutionService(
        sources,
        max_retries_per_source=settings.max_retries,
        per_attempt_timeout_seconds=settings.per_attempt_timeout_seconds,
        backoff_seconds=settings.backoff_seconds,
        default_region_hint=settings.default_region_hint,
    )
