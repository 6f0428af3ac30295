"""
OpenFoodFacts product source.

Looks a barcode up on the regional OpenFoodFacts databases, preferred
region first, through the retrying fetch executor.
"""

from typing import Optional

import aiohttp
import structlog

from upc_resolution.domain.openfoodfacts.mapper import OpenFoodFactsMapper
from upc_resolution.domain.openfoodfacts.models import OFFProduct
from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    NoMatch,
    NoMatchReason,
    NormalizedProduct,
    ProviderMatch,
    ResolutionRequest,
    SourceName,
    SourceOutcome,
)
from upc_resolution.domain.shared.errors import SourceExhaustedError
from upc_resolution.infrastructure.http.endpoints import EndpointSelector
from upc_resolution.infrastructure.http.retrying_fetch import (
    FetchResponse,
    RetryingFetchExecutor,
)
from upc_resolution.infrastructure.http.session import (
    raise_for_status,
    session_scope,
)

logger = structlog.get_logger(__name__)


class OpenFoodFactsSource:
    """OpenFoodFacts adapter implementing IProductSource.

    Example:
        >>> source = OpenFoodFactsSource()
        >>> # outcome = await source.resolve(request)
    """

    USER_AGENT = "upc-resolution/1.0"

    def __init__(
        self,
        endpoint_selector: Optional[EndpointSelector] = None,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        """Initialize source.

        Args:
            endpoint_selector: Region-aware endpoint ordering
            session: Shared aiohttp session (one per call if omitted)
            user_agent: User-Agent header sent upstream
        """
        self._selector = endpoint_selector or EndpointSelector()
        self._session = session
        self.user_agent = user_agent or self.USER_AGENT

    @property
    def name(self) -> SourceName:
        return SourceName.OPENFOODFACTS

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            "Cache-Control": "no-cache",
        }

    @staticmethod
    def accept(response: FetchResponse) -> bool:
        """A hit is HTTP 200 with a known product."""
        if response.status != 200 or not isinstance(response.payload, dict):
            return False
        return OpenFoodFactsMapper.parse_product_response(response.payload).is_found()

    async def resolve(self, request: ResolutionRequest) -> SourceOutcome:
        """Look a barcode up on OpenFoodFacts.

        Args:
            request: Validated resolution request

        Returns:
            ProviderMatch carrying an OFFProduct, or NoMatch
        """
        code = request.code.value
        endpoints = self._selector.select_endpoints(self.name, request.region_hint)
        executor = RetryingFetchExecutor.for_request(self.name, request)
        timeout = aiohttp.ClientTimeout(total=request.per_attempt_timeout_seconds)

        async with session_scope(self._session, self.user_agent) as session:

            async def fetch(endpoint: str) -> FetchResponse:
                url = f"{endpoint}/{code}.json"
                async with session.get(url, headers=self.headers, timeout=timeout) as response:
                    if response.status == 404:
                        # OFF answers unknown products with 404
                        return FetchResponse(status=404, payload=None, url=url)

                    raise_for_status("OpenFoodFacts", response.status)

                    data = await response.json(content_type=None)
                    return FetchResponse(status=response.status, payload=data, url=url)

            try:
                success = await executor.attempt(endpoints, fetch, self.accept)
            except SourceExhaustedError as e:
                reason = NoMatchReason.NOT_FOUND if e.definitive_miss else NoMatchReason.UNAVAILABLE
                logger.info(
                    "Product not found in OFF",
                    barcode=code,
                    reason=reason.value,
                    attempts=len(e.attempts),
                )
                return NoMatch(
                    source_name=self.name,
                    reason=reason,
                    detail=str(e),
                    attempts=e.attempts,
                )

        result = OpenFoodFactsMapper.parse_product_response(success.response.payload)
        product = result.product
        assert product is not None  # guaranteed by accept()

        logger.info(
            "Product found in OFF",
            barcode=code,
            name=product.product_name,
            endpoint=success.endpoint_used,
            regional_match=success.regional_match,
        )

        return ProviderMatch(
            source_name=self.name,
            code=code,
            payload=product,
            category_signal=product.categories_tags or product.categories,
            endpoint_used=success.endpoint_used,
            regional_match=success.regional_match,
            attempts=success.attempts,
        )

    def to_product(self, match: ProviderMatch, category: CanonicalCategory) -> NormalizedProduct:
        """Convert an OFF match to the canonical product."""
        product: OFFProduct = match.payload
        return OpenFoodFactsMapper.to_normalized_product(
            product,
            code=match.code,
            category=category,
            endpoint_used=match.endpoint_used,
            regional_match=match.regional_match,
        )
