"""
USDA FoodData Central product source.

Searches branded foods by GTIN-14, keeps only exact GTIN matches, then
fetches the food detail for the full nutrient panel. Without an API key
the source reports itself as not configured and makes no network call.
"""

import asyncio
import time
from typing import Any, Optional

import aiohttp
import structlog

from upc_resolution.domain.barcode.gtin import to_gtin14
from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    AttemptOutcome,
    NoMatch,
    NoMatchReason,
    NormalizedProduct,
    ProviderMatch,
    ResolutionRequest,
    SourceAttemptRecord,
    SourceName,
    SourceOutcome,
)
from upc_resolution.domain.shared.errors import (
    ExternalServiceError,
    SourceExhaustedError,
)
from upc_resolution.domain.usda.mapper import USDAMapper
from upc_resolution.domain.usda.models import USDAFoodItem, USDASearchResult
from upc_resolution.infrastructure.http.endpoints import (
    USDA_BASE_URL,
    EndpointSelector,
)
from upc_resolution.infrastructure.http.retrying_fetch import (
    FetchResponse,
    RetryingFetchExecutor,
)
from upc_resolution.infrastructure.http.session import (
    raise_for_status,
    session_scope,
)

logger = structlog.get_logger(__name__)


class USDASource:
    """USDA FoodData Central adapter implementing IProductSource.

    Example:
        >>> source = USDASource(api_key=None)
        >>> # await source.resolve(request) -> NoMatch(NOT_CONFIGURED)
    """

    USER_AGENT = "upc-resolution/1.0"
    SEARCH_PATH = "/foods/search"
    FOOD_PATH = "/food"
    PAGE_SIZE = 5

    def __init__(
        self,
        api_key: Optional[str],
        endpoint_selector: Optional[EndpointSelector] = None,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: Optional[str] = None,
        allow_approximate_match: bool = False,
    ) -> None:
        """Initialize source.

        Args:
            api_key: USDA API key (None disables the source)
            endpoint_selector: Endpoint table
            session: Shared aiohttp session (one per call if omitted)
            user_agent: User-Agent header sent upstream
            allow_approximate_match: Use the first search result when no
                GTIN matches exactly
        """
        self.api_key = api_key or None
        self._selector = endpoint_selector or EndpointSelector()
        self._session = session
        self.user_agent = user_agent or self.USER_AGENT
        self.allow_approximate_match = allow_approximate_match

    @property
    def name(self) -> SourceName:
        return SourceName.USDA

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}

    def _search_params(self, gtin14: str) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "query": gtin14,
            "dataType": "Branded",
            "pageSize": self.PAGE_SIZE,
            "sortBy": "dataType.keyword",
            "sortOrder": "asc",
        }

    def _pick(self, search: USDASearchResult, gtin14: str, code: str) -> tuple[Optional[USDAFoodItem], bool]:
        """Return (food, approximate) for a search result."""
        exact = USDAMapper.find_exact_match(search, gtin14, code)
        if exact is not None:
            return exact, False
        if self.allow_approximate_match and search.foods:
            return search.foods[0], True
        return None, False

    async def resolve(self, request: ResolutionRequest) -> SourceOutcome:
        """Look a barcode up on USDA FoodData Central.

        Args:
            request: Validated resolution request

        Returns:
            ProviderMatch carrying a USDAFoodItem, or NoMatch
        """
        code = request.code.value
        endpoints = self._selector.select_endpoints(self.name, request.region_hint)

        if not self.api_key:
            logger.info("USDA source not configured, skipping", barcode=code)
            return NoMatch(
                source_name=self.name,
                reason=NoMatchReason.NOT_CONFIGURED,
                detail="USDA API key not configured",
                attempts=[
                    SourceAttemptRecord(
                        source_name=self.name.value,
                        endpoint_used=endpoints[0] if endpoints else USDA_BASE_URL,
                        attempt_number=1,
                        outcome=AttemptOutcome.NOT_CONFIGURED,
                    )
                ],
            )

        gtin14 = to_gtin14(request.code)
        executor = RetryingFetchExecutor.for_request(self.name, request)
        timeout = aiohttp.ClientTimeout(total=request.per_attempt_timeout_seconds)

        def accept(response: FetchResponse) -> bool:
            if response.status != 200 or not isinstance(response.payload, dict):
                return False
            search = USDAMapper.parse_search_response(response.payload)
            food, _ = self._pick(search, gtin14, code)
            return food is not None

        async with session_scope(self._session, self.user_agent) as session:

            async def fetch(endpoint: str) -> FetchResponse:
                url = f"{endpoint}{self.SEARCH_PATH}"
                async with session.get(
                    url,
                    params=self._search_params(gtin14),
                    headers=self.headers,
                    timeout=timeout,
                ) as response:
                    if response.status == 404:
                        return FetchResponse(status=404, payload=None, url=url)

                    raise_for_status("USDA", response.status)

                    data = await response.json(content_type=None)
                    return FetchResponse(status=response.status, payload=data, url=url)

            try:
                success = await executor.attempt(endpoints, fetch, accept)
            except SourceExhaustedError as e:
                reason = NoMatchReason.NOT_FOUND if e.definitive_miss else NoMatchReason.UNAVAILABLE
                logger.info(
                    "Product not found in USDA",
                    barcode=code,
                    gtin14=gtin14,
                    reason=reason.value,
                    attempts=len(e.attempts),
                )
                return NoMatch(
                    source_name=self.name,
                    reason=reason,
                    detail=str(e),
                    attempts=e.attempts,
                )

            search = USDAMapper.parse_search_response(success.response.payload)
            food, approximate = self._pick(search, gtin14, code)
            assert food is not None  # guaranteed by accept()

            attempts = list(success.attempts)
            detail = await self._fetch_detail(
                session,
                success.endpoint_used,
                food,
                request.per_attempt_timeout_seconds,
                attempts,
            )

        logger.info(
            "Product found in USDA",
            barcode=code,
            fdc_id=food.fdc_id,
            description=food.description,
            approximate=approximate,
            detail_fetched=detail is not None,
        )

        payload = self._reconcile(food, detail)

        return ProviderMatch(
            source_name=self.name,
            code=code,
            payload=payload,
            category_signal=payload.category,
            endpoint_used=success.endpoint_used,
            regional_match=success.regional_match,
            approximate_match=approximate,
            attempts=attempts,
        )

    async def _fetch_detail(
        self,
        session: aiohttp.ClientSession,
        endpoint: str,
        food: USDAFoodItem,
        timeout_seconds: float,
        attempts: list[SourceAttemptRecord],
    ) -> Optional[USDAFoodItem]:
        """Fetch one food detail; None when it fails (never retried)."""
        url = f"{endpoint}{self.FOOD_PATH}/{food.fdc_id}"
        pass_number = max((a.attempt_number for a in attempts), default=1)
        started = time.perf_counter()
        detail: Optional[USDAFoodItem] = None

        async def get_detail() -> dict[str, Any]:
            async with session.get(
                url,
                params={"api_key": self.api_key},
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=timeout_seconds),
            ) as response:
                raise_for_status("USDA", response.status)
                return await response.json(content_type=None)

        try:
            data = await asyncio.wait_for(get_detail(), timeout=timeout_seconds)
            if isinstance(data, dict):
                detail = USDAMapper.parse_food(data)
            outcome = AttemptOutcome.SUCCESS if detail is not None else AttemptOutcome.NO_MATCH

        except asyncio.TimeoutError:
            outcome = AttemptOutcome.TIMEOUT
            logger.warning("USDA detail fetch timed out, using search record", fdc_id=food.fdc_id)

        except (aiohttp.ClientError, ExternalServiceError, ValueError) as e:
            outcome = AttemptOutcome.HTTP_ERROR
            logger.warning(
                "USDA detail fetch failed, using search record",
                fdc_id=food.fdc_id,
                error=str(e),
            )

        attempts.append(
            SourceAttemptRecord(
                source_name=self.name.value,
                endpoint_used=f"{endpoint}{self.FOOD_PATH}",
                attempt_number=pass_number,
                outcome=outcome,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
            )
        )
        return detail

    @staticmethod
    def _reconcile(food: USDAFoodItem, detail: Optional[USDAFoodItem]) -> USDAFoodItem:
        """Prefer the detail record, filling its gaps from the search record."""
        if detail is None:
            return food

        updates: dict[str, Any] = {}
        for field_name in USDAFoodItem.model_fields:
            value = getattr(detail, field_name)
            if value in (None, "", []):
                fallback = getattr(food, field_name)
                if fallback not in (None, "", []):
                    updates[field_name] = fallback

        return detail.model_copy(update=updates) if updates else detail

    def to_product(self, match: ProviderMatch, category: CanonicalCategory) -> NormalizedProduct:
        """Convert a USDA match to the canonical product."""
        food: USDAFoodItem = match.payload
        return USDAMapper.to_normalized_product(
            food,
            code=match.code,
            category=category,
            endpoint_used=match.endpoint_used,
            approximate_match=match.approximate_match,
        )
