"""
Product resolution service.

Orchestrates barcode resolution across the configured sources.

Flow:
1. Validate and normalize the raw code (invalid input stops here)
2. Detect barcode format and probable region
3. Query sources in priority order (OpenFoodFacts, USDA, fallback),
   stopping at the first match
4. Map the match's category and normalize it
5. Otherwise return a structured failure with suggestions
"""

import time
from typing import Optional, Sequence

import structlog

from upc_resolution.domain.barcode.format_detection import (
    UNKNOWN_FORMAT,
    BarcodeFormat,
    BarcodeFormatInfo,
    BarcodeRegion,
    detect_format,
)
from upc_resolution.domain.barcode.validation import validate_barcode
from upc_resolution.domain.product.categories import map_category
from upc_resolution.domain.product.models import (
    FailureReason,
    NoMatch,
    NoMatchReason,
    NormalizedProduct,
    ProviderMatch,
    ResolutionFailure,
    ResolutionRequest,
    ResolutionResult,
    ResolutionState,
    SourceAttemptRecord,
    SourceName,
    SourceOutcome,
)
from upc_resolution.domain.product.ports import IProductSource
from upc_resolution.domain.shared.errors import BarcodeValidationError
from upc_resolution.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

_STATE_FOR_SOURCE = {
    SourceName.OPENFOODFACTS: ResolutionState.TRY_OFF,
    SourceName.USDA: ResolutionState.TRY_USDA,
    SourceName.FALLBACK: ResolutionState.TRY_FALLBACK,
}

NON_US_SUGGESTION = (
    "This appears to be a non-US product. Try scanning again or check if the barcode is complete."
)
UK_SUGGESTION = "This appears to be a UK product. The item might be available in UK stores."
EAN8_SUGGESTION = "This is a short EAN-8 barcode. Try the full product barcode if available."
GENERIC_SUGGESTION = (
    "Try adding the product manually or check if the barcode is clearly visible and complete."
)
INVALID_SUGGESTION = "Check that the barcode is complete and scan it again."


def build_suggestions(
    barcode: Barcode, format_info: BarcodeFormatInfo, region_hint: str
) -> list[str]:
    """Rule-based hints for a product no source knows.

    Always returns at least one suggestion.

    Example:
        >>> from upc_resolution.domain.barcode.format_detection import detect_format
        >>> code = Barcode(value="5000000000001")
        >>> build_suggestions(code, detect_format(code), "USD")[0].startswith(
        ...     "This appears to be a non-US product"
        ... )
        True
    """
    hint = (region_hint or "").strip().upper()
    suggestions: list[str] = []

    if format_info.region != BarcodeRegion.US and hint == "USD":
        suggestions.append(NON_US_SUGGESTION)

    if format_info.region == BarcodeRegion.UK and hint != "GBP":
        suggestions.append(UK_SUGGESTION)

    # 8-digit scans are padded to UPC-A before detection
    if format_info.format == BarcodeFormat.EAN_8 or barcode.original_length == 8:
        suggestions.append(EAN8_SUGGESTION)

    if not suggestions:
        suggestions.append(GENERIC_SUGGESTION)

    return suggestions


def failure_message(code: str, format_info: BarcodeFormatInfo) -> str:
    return (
        f"Product not found in any database. UPC {code} appears to be a "
        f"{format_info.format.value} from {format_info.region.value}."
    )


class ProductResolutionService:
    """Resolves raw barcodes into canonical products.

    Sources are queried strictly in the given order; the first
    ProviderMatch wins. Source failures never reach the caller.

    Example:
        >>> from upc_resolution.infrastructure.fallback.catalog import (
        ...     StaticFallbackCatalog,
        ... )
        >>> service = ProductResolutionService([StaticFallbackCatalog()])
        >>> # result = await service.resolve("71592007746")
    """

    def __init__(
        self,
        sources: Sequence[IProductSource],
        max_retries_per_source: int = 2,
        per_attempt_timeout_seconds: float = 1.5,
        backoff_seconds: float = 0.25,
        default_region_hint: str = "USD",
    ) -> None:
        """Initialize service.

        Args:
            sources: Sources in priority order
            max_retries_per_source: Full passes per network source
            per_attempt_timeout_seconds: Deadline per fetch
            backoff_seconds: Wait between passes
            default_region_hint: Region hint when the caller gives none
        """
        self.sources = list(sources)
        self.max_retries_per_source = max_retries_per_source
        self.per_attempt_timeout_seconds = per_attempt_timeout_seconds
        self.backoff_seconds = backoff_seconds
        self.default_region_hint = default_region_hint

    async def resolve(
        self, raw_code: Optional[str], region_hint: Optional[str] = None
    ) -> ResolutionResult:
        """Resolve a raw barcode.

        Args:
            raw_code: Barcode as scanned or typed
            region_hint: Caller currency/locale hint ("USD", "GBP", ...)

        Returns:
            NormalizedProduct on a hit, ResolutionFailure otherwise
            (INVALID_FORMAT or NOT_FOUND); never raises for source errors
        """
        start_time = time.time()
        hint = region_hint or self.default_region_hint

        self._transition(ResolutionState.VALIDATING, raw_code)
        try:
            barcode = validate_barcode(raw_code)
        except BarcodeValidationError as e:
            logger.info(
                "Invalid barcode",
                raw=raw_code,
                reason=e.reason.value,
            )
            self._transition(ResolutionState.FAILED, raw_code)
            return ResolutionFailure(
                code=e.clean_code,
                reason=FailureReason.INVALID_FORMAT,
                validation_reason=e.reason,
                format_info=UNKNOWN_FORMAT,
                suggestions=[INVALID_SUGGESTION],
                message=str(e),
            )

        self._transition(ResolutionState.DETECTING, barcode.value)
        format_info = detect_format(barcode)

        request = ResolutionRequest(
            code=barcode,
            region_hint=hint,
            max_retries_per_source=self.max_retries_per_source,
            per_attempt_timeout_seconds=self.per_attempt_timeout_seconds,
            backoff_seconds=self.backoff_seconds,
        )

        logger.info(
            "Starting barcode resolution",
            barcode=barcode.value,
            format=format_info.format.value,
            region=format_info.region.value,
            region_hint=hint,
        )

        attempts: list[SourceAttemptRecord] = []
        attempted: list[SourceName] = []

        for source in self.sources:
            self._transition(_STATE_FOR_SOURCE.get(source.name, ResolutionState.TRY_FALLBACK), barcode.value)
            attempted.append(source.name)

            source_start = time.time()
            outcome = await self._query(source, request)
            attempts.extend(outcome.attempts)
            source_time_ms = (time.time() - source_start) * 1000

            if isinstance(outcome, NoMatch):
                logger.debug(
                    "Source had no match",
                    barcode=barcode.value,
                    source=source.name.value,
                    reason=outcome.reason.value,
                    time_ms=round(source_time_ms, 2),
                )
                continue

            product = self._normalize(source, outcome)
            if product is None:
                continue

            product = product.model_copy(
                update={"format_info": format_info, "attempts": list(attempts)}
            )
            self._transition(ResolutionState.SUCCEEDED, barcode.value)
            logger.info(
                "Barcode resolution completed",
                barcode=barcode.value,
                source=product.source_name.value,
                category=product.category.value,
                approximate=product.approximate_match,
                has_nutrition=not product.nutrition_per_100.is_empty(),
                total_time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return product

        self._transition(ResolutionState.FAILED, barcode.value)
        logger.warning(
            "Barcode not found in any database",
            barcode=barcode.value,
            attempted_sources=[s.value for s in attempted],
            total_time_ms=round((time.time() - start_time) * 1000, 2),
        )
        return ResolutionFailure(
            code=barcode.value,
            reason=FailureReason.NOT_FOUND,
            attempted_sources=attempted,
            format_info=format_info,
            suggestions=build_suggestions(barcode, format_info, hint),
            attempts=attempts,
            message=failure_message(barcode.value, format_info),
        )

    async def _query(self, source: IProductSource, request: ResolutionRequest) -> SourceOutcome:
        """Run one source; fold unexpected errors into NoMatch(ERROR).

        Cancellation is not an Exception and propagates to the caller.
        """
        try:
            return await source.resolve(request)
        except Exception as e:
            logger.exception(
                "Source lookup failed",
                barcode=request.code.value,
                source=source.name.value,
                error=str(e),
            )
            return NoMatch(
                source_name=source.name,
                reason=NoMatchReason.ERROR,
                detail=str(e),
            )

    def _normalize(
        self, source: IProductSource, match: ProviderMatch
    ) -> Optional[NormalizedProduct]:
        category = map_category(match.category_signal, match.source_name.value)
        try:
            return source.to_product(match, category)
        except Exception as e:
            logger.exception(
                "Product normalization failed",
                barcode=match.code,
                source=source.name.value,
                error=str(e),
            )
            return None

    @staticmethod
    def _transition(state: ResolutionState, barcode: Optional[str]) -> None:
        logger.debug("Resolution state", state=state.value, barcode=barcode)
