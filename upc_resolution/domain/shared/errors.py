"""
Domain exceptions.

Typed exceptions for explicit error handling.
Only input validation escapes the resolution engine; everything else is
folded into typed outcomes by the adapters and the orchestrator.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from upc_resolution.domain.product.models import SourceAttemptRecord


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationReason(str, Enum):
    """Why a raw barcode was rejected."""

    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_PATTERN = "invalid_pattern"


class ValidationError(DomainError):
    """
    Input validation failed.

    Raised when:
    - Invalid input format
    - Missing required fields

    Example:
        >>> raise ValidationError("Region hint cannot be empty")
    """

    pass


class BarcodeValidationError(ValidationError):
    """
    Raw barcode cannot be turned into a clean code.

    Terminal: never retried, no source is queried.

    Example:
        >>> raise BarcodeValidationError(
        ...     ValidationReason.TOO_SHORT, raw="123", clean_code="123"
        ... )
    """

    def __init__(
        self,
        reason: ValidationReason,
        raw: str | None = None,
        clean_code: str = "",
    ) -> None:
        self.reason = reason
        self.raw = raw
        self.clean_code = clean_code
        super().__init__(f"Invalid barcode ({reason.value.replace('_', ' ')}): {raw!r}")


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.

    Raised when:
    - API call fails
    - Network error
    - Non-2xx response

    Example:
        >>> raise ExternalServiceError("OpenFoodFacts API error: 503")
    """

    pass


class RateLimitError(ExternalServiceError):
    """
    API rate limit exceeded.

    Raised when:
    - HTTP 429 from upstream
    - Free-tier quota exhausted

    Example:
        >>> raise RateLimitError("USDA API rate limit")
    """

    pass


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    API call timed out.

    Raised when:
    - Request exceeds the per-attempt deadline

    Example:
        >>> raise TimeoutError("USDA API timeout after 3s")
    """

    pass


class ServiceUnavailableError(ExternalServiceError):
    """
    External service unavailable.

    Raised when:
    - Service down (5xx)
    - DNS or connection failure

    Example:
        >>> raise ServiceUnavailableError(
        ...     "OpenFoodFacts service unavailable"
        ... )
    """

    pass


class SourceExhaustedError(ExternalServiceError):
    """
    Every endpoint failed on every pass.

    Carries the full attempt trail for diagnostics.

    Example:
        >>> raise SourceExhaustedError("openfoodfacts", attempts=[])
    """

    def __init__(
        self,
        source_name: str,
        attempts: Sequence["SourceAttemptRecord"] = (),
        definitive_miss: bool = False,
    ) -> None:
        self.source_name = source_name
        self.attempts = list(attempts)
        self.definitive_miss = definitive_miss
        super().__init__(
            f"{source_name}: no endpoint succeeded after {len(self.attempts)} attempt(s)"
        )
