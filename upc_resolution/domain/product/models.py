"""
Product resolution domain models.

The canonical product schema every source must produce, the typed
per-source outcomes, and the diagnostic trail attached to results.
Every model lives for a single resolution call.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from upc_resolution.domain.barcode.format_detection import (
    UNKNOWN_FORMAT,
    BarcodeFormatInfo,
)
from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.shared.errors import ValidationReason
from upc_resolution.domain.shared.value_objects import Barcode


class SourceName(str, Enum):
    """Product data sources, in default priority order."""

    OPENFOODFACTS = "openfoodfacts"
    USDA = "usda"
    FALLBACK = "fallback"


class AttemptOutcome(str, Enum):
    """Result of a single fetch attempt against one endpoint."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    NO_MATCH = "no_match"
    NOT_CONFIGURED = "not_configured"


class NoMatchReason(str, Enum):
    """Why a source produced no candidate."""

    NOT_FOUND = "not_found"  # Source answered, product unknown
    UNAVAILABLE = "unavailable"  # Retries exhausted on transport errors
    NOT_CONFIGURED = "not_configured"  # e.g. missing USDA API key
    ERROR = "error"  # Unexpected adapter failure


class FailureReason(str, Enum):
    """Why a resolution call did not produce a product."""

    INVALID_FORMAT = "INVALID_FORMAT"
    NOT_FOUND = "NOT_FOUND"


class ResolutionState(str, Enum):
    """Orchestrator states."""

    VALIDATING = "VALIDATING"
    DETECTING = "DETECTING"
    TRY_OFF = "TRY_OFF"
    TRY_USDA = "TRY_USDA"
    TRY_FALLBACK = "TRY_FALLBACK"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


# ═══════════════════════════════════════════════════════════
# REQUEST / DIAGNOSTICS
# ═══════════════════════════════════════════════════════════


class ResolutionRequest(BaseModel):
    """One incoming lookup, created after validation.

    Example:
        >>> request = ResolutionRequest(
        ...     code=Barcode(value="071592007746"),
        ...     region_hint="USD",
        ... )
        >>> assert request.max_retries_per_source == 2
    """

    model_config = ConfigDict(frozen=True)

    code: Barcode = Field(..., description="Clean barcode")
    region_hint: str = Field("USD", description="Caller currency/locale hint")
    max_retries_per_source: int = Field(2, ge=1, description="Full passes per source")
    per_attempt_timeout_seconds: float = Field(1.5, gt=0, description="Deadline per fetch")
    backoff_seconds: float = Field(0.25, ge=0, description="Wait between passes")


class SourceAttemptRecord(BaseModel):
    """Single fetch attempt, kept for diagnostics only."""

    model_config = ConfigDict(frozen=True)

    source_name: str = Field(..., description="Source that made the attempt")
    endpoint_used: str = Field(..., description="Endpoint or URL tried")
    attempt_number: int = Field(..., ge=1, description="Pass number (1-based)")
    outcome: AttemptOutcome = Field(..., description="What happened")
    elapsed_ms: float = Field(0.0, ge=0, description="Wall time of the attempt")


# ═══════════════════════════════════════════════════════════
# CANONICAL PRODUCT
# ═══════════════════════════════════════════════════════════


class NutritionPer100(BaseModel):
    """Nutrients per 100 g (sodium in mg).

    Example:
        >>> n = NutritionPer100(energy_kcal=22.0, protein=3.1)
        >>> assert n.fat is None
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal")
    fat: Optional[float] = Field(None, ge=0, description="Total fat in g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g")
    protein: Optional[float] = Field(None, ge=0, description="Protein in g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g")
    sugars: Optional[float] = Field(None, ge=0, description="Sugars in g")
    sodium_mg: Optional[float] = Field(None, ge=0, description="Sodium in mg")
    serving_size: Optional[str] = Field(None, description="Serving size text")

    def is_empty(self) -> bool:
        """True when no nutrient value is known."""
        return all(
            value is None
            for value in (
                self.energy_kcal,
                self.fat,
                self.carbohydrates,
                self.protein,
                self.fiber,
                self.sugars,
                self.sodium_mg,
            )
        )


class ProductScores(BaseModel):
    """Quality scores published by OpenFoodFacts."""

    model_config = ConfigDict(frozen=True)

    nutriscore: Optional[str] = Field(None, description="Nutri-Score grade (a-e)")
    nova_group: Optional[int] = Field(None, ge=1, le=4, description="NOVA group (1-4)")
    ecoscore: Optional[str] = Field(None, description="Eco-Score grade")


class NormalizedProduct(BaseModel):
    """Canonical product record.

    `found` is always True; a miss is a ResolutionFailure, never an empty
    NormalizedProduct.

    Example:
        >>> product = NormalizedProduct(
        ...     code="071592007746",
        ...     name="Mushrooms Stems and Pieces",
        ...     source_name=SourceName.FALLBACK,
        ... )
        >>> assert product.found is True
        >>> assert product.category == CanonicalCategory.OTHER
    """

    model_config = ConfigDict(frozen=True)

    found: Literal[True] = True
    code: str = Field(..., description="Clean barcode")
    name: str = Field(..., min_length=1, description="Product name")
    brand: str = Field("", description="Brand name")
    category: CanonicalCategory = Field(CanonicalCategory.OTHER, description="Canonical category")
    ingredients_text: str = Field("", description="Ingredients list")
    image_url: Optional[str] = Field(None, description="Product image URL")
    nutrition_per_100: NutritionPer100 = Field(default_factory=NutritionPer100)
    scores: ProductScores = Field(default_factory=ProductScores)
    allergens: list[str] = Field(default_factory=list, description="Allergen tags")
    packaging: str = Field("", description="Packaging description")
    quantity_text: str = Field("", description="Quantity (e.g. '10 oz')")
    source_name: SourceName = Field(..., description="Source that answered")
    source_url: Optional[str] = Field(None, description="Human-readable source page")
    regional_match: bool = Field(False, description="Hit came from preferred endpoint")
    approximate_match: bool = Field(False, description="Not an exact barcode match")

    # Diagnostics
    format_info: BarcodeFormatInfo = Field(default=UNKNOWN_FORMAT)
    endpoint_used: Optional[str] = Field(None, description="Endpoint that answered")
    attempts: list[SourceAttemptRecord] = Field(default_factory=list)


class ResolutionFailure(BaseModel):
    """Structured miss: invalid input or no source had the product.

    Example:
        >>> failure = ResolutionFailure(
        ...     code="5000000000001",
        ...     reason=FailureReason.NOT_FOUND,
        ...     suggestions=["Try adding the product manually."],
        ... )
        >>> assert failure.found is False
    """

    model_config = ConfigDict(frozen=True)

    found: Literal[False] = False
    code: str = Field(..., description="Clean (or partially cleaned) barcode")
    reason: FailureReason = Field(..., description="Failure category")
    validation_reason: Optional[ValidationReason] = Field(None, description="Validation detail")
    attempted_sources: list[SourceName] = Field(default_factory=list)
    format_info: BarcodeFormatInfo = Field(default=UNKNOWN_FORMAT)
    suggestions: list[str] = Field(default_factory=list)
    attempts: list[SourceAttemptRecord] = Field(default_factory=list)
    message: str = Field("", description="Human-readable summary")


ResolutionResult = Union[NormalizedProduct, ResolutionFailure]


# ═══════════════════════════════════════════════════════════
# PER-SOURCE OUTCOMES
# ═══════════════════════════════════════════════════════════


class ProviderMatch(BaseModel):
    """Provider-native payload plus provenance, not yet normalized."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source_name: SourceName
    code: str = Field(..., description="Clean barcode that was looked up")
    payload: Any = Field(..., description="Provider model (OFFProduct, USDAFoodDetail, ...)")
    category_signal: Union[list[str], str, None] = Field(
        None, description="Raw taxonomy tags or free-text category"
    )
    endpoint_used: Optional[str] = None
    regional_match: bool = False
    approximate_match: bool = False
    attempts: list[SourceAttemptRecord] = Field(default_factory=list)


class NoMatch(BaseModel):
    """Typed miss for one source."""

    model_config = ConfigDict(frozen=True)

    source_name: SourceName
    reason: NoMatchReason = NoMatchReason.NOT_FOUND
    detail: str = ""
    attempts: list[SourceAttemptRecord] = Field(default_factory=list)


SourceOutcome = Union[ProviderMatch, NoMatch]
