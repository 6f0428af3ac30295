"""Unit tests for product resolution models."""

import pytest
from pydantic import ValidationError

from upc_resolution.domain.barcode.format_detection import UNKNOWN_FORMAT
from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    AttemptOutcome,
    FailureReason,
    NormalizedProduct,
    NutritionPer100,
    ResolutionFailure,
    ResolutionRequest,
    SourceAttemptRecord,
    SourceName,
)
from upc_resolution.domain.shared.value_objects import Barcode


class TestResolutionRequest:
    """Test ResolutionRequest validation."""

    def test_defaults(self, sample_barcode: Barcode) -> None:
        """Test retry policy defaults."""
        request = ResolutionRequest(code=sample_barcode)

        assert request.region_hint == "USD"
        assert request.max_retries_per_source == 2
        assert request.per_attempt_timeout_seconds == 1.5
        assert request.backoff_seconds == 0.25

    def test_zero_retries_rejected(self, sample_barcode: Barcode) -> None:
        """Test at least one pass is required."""
        with pytest.raises(ValidationError):
            ResolutionRequest(code=sample_barcode, max_retries_per_source=0)

    def test_frozen(self, sample_barcode: Barcode) -> None:
        """Test requests are immutable."""
        request = ResolutionRequest(code=sample_barcode)
        with pytest.raises(ValidationError):
            request.region_hint = "GBP"  # type: ignore[misc]


class TestNormalizedProduct:
    """Test the canonical product record."""

    def test_found_always_true(self) -> None:
        """Test a product can only be a hit."""
        product = NormalizedProduct(
            code="071592007746",
            name="Mushrooms",
            source_name=SourceName.FALLBACK,
        )

        assert product.found is True
        assert product.category == CanonicalCategory.OTHER
        assert product.format_info == UNKNOWN_FORMAT
        assert product.nutrition_per_100.is_empty()

        with pytest.raises(ValidationError):
            NormalizedProduct(
                found=False,  # type: ignore[arg-type]
                code="071592007746",
                name="Mushrooms",
                source_name=SourceName.FALLBACK,
            )

    def test_name_required(self) -> None:
        """Test an empty name is rejected."""
        with pytest.raises(ValidationError):
            NormalizedProduct(code="071592007746", name="", source_name=SourceName.USDA)

    def test_category_closed_set(self) -> None:
        """Test categories outside the enum are rejected."""
        with pytest.raises(ValidationError):
            NormalizedProduct(
                code="071592007746",
                name="Mushrooms",
                category="Mushroom Things",  # type: ignore[arg-type]
                source_name=SourceName.USDA,
            )

    def test_serializes_enum_values(self) -> None:
        """Test JSON output uses plain strings."""
        product = NormalizedProduct(
            code="071592007746",
            name="Mushrooms",
            category=CanonicalCategory.CANNED_VEGETABLES,
            source_name=SourceName.FALLBACK,
        )

        data = product.model_dump(mode="json")
        assert data["category"] == "Canned Vegetables"
        assert data["source_name"] == "fallback"


class TestResolutionFailure:
    """Test the structured miss."""

    def test_found_always_false(self) -> None:
        """Test a failure is never a hit."""
        failure = ResolutionFailure(code="5000000000001", reason=FailureReason.NOT_FOUND)

        assert failure.found is False
        assert failure.attempted_sources == []


class TestNutritionPer100:
    """Test nutrition helper."""

    def test_is_empty(self) -> None:
        """Test a serving size alone does not count as nutrition."""
        assert NutritionPer100(serving_size="60 g").is_empty()
        assert not NutritionPer100(sodium_mg=400.0).is_empty()

    def test_negative_rejected(self) -> None:
        """Test nutrient values cannot be negative."""
        with pytest.raises(ValidationError):
            NutritionPer100(fat=-1.0)


class TestSourceAttemptRecord:
    """Test attempt records."""

    def test_attempt_number_one_based(self) -> None:
        """Test attempt numbers start at 1."""
        with pytest.raises(ValidationError):
            SourceAttemptRecord(
                source_name="usda",
                endpoint_used="https://api.nal.usda.gov/fdc/v1",
                attempt_number=0,
                outcome=AttemptOutcome.TIMEOUT,
            )
