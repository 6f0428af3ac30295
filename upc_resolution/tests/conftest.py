"""
Shared fixtures for the resolution engine tests.

Real-world test products:
- Pennsylvania Dutchman Mushrooms Stems and Pieces, UPC 071592007746
- Old El Paso Medium Red Enchilada Sauce, UPC 046000861210
"""

from typing import Any, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

from upc_resolution.domain.openfoodfacts.models import OFFNutriments, OFFProduct
from upc_resolution.domain.product.models import (
    NoMatch,
    NoMatchReason,
    ResolutionRequest,
    SourceName,
)
from upc_resolution.domain.shared.value_objects import Barcode
from upc_resolution.domain.usda.models import (
    USDADataType,
    USDAFoodItem,
    USDANutrient,
    USDASearchResult,
)
from upc_resolution.infrastructure.http.retrying_fetch import FetchResponse

# Load .env for opt-in integration runs; unit tests never need it
load_dotenv()


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def sample_barcode() -> Barcode:
    """Pennsylvania Dutchman mushrooms (UPC-A)."""
    return Barcode(value="071592007746", original_length=12)


@pytest.fixture
def sample_request(sample_barcode: Barcode) -> ResolutionRequest:
    """Request with fast retry policy (no backoff)."""
    return ResolutionRequest(
        code=sample_barcode,
        region_hint="USD",
        max_retries_per_source=2,
        per_attempt_timeout_seconds=1.0,
        backoff_seconds=0.0,
    )


@pytest.fixture
def sample_off_payload() -> dict[str, Any]:
    """Raw OpenFoodFacts v2 product response."""
    return {
        "code": "071592007746",
        "status": 1,
        "status_verbose": "product found",
        "product": {
            "code": "071592007746",
            "product_name": "Mushrooms Stems and Pieces",
            "brands": "Pennsylvania Dutchman, Giorgio Foods",
            "categories_tags": [
                "en:plant-based-foods",
                "en:canned-foods",
                "en:canned-mushrooms",
            ],
            "quantity": "4 oz",
            "serving_size": "0.5 cup (60 g)",
            "packaging": "Can",
            "image_front_url": "https://images.openfoodfacts.org/images/products/007/159/200/7746/front_en.jpg",
            "nutriscore_grade": "a",
            "nova_group": 3,
            "ecoscore_grade": "b",
            "ingredients_text_en": "Mushrooms, water, salt, ascorbic acid.",
            "allergens_tags": [],
            "nutriments": {
                "energy-kcal_100g": 22,
                "proteins_100g": 3.1,
                "carbohydrates_100g": 3.3,
                "fat_100g": 0.3,
                "fiber_100g": 1.7,
                "sugars_100g": 1.7,
                "sodium_100g": 0.4,
                "salt_100g": 1.0,
            },
        },
    }


@pytest.fixture
def sample_off_product() -> OFFProduct:
    """Parsed OpenFoodFacts product."""
    return OFFProduct(
        code="071592007746",
        product_name="Mushrooms Stems and Pieces",
        brands="Pennsylvania Dutchman",
        categories_tags=["en:canned-foods", "en:canned-mushrooms"],
        quantity="4 oz",
        nutriments=OFFNutriments(
            energy_kcal=22.0,
            proteins=3.1,
            carbohydrates=3.3,
            fat=0.3,
            sodium=0.4,
        ),
    )


@pytest.fixture
def sample_usda_nutrients() -> list[USDANutrient]:
    """USDA nutrients in the detail schema (number + id)."""
    return [
        USDANutrient(number="208", nutrient_id=1008, name="Energy", amount=42.0, unit="KCAL"),
        USDANutrient(number="203", nutrient_id=1003, name="Protein", amount=1.0, unit="G"),
        USDANutrient(number="204", nutrient_id=1004, name="Total lipid (fat)", amount=0.8, unit="G"),
        USDANutrient(
            number="205",
            nutrient_id=1005,
            name="Carbohydrate, by difference",
            amount=8.3,
            unit="G",
        ),
        USDANutrient(number="307", nutrient_id=1093, name="Sodium, Na", amount=890.0, unit="MG"),
    ]


@pytest.fixture
def sample_usda_food_item(sample_usda_nutrients: list[USDANutrient]) -> USDAFoodItem:
    """USDA branded food (Old El Paso enchilada sauce)."""
    return USDAFoodItem(
        fdc_id="2041155",
        description="OLD EL PASO, MEDIUM RED ENCHILADA SAUCE",
        data_type=USDADataType.BRANDED,
        brand_owner="Old El Paso",
        gtin_upc="00046000861210",
        ingredients="WATER, TOMATO PUREE, CHILI PEPPER.",
        category="Pasta Sauces",
        serving_size=60.0,
        serving_size_unit="ml",
        package_weight="283",
        nutrients=sample_usda_nutrients,
    )


@pytest.fixture
def sample_usda_search_payload() -> dict[str, Any]:
    """Raw USDA foods/search response (search schema)."""
    return {
        "totalHits": 2,
        "currentPage": 1,
        "totalPages": 1,
        "foods": [
            {
                "fdcId": 999001,
                "description": "SOMETHING ELSE",
                "dataType": "Branded",
                "gtinUpc": "00011110000000",
                "foodNutrients": [],
            },
            {
                "fdcId": 2041155,
                "description": "OLD EL PASO, MEDIUM RED ENCHILADA SAUCE",
                "dataType": "Branded",
                "gtinUpc": "00046000861210",
                "brandOwner": "Old El Paso",
                "foodCategory": "Pasta Sauces",
                "foodNutrients": [
                    {"nutrientId": 1008, "nutrientNumber": "208", "value": 42.0, "unitName": "KCAL"},
                    {"nutrientId": 1093, "nutrientNumber": "307", "value": 890.0, "unitName": "MG"},
                ],
            },
        ],
    }


@pytest.fixture
def sample_usda_detail_payload() -> dict[str, Any]:
    """Raw USDA food/{fdcId} response (detail schema)."""
    return {
        "fdcId": 2041155,
        "description": "OLD EL PASO, MEDIUM RED ENCHILADA SAUCE",
        "dataType": "Branded",
        "gtinUpc": "00046000861210",
        "brandOwner": "Old El Paso",
        "brandedFoodCategory": "Pasta Sauces",
        "ingredients": "WATER, TOMATO PUREE, CHILI PEPPER.",
        "servingSize": 60.0,
        "servingSizeUnit": "ml",
        "packageWeight": "283",
        "foodNutrients": [
            {"nutrient": {"id": 1008, "number": "208", "name": "Energy"}, "amount": 42.0},
            {"nutrient": {"id": 1003, "number": "203", "name": "Protein"}, "amount": 1.0},
            {"nutrient": {"id": 1004, "number": "204", "name": "Total lipid (fat)"}, "amount": 0.8},
            {"nutrient": {"id": 1005, "number": "205", "name": "Carbohydrate"}, "amount": 8.3},
            {"nutrient": {"id": 1093, "number": "307", "name": "Sodium, Na"}, "amount": 890.0},
        ],
    }


@pytest.fixture
def sample_usda_search_result(sample_usda_food_item: USDAFoodItem) -> USDASearchResult:
    """Parsed USDA search result."""
    return USDASearchResult(
        total_hits=1,
        current_page=1,
        total_pages=1,
        foods=[sample_usda_food_item],
    )


# ═══════════════════════════════════════════════════════════
# HTTP MOCK HELPERS
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def make_http_response() -> Callable[..., MagicMock]:
    """Factory for mocked aiohttp responses.

    Usage:
        response = make_http_response(200, {"status": 1})
    """

    def _make(status: int = 200, payload: Optional[Any] = None) -> MagicMock:
        response = MagicMock()
        response.status = status
        response.json = AsyncMock(return_value=payload)
        return response

    return _make


@pytest.fixture
def make_get_context() -> Callable[[MagicMock], MagicMock]:
    """Wrap a mocked response in an async context manager.

    Lets tests feed several responses through
    `patch("aiohttp.ClientSession.get", side_effect=[...])`.
    """

    def _make(response: MagicMock) -> MagicMock:
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        return context

    return _make


@pytest.fixture
def fetch_response() -> Callable[..., FetchResponse]:
    """Factory for executor-level responses."""

    def _make(status: int = 200, payload: Optional[Any] = None, url: str = "") -> FetchResponse:
        return FetchResponse(status=status, payload=payload, url=url)

    return _make


# ═══════════════════════════════════════════════════════════
# MOCK SOURCE FIXTURES
# ═══════════════════════════════════════════════════════════


def _mock_source(name: SourceName) -> MagicMock:
    source = MagicMock()
    source.name = name
    source.resolve = AsyncMock(return_value=NoMatch(source_name=name, reason=NoMatchReason.NOT_FOUND))
    return source


@pytest.fixture
def mock_off_source() -> MagicMock:
    """Mock OpenFoodFacts source.

    Default behavior: NoMatch(NOT_FOUND)
    Override in tests with specific return values.
    """
    return _mock_source(SourceName.OPENFOODFACTS)


@pytest.fixture
def mock_usda_source() -> MagicMock:
    """Mock USDA source.

    Default behavior: NoMatch(NOT_FOUND)
    """
    return _mock_source(SourceName.USDA)


@pytest.fixture
def mock_fallback_source() -> MagicMock:
    """Mock fallback source.

    Default behavior: NoMatch(NOT_FOUND)
    """
    return _mock_source(SourceName.FALLBACK)
