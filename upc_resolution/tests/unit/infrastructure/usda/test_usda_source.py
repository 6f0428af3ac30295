"""
Unit tests for the USDA FoodData Central source.

Real-world test case: Old El Paso Medium Red Enchilada Sauce,
UPC 046000861210 (GTIN-14 00046000861210)
"""

from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest

from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    AttemptOutcome,
    NoMatch,
    NoMatchReason,
    ProviderMatch,
    ResolutionRequest,
    SourceName,
)
from upc_resolution.domain.product.ports import IProductSource
from upc_resolution.domain.shared.value_objects import Barcode
from upc_resolution.domain.usda.models import USDAFoodItem
from upc_resolution.infrastructure.http.endpoints import USDA_BASE_URL
from upc_resolution.infrastructure.usda.source import USDASource


@pytest.fixture
def usda_request() -> ResolutionRequest:
    """Request for the enchilada sauce."""
    return ResolutionRequest(
        code=Barcode(value="046000861210", original_length=12),
        per_attempt_timeout_seconds=1.0,
        backoff_seconds=0.0,
    )


class TestUSDASource:
    """Test USDASource.resolve()."""

    @pytest.fixture
    def source(self) -> USDASource:
        return USDASource(api_key="test-key")

    def test_implements_port(self, source: USDASource) -> None:
        """Test the adapter satisfies IProductSource."""
        assert isinstance(source, IProductSource)
        assert source.name == SourceName.USDA

    async def test_not_configured(self, usda_request: ResolutionRequest) -> None:
        """Test a missing API key skips the network entirely."""
        source = USDASource(api_key=None)

        with patch("aiohttp.ClientSession.get") as mock_get:
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, NoMatch)
        assert outcome.reason == NoMatchReason.NOT_CONFIGURED
        assert outcome.attempts[0].outcome == AttemptOutcome.NOT_CONFIGURED
        mock_get.assert_not_called()

    async def test_exact_match_with_detail(
        self,
        source: USDASource,
        usda_request: ResolutionRequest,
        sample_usda_search_payload: dict[str, Any],
        sample_usda_detail_payload: dict[str, Any],
        make_http_response: Callable[..., MagicMock],
        make_get_context: Callable[[MagicMock], MagicMock],
    ) -> None:
        """Test search, exact GTIN filter, then detail fetch."""
        with patch(
            "aiohttp.ClientSession.get",
            side_effect=[
                make_get_context(make_http_response(200, sample_usda_search_payload)),
                make_get_context(make_http_response(200, sample_usda_detail_payload)),
            ],
        ) as mock_get:
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, ProviderMatch)
        food = outcome.payload
        assert isinstance(food, USDAFoodItem)
        assert food.fdc_id == "2041155"
        assert len(food.nutrients) == 5
        assert outcome.category_signal == "Pasta Sauces"
        assert outcome.approximate_match is False
        assert [a.outcome for a in outcome.attempts] == [
            AttemptOutcome.SUCCESS,
            AttemptOutcome.SUCCESS,
        ]

        search_call, detail_call = mock_get.call_args_list
        assert search_call.args[0] == f"{USDA_BASE_URL}/foods/search"
        params = search_call.kwargs["params"]
        assert params["query"] == "00046000861210"
        assert params["dataType"] == "Branded"
        assert params["pageSize"] == 5
        assert params["api_key"] == "test-key"
        assert detail_call.args[0] == f"{USDA_BASE_URL}/food/2041155"

    async def test_detail_failure_uses_search_record(
        self,
        source: USDASource,
        usda_request: ResolutionRequest,
        sample_usda_search_payload: dict[str, Any],
        make_http_response: Callable[..., MagicMock],
        make_get_context: Callable[[MagicMock], MagicMock],
    ) -> None:
        """Test the hit survives a failed detail fetch."""
        with patch(
            "aiohttp.ClientSession.get",
            side_effect=[
                make_get_context(make_http_response(200, sample_usda_search_payload)),
                make_get_context(make_http_response(500)),
            ],
        ):
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, ProviderMatch)
        food = outcome.payload
        assert food.description == "OLD EL PASO, MEDIUM RED ENCHILADA SAUCE"
        assert len(food.nutrients) == 2
        assert outcome.attempts[-1].outcome == AttemptOutcome.HTTP_ERROR

    async def test_no_exact_match(
        self,
        source: USDASource,
        usda_request: ResolutionRequest,
        make_http_response: Callable[..., MagicMock],
    ) -> None:
        """Test results without a matching GTIN are a definitive miss."""
        payload = {
            "totalHits": 1,
            "foods": [{"fdcId": 1, "description": "OTHER", "gtinUpc": "00099999999999"}],
        }

        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = make_http_response(200, payload)
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, NoMatch)
        assert outcome.reason == NoMatchReason.NOT_FOUND
        assert mock_get.call_count == 1

    async def test_approximate_match(
        self,
        usda_request: ResolutionRequest,
        sample_usda_detail_payload: dict[str, Any],
        make_http_response: Callable[..., MagicMock],
        make_get_context: Callable[[MagicMock], MagicMock],
    ) -> None:
        """Test the first result is used when approximate matches are allowed."""
        source = USDASource(api_key="test-key", allow_approximate_match=True)
        payload = {
            "totalHits": 1,
            "foods": [{"fdcId": 2041155, "description": "OLD EL PASO", "gtinUpc": "00099999999999"}],
        }

        with patch(
            "aiohttp.ClientSession.get",
            side_effect=[
                make_get_context(make_http_response(200, payload)),
                make_get_context(make_http_response(200, sample_usda_detail_payload)),
            ],
        ):
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, ProviderMatch)
        assert outcome.approximate_match is True

    async def test_rate_limited(
        self,
        source: USDASource,
        usda_request: ResolutionRequest,
        make_http_response: Callable[..., MagicMock],
    ) -> None:
        """Test 429 on every pass is reported as unavailable."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = make_http_response(429)
            outcome = await source.resolve(usda_request)

        assert isinstance(outcome, NoMatch)
        assert outcome.reason == NoMatchReason.UNAVAILABLE
        assert mock_get.call_count == 2

    def test_to_product(self, source: USDASource, sample_usda_food_item: USDAFoodItem) -> None:
        """Test conversion keeps the approximate flag."""
        match = ProviderMatch(
            source_name=SourceName.USDA,
            code="046000861210",
            payload=sample_usda_food_item,
            category_signal=sample_usda_food_item.category,
            endpoint_used=USDA_BASE_URL,
            approximate_match=True,
        )

        product = source.to_product(match, CanonicalCategory.CANNED_SAUCES)

        assert product.source_name == SourceName.USDA
        assert product.brand == "Old El Paso"
        assert product.approximate_match is True
        assert product.endpoint_used == USDA_BASE_URL
