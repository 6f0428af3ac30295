"""
USDA data mapper.

Transforms USDA FoodData Central responses to domain models.
"""

import re
from typing import Any, Optional

from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    NormalizedProduct,
    NutritionPer100,
    SourceName,
)
from upc_resolution.domain.usda.models import (
    USDADataType,
    USDAFoodItem,
    USDANutrient,
    USDASearchResult,
)

UNKNOWN_PRODUCT_NAME = "Unknown Product"
FOOD_DETAILS_URL = "https://fdc.nal.usda.gov/fdc-app.html#/food-details/{fdc_id}/nutrients"

_LEADING_SEPARATORS = re.compile(r"^[,\-\s]+")


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class USDAMapper:
    """Maps USDA API data to domain models."""

    # field -> (nutrient numbers, nutrient ids); legacy numbers and the
    # newer ids both occur in FoodData Central payloads
    NUTRIENT_MAP: dict[str, tuple[frozenset[str], frozenset[int]]] = {
        "energy_kcal": (frozenset({"208", "1008", "957", "958"}), frozenset({1008, 2047, 2048})),
        "protein": (frozenset({"203"}), frozenset({1003})),
        "fat": (frozenset({"204"}), frozenset({1004})),
        "carbohydrates": (frozenset({"205"}), frozenset({1005})),
        "fiber": (frozenset({"291"}), frozenset({1079})),
        "sugars": (frozenset({"269"}), frozenset({2000, 1063})),
        "sodium_mg": (frozenset({"307"}), frozenset({1093})),
    }

    @staticmethod
    def _field_for(nutrient: USDANutrient) -> Optional[str]:
        for field_name, (numbers, ids) in USDAMapper.NUTRIENT_MAP.items():
            if nutrient.number in numbers or nutrient.nutrient_id in ids:
                return field_name
        return None

    @staticmethod
    def map_nutrients_to_dict(
        nutrients: list[USDANutrient],
    ) -> dict[str, float]:
        """Convert USDA nutrients to dict.

        First occurrence wins when several nutrients map to one field.

        Args:
            nutrients: List of USDA nutrients

        Returns:
            Dictionary with nutrient values per 100g (sodium in mg)

        Example:
            >>> nutrients = [
            ...     USDANutrient(number="208", name="Energy", amount=22.0, unit="KCAL"),
            ...     USDANutrient(nutrient_id=1003, name="Protein", amount=3.1, unit="G"),
            ... ]
            >>> result = USDAMapper.map_nutrients_to_dict(nutrients)
            >>> assert result["energy_kcal"] == 22.0
            >>> assert result["protein"] == 3.1
        """
        nutrient_dict: dict[str, float] = {}

        for nutrient in nutrients:
            field_name = USDAMapper._field_for(nutrient)
            if field_name and field_name not in nutrient_dict and nutrient.amount >= 0:
                nutrient_dict[field_name] = nutrient.amount

        return nutrient_dict

    @staticmethod
    def _parse_nutrient(n: dict[str, Any]) -> Optional[USDANutrient]:
        """Parse one nutrient in either the search or the detail schema."""
        nested = n.get("nutrient")
        if isinstance(nested, dict):
            amount = _to_float(n.get("amount"))
            number = nested.get("number")
            nutrient_id = nested.get("id")
            name = nested.get("name")
            unit = nested.get("unitName")
        else:
            amount = _to_float(n.get("value", n.get("amount")))
            number = n.get("nutrientNumber")
            nutrient_id = n.get("nutrientId")
            name = n.get("nutrientName")
            unit = n.get("unitName")

        if amount is None:
            return None

        return USDANutrient(
            number=str(number) if number is not None else "",
            nutrient_id=_to_int(nutrient_id),
            name=name or "",
            amount=amount,
            unit=unit or "",
        )

    @staticmethod
    def parse_food(food_data: dict[str, Any]) -> USDAFoodItem:
        """Parse a search record or a food detail response.

        Example:
            >>> food = USDAMapper.parse_food(
            ...     {
            ...         "fdcId": 2345678,
            ...         "description": "MUSHROOMS",
            ...         "dataType": "Branded",
            ...         "gtinUpc": "071592007746",
            ...         "foodNutrients": [
            ...             {"nutrient": {"id": 1008, "number": "208"}, "amount": 22.0}
            ...         ],
            ...     }
            ... )
            >>> assert food.fdc_id == "2345678"
            >>> assert food.nutrients[0].amount == 22.0
        """
        nutrients = []
        for n in food_data.get("foodNutrients") or []:
            if isinstance(n, dict):
                nutrient = USDAMapper._parse_nutrient(n)
                if nutrient is not None:
                    nutrients.append(nutrient)

        category = food_data.get("foodCategory")
        if isinstance(category, dict):
            category = category.get("description")
        category = category or food_data.get("brandedFoodCategory")

        data_type = None
        try:
            data_type = USDADataType(food_data.get("dataType"))
        except ValueError:
            data_type = None

        package_weight = food_data.get("packageWeight")

        return USDAFoodItem(
            fdc_id=str(food_data.get("fdcId", "")),
            description=food_data.get("description") or "",
            data_type=data_type,
            nutrients=nutrients,
            brand_owner=food_data.get("brandOwner"),
            brand_name=food_data.get("brandName"),
            gtin_upc=food_data.get("gtinUpc"),
            ingredients=food_data.get("ingredients"),
            category=category,
            serving_size=_to_float(food_data.get("servingSize")),
            serving_size_unit=food_data.get("servingSizeUnit"),
            package_weight=str(package_weight) if package_weight not in (None, "") else None,
        )

    @staticmethod
    def parse_search_response(response_data: dict[str, Any]) -> USDASearchResult:
        """Parse USDA search API response.

        Args:
            response_data: Raw API response JSON

        Returns:
            Parsed USDASearchResult

        Example:
            >>> response = {
            ...     "totalHits": 1,
            ...     "currentPage": 1,
            ...     "totalPages": 1,
            ...     "foods": [
            ...         {
            ...             "fdcId": 123,
            ...             "description": "Mushrooms",
            ...             "dataType": "Branded",
            ...             "gtinUpc": "00071592007746",
            ...             "foodNutrients": [
            ...                 {"nutrientNumber": "208", "value": 22.0}
            ...             ],
            ...         }
            ...     ],
            ... }
            >>> result = USDAMapper.parse_search_response(response)
            >>> assert result.total_hits == 1
            >>> assert len(result.foods) == 1
        """
        foods = [
            USDAMapper.parse_food(food_data)
            for food_data in response_data.get("foods") or []
            if isinstance(food_data, dict)
        ]

        return USDASearchResult(
            total_hits=_to_int(response_data.get("totalHits")) or len(foods),
            current_page=_to_int(response_data.get("currentPage")) or 1,
            total_pages=_to_int(response_data.get("totalPages")) or 0,
            foods=foods,
        )

    @staticmethod
    def find_exact_match(
        result: USDASearchResult, gtin14: str, clean_code: str
    ) -> Optional[USDAFoodItem]:
        """Pick the first food whose GTIN matches the scanned code.

        A food matches when its gtinUpc equals the GTIN-14, equals the
        clean code, or ends with the clean code.
        """
        for food in result.foods:
            gtin = (food.gtin_upc or "").strip()
            if not gtin:
                continue
            if gtin == gtin14 or gtin == clean_code or gtin.endswith(clean_code):
                return food
        return None

    @staticmethod
    def split_brand(description: str, brand_owner: Optional[str]) -> tuple[str, str]:
        """Separate the brand prefix USDA puts in front of descriptions.

        Example:
            >>> USDAMapper.split_brand(
            ...     "Old El Paso, Enchilada Sauce", "Old El Paso"
            ... )
            ('Enchilada Sauce', 'Old El Paso')
        """
        name = description.strip()
        brand = (brand_owner or "").strip()

        if brand and name.lower().startswith(brand.lower()):
            stripped = _LEADING_SEPARATORS.sub("", name[len(brand) :].strip())
            if stripped:
                name = stripped

        return name, brand

    @staticmethod
    def to_nutrition(food: USDAFoodItem) -> NutritionPer100:
        """Convert USDA nutrients to canonical per-100g nutrition."""
        nutrient_dict = USDAMapper.map_nutrients_to_dict(food.nutrients)
        return NutritionPer100(**nutrient_dict)

    @staticmethod
    def to_normalized_product(
        food: USDAFoodItem,
        code: str,
        category: CanonicalCategory,
        endpoint_used: Optional[str] = None,
        approximate_match: bool = False,
    ) -> NormalizedProduct:
        """Convert a USDA food to the canonical record.

        Args:
            food: Food detail (or search record when detail was unavailable)
            code: Clean barcode that was looked up
            category: Canonical category already mapped from food category
            endpoint_used: Endpoint that answered
            approximate_match: Food was not an exact GTIN match

        Returns:
            NormalizedProduct with source_name "usda"
        """
        name, brand = USDAMapper.split_brand(
            food.description or UNKNOWN_PRODUCT_NAME,
            food.brand_owner or food.brand_name,
        )

        nutrition = USDAMapper.to_nutrition(food)

        quantity = ""
        if food.serving_size is not None:
            amount = f"{food.serving_size:g}"
            quantity = f"{amount} {food.serving_size_unit or ''}".strip()
            nutrition = nutrition.model_copy(update={"serving_size": quantity})

        packaging = ""
        if food.package_weight:
            weight = food.package_weight.strip()
            # Bare numbers are grams
            packaging = f"{weight}g" if _to_float(weight) is not None else weight

        return NormalizedProduct(
            code=code,
            name=name or UNKNOWN_PRODUCT_NAME,
            brand=brand,
            category=category,
            ingredients_text=food.ingredients or "",
            nutrition_per_100=nutrition,
            packaging=packaging,
            quantity_text=quantity,
            source_name=SourceName.USDA,
            source_url=FOOD_DETAILS_URL.format(fdc_id=food.fdc_id) if food.fdc_id else None,
            approximate_match=approximate_match,
            endpoint_used=endpoint_used,
        )
