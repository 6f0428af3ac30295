"""
OpenFoodFacts data mapper.

Transforms OpenFoodFacts API responses to domain models.
"""

from typing import Any, Optional

from upc_resolution.domain.openfoodfacts.models import (
    NovaGroup,
    NutriscoreGrade,
    OFFNutriments,
    OFFProduct,
    OFFSearchResult,
)
from upc_resolution.domain.product.categories import CanonicalCategory
from upc_resolution.domain.product.models import (
    NormalizedProduct,
    NutritionPer100,
    ProductScores,
    SourceName,
)

UNKNOWN_PRODUCT_NAME = "Unknown Product"
PRODUCT_PAGE_URL = "https://world.openfoodfacts.org/product/{code}"

KJ_PER_KCAL = 4.184
# 1 g salt = 0.4 g sodium
SODIUM_MG_PER_SALT_G = 400.0


def _to_float(value: Any) -> Optional[float]:
    """OFF publishes numbers as floats, ints or numeric strings."""
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _first_text(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _strip_language(tag: str) -> str:
    """'en:milk' -> 'milk'."""
    return tag.split(":", 1)[1] if ":" in tag else tag


class OpenFoodFactsMapper:
    """Maps OpenFoodFacts API data to domain models."""

    @staticmethod
    def parse_product_response(response_data: dict[str, Any]) -> OFFSearchResult:
        """Parse OpenFoodFacts product API response.

        Field fallbacks are resolved here: name from product_name,
        product_name_en or generic_name; brand owner when brands is empty;
        English ingredients; front image.

        Args:
            response_data: Raw API response JSON

        Returns:
            Parsed OFFSearchResult

        Example:
            >>> response = {
            ...     "status": 1,
            ...     "status_verbose": "product found",
            ...     "product": {
            ...         "code": "071592007746",
            ...         "product_name": "Mushrooms Stems and Pieces",
            ...         "brands": "Pennsylvania Dutchman",
            ...         "nutriments": {
            ...             "energy-kcal_100g": 22,
            ...             "proteins_100g": 3.1,
            ...         },
            ...     },
            ... }
            >>> result = OpenFoodFactsMapper.parse_product_response(response)
            >>> assert result.is_found()
            >>> assert result.product.nutriments.energy_kcal == 22.0
        """
        status = response_data.get("status", 0)
        status_verbose = response_data.get("status_verbose")
        if not isinstance(status_verbose, str):
            status_verbose = None
        product_data = response_data.get("product")

        try:
            status = int(status)
        except (TypeError, ValueError):
            status = 0

        if status == 0 or not isinstance(product_data, dict):
            return OFFSearchResult(status=status, status_verbose=status_verbose, product=None)

        nutriments_data = product_data.get("nutriments")
        if not isinstance(nutriments_data, dict):
            nutriments_data = {}

        # Parse nutriments
        nutriments = OFFNutriments(
            energy_kcal=_to_float(nutriments_data.get("energy-kcal_100g")),
            energy_kj=_to_float(nutriments_data.get("energy_100g")),
            proteins=_to_float(nutriments_data.get("proteins_100g")),
            carbohydrates=_to_float(nutriments_data.get("carbohydrates_100g")),
            fat=_to_float(nutriments_data.get("fat_100g")),
            fiber=_to_float(nutriments_data.get("fiber_100g")),
            sugars=_to_float(nutriments_data.get("sugars_100g")),
            sodium=_to_float(nutriments_data.get("sodium_100g")),
            salt=_to_float(nutriments_data.get("salt_100g")),
        )

        # Parse nutriscore
        nutriscore_raw = product_data.get("nutriscore_grade")
        nutriscore = None
        if nutriscore_raw:
            try:
                nutriscore = NutriscoreGrade(str(nutriscore_raw).lower())
            except ValueError:
                nutriscore = NutriscoreGrade.UNKNOWN

        # Parse nova group
        nova_raw = product_data.get("nova_group")
        nova = None
        if nova_raw:
            try:
                nova = NovaGroup(str(nova_raw))
            except ValueError:
                nova = NovaGroup.UNKNOWN

        tags = _as_list(product_data.get("categories_tags"))
        allergens = _as_list(product_data.get("allergens_tags"))

        product = OFFProduct(
            code=str(product_data.get("code") or ""),
            product_name=_first_text(
                product_data.get("product_name"),
                product_data.get("product_name_en"),
                product_data.get("generic_name"),
            ),
            brands=_first_text(product_data.get("brands"), product_data.get("brand_owner")),
            categories=_first_text(product_data.get("categories")),
            categories_tags=[str(tag) for tag in tags if tag],
            quantity=_first_text(product_data.get("quantity")),
            serving_size=_first_text(product_data.get("serving_size")),
            packaging=_first_text(product_data.get("packaging")),
            image_url=_first_text(
                product_data.get("image_url"),
                product_data.get("image_front_url"),
            ),
            nutriments=nutriments,
            nutriscore_grade=nutriscore,
            nova_group=nova,
            ecoscore_grade=_first_text(product_data.get("ecoscore_grade")),
            ingredients_text=_first_text(
                product_data.get("ingredients_text"),
                product_data.get("ingredients_text_en"),
            ),
            allergens_tags=[str(tag) for tag in allergens if tag],
        )

        return OFFSearchResult(status=status, status_verbose=status_verbose, product=product)

    @staticmethod
    def to_nutrition(nutriments: Optional[OFFNutriments]) -> NutritionPer100:
        """Convert OFF nutriments to canonical per-100g nutrition.

        Energy falls back to kJ / 4.184; sodium (g) becomes mg, or is
        derived from salt when absent.

        Example:
            >>> n = OpenFoodFactsMapper.to_nutrition(
            ...     OFFNutriments(energy_kj=418.4, salt=1.0)
            ... )
            >>> assert n.energy_kcal == 100.0
            >>> assert n.sodium_mg == 400.0
        """
        n = nutriments if nutriments else OFFNutriments()

        energy = n.energy_kcal
        if energy is None and n.energy_kj is not None:
            energy = round(n.energy_kj / KJ_PER_KCAL, 1)

        sodium_mg = None
        if n.sodium is not None:
            sodium_mg = round(n.sodium * 1000, 1)
        elif n.salt is not None:
            sodium_mg = round(n.salt * SODIUM_MG_PER_SALT_G, 1)

        return NutritionPer100(
            energy_kcal=energy,
            fat=n.fat,
            carbohydrates=n.carbohydrates,
            protein=n.proteins,
            fiber=n.fiber,
            sugars=n.sugars,
            sodium_mg=sodium_mg,
        )

    @staticmethod
    def to_normalized_product(
        product: OFFProduct,
        code: str,
        category: CanonicalCategory,
        endpoint_used: Optional[str] = None,
        regional_match: bool = False,
    ) -> NormalizedProduct:
        """Convert an OpenFoodFacts product to the canonical record.

        Args:
            product: Parsed OpenFoodFacts product
            code: Clean barcode that was looked up
            category: Canonical category already mapped from tags
            endpoint_used: Endpoint that answered
            regional_match: Hit came from the preferred endpoint

        Returns:
            NormalizedProduct with source_name "openfoodfacts"
        """
        nutrition = OpenFoodFactsMapper.to_nutrition(product.nutriments)
        if product.serving_size:
            nutrition = nutrition.model_copy(update={"serving_size": product.serving_size})

        nova = None
        if product.nova_group and product.nova_group != NovaGroup.UNKNOWN:
            nova = int(product.nova_group.value)

        nutriscore = None
        if product.nutriscore_grade and product.nutriscore_grade != NutriscoreGrade.UNKNOWN:
            nutriscore = product.nutriscore_grade.value

        brand = ""
        if product.brands:
            brand = product.brands.split(",")[0].strip()

        return NormalizedProduct(
            code=code,
            name=product.product_name or UNKNOWN_PRODUCT_NAME,
            brand=brand,
            category=category,
            ingredients_text=product.ingredients_text or "",
            image_url=product.image_url,
            nutrition_per_100=nutrition,
            scores=ProductScores(
                nutriscore=nutriscore,
                nova_group=nova,
                ecoscore=product.ecoscore_grade,
            ),
            allergens=[_strip_language(tag) for tag in product.allergens_tags],
            packaging=product.packaging or "",
            quantity_text=product.quantity or "",
            source_name=SourceName.OPENFOODFACTS,
            source_url=PRODUCT_PAGE_URL.format(code=product.code or code),
            regional_match=regional_match,
            endpoint_used=endpoint_used,
        )
