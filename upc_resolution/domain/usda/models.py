"""
USDA domain models.

These models represent USDA FoodData Central API responses
(branded food search and food detail).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class USDADataType(str, Enum):
    """USDA food database types."""

    BRANDED = "Branded"
    SR_LEGACY = "SR Legacy"
    SURVEY = "Survey (FNDDS)"
    FOUNDATION = "Foundation"


class USDANutrient(BaseModel):
    """Single nutrient from USDA response.

    The search endpoint identifies nutrients by `nutrientNumber` and
    `nutrientId`, the detail endpoint by `nutrient.number` and
    `nutrient.id`; both end up here.

    Example:
        >>> nutrient = USDANutrient(
        ...     number="208",
        ...     nutrient_id=1008,
        ...     name="Energy",
        ...     amount=22.0,
        ...     unit="KCAL",
        ... )
        >>> assert nutrient.amount == 22.0
    """

    model_config = ConfigDict(frozen=True)

    number: str = Field("", description="USDA nutrient number")
    nutrient_id: Optional[int] = Field(None, description="USDA nutrient id")
    name: str = Field("", description="Nutrient name")
    amount: float = Field(..., description="Amount per 100g")
    unit: str = Field("", description="Unit of measurement")


class USDAFoodItem(BaseModel):
    """USDA food item (search record or food detail).

    Example:
        >>> food = USDAFoodItem(
        ...     fdc_id="2345678",
        ...     description="PENNSYLVANIA DUTCHMAN, MUSHROOMS STEMS AND PIECES",
        ...     data_type=USDADataType.BRANDED,
        ...     brand_owner="Pennsylvania Dutchman",
        ...     gtin_upc="071592007746",
        ... )
        >>> assert food.fdc_id == "2345678"
    """

    model_config = ConfigDict(frozen=True)

    fdc_id: str = Field(..., description="FoodData Central ID")
    description: str = Field("", description="Food description")
    data_type: Optional[USDADataType] = Field(None, description="Database type")
    nutrients: list[USDANutrient] = Field(default_factory=list, description="Nutrient list")
    brand_owner: Optional[str] = Field(None, description="Brand owner (branded foods)")
    brand_name: Optional[str] = Field(None, description="Brand name (branded foods)")
    gtin_upc: Optional[str] = Field(None, description="Barcode (branded foods)")
    ingredients: Optional[str] = Field(None, description="Ingredients list")
    category: Optional[str] = Field(None, description="Food category text")
    serving_size: Optional[float] = Field(None, description="Serving size amount")
    serving_size_unit: Optional[str] = Field(None, description="Serving size unit")
    package_weight: Optional[str] = Field(None, description="Package weight")


class USDASearchResult(BaseModel):
    """USDA search API response.

    Example:
        >>> result = USDASearchResult(
        ...     total_hits=1,
        ...     current_page=1,
        ...     total_pages=1,
        ...     foods=[USDAFoodItem(fdc_id="123", description="Mushrooms")],
        ... )
        >>> assert result.total_hits == 1
    """

    model_config = ConfigDict(frozen=True)

    total_hits: int = Field(0, ge=0, description="Total results")
    current_page: int = Field(1, ge=0, description="Current page")
    total_pages: int = Field(0, ge=0, description="Total pages")
    foods: list[USDAFoodItem] = Field(default_factory=list, description="Food items")
