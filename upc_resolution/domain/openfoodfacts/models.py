"""
OpenFoodFacts domain models.

Models for OpenFoodFacts product API responses.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

NOT_FOUND_VERBOSE = "product not found"


class NutriscoreGrade(str, Enum):
    """Nutriscore grade classification."""

    A = "a"  # Best
    B = "b"
    C = "c"
    D = "d"
    E = "e"  # Worst
    UNKNOWN = "unknown"


class NovaGroup(str, Enum):
    """NOVA food processing classification."""

    GROUP_1 = "1"  # Unprocessed or minimally processed
    GROUP_2 = "2"  # Processed culinary ingredients
    GROUP_3 = "3"  # Processed foods
    GROUP_4 = "4"  # Ultra-processed foods
    UNKNOWN = "unknown"


class OFFNutriments(BaseModel):
    """OpenFoodFacts nutriments (per 100g).

    Sodium and salt are kept in grams, as published.

    Example:
        >>> nutriments = OFFNutriments(
        ...     energy_kcal=22.0,
        ...     proteins=3.1,
        ...     carbohydrates=3.3,
        ...     fat=0.3,
        ... )
        >>> assert nutriments.energy_kcal == 22.0
    """

    model_config = ConfigDict(frozen=True)

    energy_kcal: Optional[float] = Field(None, ge=0, description="Energy in kcal per 100g")
    energy_kj: Optional[float] = Field(None, ge=0, description="Energy in kJ per 100g")
    proteins: Optional[float] = Field(None, ge=0, description="Protein in g per 100g")
    carbohydrates: Optional[float] = Field(None, ge=0, description="Carbohydrates in g per 100g")
    fat: Optional[float] = Field(None, ge=0, description="Fat in g per 100g")
    fiber: Optional[float] = Field(None, ge=0, description="Fiber in g per 100g")
    sugars: Optional[float] = Field(None, ge=0, description="Sugars in g per 100g")
    sodium: Optional[float] = Field(None, ge=0, description="Sodium in g per 100g")
    salt: Optional[float] = Field(None, ge=0, description="Salt in g per 100g")


class OFFProduct(BaseModel):
    """OpenFoodFacts product response.

    Example:
        >>> product = OFFProduct(
        ...     code="071592007746",
        ...     product_name="Mushrooms Stems and Pieces",
        ...     brands="Pennsylvania Dutchman",
        ...     categories_tags=["en:canned-mushrooms"],
        ... )
        >>> assert product.code == "071592007746"
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Product barcode")
    product_name: Optional[str] = Field(None, description="Product name")
    brands: Optional[str] = Field(None, description="Brand names, comma separated")
    categories: Optional[str] = Field(None, description="Product categories")
    categories_tags: list[str] = Field(default_factory=list, description="Taxonomy tags")
    quantity: Optional[str] = Field(None, description="Product quantity (e.g., '10 oz')")
    serving_size: Optional[str] = Field(None, description="Serving size (e.g., '30g')")
    packaging: Optional[str] = Field(None, description="Packaging description")
    image_url: Optional[str] = Field(None, description="Product image URL")
    nutriments: Optional[OFFNutriments] = Field(None, description="Nutritional values")
    nutriscore_grade: Optional[NutriscoreGrade] = Field(None, description="Nutriscore grade (a-e)")
    nova_group: Optional[NovaGroup] = Field(None, description="NOVA processing group (1-4)")
    ecoscore_grade: Optional[str] = Field(None, description="Eco-Score grade")
    ingredients_text: Optional[str] = Field(None, description="Ingredients list")
    allergens_tags: list[str] = Field(default_factory=list, description="Allergen tags")


class OFFSearchResult(BaseModel):
    """OpenFoodFacts product lookup response.

    Example:
        >>> result = OFFSearchResult(
        ...     status=1,
        ...     status_verbose="product found",
        ...     product=OFFProduct(code="071592007746", product_name="Mushrooms"),
        ... )
        >>> assert result.is_found()
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="API status (1=found, 0=not)")
    status_verbose: Optional[str] = Field(None, description="Human-readable status")
    product: Optional[OFFProduct] = Field(None, description="Product data (if found)")

    def is_found(self) -> bool:
        """Check if product was found.

        Returns:
            True if product exists in database
        """
        if self.status == 0 or self.product is None:
            return False
        return (self.status_verbose or "").strip().lower() != NOT_FOUND_VERBOSE
