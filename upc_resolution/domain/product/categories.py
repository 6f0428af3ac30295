"""
Canonical category taxonomy.

Maps provider category signals (OpenFoodFacts taxonomy tags, USDA
free-text categories) onto one closed set of canonical categories.
Matching is lossy and heuristic: case-insensitive substring containment
against ordered keyword tables, first match wins, "Other" otherwise.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Union

import structlog

logger = structlog.get_logger(__name__)


class CanonicalCategory(str, Enum):
    """Closed set of inventory categories."""

    BAKING = "Baking & Cooking Ingredients"
    BEANS = "Beans"
    BEVERAGES = "Beverages"
    BOUILLON = "Bouillon"
    BOXED_MEALS = "Boxed Meals"
    BREADS = "Breads"
    CANNED_BEANS = "Canned Beans"
    CANNED_FRUIT = "Canned Fruit"
    CANNED_MEALS = "Canned Meals"
    CANNED_MEAT = "Canned Meat"
    CANNED_SAUCES = "Canned Sauces"
    CANNED_TOMATOES = "Canned Tomatoes"
    CANNED_VEGETABLES = "Canned Vegetables"
    CHEESE = "Cheese"
    CONDIMENTS = "Condiments"
    DAIRY = "Dairy"
    EGGS = "Eggs"
    FRESH_FRUITS = "Fresh Fruits"
    FRESH_SPICES = "Fresh Spices"
    FRESH_VEGETABLES = "Fresh Vegetables"
    BEEF = "Fresh/Frozen Beef"
    FISH_SEAFOOD = "Fresh/Frozen Fish & Seafood"
    LAMB = "Fresh/Frozen Lamb"
    PORK = "Fresh/Frozen Pork"
    POULTRY = "Fresh/Frozen Poultry"
    RABBIT = "Fresh/Frozen Rabbit"
    VENISON = "Fresh/Frozen Venison"
    FROZEN_FRUIT = "Frozen Fruit"
    FROZEN_VEGETABLES = "Frozen Vegetables"
    GRAINS = "Grains"
    PASTA = "Pasta"
    SEASONINGS = "Seasonings"
    SNACKS = "Snacks"
    SOUPS = "Soups & Soup Mixes"
    SPICES = "Spices"
    STOCK_BROTH = "Stock/Broth"
    STUFFING_SIDES = "Stuffing & Sides"
    OTHER = "Other"


C = CanonicalCategory

# OpenFoodFacts taxonomy keywords ("en:" prefix dropped). Order is priority:
# canned goods first so e.g. canned mushrooms never land in fresh produce.
OFF_TAG_KEYWORDS: tuple[tuple[CanonicalCategory, tuple[str, ...]], ...] = (
    (C.CANNED_SAUCES, ("canned-sauces", "pasta-sauces", "marinara", "alfredo", "enchilada-sauce", "tomato-sauce", "sauce")),
    (C.CANNED_VEGETABLES, ("canned-vegetables", "canned-corn", "canned-peas", "canned-carrots", "canned-green-beans", "mushrooms", "canned-mushrooms")),
    (C.CANNED_FRUIT, ("canned-fruits", "canned-peaches", "canned-pears", "fruit-cocktail", "canned-pineapple", "fruit-in-syrup")),
    (C.CANNED_MEALS, ("canned-meals", "canned-soup", "canned-chili", "canned-stew", "ravioli", "spaghetti")),
    (C.CANNED_MEAT, ("canned-meat", "canned-chicken", "canned-beef", "canned-fish", "tuna", "salmon", "sardines", "spam")),
    (C.CANNED_BEANS, ("canned-beans", "black-beans", "kidney-beans", "chickpeas", "pinto-beans", "navy-beans", "baked-beans")),
    (C.CANNED_TOMATOES, ("canned-tomatoes", "tomato-paste", "diced-tomatoes", "crushed-tomatoes", "tomato-puree")),
    (C.BEVERAGES, ("beverages", "drinks", "sodas", "juices", "water", "coffee", "tea", "energy-drinks")),
    (C.DAIRY, ("dairy", "milk", "yogurt", "butter", "cream", "sour-cream")),
    (C.CHEESE, ("cheese", "cheeses", "cheddar", "mozzarella", "parmesan", "cream-cheese")),
    (C.CONDIMENTS, ("condiments", "ketchup", "mustard", "mayonnaise", "salad-dressings")),
    (C.SNACKS, ("snacks", "chips", "crackers", "cookies", "nuts", "pretzels", "popcorn")),
    (C.BREADS, ("bread", "sandwich-bread", "white-bread", "wheat-bread", "hotdog-buns", "hamburger-buns", "tortillas", "bagels")),
    (C.BEEF, ("beef", "beef-meat", "ground-beef", "steaks", "roasts")),
    (C.PORK, ("pork", "pork-meat", "bacon", "ham", "sausages", "ground-pork")),
    (C.POULTRY, ("chicken", "poultry", "turkey", "duck", "chicken-meat", "turkey-meat")),
    (C.FISH_SEAFOOD, ("fish", "seafood", "salmon", "tuna", "cod", "tilapia", "shrimp")),
    (C.FRESH_VEGETABLES, ("vegetables", "fresh-vegetables", "tomatoes", "onions", "carrots", "potatoes", "peppers")),
    (C.FRESH_FRUITS, ("fruits", "fresh-fruits", "apples", "bananas", "oranges", "berries")),
    (C.FROZEN_VEGETABLES, ("frozen-vegetables", "frozen-peas", "frozen-corn", "frozen-broccoli")),
    (C.FROZEN_FRUIT, ("frozen-fruits", "frozen-berries", "frozen-strawberries")),
    (C.GRAINS, ("cereals", "rice", "quinoa", "oats", "barley", "rice-mixes")),
    (C.PASTA, ("pasta", "noodles", "macaroni", "penne")),
    (C.SOUPS, ("soups", "soup-mixes", "instant-soup", "ramen")),
    (C.BAKING, ("baking-ingredients", "flour", "sugar", "baking-powder", "vanilla")),
    (C.SEASONINGS, ("seasonings", "salt", "pepper", "garlic-powder", "seasoning-mixes")),
    (C.SPICES, ("spices", "cinnamon", "paprika", "cumin", "oregano")),
    (C.BEANS, ("beans", "dried-beans", "lentils", "split-peas")),
    (C.BOUILLON, ("bouillon", "stock-cubes", "broth-cubes")),
    (C.STOCK_BROTH, ("broth", "stock", "bone-broth")),
    (C.BOXED_MEALS, ("meal-kits", "boxed-dinners", "mac-and-cheese", "instant-meals")),
    (C.EGGS, ("eggs", "egg-products")),
    (C.FRESH_SPICES, ("fresh-herbs", "fresh-spices", "basil", "cilantro", "parsley")),
    (C.LAMB, ("lamb", "mutton")),
    (C.RABBIT, ("rabbit",)),
    (C.VENISON, ("venison", "deer", "game-meat")),
    (C.STUFFING_SIDES, ("stuffing", "mashed-potato", "side-dishes", "gravy-mix")),
)

# USDA branded food categories are free text ("Canned Vegetables",
# "Pasta Sauces", ...).
USDA_TEXT_KEYWORDS: tuple[tuple[CanonicalCategory, tuple[str, ...]], ...] = (
    (C.DAIRY, ("dairy", "milk", "cheese", "yogurt", "butter", "cream")),
    (C.BEEF, ("beef", "cattle")),
    (C.PORK, ("pork", "swine")),
    (C.POULTRY, ("poultry", "chicken", "turkey")),
    (C.FISH_SEAFOOD, ("fish", "seafood", "salmon", "tuna")),
    (C.BEVERAGES, ("beverages", "drinks", "juice", "soda", "water")),
    (C.SNACKS, ("snacks", "chips", "crackers", "cookies")),
    (C.GRAINS, ("grains", "cereal", "rice", "bread", "pasta")),
    (C.FRESH_VEGETABLES, ("vegetables", "produce")),
    (C.FRESH_FRUITS, ("fruits", "fruit")),
    (C.SOUPS, ("soup", "broth", "stew")),
    (C.CONDIMENTS, ("condiments", "sauce", "dressing")),
    (C.CANNED_MEALS, ("meals", "entree", "dinner")),
    (C.CANNED_SAUCES, ("sauce", "enchilada", "pasta sauce")),
    (C.CANNED_VEGETABLES, ("canned vegetables", "mushrooms")),
    (C.CANNED_FRUIT, ("canned fruit", "fruit cocktail")),
)

_CANONICAL_BY_NAME = {category.value.lower(): category for category in CanonicalCategory}

CategorySignal = Union[Iterable[str], str, None]


def _as_texts(signal: CategorySignal) -> list[str]:
    """Normalize a tag list or free text to lowercase strings."""
    if signal is None:
        return []
    if isinstance(signal, str):
        return [signal.lower()] if signal.strip() else []
    return [str(item).lower() for item in signal if item is not None and str(item).strip()]


def _match(
    texts: list[str],
    table: tuple[tuple[CanonicalCategory, tuple[str, ...]], ...],
) -> Optional[CanonicalCategory]:
    for category, keywords in table:
        if any(keyword in text for text in texts for keyword in keywords):
            return category
    return None


def map_category(signal: CategorySignal, source_name: Optional[str] = None) -> CanonicalCategory:
    """Map a provider category signal to a canonical category.

    Never raises; always returns a CanonicalCategory member.

    Args:
        signal: OpenFoodFacts tag list, USDA free text, or None
        source_name: "openfoodfacts", "usda", "fallback" or None

    Returns:
        First matching canonical category, CanonicalCategory.OTHER otherwise

    Example:
        >>> map_category(["en:groceries", "en:enchilada-sauce"], "openfoodfacts")
        <CanonicalCategory.CANNED_SAUCES: 'Canned Sauces'>
        >>> map_category("Canned Fruit", "usda")
        <CanonicalCategory.FRESH_FRUITS: 'Fresh Fruits'>
        >>> map_category(None, "usda")
        <CanonicalCategory.OTHER: 'Other'>
    """
    try:
        texts = _as_texts(signal)
        if not texts:
            return CanonicalCategory.OTHER

        source = str(getattr(source_name, "value", source_name) or "").lower()

        if source == "openfoodfacts":
            tables = (OFF_TAG_KEYWORDS,)
        elif source == "usda":
            tables = (USDA_TEXT_KEYWORDS,)
        else:
            # Fallback records already carry a canonical name
            for text in texts:
                exact = _CANONICAL_BY_NAME.get(text.strip())
                if exact is not None:
                    return exact
            tables = (OFF_TAG_KEYWORDS, USDA_TEXT_KEYWORDS)

        for table in tables:
            category = _match(texts, table)
            if category is not None:
                return category

    except Exception as e:  # noqa: BLE001
        logger.warning("Category mapping failed", source=source_name, error=str(e))

    return CanonicalCategory.OTHER
