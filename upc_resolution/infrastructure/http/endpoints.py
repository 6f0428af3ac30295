"""
Endpoint selection.

Orders each source's endpoints by the caller's region hint so the most
likely regional database is asked first.
"""

from typing import Mapping, Optional, Sequence

from upc_resolution.domain.product.models import SourceName

OFF_GLOBAL = "https://world.openfoodfacts.org/api/v2/product"
OFF_US = "https://us.openfoodfacts.org/api/v2/product"
OFF_UK = "https://uk.openfoodfacts.org/api/v2/product"
OFF_FRANCE = "https://fr.openfoodfacts.org/api/v2/product"

USDA_BASE_URL = "https://api.nal.usda.gov/fdc/v1"

DEFAULT_REGION_KEY = "*"

# source -> region hint (upper case) -> ordered endpoints
DEFAULT_ENDPOINT_TABLE: dict[str, dict[str, tuple[str, ...]]] = {
    SourceName.OPENFOODFACTS.value: {
        "USD": (OFF_GLOBAL, OFF_US, OFF_UK),
        "GBP": (OFF_UK, OFF_GLOBAL, OFF_FRANCE),
        DEFAULT_REGION_KEY: (OFF_GLOBAL, OFF_UK, OFF_FRANCE),
    },
    SourceName.USDA.value: {
        DEFAULT_REGION_KEY: (USDA_BASE_URL,),
    },
}


class EndpointSelector:
    """Region-aware endpoint ordering.

    Example:
        >>> selector = EndpointSelector()
        >>> selector.select_endpoints("openfoodfacts", "gbp")[0]
        'https://uk.openfoodfacts.org/api/v2/product'
        >>> selector.select_endpoints("unknown", "USD")
        []
    """

    def __init__(
        self,
        table: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
    ) -> None:
        """Initialize selector.

        Args:
            table: Endpoint table override (source -> region -> endpoints),
                with "*" as the per-source default
        """
        self._table = table if table is not None else DEFAULT_ENDPOINT_TABLE

    def select_endpoints(self, source_name: str, region_hint: Optional[str]) -> list[str]:
        """Return endpoints for a source, preferred first.

        Args:
            source_name: Source identifier (str or SourceName)
            region_hint: Caller currency/locale hint, case-insensitive

        Returns:
            Ordered endpoint list, empty for an unknown source
        """
        key = str(getattr(source_name, "value", source_name))
        regions = self._table.get(key)
        if not regions:
            return []

        hint = (region_hint or "").strip().upper()
        endpoints = regions.get(hint) or regions.get(DEFAULT_REGION_KEY) or ()
        return list(endpoints)
