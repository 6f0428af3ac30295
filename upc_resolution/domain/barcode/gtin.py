"""
GTIN-14 conversion.

USDA FoodData Central stores branded foods under their 14-digit GTIN.
"""

from __future__ import annotations

from typing import Union

from upc_resolution.domain.barcode.validation import strip_non_digits
from upc_resolution.domain.shared.value_objects import Barcode

GTIN14_LENGTH = 14

# digit count -> zeros to prepend
_GTIN14_PREFIXES = {
    12: "00",  # UPC-A
    13: "0",  # EAN-13
    8: "000000",  # EAN-8
    14: "",
}


def to_gtin14(code: Union[Barcode, str]) -> str:
    """Convert a UPC/EAN code to GTIN-14.

    Example:
        >>> to_gtin14("046000861210")
        '00046000861210'
        >>> to_gtin14("12345678")
        '00000012345678'
        >>> to_gtin14("3017620422003")
        '03017620422003'
    """
    digits = code.value if isinstance(code, Barcode) else strip_non_digits(code)

    prefix = _GTIN14_PREFIXES.get(len(digits))
    if prefix is not None:
        return prefix + digits

    return digits.zfill(GTIN14_LENGTH)
