"""
Barcode format and region detection.

Pure functions: classify a clean code by length and, for EAN-13, infer a
probable origin from the numeric prefix. The prefix table is coarse (GS1
allocation is finer grained and changes over time), so the region is a
best-effort hint for diagnostics and suggestions only.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from upc_resolution.domain.barcode.validation import strip_non_digits
from upc_resolution.domain.shared.value_objects import Barcode


class BarcodeFormat(str, Enum):
    """Barcode symbology inferred from length."""

    EAN_8 = "EAN-8"
    UPC_A = "UPC-A"
    EAN_13 = "EAN-13"
    GTIN_14 = "GTIN-14"
    UNKNOWN = "UNKNOWN"


class BarcodeRegion(str, Enum):
    """Probable origin of the product."""

    US = "US"
    UK = "UK"
    FR = "FR"
    INTERNATIONAL = "INTERNATIONAL"
    GLOBAL = "GLOBAL"
    UNKNOWN = "UNKNOWN"


class BarcodeType(str, Enum):
    """Coarse barcode kind."""

    SHORT = "short"
    STANDARD = "standard"
    CASE = "case"  # Shipping case / trade unit
    INVALID = "invalid"


class BarcodeFormatInfo(BaseModel):
    """Derived barcode classification.

    Example:
        >>> info = BarcodeFormatInfo(
        ...     format=BarcodeFormat.UPC_A,
        ...     region=BarcodeRegion.US,
        ...     type=BarcodeType.STANDARD,
        ... )
        >>> assert info.format == BarcodeFormat.UPC_A
    """

    model_config = ConfigDict(frozen=True)

    format: BarcodeFormat = Field(..., description="Barcode symbology")
    region: BarcodeRegion = Field(..., description="Probable origin")
    type: BarcodeType = Field(..., description="Barcode kind")


UNKNOWN_FORMAT = BarcodeFormatInfo(
    format=BarcodeFormat.UNKNOWN,
    region=BarcodeRegion.UNKNOWN,
    type=BarcodeType.INVALID,
)

# (low, high, region) on the first three digits, inclusive
EAN13_PREFIX_REGIONS: tuple[tuple[int, int, BarcodeRegion], ...] = (
    (0, 139, BarcodeRegion.US),
    (500, 509, BarcodeRegion.UK),
    (300, 379, BarcodeRegion.FR),
)


def region_for_ean13(code: str) -> BarcodeRegion:
    """Map an EAN-13 prefix to a region.

    Example:
        >>> region_for_ean13("5030000000000")
        <BarcodeRegion.UK: 'UK'>
    """
    prefix = int(code[:3])
    for low, high, region in EAN13_PREFIX_REGIONS:
        if low <= prefix <= high:
            return region
    return BarcodeRegion.INTERNATIONAL


def detect_format(code: Union[Barcode, str]) -> BarcodeFormatInfo:
    """Classify a clean code.

    Args:
        code: Clean Barcode (or digit string; non-digits are ignored)

    Returns:
        BarcodeFormatInfo (UNKNOWN/UNKNOWN/invalid for odd lengths)

    Example:
        >>> detect_format("071592007746").format
        <BarcodeFormat.UPC_A: 'UPC-A'>
        >>> detect_format("3017620422003").region
        <BarcodeRegion.FR: 'FR'>
    """
    digits = code.value if isinstance(code, Barcode) else strip_non_digits(code or "")
    length = len(digits)

    if length == 8:
        return BarcodeFormatInfo(
            format=BarcodeFormat.EAN_8,
            region=BarcodeRegion.INTERNATIONAL,
            type=BarcodeType.SHORT,
        )
    if length == 12:
        return BarcodeFormatInfo(
            format=BarcodeFormat.UPC_A,
            region=BarcodeRegion.US,
            type=BarcodeType.STANDARD,
        )
    if length == 13:
        return BarcodeFormatInfo(
            format=BarcodeFormat.EAN_13,
            region=region_for_ean13(digits),
            type=BarcodeType.STANDARD,
        )
    if length == 14:
        return BarcodeFormatInfo(
            format=BarcodeFormat.GTIN_14,
            region=BarcodeRegion.GLOBAL,
            type=BarcodeType.CASE,
        )

    return UNKNOWN_FORMAT
