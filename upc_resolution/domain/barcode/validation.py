"""
Barcode normalization and validation.

Turns whatever a scanner or a human typed into a clean digit code.
Scanners and manual entry frequently drop leading zeros; padding recovers
the standard UPC-A form without guessing semantics.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from upc_resolution.domain.shared.errors import (
    BarcodeValidationError,
    ValidationReason,
)
from upc_resolution.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)

MIN_DIGITS = 6
MAX_DIGITS = 14
UPC_A_LENGTH = 12

_NON_DIGITS = re.compile(r"\D")
_ALL_ZEROS = re.compile(r"^0+$")
# One digit repeated nine or more times, nothing else
_REPEATED_DIGIT = re.compile(r"^(\d)\1{8,}$")


def strip_non_digits(raw: str) -> str:
    """Remove every non-digit character."""
    return _NON_DIGITS.sub("", raw)


def is_pattern_artifact(code: str) -> bool:
    """Check for scanner misreads such as all zeros or one repeated digit.

    Example:
        >>> is_pattern_artifact("000000000000")
        True
        >>> is_pattern_artifact("111111111111")
        True
        >>> is_pattern_artifact("071592007746")
        False
    """
    return bool(_ALL_ZEROS.match(code) or _REPEATED_DIGIT.match(code))


def validate_barcode(raw: Optional[str]) -> Barcode:
    """Clean and validate a raw barcode.

    Algorithm:
    1. Strip all non-digits
    2. Reject < 6 digits (TOO_SHORT) and > 14 digits (TOO_LONG)
    3. 11 digits: prefix one "0" (UPC-A missing its system digit)
    4. 6-10 digits: left-pad with zeros to 12 digits
    5. Reject all-zero / single repeated digit codes (INVALID_PATTERN)

    Args:
        raw: Caller-supplied barcode string

    Returns:
        Clean Barcode value object

    Raises:
        BarcodeValidationError: If the input cannot be a barcode

    Example:
        >>> validate_barcode("71592007746").value
        '071592007746'
        >>> validate_barcode("0 46000-86121 0").value
        '046000861210'
    """
    if raw is None or not isinstance(raw, str) or not raw.strip():
        raise BarcodeValidationError(ValidationReason.EMPTY, raw=raw)

    digits = strip_non_digits(raw)
    original_length = len(digits)

    if original_length < MIN_DIGITS:
        raise BarcodeValidationError(ValidationReason.TOO_SHORT, raw=raw, clean_code=digits)

    if original_length > MAX_DIGITS:
        raise BarcodeValidationError(ValidationReason.TOO_LONG, raw=raw, clean_code=digits)

    clean = digits
    if original_length == 11:
        clean = "0" + digits
    elif original_length <= 10:
        clean = digits.zfill(UPC_A_LENGTH)

    if clean != digits:
        logger.debug(
            "Padded barcode to UPC-A",
            original=digits,
            padded=clean,
            original_length=original_length,
        )

    if is_pattern_artifact(clean):
        raise BarcodeValidationError(ValidationReason.INVALID_PATTERN, raw=raw, clean_code=clean)

    return Barcode(
        value=clean,
        original_length=original_length,
        padded=clean != digits,
    )
