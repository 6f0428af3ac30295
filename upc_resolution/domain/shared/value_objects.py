"""
Shared value objects.

Immutable, validated domain primitives.
Following DDD value object pattern.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Barcode(BaseModel):
    """
    Clean product barcode value object.

    Digits only, 6-14 long. Produced by the barcode validator, which may
    have left-padded the scanned digits to the 12-digit UPC-A form.

    Example:
        >>> barcode = Barcode(value="071592007746", original_length=11, padded=True)
        >>> assert len(barcode.value) == 12
        >>> assert str(barcode) == "071592007746"
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d{6,14}$", description="Barcode digits")
    original_length: int = Field(0, ge=0, description="Digit count before padding")
    padded: bool = Field(False, description="Whether leading zeros were added")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"
