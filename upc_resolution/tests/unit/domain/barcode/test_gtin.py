"""Unit tests for GTIN-14 conversion."""

import pytest

from upc_resolution.domain.barcode.gtin import to_gtin14
from upc_resolution.domain.shared.value_objects import Barcode


class TestToGtin14:
    """Test to_gtin14()."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("071592007746", "00071592007746"),
            ("0046000861210", "00046000861210"),
            ("96385074", "00000096385074"),
            ("00046000861210", "00046000861210"),
            ("1234567890", "00001234567890"),
        ],
    )
    def test_conversion(self, code: str, expected: str) -> None:
        """Test each supported length is prefixed to 14 digits."""
        assert to_gtin14(code) == expected

    def test_accepts_barcode(self) -> None:
        """Test a Barcode value object converts by value."""
        assert to_gtin14(Barcode(value="071592007746")) == "00071592007746"

    def test_always_fourteen_digits(self) -> None:
        """Test results are always 14 digits long."""
        for code in ("123456", "12345678", "123456789012", "1234567890123"):
            assert len(to_gtin14(code)) == 14
