"""Unit tests for the upc-lookup command."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from upc_resolution.domain.product.models import (
    FailureReason,
    NormalizedProduct,
    ResolutionFailure,
    SourceName,
)
from upc_resolution.scripts.lookup_barcode import (
    EXIT_FOUND,
    EXIT_INVALID,
    EXIT_NOT_FOUND,
    exit_code_for,
    main,
    parse_args,
)

PRODUCT = NormalizedProduct(
    code="071592007746",
    name="Mushrooms Stems and Pieces",
    source_name=SourceName.FALLBACK,
)


class TestExitCodes:
    """Test exit_code_for()."""

    def test_found(self) -> None:
        assert exit_code_for(PRODUCT) == EXIT_FOUND

    def test_not_found(self) -> None:
        failure = ResolutionFailure(code="5000000000001", reason=FailureReason.NOT_FOUND)
        assert exit_code_for(failure) == EXIT_NOT_FOUND

    def test_invalid(self) -> None:
        failure = ResolutionFailure(code="123", reason=FailureReason.INVALID_FORMAT)
        assert exit_code_for(failure) == EXIT_INVALID


class TestParseArgs:
    """Test parse_args()."""

    def test_defaults(self) -> None:
        args = parse_args(["071592007746"])

        assert args.barcode == "071592007746"
        assert args.region is None
        assert args.env_file is None
        assert args.compact is False

    def test_options(self) -> None:
        args = parse_args(["5000000000001", "--region", "GBP", "--compact", "--log-level", "DEBUG"])

        assert args.region == "GBP"
        assert args.compact is True
        assert args.log_level == "DEBUG"

    def test_barcode_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """Test main() end to end with a mocked service."""

    @pytest.fixture
    def service(self) -> MagicMock:
        service = MagicMock()
        service.resolve = AsyncMock(return_value=PRODUCT)
        return service

    def test_prints_json(self, service: MagicMock, capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "upc_resolution.scripts.lookup_barcode.build_resolution_service",
            return_value=service,
        ), patch("upc_resolution.scripts.lookup_barcode.configure_logging"):
            code = main(["71592007746", "--region", "USD", "--compact"])

        assert code == EXIT_FOUND
        output = json.loads(capsys.readouterr().out)
        assert output["found"] is True
        assert output["source_name"] == "fallback"
        service.resolve.assert_awaited_once_with("71592007746", region_hint="USD")

    def test_not_found_exit_code(
        self, service: MagicMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        service.resolve.return_value = ResolutionFailure(
            code="5000000000001", reason=FailureReason.NOT_FOUND
        )

        with patch(
            "upc_resolution.scripts.lookup_barcode.build_resolution_service",
            return_value=service,
        ), patch("upc_resolution.scripts.lookup_barcode.configure_logging"):
            code = main(["5000000000001"])

        assert code == EXIT_NOT_FOUND
        assert json.loads(capsys.readouterr().out)["reason"] == "NOT_FOUND"
