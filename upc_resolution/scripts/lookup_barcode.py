#!/usr/bin/env python3
"""
Barcode lookup tool.

Resolves one barcode through the full pipeline and prints the result as
JSON. Logs go to stderr.

Usage:
    upc-lookup 071592007746 --region USD
    python -m upc_resolution.scripts.lookup_barcode 5000000000001 --region GBP

Exit codes: 0 product found, 1 not found, 2 invalid barcode.
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from upc_resolution.application.factory import build_resolution_service
from upc_resolution.config import load_settings
from upc_resolution.domain.product.models import (
    FailureReason,
    NormalizedProduct,
    ResolutionResult,
)
from upc_resolution.logging_config import configure_logging

logger = structlog.get_logger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="upc-lookup",
        description="Resolve a UPC/EAN/GTIN barcode to a product.",
    )
    parser.add_argument("barcode", help="Barcode as scanned or typed")
    parser.add_argument(
        "--region",
        default=None,
        help="Currency/locale hint (USD, GBP, ...); defaults to UPC_RESOLVER_REGION_HINT",
    )
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    parser.add_argument(
        "--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING)"
    )
    parser.add_argument(
        "--compact", action="store_true", help="Print JSON on a single line"
    )
    return parser.parse_args(argv)


def exit_code_for(result: ResolutionResult) -> int:
    if isinstance(result, NormalizedProduct):
        return EXIT_FOUND
    if result.reason == FailureReason.INVALID_FORMAT:
        return EXIT_INVALID
    return EXIT_NOT_FOUND


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.env_file)
    configure_logging(args.log_level or settings.log_level, settings.log_json)

    service = build_resolution_service(settings)
    result = await service.resolve(args.barcode, region_hint=args.region)

    print(result.model_dump_json(indent=None if args.compact else 2))
    return exit_code_for(result)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.warning("Lookup interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
