"""Command-line interface for the NEAR oracle client."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import AppConfig, connection_config_from, load_config
from .connection import LedgerConnection
from .errors import NotFoundError, OracleError
from .identifiers import DerivationMethod, PriceIdentifier, derive
from .interfaces import PriceOracle
from .logging_setup import configure_logging
from .oracles import PriceDataOracle, PythOracle
from .oracles.price_data import PRICE_DATA_VIEW_METHODS
from .oracles.pyth import PYTH_CHANGE_METHODS, PYTH_VIEW_METHODS

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="near-oracle",
        description="Query price oracles on NEAR",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    method_choices = [DerivationMethod.DIGEST.value, DerivationMethod.TRUNCATE_PAD.value]

    derive_p = sub.add_parser("derive", help="Print the identifier for a symbol")
    derive_p.add_argument("symbol")
    derive_p.add_argument(
        "--method",
        choices=method_choices,
        default=DerivationMethod.DIGEST.value,
        help="Derivation method (default: digest)",
    )

    price_p = sub.add_parser("price", help="Fetch the price for a symbol")
    price_p.add_argument("symbol")
    price_p.add_argument(
        "--method",
        choices=method_choices,
        default=None,
        help="Derivation method (overrides config)",
    )

    data_p = sub.add_parser("price-data", help="Fetch asset prices from the price-data oracle")
    data_p.add_argument("assets", nargs="*", help="Asset ids (default: all)")

    return parser


def resolve_identifier(
    config: AppConfig, symbol: str, method: str | None = None
) -> PriceIdentifier:
    """Published feed id when configured, otherwise derive from the symbol."""
    if method is None and symbol in config.oracle.feeds:
        return PriceIdentifier.from_feed_id(config.oracle.feeds[symbol])
    return derive(symbol, DerivationMethod(method or config.oracle.identifier_method))


async def _price(config: AppConfig, symbol: str, method: str | None) -> None:
    identifier = resolve_identifier(config, symbol, method)
    async with LedgerConnection(connection_config_from(config)) as conn:
        handle = conn.bind(
            config.oracle.contract_id,
            view_methods=PYTH_VIEW_METHODS,
            change_methods=PYTH_CHANGE_METHODS,
        )
        oracle: PriceOracle = PythOracle(
            handle,
            identifier_encoding=config.oracle.identifier_encoding,
            argument_name=config.oracle.argument_name,
        )
        record = await oracle.get_price(identifier)

    print(f"{symbol} ({identifier.hex()})")
    print(f"  price:        {record.value:,.8f}")
    print(f"  confidence:   {record.confidence:,.8f}")
    print(f"  publish_time: {record.publish_time}")


async def _price_data(config: AppConfig, assets: list[str]) -> None:
    async with LedgerConnection(connection_config_from(config)) as conn:
        handle = conn.bind(
            config.price_data_oracle.contract_id, view_methods=PRICE_DATA_VIEW_METHODS
        )
        data = await PriceDataOracle(handle).get_price_data(assets or None)

    print(f"timestamp: {data.timestamp} (recency {data.recency_duration_sec}s)")
    for entry in data.prices:
        shown = f"{entry.price.value:,.8f}" if entry.price else "n/a"
        print(f"  {entry.asset_id}: {shown}")


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit status."""
    configure_logging(args.log_level)

    if args.command == "derive":
        print(derive(args.symbol, DerivationMethod(args.method)).hex())
        return 0

    try:
        config = load_config(args.config)
        if args.command == "price":
            await _price(config, args.symbol, args.method)
        elif args.command == "price-data":
            await _price_data(config, args.assets)
        else:
            build_parser().print_help()
            return EXIT_ERROR
    except NotFoundError as e:
        logger.error("Not registered: %s", e)
        return EXIT_NOT_FOUND
    except OracleError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return EXIT_ERROR
    except FileNotFoundError as e:
        logger.error("%s", e)
        return EXIT_ERROR
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
