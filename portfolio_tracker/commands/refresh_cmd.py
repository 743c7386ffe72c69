"""Refresh command implementation."""

import argparse
import logging
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.display import display_summary
from portfolio_tracker.models import Portfolio, PriceData
from portfolio_tracker.services.portfolio_service import PortfolioService
from portfolio_tracker.services.price_service import PriceService

logger = logging.getLogger(__name__)


@CommandRegistry.register
class RefreshCommand(Command):
    """Command to refresh current prices from Yahoo Finance."""

    name: str = "refresh"
    help: str = "Refresh current prices"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the refresh command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument(
            "--symbol",
            action="append",
            dest="symbols",
            help="Only look up these symbols and print their prices (repeatable)",
        )

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the refresh command."""
        price_service: PriceService = self.container.get_service(PriceService)
        symbols: list[str] | None = getattr(args, "symbols", None)

        if symbols:
            return self._quote(price_service, symbols)

        portfolio_service: PortfolioService = self.container.get_service(PortfolioService)
        print("Refreshing prices...")
        try:
            portfolio: Portfolio = portfolio_service.refresh_prices(price_service)
        except Exception as e:
            return self.fail("Failed to refresh prices", e)

        display_summary(portfolio, self.display_currency())
        return 0

    def _quote(self, price_service: PriceService, symbols: list[str]) -> int:
        """Print prices for the given symbols without touching stored investments."""
        try:
            prices: dict[str, PriceData | None] = price_service.fetch_prices(symbols)
        except Exception as e:
            return self.fail("Failed to fetch prices", e)

        result = 0
        for symbol, price in prices.items():
            if price is None:
                print(f"{symbol}: price unavailable")
                result = 1
            else:
                print(
                    f"{symbol}: {price.price:,.4f} "
                    f"({price.change:+,.4f}, {price.change_percent:+.2f}%)"
                )
        return result
