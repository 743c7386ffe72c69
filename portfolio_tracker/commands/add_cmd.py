"""Add command implementation."""

import argparse
import logging
from datetime import datetime
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.models import Category, InvestmentLot, MarketScenario, RiskLevel
from portfolio_tracker.services.investment_service import InvestmentService, create_lot
from portfolio_tracker.utils.parser_utils import format_choices, parse_scenarios

logger = logging.getLogger(__name__)


def add_lot_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    """Lot fields shared by the add and update commands."""
    _ = parser.add_argument("--name", dest="asset_name", required=required, help="Asset name")
    _ = parser.add_argument(
        "--category",
        required=required,
        choices=[str(c) for c in Category],
        help="Asset category",
    )
    _ = parser.add_argument(
        "--risk",
        dest="risk_level",
        required=required,
        choices=[str(r) for r in RiskLevel],
        help="Risk level",
    )
    _ = parser.add_argument("--quantity", type=float, required=required, help="Units held")
    _ = parser.add_argument(
        "--price", dest="purchase_price", type=float, required=required, help="Price paid per unit"
    )
    _ = parser.add_argument("--fees", type=float, help="Brokerage and other fees")
    _ = parser.add_argument(
        "--scenarios",
        dest="market_scenarios",
        type=parse_scenarios,
        help="Comma separated market scenarios, e.g. growth,low-interest",
    )
    _ = parser.add_argument("--ticker", help="Ticker symbol used for price refresh")
    _ = parser.add_argument(
        "--date",
        dest="purchase_date",
        type=datetime.fromisoformat,
        help="Purchase date (YYYY-MM-DD)",
    )
    _ = parser.add_argument(
        "--current-price", type=float, help="Manually set the current price per unit"
    )
    _ = parser.add_argument("--currency", help="Currency of the purchase (default USD)")
    _ = parser.add_argument("--notes", help="Free-form notes")


@CommandRegistry.register
class AddCommand(Command):
    """Command to add an investment lot."""

    name: str = "add"
    help: str = "Add an investment"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the add command."""
        parser: argparse.ArgumentParser = subparser.add_parser(
            cls.name,
            help=cls.help,
            epilog=f"Scenarios: {format_choices(MarketScenario)}",
        )
        add_lot_arguments(parser, required=True)

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the add command."""
        investment_service: InvestmentService = self.container.get_service(InvestmentService)

        try:
            lot: InvestmentLot = create_lot(
                asset_name=args.asset_name,
                category=args.category,
                risk_level=args.risk_level,
                quantity=args.quantity,
                purchase_price=args.purchase_price,
                fees=args.fees or 0.0,
                market_scenarios=args.market_scenarios,
                ticker=args.ticker,
                purchase_date=args.purchase_date,
                current_price=args.current_price,
                currency=args.currency or self.display_currency(),
                notes=args.notes,
            )
            _ = investment_service.add(lot)
        except ValueError as e:
            return self.fail("Invalid investment", e)
        except Exception as e:
            return self.fail("Failed to add investment", e)

        print(f"Added {lot.asset_name} ({lot.id}), total cost {lot.total_cost:,.2f} {lot.currency}")
        return 0
