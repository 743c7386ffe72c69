"""Update command implementation."""

import argparse
import logging
from typing import Any, override

from portfolio_tracker.commands.add_cmd import add_lot_arguments
from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.models import Category, InvestmentLot, MarketScenario, RiskLevel
from portfolio_tracker.services.investment_service import InvestmentService

logger = logging.getLogger(__name__)

# argparse destinations that map straight onto lot fields
LOT_FIELDS: tuple[str, ...] = (
    "asset_name",
    "category",
    "risk_level",
    "quantity",
    "purchase_price",
    "fees",
    "market_scenarios",
    "ticker",
    "purchase_date",
    "current_price",
    "currency",
    "notes",
)


def changes_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the lot fields the user actually passed, converted to model types."""
    changes: dict[str, Any] = {
        name: getattr(args, name) for name in LOT_FIELDS if getattr(args, name, None) is not None
    }
    if "category" in changes:
        changes["category"] = Category(changes["category"])
    if "risk_level" in changes:
        changes["risk_level"] = RiskLevel(changes["risk_level"])
    if "market_scenarios" in changes:
        changes["market_scenarios"] = list(
            dict.fromkeys(MarketScenario(s) for s in changes["market_scenarios"])
        )
    if "ticker" in changes:
        changes["ticker"] = changes["ticker"].strip().upper() or None
    if "currency" in changes:
        changes["currency"] = changes["currency"].strip().upper()
    return changes


@CommandRegistry.register
class UpdateCommand(Command):
    """Command to edit an existing investment lot."""

    name: str = "update"
    help: str = "Edit an investment"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the update command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument("id", help="Investment ID (see 'list')")
        add_lot_arguments(parser, required=False)

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the update command."""
        investment_service: InvestmentService = self.container.get_service(InvestmentService)

        try:
            changes: dict[str, Any] = changes_from_args(args)
        except ValueError as e:
            return self.fail("Invalid investment", e)

        if not changes:
            print("Nothing to update. Pass at least one field, e.g. --quantity 10")
            return 1

        try:
            updated: InvestmentLot = investment_service.update(args.id, **changes)
        except KeyError:
            return self.fail(f"Investment '{args.id}' not found")
        except ValueError as e:
            return self.fail("Invalid investment", e)
        except Exception as e:
            return self.fail("Failed to update investment", e)

        print(
            f"Updated {updated.asset_name} ({updated.id}), "
            f"total cost {updated.total_cost:,.2f} {updated.currency}"
        )
        return 0
