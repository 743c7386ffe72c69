"""List command implementation."""

import argparse
import logging
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.display import display_lots
from portfolio_tracker.models import Category, InvestmentLot
from portfolio_tracker.services.investment_service import InvestmentService

logger = logging.getLogger(__name__)


@CommandRegistry.register
class ListCommand(Command):
    """Command to list stored investment lots."""

    name: str = "list"
    help: str = "List investments"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the list command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument(
            "--category", choices=[str(c) for c in Category], help="Only show this category"
        )

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the list command."""
        investment_service: InvestmentService = self.container.get_service(InvestmentService)

        try:
            lots: list[InvestmentLot] = investment_service.get_all()
        except Exception as e:
            return self.fail("Failed to load investments", e)

        category: str | None = getattr(args, "category", None)
        if category:
            lots = [lot for lot in lots if lot.category == Category(category)]

        display_lots(lots)
        return 0
