"""Remove command implementation."""

import argparse
import logging
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.services.investment_service import InvestmentService

logger = logging.getLogger(__name__)


@CommandRegistry.register
class RemoveCommand(Command):
    """Command to delete investment lots."""

    name: str = "remove"
    help: str = "Remove one or more investments"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the remove command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument("ids", nargs="+", help="Investment IDs (see 'list')")

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the remove command."""
        investment_service: InvestmentService = self.container.get_service(InvestmentService)

        result = 0
        for lot_id in args.ids:
            try:
                if investment_service.delete(lot_id):
                    print(f"Removed {lot_id}")
                else:
                    result = self.fail(f"Investment '{lot_id}' not found")
            except Exception as e:
                result = self.fail(f"Failed to remove {lot_id}", e)
        return result
