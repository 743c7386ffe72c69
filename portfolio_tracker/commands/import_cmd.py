"""Import command implementation."""

import argparse
import logging
from pathlib import Path
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.importer import import_investments
from portfolio_tracker.services.investment_service import InvestmentService

logger = logging.getLogger(__name__)


@CommandRegistry.register
class ImportCommand(Command):
    """Command to import investment lots from a CSV file."""

    name: str = "import"
    help: str = "Import investments from CSV"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the import command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument(
            "file",
            nargs="?",
            help="CSV file to import (defaults to config.csv_path if not specified)",
        )

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the import command."""
        # Determine the CSV file to import
        csv_path: Path = Path(args.file) if getattr(args, "file", None) else self.config.csv_path

        if not csv_path.exists():
            return self.fail(f"CSV file not found: {csv_path}")

        investment_service: InvestmentService = self.container.get_service(InvestmentService)

        logger.info(f"Importing investments from {csv_path}")
        print(f"Importing investments from {csv_path}...")

        try:
            imported: int = import_investments(csv_path, investment_service)
        except Exception as e:
            return self.fail("Import failed", e)

        print(f"Import completed. {imported} investment(s) imported.")
        return 0
