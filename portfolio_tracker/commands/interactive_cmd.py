"""Interactive command implementation."""

import argparse
import logging
from typing import Callable, override

from portfolio_tracker.commands.base import Command, CommandRegistry

logger = logging.getLogger(__name__)


@CommandRegistry.register
class InteractiveCommand(Command):
    """Command to launch interactive menu mode."""

    name: str = "interactive"
    help: str = "Launch interactive menu mode"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the interactive command."""
        _ = subparser.add_parser(cls.name, help=cls.help)
        # No additional arguments needed

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the interactive command."""
        return self._run_interactive_mode()

    def _run_interactive_mode(self) -> int:
        """Run the application in interactive menu mode."""
        # Import other command classes
        from portfolio_tracker.commands.import_cmd import ImportCommand
        from portfolio_tracker.commands.list_cmd import ListCommand
        from portfolio_tracker.commands.refresh_cmd import RefreshCommand
        from portfolio_tracker.commands.report_cmd import ReportCommand

        # Create command instances
        import_cmd: Command = ImportCommand(self.config, self.db, self.container)
        list_cmd: Command = ListCommand(self.config, self.db, self.container)
        refresh_cmd: Command = RefreshCommand(self.config, self.db, self.container)
        report_cmd: Command = ReportCommand(self.config, self.db, self.container)

        def report(report_type: str) -> Callable[[], int]:
            return lambda: report_cmd.execute(argparse.Namespace(type=report_type))

        # Dictionary mapping menu options to handler functions
        handlers: dict[str, Callable[[], int]] = {
            "1": lambda: list_cmd.execute(argparse.Namespace(category=None)),
            "2": lambda: import_cmd.execute(argparse.Namespace(file=None)),
            "3": lambda: refresh_cmd.execute(argparse.Namespace(symbols=None)),
            "4": report("summary"),
            "5": report("categories"),
            "6": report("risk"),
            "7": report("scenarios"),
            "8": report("history"),
            "9": report("performance"),
        }

        while True:
            # Display menu
            print("\n=== Portfolio Tracker Menu ===")
            print("1. List Investments")
            print("2. Import Investments from CSV")
            print("3. Refresh Prices")
            print("4. Portfolio Summary")
            print("5. Category Breakdown")
            print("6. Risk Breakdown")
            print("7. Market Scenario Analysis")
            print("8. Value History")
            print("9. Investment Performance")
            print("0. Exit")

            # Get user choice
            choice: str = input("\nEnter your choice (0-9): ").strip()

            if choice == "0":
                print("Exiting Portfolio Tracker. Goodbye!")
                break

            # Execute handler if valid choice
            handler = handlers.get(choice)
            if handler:
                try:
                    exit_code = handler()
                    if exit_code != 0:
                        print(f"\nCommand completed with exit code {exit_code}")
                except Exception as e:
                    print(f"\nError: {e}")
                    logger.error(f"Error in interactive mode: {e}", exc_info=True)
            else:
                print("Invalid choice. Please try again.")

        return 0
