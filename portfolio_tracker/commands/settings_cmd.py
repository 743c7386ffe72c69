"""Settings command implementation."""

import argparse
import logging
from dataclasses import asdict
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.models import AppSettings
from portfolio_tracker.repositories.settings_repository import SettingsRepository
from portfolio_tracker.utils.parser_utils import parse_key_value

logger = logging.getLogger(__name__)


@CommandRegistry.register
class SettingsCommand(Command):
    """Command to show or change user settings."""

    name: str = "settings"
    help: str = "Show or change settings"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the settings command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        actions = parser.add_subparsers(dest="action")
        _ = actions.add_parser("show", help="Show current settings")
        set_parser: argparse.ArgumentParser = actions.add_parser(
            "set", help="Change settings, e.g. 'settings set currency=AUD refresh_interval=30'"
        )
        _ = set_parser.add_argument("pairs", nargs="+", type=parse_key_value, metavar="KEY=VALUE")

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the settings command."""
        settings_repo: SettingsRepository = self.container.get_repository(SettingsRepository)
        action: str = getattr(args, "action", None) or "show"

        if action == "show":
            self._print_settings(settings_repo.get())
            return 0

        updates: dict[str, str] = dict(args.pairs)
        if "currency" in updates:
            updates["currency"] = updates["currency"].upper()

        try:
            settings: AppSettings = settings_repo.save(**updates)
        except KeyError as e:
            return self.fail(f"Unknown setting {e}")
        except (ValueError, TypeError) as e:
            return self.fail("Invalid setting value", e)

        logger.info(f"Updated settings: {sorted(updates)}")
        self._print_settings(settings)
        return 0

    @staticmethod
    def _print_settings(settings: AppSettings) -> None:
        for key, value in asdict(settings).items():
            print(f"{key:<18} {value}")
