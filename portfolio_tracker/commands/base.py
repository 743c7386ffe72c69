"""Base command class and the registry commands add themselves to."""

import argparse
import logging
import sys
from abc import ABC, abstractmethod

from portfolio_tracker.config import AppConfig
from portfolio_tracker.container import ServiceContainer
from portfolio_tracker.db import Database
from portfolio_tracker.repositories.settings_repository import SettingsRepository

logger = logging.getLogger(__name__)


class Command(ABC):
    """Base class for all CLI commands."""

    name: str  # Command name used in CLI
    help: str  # Help text shown in CLI

    def __init__(self, config: AppConfig, db: Database, container: ServiceContainer):
        """
        Initialise command with configuration, database connection, and service container.

        Args:
            config: AppConfig object
            db: Database object
            container: ServiceContainer object
        """
        self.config: AppConfig = config
        self.db: Database = db
        self.container: ServiceContainer = container

    @classmethod
    @abstractmethod
    def setup_parser(cls, subparser) -> None:
        """
        Configure the argument parser for this command.

        Args:
            subparser: The subparsers action to add this command's parser to
        """
        pass

    @abstractmethod
    def execute(self, args: argparse.Namespace) -> int:
        """
        Execute the command with the given arguments.

        Args:
            args: Command line arguments from argparse

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        pass

    def display_currency(self) -> str:
        """Currency code from the stored user settings, used to label values."""
        return self.container.get_repository(SettingsRepository).get().currency

    def fail(self, message: str, error: Exception | None = None) -> int:
        """Log and print a command failure, returning the error exit code."""
        if error is not None:
            logger.error(f"{message}: {error}", exc_info=True)
            print(f"Error: {message}: {error}", file=sys.stderr)
        else:
            logger.error(message)
            print(f"Error: {message}", file=sys.stderr)
        return 1


class CommandRegistry:
    """Registry of available commands."""

    _commands: dict[str, type[Command]] = {}

    @classmethod
    def register(cls, command_class: type[Command]) -> type[Command]:
        """
        Register a command class with the registry.

        Args:
            command_class: Command class to register

        Returns:
            The registered command class (for decorator use)
        """
        cls._commands[command_class.name] = command_class
        return command_class

    @classmethod
    def get_commands(cls) -> dict[str, type[Command]]:
        """Get all registered commands, keyed by command name."""
        return cls._commands.copy()
