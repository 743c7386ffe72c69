"""Utilities for working with argument parsers."""

import argparse
from dataclasses import fields
from typing import Any, get_origin, ClassVar

from portfolio_tracker.config import AppConfig


def add_config_options(
    parser: argparse.ArgumentParser | argparse._ArgumentGroup,
    config_class: type = AppConfig,
) -> None:
    """
    Dynamically add configuration options to a parser based on a dataclass.

    Args:
        parser: The argument parser (or group) to add options to
        config_class: The dataclass to extract fields from (default: AppConfig)
    """
    for field in fields(config_class):
        # Skip private fields and ClassVars
        if field.name.startswith("_") or get_origin(field.type) is ClassVar:
            continue

        arg_name: str = f"--{field.name.replace('_', '-')}"  # eg. db_path -> --db-path
        help_text: str = f"Override {field.name} configuration value"

        if field.type is bool:
            _ = parser.add_argument(arg_name, action="store_true", default=None, help=help_text)
            continue

        type_name: str = getattr(field.type, "__name__", str(field.type))

        # Accept everything as strings, ConfigLoader converts to the field type
        _ = parser.add_argument(
            arg_name,
            type=str,
            default=None,  # So we know if user passed it
            metavar=type_name.upper(),
            help=help_text,
        )


def parse_key_value(text: str) -> tuple[str, str]:
    """Split a KEY=VALUE command line argument."""
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{text}'")
    return key.strip(), value.strip()


def parse_scenarios(text: str) -> list[str]:
    """Comma or semicolon separated list, e.g. 'growth,low-interest'."""
    return [part.strip() for part in text.replace(";", ",").split(",") if part.strip()]


def format_choices(values: Any) -> str:
    return ", ".join(str(v) for v in values)
