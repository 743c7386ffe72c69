import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from portfolio_tracker.models import InvestmentLot, MarketScenario
from portfolio_tracker.services.investment_service import InvestmentService, create_lot

logger: logging.Logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = (
    "asset_name",
    "category",
    "risk_level",
    "quantity",
    "purchase_price",
)
SCENARIO_SEPARATOR: str = ";"


# --- CSV Parsing Functions  ---
def parse_csv_datetime(value: Any) -> datetime:
    """Parses an ISO date or datetime string from CSV. Empty values mean now."""
    if not isinstance(value, str):
        raise ValueError(f"Expected string for datetime, got {type(value)}")
    if value.strip() == "":
        return datetime.now()
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid datetime format: '{value}'. Expected ISO format, e.g. 2024-01-31")


def parse_csv_float(value: Any, field_name: str, default: float | None = None) -> float:
    """Parses a value from CSV into a float."""
    # Handle empty strings which come from pandas fillna('')
    if isinstance(value, str) and value.strip() == "":
        if default is not None:
            return default
        raise ValueError(f"Empty string value for '{field_name}'")
    if value is None:
        raise ValueError(f"Missing value for '{field_name}'")

    try:
        return float(value)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid float value for '{field_name}': '{value}' (type: {type(value)})")


def parse_csv_scenarios(value: Any) -> list[MarketScenario]:
    """Parses 'growth;low-interest' into scenarios. Unknown scenarios raise ValueError."""
    if not isinstance(value, str) or not value.strip():
        return []
    return [
        MarketScenario(part.strip().lower())
        for part in value.split(SCENARIO_SEPARATOR)
        if part.strip()
    ]


def read_csv_file(csv_path: Path) -> pd.DataFrame | None:
    """
    Read and validate a CSV file.

    Args:
        csv_path: Path to the CSV file

    Returns:
        DataFrame containing the CSV data or None if there was an error
    """
    try:
        df: pd.DataFrame = pd.read_csv(csv_path, dtype=str).fillna("")
        if df.empty:
            logger.warning(f"CSV file is empty: {csv_path}")
            return None
        df.columns = [str(c).strip().lower() for c in df.columns]
        missing: list[str] = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            logger.error(f"CSV file {csv_path} is missing required columns: {missing}")
            return None
        return df
    except FileNotFoundError:
        logger.error(f"CSV file not found: {csv_path}")
        return None
    except Exception as e:
        logger.error(f"Error reading CSV file {csv_path}: {e}")
        return None


def lot_from_row(row_data: dict[str, str]) -> InvestmentLot:
    """
    Build a validated lot from one CSV row.

    Raises:
        ValueError: If any field is missing or invalid
    """
    currency: str = row_data.get("currency", "").strip() or "USD"
    notes: str | None = row_data.get("notes", "").strip() or None

    return create_lot(
        asset_name=row_data.get("asset_name", ""),
        category=row_data.get("category", "").strip().lower(),
        risk_level=row_data.get("risk_level", "").strip().lower(),
        quantity=parse_csv_float(row_data.get("quantity", ""), "quantity"),
        purchase_price=parse_csv_float(row_data.get("purchase_price", ""), "purchase_price"),
        fees=parse_csv_float(row_data.get("fees", ""), "fees", default=0.0),
        market_scenarios=parse_csv_scenarios(row_data.get("market_scenarios", "")),
        ticker=row_data.get("ticker", "") or None,
        purchase_date=parse_csv_datetime(row_data.get("purchase_date", "")),
        currency=currency,
        notes=notes,
    )


def import_investments(csv_path: Path, investment_service: InvestmentService) -> int:
    """
    Import investment lots from a CSV file.

    Rows that fail validation are logged and skipped.

    Args:
        csv_path: Path to the CSV file
        investment_service: Service used to store the new lots

    Returns:
        Number of lots successfully imported
    """
    df = read_csv_file(csv_path)
    if df is None or df.empty:
        return 0

    imported = 0
    for i in range(len(df)):
        # Calculate human-readable row number (1-based, plus 1 for header)
        row_number: int = i + 2
        row_data: dict[str, str] = df.iloc[i].to_dict()

        try:
            lot: InvestmentLot = lot_from_row(row_data)
            _ = investment_service.add(lot)
            imported += 1
            logger.info(f"Row {row_number}: Imported {lot.asset_name} as {lot.id}")
        except ValueError as e:
            logger.error(f"Row {row_number}: Validation error: {e}. Skipping row: {row_data}")
            continue
        except Exception as e:
            logger.error(
                f"Row {row_number}: Unexpected error processing row: {e}. Skipping row: {row_data}",
                exc_info=True,
            )
            continue

    logger.info(f"Finished importing. Successfully imported {imported} of {len(df)} rows")
    return imported
