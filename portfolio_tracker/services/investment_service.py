import logging
import random
import string
import time
from datetime import datetime
from typing import Any

from portfolio_tracker.models import (
    Category,
    DataSource,
    InvestmentLot,
    MarketScenario,
    RiskLevel,
)
from portfolio_tracker.repositories.investment_repository import InvestmentRepository
from portfolio_tracker.services.price_service import is_valid_ticker

logger: logging.Logger = logging.getLogger(__name__)

_ID_ALPHABET: str = string.digits + string.ascii_lowercase

# Changing any of these requires total_cost to be recomputed
_COST_FIELDS: frozenset[str] = frozenset({"quantity", "purchase_price", "fees"})


def generate_id() -> str:
    """Unique lot id, e.g. inv_1739167200000_k3j9x0a1b"""
    suffix: str = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"inv_{time.time_ns() // 1_000_000}_{suffix}"


def validate_lot_input(asset_name: str, quantity: float, purchase_price: float, fees: float) -> None:
    """
    Check user-supplied lot values before a lot is created or edited.

    Raises:
        ValueError: Naming the first invalid field
    """
    if not asset_name or not asset_name.strip():
        raise ValueError("Asset name is required")
    if quantity is None or not quantity > 0:
        raise ValueError(f"Quantity must be positive, got {quantity}")
    if purchase_price is None or not purchase_price > 0:
        raise ValueError(f"Purchase price must be positive, got {purchase_price}")
    if fees is None or not fees >= 0:
        raise ValueError(f"Fees cannot be negative, got {fees}")


def create_lot(
    asset_name: str,
    category: Category | str,
    risk_level: RiskLevel | str,
    quantity: float,
    purchase_price: float,
    fees: float = 0.0,
    market_scenarios: list[MarketScenario | str] | None = None,
    ticker: str | None = None,
    purchase_date: datetime | None = None,
    current_price: float | None = None,
    currency: str = "USD",
    notes: str | None = None,
    lot_id: str | None = None,
) -> InvestmentLot:
    """Validate input and build a lot with its total cost computed."""
    validate_lot_input(asset_name, quantity, purchase_price, fees)

    ticker = ticker.strip().upper() if ticker and ticker.strip() else None
    if ticker and not is_valid_ticker(ticker):
        logger.warning(f"Ticker '{ticker}' doesn't look like a standard symbol, keeping as entered")

    scenarios: list[MarketScenario] = list(
        dict.fromkeys(MarketScenario(s) for s in (market_scenarios or []))
    )

    return InvestmentLot(
        id=lot_id or generate_id(),
        asset_name=asset_name.strip(),
        ticker=ticker,
        category=Category(category),
        risk_level=RiskLevel(risk_level),
        market_scenarios=scenarios,
        purchase_date=purchase_date or datetime.now(),
        quantity=float(quantity),
        purchase_price=float(purchase_price),
        fees=float(fees),
        total_cost=float(quantity) * float(purchase_price) + float(fees),
        current_price=current_price,
        last_updated=datetime.now() if current_price is not None else None,
        currency=currency.strip().upper(),
        notes=notes,
        data_source=DataSource.MANUAL if current_price is not None or not ticker else None,
    )


class InvestmentService:
    """Service for creating, editing and removing investment lots."""

    def __init__(self, investment_repo: InvestmentRepository):
        self.investment_repo = investment_repo

    def get_all(self) -> list[InvestmentLot]:
        return self.investment_repo.load()

    def get(self, lot_id: str) -> InvestmentLot | None:
        return self.investment_repo.get_by_id(lot_id)

    def add(self, lot: InvestmentLot) -> InvestmentLot:
        validate_lot_input(lot.asset_name, lot.quantity, lot.purchase_price, lot.fees)
        self.investment_repo.add(lot)
        logger.info(f"Added investment {lot.id} ({lot.asset_name})")
        return lot

    def update(self, lot_id: str, **changes: Any) -> InvestmentLot:
        """
        Edit a lot. The total cost is recomputed if quantity, purchase price or fees change.

        Raises:
            KeyError: If the lot doesn't exist
            ValueError: If the edited values are invalid
        """
        existing: InvestmentLot | None = self.investment_repo.get_by_id(lot_id)
        if existing is None:
            raise KeyError(f"Investment '{lot_id}' not found")

        if "total_cost" in changes:
            raise ValueError("total_cost is derived and can't be set directly")

        if "current_price" in changes and changes["current_price"] is not None:
            changes.setdefault("last_updated", datetime.now())
            changes.setdefault("data_source", DataSource.MANUAL)

        quantity = float(changes.get("quantity", existing.quantity))
        purchase_price = float(changes.get("purchase_price", existing.purchase_price))
        fees = float(changes.get("fees", existing.fees))
        validate_lot_input(
            changes.get("asset_name", existing.asset_name), quantity, purchase_price, fees
        )
        if _COST_FIELDS & changes.keys():
            changes.update(quantity=quantity, purchase_price=purchase_price, fees=fees)
            changes["total_cost"] = quantity * purchase_price + fees

        updated: InvestmentLot = self.investment_repo.update(lot_id, **changes)
        logger.info(f"Updated investment {lot_id}: {sorted(changes)}")
        return updated

    def delete(self, lot_id: str) -> bool:
        deleted: bool = self.investment_repo.delete(lot_id)
        if deleted:
            logger.info(f"Deleted investment {lot_id}")
        return deleted
