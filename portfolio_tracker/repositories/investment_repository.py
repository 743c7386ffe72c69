import logging
from dataclasses import replace
from typing import Any

from portfolio_tracker.db import Database
from portfolio_tracker.models import InvestmentLot
from portfolio_tracker.repositories.kv_repository import KeyValueRepository, STORAGE_KEY_INVESTMENTS
from portfolio_tracker.utils.model_utils import ModelFactory

logger: logging.Logger = logging.getLogger(__name__)


class InvestmentRepository:
    """Stores the full list of investment lots as one JSON array."""

    def __init__(self, db: Database, key: str = STORAGE_KEY_INVESTMENTS):
        self.kv: KeyValueRepository = KeyValueRepository(db)
        self.key: str = key

    def load(self) -> list[InvestmentLot]:
        """
        Load all lots in stored order.

        A malformed store, or an individual malformed record, is skipped and
        logged rather than raised.
        """
        data: Any = self.kv.get_json(self.key, default=[])
        if not isinstance(data, list):
            logger.error(f"Expected a JSON array under '{self.key}', got {type(data).__name__}")
            return []

        lots: list[InvestmentLot] = []
        for item in data:
            try:
                lots.append(ModelFactory.create_from_dict(InvestmentLot, item))
            except (ValueError, TypeError, AttributeError) as e:
                logger.error(f"Skipping malformed investment record {item!r}: {e}")
        return lots

    def save(self, lots: list[InvestmentLot]) -> None:
        self.kv.set_json(self.key, [ModelFactory.to_dict(lot) for lot in lots])
        logger.debug(f"Saved {len(lots)} investment lots")

    def get_all(self) -> list[InvestmentLot]:
        return self.load()

    def get_by_id(self, lot_id: str) -> InvestmentLot | None:
        return next((lot for lot in self.load() if lot.id == lot_id), None)

    def add(self, lot: InvestmentLot) -> None:
        lots: list[InvestmentLot] = self.load()
        if any(existing.id == lot.id for existing in lots):
            raise ValueError(f"Investment with id '{lot.id}' already exists")
        lots.append(lot)
        self.save(lots)

    def update(self, lot_id: str, **changes: Any) -> InvestmentLot:
        """
        Apply field changes to a stored lot.

        Raises:
            KeyError: If no lot has the given id
        """
        if "id" in changes and changes["id"] != lot_id:
            raise ValueError("Investment id is immutable")

        lots: list[InvestmentLot] = self.load()
        for index, lot in enumerate(lots):
            if lot.id == lot_id:
                lots[index] = replace(lot, **changes)
                self.save(lots)
                return lots[index]
        raise KeyError(f"Investment '{lot_id}' not found")

    def delete(self, lot_id: str) -> bool:
        """Remove a lot. Returns False if it didn't exist."""
        lots: list[InvestmentLot] = self.load()
        remaining: list[InvestmentLot] = [lot for lot in lots if lot.id != lot_id]
        if len(remaining) == len(lots):
            logger.warning(f"Attempted to delete unknown investment '{lot_id}'")
            return False
        self.save(remaining)
        return True
