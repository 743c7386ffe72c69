import logging
from typing import Any

from portfolio_tracker.db import Database
from portfolio_tracker.models import HistoricalDataPoint
from portfolio_tracker.repositories.kv_repository import KeyValueRepository, STORAGE_KEY_HISTORICAL
from portfolio_tracker.timeseries import HISTORY_MAX_POINTS, append_point
from portfolio_tracker.utils.model_utils import ModelFactory

logger: logging.Logger = logging.getLogger(__name__)

PORTFOLIO_SERIES: str = "portfolio"


class HistoryRepository:
    """Per-key, date-ordered value series, one JSON array per series."""

    def __init__(self, db: Database, max_points: int = HISTORY_MAX_POINTS):
        self.kv: KeyValueRepository = KeyValueRepository(db)
        self.max_points: int = max_points

    @staticmethod
    def _storage_key(series: str) -> str:
        return f"{STORAGE_KEY_HISTORICAL}-{series}"

    def read_all(self, series: str = PORTFOLIO_SERIES) -> list[HistoricalDataPoint]:
        """Return the series oldest first, or an empty list if nothing was recorded."""
        data: Any = self.kv.get_json(self._storage_key(series), default=[])
        if not isinstance(data, list):
            logger.error(f"Expected a JSON array for series '{series}', got {type(data).__name__}")
            return []

        points: list[HistoricalDataPoint] = []
        for item in data:
            try:
                points.append(ModelFactory.create_from_dict(HistoricalDataPoint, item))
            except (ValueError, TypeError, AttributeError) as e:
                logger.error(f"Skipping malformed history point {item!r}: {e}")
        points.sort(key=lambda p: p.date)
        return points

    def append(
        self, point: HistoricalDataPoint, series: str = PORTFOLIO_SERIES
    ) -> list[HistoricalDataPoint]:
        """Record a point, replacing any existing point for the same day. Returns the new series."""
        updated: list[HistoricalDataPoint] = append_point(
            self.read_all(series), point, self.max_points
        )
        self.kv.set_json(
            self._storage_key(series), [ModelFactory.to_dict(p) for p in updated]
        )
        logger.debug(f"Recorded {point.value:.2f} for {point.date} in series '{series}'")
        return updated

    def clear(self, series: str = PORTFOLIO_SERIES) -> None:
        self.kv.delete(self._storage_key(series))
