import logging
from collections.abc import Iterable

from portfolio_tracker.models import HistoricalDataPoint

logger: logging.Logger = logging.getLogger(__name__)

HISTORY_MAX_POINTS: int = 1000


def append_point(
    points: Iterable[HistoricalDataPoint],
    point: HistoricalDataPoint,
    max_points: int = HISTORY_MAX_POINTS,
) -> list[HistoricalDataPoint]:
    """
    Add a point to a date-ordered series, returning a new list.

    Any existing point for the same calendar day is replaced (last write wins).
    The result is sorted by date ascending and trimmed to the most recent
    `max_points` entries, dropping the oldest first.

    Args:
        points: Existing series (not modified)
        point: The point to record
        max_points: Maximum number of points to keep

    Returns:
        The updated series, oldest first
    """
    if max_points < 1:
        raise ValueError(f"max_points must be positive, got {max_points}")

    updated: list[HistoricalDataPoint] = [p for p in points if p.date != point.date]
    updated.append(point)
    updated.sort(key=lambda p: p.date)

    if len(updated) > max_points:
        dropped: int = len(updated) - max_points
        logger.debug(f"History over {max_points} points, dropping {dropped} oldest")
        updated = updated[dropped:]

    return updated
