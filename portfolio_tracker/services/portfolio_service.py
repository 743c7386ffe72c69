import logging
from collections.abc import Callable, Hashable, Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING, TypeVar

from portfolio_tracker.models import (
    BreakdownEntry,
    Category,
    HistoricalDataPoint,
    InvestmentLot,
    LotPerformance,
    Portfolio,
    RiskLevel,
)
from portfolio_tracker.repositories.history_repository import PORTFOLIO_SERIES, HistoryRepository
from portfolio_tracker.repositories.investment_repository import InvestmentRepository
from portfolio_tracker.valuation import lot_performance, lot_value

if TYPE_CHECKING:
    from portfolio_tracker.services.price_service import PriceService

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


def order_breakdown(
    breakdown: dict[K, BreakdownEntry], reference: Iterable[K]
) -> dict[K, BreakdownEntry]:
    """
    Re-order a breakdown to follow a reference ordering (e.g. an enum's declaration order).

    Keys missing from the reference keep their relative order at the end.
    """
    ordered: dict[K, BreakdownEntry] = {key: breakdown[key] for key in reference if key in breakdown}
    for key, entry in breakdown.items():
        if key not in ordered:
            ordered[key] = entry
    return ordered


class PortfolioService:
    """Service for portfolio-level totals, breakdowns and value history."""

    def __init__(self, investment_repo: InvestmentRepository, history_repo: HistoryRepository):
        self.investment_repo = investment_repo
        self.history_repo = history_repo

    @staticmethod
    def summarize(lots: list[InvestmentLot]) -> Portfolio:
        """Reduce all lots to total value, total cost and gain/loss."""
        total_cost = sum(lot.total_cost for lot in lots)
        total_value = sum(lot_value(lot) for lot in lots)

        total_gain_loss = total_value - total_cost
        # A zero-cost portfolio reports 0% so the summary is always displayable
        total_gain_loss_percent = (total_gain_loss / total_cost * 100) if total_cost > 0 else 0.0

        return Portfolio(
            investments=list(lots),
            total_value=total_value,
            total_cost=total_cost,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percent=total_gain_loss_percent,
            last_updated=datetime.now(),
        )

    @staticmethod
    def calculate_breakdown(
        lots: list[InvestmentLot], classifier: Callable[[InvestmentLot], K]
    ) -> dict[K, BreakdownEntry]:
        """
        Group lots by `classifier` and report value, share of total value and count per group.

        Groups appear in order of first occurrence; groups with no lots are absent.
        """
        breakdown: dict[K, BreakdownEntry] = {}
        total_value = 0.0

        for lot in lots:
            value = lot_value(lot)
            entry = breakdown.setdefault(classifier(lot), BreakdownEntry())
            entry.value += value
            entry.count += 1
            total_value += value

        for entry in breakdown.values():
            entry.percentage = (entry.value / total_value * 100) if total_value > 0 else 0.0

        return breakdown

    @staticmethod
    def category_breakdown(lots: list[InvestmentLot]) -> dict[Category, BreakdownEntry]:
        return PortfolioService.calculate_breakdown(lots, lambda lot: lot.category)

    @staticmethod
    def risk_breakdown(lots: list[InvestmentLot]) -> dict[RiskLevel, BreakdownEntry]:
        return PortfolioService.calculate_breakdown(lots, lambda lot: lot.risk_level)

    @staticmethod
    def performance(lots: list[InvestmentLot]) -> list[LotPerformance]:
        """Per-lot value and gain/loss, in lot order."""
        return [lot_performance(lot) for lot in lots]

    def calculate_portfolio(
        self, lots: list[InvestmentLot] | None = None, today: date | None = None
    ) -> Portfolio:
        """
        Summarize the portfolio and record today's total value in the history.

        Args:
            lots: Lots to summarize (defaults to all stored lots)
            today: Date to record the value under (defaults to today)

        Returns:
            The portfolio summary
        """
        if lots is None:
            lots = self.investment_repo.load()

        portfolio: Portfolio = self.summarize(lots)

        # Nothing is recorded until the portfolio has some value
        if portfolio.total_value > 0:
            point = HistoricalDataPoint(date=today or date.today(), value=portfolio.total_value)
            _ = self.history_repo.append(point, PORTFOLIO_SERIES)
        else:
            logger.debug("Portfolio value is zero, not recording history")

        return portfolio

    def history(self) -> list[HistoricalDataPoint]:
        return self.history_repo.read_all(PORTFOLIO_SERIES)

    def refresh_prices(self, price_service: "PriceService", today: date | None = None) -> Portfolio:
        """
        Fetch current prices for every lot with a ticker, store them and re-summarize.

        Lots without a ticker, or whose price couldn't be fetched, keep their
        existing current price.
        """
        lots: list[InvestmentLot] = self.investment_repo.load()
        if not lots:
            logger.info("No investments to refresh")
            return self.summarize(lots)

        symbols: list[str] = price_service.symbols_for(lots)
        if not symbols:
            logger.info("No investments have tickers, recalculating only")
            return self.calculate_portfolio(lots, today)

        prices = price_service.fetch_prices(symbols)
        updated: list[InvestmentLot] = price_service.apply_prices(lots, prices)
        refreshed: int = sum(1 for price in prices.values() if price is not None)
        logger.info(f"Fetched {refreshed}/{len(symbols)} prices")

        self.investment_repo.save(updated)
        return self.calculate_portfolio(updated, today)
