import logging
import math

from portfolio_tracker.models import (
    MARKET_SCENARIOS,
    Category,
    InvestmentLot,
    MarketScenario,
    ScenarioAnalysis,
    ScenarioCoverage,
    ScenarioTier,
)
from portfolio_tracker.valuation import lot_value

logger = logging.getLogger(__name__)

EXPOSURE_WEIGHT: float = 1.4
EXPOSURE_SCORE_CAP: float = 70.0
CATEGORY_BONUS: float = 10.0
DIVERSITY_BONUS_CAP: float = 30.0
MAX_SCORE: float = 100.0

STRONG_THRESHOLD: int = 70
MODERATE_THRESHOLD: int = 40
WEAK_THRESHOLD: int = 15


def _round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


class ScenarioService:
    """
    Scores how well the portfolio is positioned for each market scenario.

    A scenario's strength combines how much of the portfolio's value is held in
    lots tagged for it (capped at 70 points, reached at 50% exposure) with how
    many distinct categories those lots span (10 points each, capped at 30).
    """

    @staticmethod
    def strength_score(exposure_percent: float, distinct_categories: int) -> int:
        """Score in [0, 100] for a scenario's exposure and category diversity."""
        if exposure_percent <= 0:
            return 0
        base: float = min(exposure_percent * EXPOSURE_WEIGHT, EXPOSURE_SCORE_CAP)
        bonus: float = min(distinct_categories * CATEGORY_BONUS, DIVERSITY_BONUS_CAP)
        return int(_round_half_up(min(base + bonus, MAX_SCORE)))

    @staticmethod
    def classify_tier(score: int) -> ScenarioTier:
        if score >= STRONG_THRESHOLD:
            return ScenarioTier.STRONG
        if score >= MODERATE_THRESHOLD:
            return ScenarioTier.MODERATE
        if score >= WEAK_THRESHOLD:
            return ScenarioTier.WEAK
        return ScenarioTier.NONE

    @staticmethod
    def analyze(lots: list[InvestmentLot]) -> list[ScenarioAnalysis]:
        """
        Analyse every market scenario, strongest first.

        Ties keep the scenario declaration order. An empty lot list yields no
        analyses; a portfolio worth nothing yields zero exposure and score everywhere.
        """
        if not lots:
            return []

        values: list[float] = [lot_value(lot) for lot in lots]
        total_value: float = sum(values)
        if total_value <= 0:
            logger.debug("Portfolio has no value, all scenario scores are zero")

        analyses: list[ScenarioAnalysis] = []
        for scenario in MarketScenario:
            relevant: list[tuple[InvestmentLot, float]] = [
                (lot, value) for lot, value in zip(lots, values) if scenario in lot.market_scenarios
            ]
            exposure_value: float = sum(value for _, value in relevant)
            exposure: float = (exposure_value / total_value * 100) if total_value > 0 else 0.0
            categories: set[Category] = {lot.category for lot, _ in relevant}

            info = MARKET_SCENARIOS[scenario]
            analyses.append(
                ScenarioAnalysis(
                    scenario=scenario,
                    label=info.label,
                    description=info.description,
                    exposure=_round_half_up(exposure, 2),
                    exposure_value=exposure_value,
                    investment_count=len(relevant),
                    strength_score=ScenarioService.strength_score(exposure, len(categories)),
                )
            )

        # sorted() is stable, so equal scores keep declaration order
        return sorted(analyses, key=lambda a: a.strength_score, reverse=True)

    @staticmethod
    def coverage(analyses: list[ScenarioAnalysis]) -> ScenarioCoverage:
        """Bucket analyses by tier, preserving their order."""
        buckets: dict[ScenarioTier, list[ScenarioAnalysis]] = {tier: [] for tier in ScenarioTier}
        for analysis in analyses:
            buckets[ScenarioService.classify_tier(analysis.strength_score)].append(analysis)
        return ScenarioCoverage(
            strong=buckets[ScenarioTier.STRONG],
            moderate=buckets[ScenarioTier.MODERATE],
            weak=buckets[ScenarioTier.WEAK],
            uncovered=buckets[ScenarioTier.NONE],
        )
