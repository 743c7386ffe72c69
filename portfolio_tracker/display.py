import logging
from collections.abc import Mapping

from portfolio_tracker.models import (
    BreakdownEntry,
    CategoryInfo,
    HistoricalDataPoint,
    InvestmentLot,
    LotPerformance,
    Portfolio,
    ReferenceInfo,
    ScenarioAnalysis,
    ScenarioCoverage,
)
from portfolio_tracker.services.scenario_service import ScenarioService
from portfolio_tracker.valuation import gain_loss, gain_loss_percent, lot_value

logger = logging.getLogger(__name__)

GENERAL_TIPS: list[str] = [
    "Diversify across different asset categories to improve scenario coverage",
    "Consider adding assets that thrive in scenarios where you're underexposed",
    "Regularly review and rebalance your portfolio as market conditions change",
    "Remember that no portfolio can be perfectly prepared for all scenarios",
]


def _truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: width - 1] + "…"
    return text


def _format_percent(value: float | None) -> str:
    if value is None:
        return "n/a"
    return f"{value:.2f}%"


def display_summary(portfolio: Portfolio, currency: str = "USD") -> None:
    """
    Display the portfolio totals in a formatted ASCII table.

    Args:
        portfolio: Portfolio summary to display
        currency: Currency code shown next to the values
    """
    print("\n╔══════════════════════════════════════════════╗")
    print("║               PORTFOLIO SUMMARY              ║")
    print("╠═════════════════╦════════════════════════════╣")
    print(f"║ Total Value     ║ {portfolio.total_value:>18,.2f} {currency:<7} ║")
    print(f"║ Total Cost      ║ {portfolio.total_cost:>18,.2f} {currency:<7} ║")
    print(f"║ Gain/Loss       ║ {portfolio.total_gain_loss:>18,.2f} {currency:<7} ║")
    print(f"║ Return          ║ {portfolio.total_gain_loss_percent:>17.2f}% {'':<7} ║")
    print(f"║ Investments     ║ {len(portfolio.investments):>18} {'':<7} ║")
    print("╚═════════════════╩════════════════════════════╝")

    if not portfolio.investments:
        print("No investments yet. Use 'add' or 'import' to get started.")
    elif portfolio.total_gain_loss >= 0:
        print(
            f"Your portfolio is up {portfolio.total_gain_loss:,.2f} {currency} "
            f"({portfolio.total_gain_loss_percent:.2f}%)."
        )
    else:
        print(
            f"Your portfolio is down {abs(portfolio.total_gain_loss):,.2f} {currency} "
            f"({portfolio.total_gain_loss_percent:.2f}%)."
        )


def display_breakdown(
    title: str,
    breakdown: Mapping[str, BreakdownEntry],
    reference: Mapping[str, ReferenceInfo | CategoryInfo],
) -> None:
    """
    Display a category or risk breakdown.

    Args:
        title: Table heading
        breakdown: Breakdown entries keyed by category or risk level
        reference: Labels for the keys
    """
    if not breakdown:
        print("No investments to break down.")
        return

    print(f"\n╔{'═' * 58}╗")
    print(f"║ {title.upper():^56} ║")
    print("╠══════════════════════════╦═══════════════╦═════════╦═════╣")
    print("║ Group                    ║ Value         ║ % Total ║  #  ║")
    print("╠══════════════════════════╬═══════════════╬═════════╬═════╣")
    for key, entry in breakdown.items():
        info = reference.get(key)
        label: str = info.label if info else str(key)
        print(
            f"║ {_truncate(label, 24):<24} ║ "
            f"{entry.value:>13,.2f} ║ "
            f"{entry.percentage:>6.2f}% ║ "
            f"{entry.count:>3} ║"
        )
    print("╚══════════════════════════╩═══════════════╩═════════╩═════╝")


def display_scenarios(analyses: list[ScenarioAnalysis], coverage: ScenarioCoverage) -> None:
    """Display the scenario table followed by coverage recommendations."""
    if not analyses:
        print("No investments to analyse. Add investments to see scenario coverage.")
        return

    print("\n╔══════════════════════════════════════════════════════════════════════╗")
    print("║                       MARKET SCENARIO ANALYSIS                       ║")
    print("╠═════════════════════╦══════════╦═══════════════╦═════╦═══════╦═══════╣")
    print("║ Scenario            ║ Exposure ║ Value         ║  #  ║ Score ║ Tier  ║")
    print("╠═════════════════════╬══════════╬═══════════════╬═════╬═══════╬═══════╣")
    for analysis in analyses:
        tier = ScenarioService.classify_tier(analysis.strength_score)
        print(
            f"║ {_truncate(analysis.label, 19):<19} ║ "
            f"{analysis.exposure:>7.2f}% ║ "
            f"{analysis.exposure_value:>13,.2f} ║ "
            f"{analysis.investment_count:>3} ║ "
            f"{analysis.strength_score:>5} ║ "
            f"{_truncate(str(tier), 5):<5} ║"
        )
    print("╚═════════════════════╩══════════╩═══════════════╩═════╩═══════╩═══════╝")

    print("\nRECOMMENDATIONS:")
    if coverage.strong:
        print("Your portfolio is well-positioned for these scenarios:")
        for analysis in coverage.strong:
            print(f"  + {analysis.label} ({analysis.exposure:.1f}%)")

    if coverage.uncovered:
        print("Consider adding investments that perform well in these scenarios:")
        for analysis in coverage.uncovered:
            print(f"  - {analysis.label} ({analysis.strength_score}% coverage)")

    print("\nGeneral tips:")
    for tip in GENERAL_TIPS:
        print(f"  • {tip}")


def display_history(points: list[HistoricalDataPoint], currency: str = "USD") -> None:
    """Display the recorded portfolio values, oldest first, with the change between them."""
    if not points:
        print("No portfolio history recorded yet.")
        return

    print("\n╔════════════╦═══════════════════╦═══════════════╗")
    print(f"║ Date       ║ Value ({currency:<3})       ║ Change        ║")
    print("╠════════════╬═══════════════════╬═══════════════╣")
    previous: float | None = None
    for point in points:
        change: str = "" if previous is None else f"{point.value - previous:+,.2f}"
        print(f"║ {point.date.isoformat()} ║ {point.value:>17,.2f} ║ {change:>13} ║")
        previous = point.value
    print("╚════════════╩═══════════════════╩═══════════════╝")


def display_performance(rows: list[LotPerformance]) -> None:
    """
    Display per-lot performance, best return first.

    Lots without a meaningful return percentage are listed last.
    """
    if not rows:
        print("No investments to display.")
        return

    ordered = sorted(
        rows,
        key=lambda r: r.gain_loss_percent if r.gain_loss_percent is not None else float("-inf"),
        reverse=True,
    )

    print("\n╔══════════════════════════╦═══════════════╦═══════════════╦═══════════════╦══════════╗")
    print("║ Investment               ║ Cost          ║ Value         ║ Gain/Loss     ║ Return   ║")
    print("╠══════════════════════════╬═══════════════╬═══════════════╬═══════════════╬══════════╣")
    for row in ordered:
        print(
            f"║ {_truncate(row.asset_name, 24):<24} ║ "
            f"{row.cost_basis:>13,.2f} ║ "
            f"{row.value:>13,.2f} ║ "
            f"{row.gain_loss:>13,.2f} ║ "
            f"{_format_percent(row.gain_loss_percent):>8} ║"
        )
    print("╚══════════════════════════╩═══════════════╩═══════════════╩═══════════════╩══════════╝")

    if len(ordered) >= 3:
        print("\nTOP PERFORMERS:")
        for i, row in enumerate(ordered[:3], 1):
            print(f"{i}. {row.asset_name}: {_format_percent(row.gain_loss_percent)}")


def display_lots(lots: list[InvestmentLot]) -> None:
    """Display every stored lot with its id, so it can be edited or removed."""
    if not lots:
        print("No investments stored.")
        return

    print("\n╔═══════════════════════════════╦══════════════════════╦══════════╦════════════╦════════════╦═══════════════╦══════════╗")
    print("║ ID                            ║ Asset                ║ Ticker   ║ Category   ║ Quantity   ║ Value         ║ Return   ║")
    print("╠═══════════════════════════════╬══════════════════════╬══════════╬════════════╬════════════╬═══════════════╬══════════╣")
    for lot in lots:
        print(
            f"║ {_truncate(lot.id, 29):<29} ║ "
            f"{_truncate(lot.asset_name, 20):<20} ║ "
            f"{_truncate(lot.ticker or '-', 8):<8} ║ "
            f"{_truncate(str(lot.category), 10):<10} ║ "
            f"{lot.quantity:>10.4f} ║ "
            f"{lot_value(lot):>13,.2f} ║ "
            f"{_format_percent(gain_loss_percent(lot)):>8} ║"
        )
    print("╚═══════════════════════════════╩══════════════════════╩══════════╩════════════╩════════════╩═══════════════╩══════════╝")

    total_gain: float = sum(gain_loss(lot) for lot in lots)
    print(f"{len(lots)} investment(s), combined gain/loss {total_gain:,.2f}")
