"""Report command implementation."""

import argparse
import logging
from typing import override

from portfolio_tracker.commands.base import Command, CommandRegistry
from portfolio_tracker.display import (
    display_breakdown,
    display_history,
    display_performance,
    display_scenarios,
    display_summary,
)
from portfolio_tracker.models import (
    CATEGORY_INFO,
    RISK_LEVELS,
    Category,
    InvestmentLot,
    RiskLevel,
)
from portfolio_tracker.services.investment_service import InvestmentService
from portfolio_tracker.services.portfolio_service import PortfolioService, order_breakdown
from portfolio_tracker.services.scenario_service import ScenarioService

logger = logging.getLogger(__name__)

REPORT_TYPES: list[str] = ["summary", "categories", "risk", "scenarios", "history", "performance"]


@CommandRegistry.register
class ReportCommand(Command):
    """Command to generate reports."""

    name: str = "report"
    help: str = "Generate reports"

    @override
    @classmethod
    def setup_parser(cls, subparser) -> None:
        """Configure the argument parser for the report command."""
        parser: argparse.ArgumentParser = subparser.add_parser(cls.name, help=cls.help)
        _ = parser.add_argument(
            "type",
            nargs="?",
            default="summary",
            choices=REPORT_TYPES,
            help="Type of report to generate (default: summary)",
        )

    @override
    def execute(self, args: argparse.Namespace) -> int:
        """Execute the report command."""
        report_type: str = str(args.type)

        portfolio_service: PortfolioService = self.container.get_service(PortfolioService)
        investment_service: InvestmentService = self.container.get_service(InvestmentService)
        currency: str = self.display_currency()

        try:
            lots: list[InvestmentLot] = investment_service.get_all()

            if report_type == "summary":
                # Summarizing also records today's value in the history
                display_summary(portfolio_service.calculate_portfolio(lots), currency)

            elif report_type == "categories":
                breakdown = order_breakdown(portfolio_service.category_breakdown(lots), Category)
                display_breakdown("Category Breakdown", breakdown, CATEGORY_INFO)

            elif report_type == "risk":
                breakdown = order_breakdown(portfolio_service.risk_breakdown(lots), RiskLevel)
                display_breakdown("Risk Breakdown", breakdown, RISK_LEVELS)

            elif report_type == "scenarios":
                scenario_service: ScenarioService = self.container.get_service(ScenarioService)
                analyses = scenario_service.analyze(lots)
                display_scenarios(analyses, scenario_service.coverage(analyses))

            elif report_type == "history":
                display_history(portfolio_service.history(), currency)

            elif report_type == "performance":
                display_performance(portfolio_service.performance(lots))

            return 0
        except Exception as e:
            return self.fail(f"Failed to generate {report_type} report", e)
