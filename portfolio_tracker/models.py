from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum


class Category(StrEnum):
    EQUITY = "equity"
    COMMODITY = "commodity"
    CRYPTO = "crypto"
    FIXED_INCOME = "fixed-income"
    REAL_ESTATE = "real-estate"
    CASH = "cash"


class RiskLevel(StrEnum):
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"
    SPECULATIVE = "speculative"


class MarketScenario(StrEnum):
    INFLATION = "inflation"
    DEFLATION = "deflation"
    STAGFLATION = "stagflation"
    RECESSION = "recession"
    GROWTH = "growth"
    HIGH_INTEREST = "high-interest"
    LOW_INTEREST = "low-interest"


class ScenarioTier(StrEnum):
    STRONG = "Strong"
    MODERATE = "Moderate"
    WEAK = "Weak"
    NONE = "None"


class DataSource(StrEnum):
    YAHOO = "yahoo"
    ALPHAVANTAGE = "alphavantage"
    MANUAL = "manual"


@dataclass
class InvestmentLot:
    id: str
    asset_name: str
    category: Category
    risk_level: RiskLevel
    purchase_date: datetime
    quantity: float
    purchase_price: float
    total_cost: float  # quantity * purchase_price + fees, stored at creation/edit
    fees: float = 0.0
    market_scenarios: list[MarketScenario] = field(default_factory=list)
    ticker: str | None = None
    current_price: float | None = None
    last_updated: datetime | None = None
    currency: str = "USD"
    notes: str | None = None
    data_source: DataSource | None = None


@dataclass
class HistoricalDataPoint:
    date: date
    value: float


@dataclass
class Portfolio:
    """
    Snapshot of the whole portfolio, recomputed on every analytics call.
    """

    investments: list[InvestmentLot]
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float
    last_updated: datetime


@dataclass
class BreakdownEntry:
    value: float = 0.0
    percentage: float = 0.0
    count: int = 0


@dataclass
class LotPerformance:
    """
    Represents the valuation of a single lot at its current (or purchase) price.
    """

    lot_id: str
    asset_name: str
    value: float
    cost_basis: float
    gain_loss: float
    gain_loss_percent: float | None  # None when the cost basis is not positive


@dataclass
class ScenarioAnalysis:
    scenario: MarketScenario
    label: str
    description: str
    exposure: float  # percentage of portfolio value, 2 decimal places
    exposure_value: float
    investment_count: int
    strength_score: int  # 0-100


@dataclass
class ScenarioCoverage:
    strong: list[ScenarioAnalysis]
    moderate: list[ScenarioAnalysis]
    weak: list[ScenarioAnalysis]
    uncovered: list[ScenarioAnalysis]


@dataclass
class PriceData:
    symbol: str
    price: float
    change: float
    change_percent: float
    last_updated: datetime


@dataclass
class AppSettings:
    currency: str = "USD"
    dark_mode: bool = True
    auto_refresh: bool = False
    refresh_interval: int = 15  # minutes


@dataclass(frozen=True)
class CategoryInfo:
    label: str
    description: str
    typical_scenarios: tuple[MarketScenario, ...]


@dataclass(frozen=True)
class ReferenceInfo:
    label: str
    description: str


CATEGORY_INFO: dict[Category, CategoryInfo] = {
    Category.EQUITY: CategoryInfo(
        "Stocks & Equity",
        "Stocks, ETFs, and equity investments",
        (MarketScenario.GROWTH, MarketScenario.LOW_INTEREST),
    ),
    Category.COMMODITY: CategoryInfo(
        "Commodities",
        "Gold, silver, oil, agricultural products",
        (MarketScenario.INFLATION, MarketScenario.STAGFLATION),
    ),
    Category.CRYPTO: CategoryInfo(
        "Cryptocurrency",
        "Bitcoin, Ethereum, and other cryptocurrencies",
        (MarketScenario.INFLATION, MarketScenario.GROWTH),
    ),
    Category.FIXED_INCOME: CategoryInfo(
        "Fixed Income",
        "Bonds, CDs, treasury securities",
        (MarketScenario.DEFLATION, MarketScenario.HIGH_INTEREST),
    ),
    Category.REAL_ESTATE: CategoryInfo(
        "Real Estate",
        "REITs, property investments",
        (MarketScenario.INFLATION, MarketScenario.GROWTH),
    ),
    Category.CASH: CategoryInfo(
        "Cash & Cash Equivalents",
        "Savings accounts, money market funds",
        (MarketScenario.HIGH_INTEREST, MarketScenario.RECESSION),
    ),
}

RISK_LEVELS: dict[RiskLevel, ReferenceInfo] = {
    RiskLevel.SAFE: ReferenceInfo("Safe", "Low volatility, capital preservation"),
    RiskLevel.MODERATE: ReferenceInfo("Moderate", "Balanced risk and return"),
    RiskLevel.RISKY: ReferenceInfo("Risky", "Higher volatility, potential for good returns"),
    RiskLevel.SPECULATIVE: ReferenceInfo(
        "Speculative", "Very high risk, potential for large gains or losses"
    ),
}

MARKET_SCENARIOS: dict[MarketScenario, ReferenceInfo] = {
    MarketScenario.INFLATION: ReferenceInfo("High Inflation", "Rising prices, devaluing currency"),
    MarketScenario.DEFLATION: ReferenceInfo("Deflation", "Falling prices, strengthening currency"),
    MarketScenario.STAGFLATION: ReferenceInfo(
        "Stagflation", "High inflation with economic stagnation"
    ),
    MarketScenario.RECESSION: ReferenceInfo("Recession", "Economic downturn, reduced spending"),
    MarketScenario.GROWTH: ReferenceInfo(
        "Economic Growth", "Expanding economy, increasing corporate profits"
    ),
    MarketScenario.HIGH_INTEREST: ReferenceInfo(
        "High Interest Rates", "Central bank raising rates to control inflation"
    ),
    MarketScenario.LOW_INTEREST: ReferenceInfo(
        "Low Interest Rates", "Central bank lowering rates to stimulate growth"
    ),
}
