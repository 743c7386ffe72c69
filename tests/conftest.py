import itertools
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable
from unittest.mock import patch

import pytest
import yaml

from portfolio_tracker.config import ENV_VARIABLE, AppConfig, ConfigLoader
from portfolio_tracker.db import Database
from portfolio_tracker.models import Category, InvestmentLot, MarketScenario, RiskLevel
from portfolio_tracker.repositories.history_repository import HistoryRepository
from portfolio_tracker.repositories.investment_repository import InvestmentRepository
from portfolio_tracker.repositories.settings_repository import SettingsRepository
from portfolio_tracker.services.investment_service import InvestmentService
from portfolio_tracker.services.portfolio_service import PortfolioService

REAL_CONFIG_DIR: Path = Path(__file__).parent.parent / "config"


@pytest.fixture(scope="session", autouse=True)
def ensure_test_environment():
    """Ensure we're using the test environment for all tests."""
    # Use os.environ directly instead of monkeypatch for session-scoped fixture
    original_env = os.environ.get(ENV_VARIABLE)
    os.environ[ENV_VARIABLE] = "test"

    yield

    # Restore original environment variable if it existed
    if original_env is not None:
        os.environ[ENV_VARIABLE] = original_env
    else:
        _ = os.environ.pop(ENV_VARIABLE, None)


@pytest.fixture
def app_config() -> AppConfig:
    """
    Load the AppConfig through the normal ConfigLoader mechanism using
    the actual config files.
    """
    with patch(
        "portfolio_tracker.config.ConfigLoader._find_config_directory",
        return_value=REAL_CONFIG_DIR,
    ):
        return ConfigLoader.load_app_config(env="test")


@pytest.fixture
def test_db():
    """Create an in-memory test database."""
    with Database(Path(":memory:")) as db:
        db.create_tables_if_not_exists()
        yield db


@pytest.fixture
def investment_repo(test_db: Database) -> InvestmentRepository:
    return InvestmentRepository(test_db)


@pytest.fixture
def history_repo(test_db: Database) -> HistoryRepository:
    return HistoryRepository(test_db)


@pytest.fixture
def settings_repo(test_db: Database) -> SettingsRepository:
    return SettingsRepository(test_db)


@pytest.fixture
def portfolio_service(
    investment_repo: InvestmentRepository, history_repo: HistoryRepository
) -> PortfolioService:
    return PortfolioService(investment_repo, history_repo)


@pytest.fixture
def investment_service(investment_repo: InvestmentRepository) -> InvestmentService:
    return InvestmentService(investment_repo)


@pytest.fixture
def make_lot() -> Callable[..., InvestmentLot]:
    """
    Factory for investment lots. Total cost is derived from quantity, price and
    fees unless passed explicitly.
    """
    counter = itertools.count(1)

    def _make_lot(
        quantity: float = 1.0,
        purchase_price: float = 100.0,
        fees: float = 0.0,
        current_price: float | None = None,
        category: Category = Category.EQUITY,
        risk_level: RiskLevel = RiskLevel.MODERATE,
        market_scenarios: list[MarketScenario] | None = None,
        **overrides: Any,
    ) -> InvestmentLot:
        n = next(counter)
        values: dict[str, Any] = {
            "id": f"lot-{n}",
            "asset_name": f"Asset {n}",
            "category": category,
            "risk_level": risk_level,
            "purchase_date": datetime(2024, 1, 15, 10, 30),
            "quantity": quantity,
            "purchase_price": purchase_price,
            "fees": fees,
            "total_cost": quantity * purchase_price + fees,
            "current_price": current_price,
            "market_scenarios": list(market_scenarios or []),
        }
        values.update(overrides)
        return InvestmentLot(**values)

    return _make_lot


@pytest.fixture
def isolated_config_environment(tmp_path: Path):
    """
    Create a completely isolated test environment with copied config files.
    Use this when you need to modify config files for specific tests.
    Generator that yields: dict[str,Path]
    - "config_dir": test_config_dir, "temp_dir": tmp_path
    """
    test_config_dir: Path = tmp_path / "config"
    test_config_dir.mkdir()

    # Copy real config files to test directory
    for config_file in REAL_CONFIG_DIR.glob("config*.yaml"):
        with open(config_file, "r") as src_file:
            content: dict[str, Any] = yaml.safe_load(src_file) or {}

        # Modify paths in the config to use the temp directory
        if "csv_path" in content:
            content["csv_path"] = str(tmp_path / "test_import.csv")
        if "log_file_path" in content:
            content["log_file_path"] = str(tmp_path / "logs/test.log")

        with open(test_config_dir / config_file.name, "w") as dest_file:
            yaml.dump(content, dest_file)

    # Patch ConfigLoader to use our test directory
    with patch(
        "portfolio_tracker.config.ConfigLoader._find_config_directory",
        return_value=test_config_dir,
    ):
        yield {"config_dir": test_config_dir, "temp_dir": tmp_path}
