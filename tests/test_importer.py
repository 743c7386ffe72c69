from datetime import datetime
from pathlib import Path

import pytest

from portfolio_tracker.importer import (
    import_investments,
    lot_from_row,
    parse_csv_datetime,
    parse_csv_float,
    parse_csv_scenarios,
    read_csv_file,
)
from portfolio_tracker.models import Category, MarketScenario, RiskLevel

HEADER = (
    "asset_name,ticker,category,risk_level,market_scenarios,"
    "purchase_date,quantity,purchase_price,fees,currency,notes"
)


def _write_csv(tmp_path: Path, *rows: str, header: str = HEADER) -> Path:
    path = tmp_path / "investments.csv"
    path.write_text("\n".join([header, *rows]) + "\n")
    return path


class TestParsing:
    def test_parse_datetime(self):
        assert parse_csv_datetime("2026-02-10") == datetime(2026, 2, 10)
        assert parse_csv_datetime("2026-02-10 09:30:00") == datetime(2026, 2, 10, 9, 30)

    def test_parse_datetime_invalid(self):
        with pytest.raises(ValueError, match="Invalid datetime format"):
            parse_csv_datetime("10/02/2026")

    def test_parse_float(self):
        assert parse_csv_float("1.5", "quantity") == 1.5
        assert parse_csv_float("", "fees", default=0.0) == 0.0
        with pytest.raises(ValueError, match="Empty string value for 'quantity'"):
            parse_csv_float(" ", "quantity")
        with pytest.raises(ValueError, match="Invalid float value"):
            parse_csv_float("ten", "quantity")

    def test_parse_scenarios(self):
        assert parse_csv_scenarios("Growth; low-interest") == [
            MarketScenario.GROWTH,
            MarketScenario.LOW_INTEREST,
        ]
        assert parse_csv_scenarios("") == []
        with pytest.raises(ValueError):
            parse_csv_scenarios("boom")

    def test_lot_from_row(self):
        lot = lot_from_row(
            {
                "asset_name": "Bitcoin",
                "ticker": "btc-aud",
                "category": "Crypto",
                "risk_level": "speculative",
                "market_scenarios": "inflation;growth",
                "purchase_date": "2026-01-14",
                "quantity": "0.05",
                "purchase_price": "120000",
                "fees": "",
                "currency": "aud",
                "notes": "",
            }
        )

        assert lot.category == Category.CRYPTO
        assert lot.risk_level == RiskLevel.SPECULATIVE
        assert lot.ticker == "BTC-AUD"
        assert lot.total_cost == pytest.approx(6000)
        assert lot.fees == 0.0
        assert lot.currency == "AUD"
        assert lot.notes is None


class TestReadCsv:
    def test_missing_file(self, tmp_path):
        assert read_csv_file(tmp_path / "nope.csv") is None

    def test_missing_required_columns(self, tmp_path):
        path = _write_csv(tmp_path, "Gold,1", header="asset_name,quantity")
        assert read_csv_file(path) is None

    def test_header_only(self, tmp_path):
        assert read_csv_file(_write_csv(tmp_path)) is None


class TestImportInvestments:
    def test_imports_valid_rows_and_skips_invalid(self, tmp_path, investment_service):
        path = _write_csv(
            tmp_path,
            "Vanguard International,VGS.AX,equity,moderate,growth;low-interest,2026-02-10,40,149.055,11,AUD,ETF",
            "Bad quantity,,equity,safe,,2026-02-10,0,10,0,USD,",
            "Bad category,,metals,safe,,2026-02-10,1,10,0,USD,",
            "Gold,,commodity,moderate,inflation;stagflation,2026-01-29,0.9,7880.77,0,AUD,",
        )

        imported = import_investments(path, investment_service)

        assert imported == 2
        lots = investment_service.get_all()
        assert [lot.asset_name for lot in lots] == ["Vanguard International", "Gold"]
        assert lots[0].total_cost == pytest.approx(40 * 149.055 + 11)
        assert lots[1].market_scenarios == [MarketScenario.INFLATION, MarketScenario.STAGFLATION]

    def test_imports_configured_csv(self, app_config, investment_service):
        csv_path = Path(__file__).parent.parent / app_config.csv_path
        assert import_investments(csv_path, investment_service) == 4

        categories = {lot.category for lot in investment_service.get_all()}
        assert categories == {Category.EQUITY, Category.CRYPTO, Category.COMMODITY}

    def test_missing_file_imports_nothing(self, tmp_path, investment_service):
        assert import_investments(tmp_path / "nope.csv", investment_service) == 0
        assert investment_service.get_all() == []
