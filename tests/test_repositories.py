import json
from datetime import date, datetime

import pytest

from portfolio_tracker.db import Database
from portfolio_tracker.models import (
    AppSettings,
    Category,
    DataSource,
    HistoricalDataPoint,
    MarketScenario,
)
from portfolio_tracker.repositories.history_repository import HistoryRepository
from portfolio_tracker.repositories.kv_repository import (
    STORAGE_KEY_INVESTMENTS,
    STORAGE_KEY_SETTINGS,
    KeyValueRepository,
)


def _raw(db: Database, key: str) -> str | None:
    row = db.query_one("SELECT value FROM kv_store WHERE key = ?", (key,))
    return row["value"] if row else None


def _store_raw(db: Database, key: str, value: str) -> None:
    _ = db.execute("INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)", (key, value))


class TestKeyValueRepository:
    def test_round_trip(self, test_db):
        kv = KeyValueRepository(test_db)
        kv.set_json("some-key", {"a": [1, 2, 3]})
        assert kv.get_json("some-key") == {"a": [1, 2, 3]}

    def test_set_replaces(self, test_db):
        kv = KeyValueRepository(test_db)
        kv.set_json("some-key", 1)
        kv.set_json("some-key", 2)

        assert kv.get_json("some-key") == 2
        rows = test_db.query_all("SELECT key FROM kv_store")
        assert len(rows) == 1

    def test_missing_key_returns_default(self, test_db):
        assert KeyValueRepository(test_db).get_json("nope", default=[]) == []

    def test_malformed_json_returns_default(self, test_db):
        _store_raw(test_db, "broken", "{not json")
        assert KeyValueRepository(test_db).get_json("broken", default={}) == {}

    def test_delete(self, test_db):
        kv = KeyValueRepository(test_db)
        kv.set_json("some-key", 1)
        kv.delete("some-key")
        assert kv.get_json("some-key") is None


class TestInvestmentRepository:
    def test_save_and_load_preserves_fields(self, investment_repo, make_lot):
        lot = make_lot(
            ticker="BTC-AUD",
            category=Category.CRYPTO,
            market_scenarios=[MarketScenario.INFLATION, MarketScenario.GROWTH],
            current_price=123.45,
            last_updated=datetime(2026, 2, 10, 9, 30),
            data_source=DataSource.YAHOO,
            notes="DCA",
            currency="AUD",
        )
        investment_repo.save([lot])

        assert investment_repo.load() == [lot]

    def test_stored_as_camel_case_json(self, investment_repo, test_db, make_lot):
        investment_repo.save([make_lot(quantity=2, purchase_price=3)])

        stored = json.loads(_raw(test_db, STORAGE_KEY_INVESTMENTS))

        assert stored[0]["assetName"] == "Asset 1"
        assert stored[0]["totalCost"] == 6
        assert stored[0]["purchaseDate"] == "2024-01-15T10:30:00"
        assert "currentPrice" not in stored[0]

    def test_loads_original_format(self, investment_repo, test_db):
        record = {
            "id": "sharesight_vgs",
            "assetName": "Vanguard MSCI Index International",
            "ticker": "VGS.AX",
            "category": "equity",
            "riskLevel": "moderate",
            "marketScenarios": ["growth", "low-interest"],
            "purchaseDate": "2026-02-10T00:00:00.000+00:00",
            "quantity": 40,
            "purchasePrice": 149.055,
            "fees": 11.00,
            "totalCost": 5962.20,
            "currency": "AUD",
            "dataSource": "manual",
            "somethingNew": True,
        }
        _store_raw(test_db, STORAGE_KEY_INVESTMENTS, json.dumps([record]))

        (lot,) = investment_repo.load()

        assert lot.asset_name == "Vanguard MSCI Index International"
        assert lot.market_scenarios == [MarketScenario.GROWTH, MarketScenario.LOW_INTEREST]
        assert lot.purchase_date.date() == date(2026, 2, 10)
        assert lot.total_cost == 5962.20
        assert lot.data_source == DataSource.MANUAL

    def test_malformed_store_loads_empty(self, investment_repo, test_db):
        _store_raw(test_db, STORAGE_KEY_INVESTMENTS, "[{broken")
        assert investment_repo.load() == []

    def test_non_list_store_loads_empty(self, investment_repo, test_db):
        _store_raw(test_db, STORAGE_KEY_INVESTMENTS, json.dumps({"id": "x"}))
        assert investment_repo.load() == []

    def test_malformed_record_is_skipped(self, investment_repo, test_db, make_lot):
        investment_repo.save([make_lot()])
        records = json.loads(_raw(test_db, STORAGE_KEY_INVESTMENTS))
        records.append({"id": "bad", "category": "not-a-category"})
        _store_raw(test_db, STORAGE_KEY_INVESTMENTS, json.dumps(records))

        assert [lot.id for lot in investment_repo.load()] == ["lot-1"]

    def test_add_rejects_duplicate_id(self, investment_repo, make_lot):
        lot = make_lot()
        investment_repo.add(lot)
        with pytest.raises(ValueError):
            investment_repo.add(lot)

    def test_update(self, investment_repo, make_lot):
        lot = make_lot()
        investment_repo.add(lot)

        updated = investment_repo.update(lot.id, asset_name="Renamed")

        assert updated.asset_name == "Renamed"
        assert investment_repo.get_by_id(lot.id).asset_name == "Renamed"

    def test_update_unknown(self, investment_repo):
        with pytest.raises(KeyError):
            investment_repo.update("missing", asset_name="x")

    def test_update_cannot_change_id(self, investment_repo, make_lot):
        lot = make_lot()
        investment_repo.add(lot)
        with pytest.raises(ValueError):
            investment_repo.update(lot.id, id="other")

    def test_delete_keeps_order(self, investment_repo, make_lot):
        lots = [make_lot(), make_lot(), make_lot()]
        investment_repo.save(lots)

        assert investment_repo.delete(lots[1].id) is True
        assert [lot.id for lot in investment_repo.get_all()] == [lots[0].id, lots[2].id]
        assert investment_repo.delete("missing") is False


class TestHistoryRepository:
    def test_append_and_read(self, history_repo):
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 11), 1100.0))
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1000.0))

        assert history_repo.read_all() == [
            HistoricalDataPoint(date(2026, 2, 10), 1000.0),
            HistoricalDataPoint(date(2026, 2, 11), 1100.0),
        ]

    def test_same_date_last_write_wins(self, history_repo):
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1000.0))
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1500.0))

        assert history_repo.read_all() == [HistoricalDataPoint(date(2026, 2, 10), 1500.0)]

    def test_series_are_independent(self, history_repo):
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1.0), series="btc")

        assert history_repo.read_all() == []
        assert len(history_repo.read_all("btc")) == 1

    def test_cap_from_constructor(self, test_db):
        repo = HistoryRepository(test_db, max_points=2)
        for day in (1, 2, 3):
            _ = repo.append(HistoricalDataPoint(date(2026, 2, day), float(day)))

        assert [p.date.day for p in repo.read_all()] == [2, 3]

    def test_read_all_returns_fresh_list(self, history_repo):
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1.0))
        history_repo.read_all().clear()
        assert len(history_repo.read_all()) == 1

    def test_malformed_points_skipped(self, history_repo, test_db):
        key = history_repo._storage_key("portfolio")
        _store_raw(
            test_db,
            key,
            json.dumps([{"date": "2026-02-10", "value": 5}, {"date": "yesterday", "value": 1}]),
        )
        assert history_repo.read_all() == [HistoricalDataPoint(date(2026, 2, 10), 5.0)]

    def test_clear(self, history_repo):
        _ = history_repo.append(HistoricalDataPoint(date(2026, 2, 10), 1.0))
        history_repo.clear()
        assert history_repo.read_all() == []


class TestSettingsRepository:
    def test_defaults(self, settings_repo):
        assert settings_repo.get() == AppSettings()

    def test_partial_update_merges(self, settings_repo):
        _ = settings_repo.save(currency="AUD")
        settings = settings_repo.save(refresh_interval="30")

        assert settings == AppSettings(currency="AUD", refresh_interval=30)
        assert settings_repo.get() == settings

    def test_camel_case_keys(self, settings_repo, test_db):
        settings = settings_repo.save(autoRefresh="true")

        assert settings.auto_refresh is True
        assert json.loads(_raw(test_db, STORAGE_KEY_SETTINGS))["autoRefresh"] is True

    def test_unknown_setting(self, settings_repo):
        with pytest.raises(KeyError):
            settings_repo.save(theme="blue")

    def test_invalid_value(self, settings_repo):
        with pytest.raises(ValueError):
            settings_repo.save(refresh_interval="often")

    def test_stored_values_merge_over_defaults(self, settings_repo, test_db):
        _store_raw(test_db, STORAGE_KEY_SETTINGS, json.dumps({"darkMode": False}))
        assert settings_repo.get() == AppSettings(dark_mode=False)

    def test_invalid_store_falls_back_to_defaults(self, settings_repo, test_db):
        _store_raw(test_db, STORAGE_KEY_SETTINGS, json.dumps({"refreshInterval": "soon"}))
        assert settings_repo.get() == AppSettings()
