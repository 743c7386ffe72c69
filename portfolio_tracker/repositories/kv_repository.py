import json
import logging
from sqlite3 import Row
from typing import Any

from portfolio_tracker.db import Database

logger: logging.Logger = logging.getLogger(__name__)

STORAGE_KEY_INVESTMENTS: str = "investment-tracker-investments"
STORAGE_KEY_HISTORICAL: str = "investment-tracker-historical"
STORAGE_KEY_SETTINGS: str = "investment-tracker-settings"


class KeyValueRepository:
    """JSON blobs stored under string keys in the kv_store table."""

    def __init__(self, db: Database):
        self.db: Database = db

    def get_json(self, key: str, default: Any = None) -> Any:
        """
        Load and decode the JSON stored under `key`.

        Returns `default` when nothing is stored or the stored text is not valid JSON.
        """
        row: Row | None = self.db.query_one(
            "SELECT value FROM kv_store WHERE key = :key",
            {"key": key},
        )
        if row is None:
            logger.debug(f"No value stored under key '{key}'")
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.error(f"Malformed JSON under key '{key}', treating as empty: {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Encode `value` as JSON and store it under `key`, replacing any existing value."""
        _ = self.db.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (:key, :value, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            {"key": key, "value": json.dumps(value)},
        )

    def delete(self, key: str) -> None:
        _ = self.db.execute("DELETE FROM kv_store WHERE key = :key", {"key": key})
