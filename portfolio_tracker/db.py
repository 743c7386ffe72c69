import logging
import sqlite3
import traceback
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Self


class Database:
    # INFO: Example usage:
    # with Database(Path("portfolio.db")) as db:
    #   db.create_tables_if_not_exists()
    #   db.execute("SELECT value FROM kv_store WHERE key = :key", {"key": "investment-tracker-settings"})
    #   Changes are committed on a clean exit and rolled back if an exception escapes the block
    def __init__(self, db_path: Path) -> None:
        self.conn: sqlite3.Connection = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row  # Allows dict-style access
        self.cursor: sqlite3.Cursor = self.conn.cursor()
        self.logger: logging.Logger = logging.getLogger(__name__)

    def execute(
        self,
        query: str,
        params: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        """
        Executes a single SQL query.
        Supports both positional (?) and named (:param) placeholders.
        Includes error handling, transaction support, and logging.
        """
        if params is None:
            params = ()

        self.logger.debug(f"Preparing SQL execution:\n{query}")
        self.logger.debug(f"Parameters: {params}")

        # Confirm positional and named-placeholders are not being inter-mixed
        if "?" in query and isinstance(params, Mapping):
            raise ValueError("Positional placeholders (?) used with named parameters.")
        if ":" in query and isinstance(params, (list, tuple)) and params:
            raise ValueError("Named placeholders (:) used with positional parameters.")

        try:
            _ = self.conn.execute("BEGIN")
            result: sqlite3.Cursor = self.cursor.execute(query, params)
            self.commit()
            self.logger.debug(f"Query executed successfully. Rows affected: {self.cursor.rowcount}")
            return result
        except sqlite3.Error:
            self.conn.rollback()
            self.logger.error("Database error during execute:")
            self.logger.error(traceback.format_exc())
            raise
        except Exception:
            self.conn.rollback()
            self.logger.error("Unexpected error during execute:")
            self.logger.error(traceback.format_exc())
            raise

    def commit(self) -> None:
        """Commits active transaction to DB, saving changes."""
        try:
            self.conn.commit()
            self.logger.debug("Database changes committed.")
        except sqlite3.DatabaseError as e:
            self.logger.error(f"Error committing changes: {e}")
            raise

    def rollback(self) -> None:
        """Rolls back active transaction to DB, not saving changes (used if error)."""
        try:
            self.conn.rollback()
            self.logger.warning("Database changes rolled back.")
        except sqlite3.DatabaseError as e:
            self.logger.error(f"Error rolling back changes: {e}")
            raise

    def fetchall(self) -> list[sqlite3.Row]:
        """Returns all data from the latest DB query."""
        return self.cursor.fetchall()

    def fetchone(self) -> sqlite3.Row | None:
        """Returns the first row of data from the latest DB query."""
        return self.cursor.fetchone()

    def query_one(
        self, query: str, params: Sequence[Any] | Mapping[str, Any] | None = None
    ) -> sqlite3.Row | None:
        """Executes a SELECT query and returns a single result."""
        _ = self.execute(query, params)
        return self.fetchone()

    def query_all(
        self, query: str, params: Sequence[Any] | Mapping[str, Any] | None = None
    ) -> list[sqlite3.Row]:
        """Executes a SELECT query and returns all results."""
        _ = self.execute(query, params)
        return self.fetchall()

    def close(self) -> None:
        """Closes active DB connection."""
        self.conn.close()

    def __enter__(self) -> Self:
        """Runs when entering the with block."""
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        """Runs when leaving the with block. Rollback on error, otherwise commit, then close."""
        if exc_type:
            self.rollback()
        else:
            self.commit()
        self.close()

    def create_tables_if_not_exists(self) -> None:
        # JSON blobs (lots, history series, settings) stored under string keys
        _ = self.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """)
