"""
SQLite-backed transaction store (reference persistence collaborator).

Tables:
- transactions: one row per finalized TransactionRecord

Search uses the same predicate as upload-time filtering: name filters call
contains_casefold() (registered as a SQL function), token filters use "=".
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .assembler import FILTER_FIELDS, contains_casefold
from .models import FieldStatus, FilterSpec, StoredTransaction, TransactionRecord

logger = logging.getLogger(__name__)

# Unfiltered searches never return more than this many rows.
DEFAULT_SEARCH_LIMIT = 100

_COLUMNS: tuple[str, ...] = (
    "buyer_name",
    "buyer_name_translated",
    "seller_name",
    "seller_name_translated",
    "house_number",
    "survey_number",
    "document_number",
    "raw_date_text",
    "raw_value_text",
    "transaction_date",
    "transaction_date_status",
    "transaction_value",
    "transaction_value_status",
    "district",
    "source_text",
)


class TransactionStore:
    """
    SQLite store for transaction records.

    Opens one connection per operation, so a single instance can be shared
    by concurrent pipelines.
    """

    def __init__(self, db_path: Path | str):
        """
        Initialize the store, creating the database file and schema if needed.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory and the filter function."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.create_function("contains_casefold", 2, contains_casefold, deterministic=True)
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    buyer_name TEXT NOT NULL,
                    buyer_name_translated TEXT NOT NULL,
                    seller_name TEXT NOT NULL,
                    seller_name_translated TEXT NOT NULL,
                    house_number TEXT,
                    survey_number TEXT NOT NULL,
                    document_number TEXT NOT NULL,
                    raw_date_text TEXT,
                    raw_value_text TEXT,
                    transaction_date TEXT NOT NULL,  -- ISO timestamp
                    transaction_date_status TEXT NOT NULL,
                    transaction_value INTEGER,
                    transaction_value_status TEXT NOT NULL,
                    district TEXT,
                    source_text TEXT,
                    created_at TEXT NOT NULL
                )
            """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_survey ON transactions(survey_number)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_transactions_document ON transactions(document_number)"
            )

    # Write

    def insert_many(self, records: Sequence[TransactionRecord]) -> list[StoredTransaction]:
        """
        Bulk-insert records in one transaction.

        Returns:
            The stored rows (with assigned ids), in input order.
        """
        if not records:
            return []

        created_at = datetime.now(timezone.utc)
        placeholders = ", ".join("?" for _ in range(len(_COLUMNS) + 1))
        sql = f"INSERT INTO transactions ({', '.join(_COLUMNS)}, created_at) VALUES ({placeholders})"

        stored: list[StoredTransaction] = []
        with self._transaction() as conn:
            for record in records:
                cursor = conn.execute(sql, (*self._to_row(record), created_at.isoformat()))
                stored.append(
                    StoredTransaction(
                        **record.model_dump(),
                        id=cursor.lastrowid,
                        created_at=created_at,
                    )
                )

        logger.debug("Inserted %d transaction(s) into %s", len(stored), self.db_path)
        return stored

    # Read

    def search(self, spec: FilterSpec | None = None, limit: int | None = None) -> list[StoredTransaction]:
        """
        Select stored transactions matching every supplied filter.

        Without filters the result is capped at DEFAULT_SEARCH_LIMIT rows.
        """
        active = spec.active() if spec is not None else {}

        clauses: list[str] = []
        params: list[Any] = []
        for name, wanted in active.items():
            column, exact = FILTER_FIELDS[name]
            if exact:
                clauses.append(f"{column} = ?")
            else:
                clauses.append(f"contains_casefold({column}, ?)")
            params.append(wanted)

        sql = "SELECT * FROM transactions"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"

        if limit is None and not clauses:
            limit = DEFAULT_SEARCH_LIMIT
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._transaction() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [self._from_row(row) for row in rows]

    def count(self) -> int:
        """Number of stored transactions."""
        with self._transaction() as conn:
            row = conn.execute("SELECT COUNT(*) FROM transactions").fetchone()
        return int(row[0])

    # Row mapping

    @staticmethod
    def _to_row(record: TransactionRecord) -> tuple[Any, ...]:
        values = record.model_dump(include=set(_COLUMNS))
        values["transaction_date"] = record.transaction_date.isoformat()
        values["transaction_date_status"] = record.transaction_date_status.value
        values["transaction_value_status"] = record.transaction_value_status.value
        return tuple(values[column] for column in _COLUMNS)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> StoredTransaction:
        data = {column: row[column] for column in _COLUMNS}
        data["transaction_date"] = datetime.fromisoformat(row["transaction_date"])
        data["transaction_date_status"] = FieldStatus(row["transaction_date_status"])
        data["transaction_value_status"] = FieldStatus(row["transaction_value_status"])
        return StoredTransaction(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            **data,
        )
