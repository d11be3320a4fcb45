"""
SQLite repository implementation for attestation storage.

This module provides persistent storage for:

- Accepted price value claims (append-only)
- Accepted interval inclusion claims (append-only)
- Aggregate buckets keyed by (value, slot_number, interval_size)

Keys and signatures are stored as lowercase hex without a prefix.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path

from oracle_attest.subspecs.containers import (
    AggregateKey,
    AggregatePriceIntervalEntry,
    PriceIntervalEntry,
    PriceValueEntry,
)

from .database import StorageError
from .namespaces import AGGREGATES, PRICE_INTERVALS, PRICE_VALUES

logger = logging.getLogger(__name__)

_UINT64_MODULUS = 2**64
_INT64_MAX = 2**63 - 1


def to_sql_integer(value: int) -> int:
    """
    Map a uint64 onto SQLite's signed 64-bit INTEGER.

    Values above 2**63 - 1 are stored as their two's-complement reinterpretation,
    which keeps equality (and therefore the bucket unique key) exact.
    """
    if not 0 <= value < _UINT64_MODULUS:
        raise ValueError(f"{value} is out of range for uint64")
    return value - _UINT64_MODULUS if value > _INT64_MAX else value


def from_sql_integer(value: int) -> int:
    """Inverse of `to_sql_integer`."""
    return value + _UINT64_MODULUS if value < 0 else value


def _strip_hex(text: str) -> str:
    return text.removeprefix("0x").lower()


class SQLiteDatabase:
    """
    SQLite implementation of the Database protocol.

    Stores attestation data in a single SQLite file.

    One connection is shared by every caller. A lock serializes access to it so
    that calls arriving from different worker threads never interleave inside
    a transaction.
    """

    def __init__(self, path: Path | str) -> None:
        """
        Initialize SQLite database.

        Creates database file and tables if they don't exist.

        Args:
            path: Path to SQLite database file.
                  Use ":memory:" for in-memory database.

        Raises:
            StorageError: If the file cannot be opened or the schema cannot be created.
        """
        self._path = Path(path) if isinstance(path, str) else path
        self._lock = threading.Lock()

        try:
            # The connection is handed between worker threads; the lock above
            # provides the serialization SQLite would otherwise require.
            self._conn = sqlite3.connect(str(self._path), check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self._path}: {exc}") from exc

        # Row factory enables dict-like access: row["column_name"].
        self._conn.row_factory = sqlite3.Row

        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        with self._transaction() as cursor:
            cursor.execute(PRICE_VALUES.CREATE_TABLE)
            cursor.execute(PRICE_VALUES.CREATE_INDEX)
            cursor.execute(PRICE_INTERVALS.CREATE_TABLE)
            cursor.execute(PRICE_INTERVALS.CREATE_INDEX)

            # The UNIQUE constraint on (value, slot_number, interval_size)
            # is the bucket identity that upserts resolve against.
            cursor.execute(AGGREGATES.CREATE_TABLE)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Run one unit of work under the connection lock.

        Commits on success, rolls back on failure. Any SQLite failure is
        re-raised as StorageError.
        """
        with self._lock:
            try:
                cursor = self._conn.cursor()
                yield cursor
                self._conn.commit()
            except sqlite3.Error as exc:
                # A closed connection cannot roll back; the original error is what matters.
                with suppress(sqlite3.Error):
                    self._conn.rollback()
                logger.error("SQLite operation failed: %s", exc)
                raise StorageError(str(exc)) from exc

    # -------------------------------------------------------------------------
    # Attestation Rows
    # -------------------------------------------------------------------------

    def insert_value_attestation(self, entry: PriceValueEntry) -> None:
        """Append one accepted price value claim."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO {PRICE_VALUES.TABLE_NAME}
                    (validator_public_key, value, slot_number, signature)
                VALUES (?, ?, ?, ?)
                """,
                (
                    _strip_hex(entry.validator_public_key),
                    to_sql_integer(entry.value),
                    to_sql_integer(entry.slot_number),
                    _strip_hex(entry.signature),
                ),
            )

    def insert_interval_attestation(self, entry: PriceIntervalEntry) -> None:
        """Append one accepted interval inclusion claim."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO {PRICE_INTERVALS.TABLE_NAME}
                    (validator_public_key, value, interval_size, slot_number, signature)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    _strip_hex(entry.validator_public_key),
                    to_sql_integer(entry.value),
                    to_sql_integer(entry.interval_size),
                    to_sql_integer(entry.slot_number),
                    _strip_hex(entry.signature),
                ),
            )

    # -------------------------------------------------------------------------
    # Aggregate Buckets
    # -------------------------------------------------------------------------

    def get_aggregate_bucket(self, key: AggregateKey) -> AggregatePriceIntervalEntry | None:
        """Point lookup of one bucket by its composite key."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                SELECT value, slot_number, interval_size, num_validators, aggregate_signature
                FROM {AGGREGATES.TABLE_NAME}
                WHERE value = ? AND slot_number = ? AND interval_size = ?
                """,
                (
                    to_sql_integer(key.value),
                    to_sql_integer(key.slot_number),
                    to_sql_integer(key.interval_size),
                ),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._aggregate_from_row(row)

    def upsert_aggregate_bucket(self, entry: AggregatePriceIntervalEntry) -> None:
        """Insert the bucket, or overwrite count and aggregate if it exists."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO {AGGREGATES.TABLE_NAME}
                    (value, slot_number, interval_size, num_validators, aggregate_signature)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (value, slot_number, interval_size) DO UPDATE SET
                    num_validators = excluded.num_validators,
                    aggregate_signature = excluded.aggregate_signature
                """,
                (
                    to_sql_integer(entry.value),
                    to_sql_integer(entry.slot_number),
                    to_sql_integer(entry.interval_size),
                    entry.num_validators,
                    _strip_hex(entry.aggregate_signature),
                ),
            )

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def get_price_value_attestations(self) -> list[PriceValueEntry]:
        """All value attestation rows in insertion order."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                SELECT validator_public_key, value, slot_number, signature
                FROM {PRICE_VALUES.TABLE_NAME}
                ORDER BY rowid
                """
            )
            rows = cursor.fetchall()
        return [
            PriceValueEntry(
                validator_public_key=row["validator_public_key"],
                value=from_sql_integer(row["value"]),
                slot_number=from_sql_integer(row["slot_number"]),
                signature=row["signature"],
            )
            for row in rows
        ]

    def get_price_interval_attestations(self) -> list[PriceIntervalEntry]:
        """All interval attestation rows in insertion order."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                SELECT validator_public_key, value, slot_number, signature, interval_size
                FROM {PRICE_INTERVALS.TABLE_NAME}
                ORDER BY rowid
                """
            )
            rows = cursor.fetchall()
        return [
            PriceIntervalEntry(
                validator_public_key=row["validator_public_key"],
                value=from_sql_integer(row["value"]),
                slot_number=from_sql_integer(row["slot_number"]),
                signature=row["signature"],
                interval_size=from_sql_integer(row["interval_size"]),
            )
            for row in rows
        ]

    def get_aggregate_price_interval_attestations(self) -> list[AggregatePriceIntervalEntry]:
        """All aggregate buckets in creation order."""
        with self._transaction() as cursor:
            cursor.execute(
                f"""
                SELECT value, slot_number, interval_size, num_validators, aggregate_signature
                FROM {AGGREGATES.TABLE_NAME}
                ORDER BY rowid
                """
            )
            rows = cursor.fetchall()
        return [self._aggregate_from_row(row) for row in rows]

    @staticmethod
    def _aggregate_from_row(row: sqlite3.Row) -> AggregatePriceIntervalEntry:
        # The aggregate is returned verbatim; decoding it is the caller's job.
        return AggregatePriceIntervalEntry(
            value=from_sql_integer(row["value"]),
            slot_number=from_sql_integer(row["slot_number"]),
            aggregate_signature=row["aggregate_signature"],
            interval_size=from_sql_integer(row["interval_size"]),
            num_validators=row["num_validators"],
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SQLiteDatabase:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
