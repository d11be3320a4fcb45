"""
Storage module for attestation rows and aggregate buckets.

Provides the repository abstraction the attestation pipeline depends on.
Uses SQLite for simplicity and correctness.
"""

from .database import Database, StorageError
from .namespaces import (
    AGGREGATES,
    PRICE_INTERVALS,
    PRICE_VALUES,
    AggregateIntervalNamespace,
    PriceIntervalNamespace,
    PriceValueNamespace,
)
from .sqlite import SQLiteDatabase

__all__ = [
    "AGGREGATES",
    "PRICE_INTERVALS",
    "PRICE_VALUES",
    "Database",
    "SQLiteDatabase",
    "StorageError",
    "AggregateIntervalNamespace",
    "PriceIntervalNamespace",
    "PriceValueNamespace",
]
