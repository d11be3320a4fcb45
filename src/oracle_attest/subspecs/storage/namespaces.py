"""
Database namespace definitions for storage tables.

Defines table names and schema constants for SQLite storage.
Each namespace represents a logical grouping of related data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PriceValueNamespace:
    """
    Namespace for price value attestations.

    One row per accepted value claim. Rows are never updated or deleted.
    """

    TABLE_NAME: str = "price_value_attestations"
    """Table name for value attestations."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS price_value_attestations (
            validator_public_key TEXT NOT NULL,
            value INTEGER NOT NULL,
            slot_number INTEGER NOT NULL,
            signature TEXT NOT NULL
        )
    """
    """SQL to create the value attestations table."""

    CREATE_INDEX: str = """
        CREATE INDEX IF NOT EXISTS idx_price_value_slot
        ON price_value_attestations(slot_number)
    """
    """SQL to create slot index."""


@dataclass(frozen=True, slots=True)
class PriceIntervalNamespace:
    """
    Namespace for interval inclusion attestations.

    One row per accepted interval claim. Rows are never updated or deleted.
    """

    TABLE_NAME: str = "price_interval_attestations"
    """Table name for interval attestations."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS price_interval_attestations (
            validator_public_key TEXT NOT NULL,
            value INTEGER NOT NULL,
            interval_size INTEGER NOT NULL,
            slot_number INTEGER NOT NULL,
            signature TEXT NOT NULL
        )
    """
    """SQL to create the interval attestations table."""

    CREATE_INDEX: str = """
        CREATE INDEX IF NOT EXISTS idx_price_interval_slot
        ON price_interval_attestations(slot_number)
    """
    """SQL to create slot index."""


@dataclass(frozen=True, slots=True)
class AggregateIntervalNamespace:
    """
    Namespace for aggregate buckets.

    One row per (value, slot_number, interval_size). Rows are updated in place
    as signatures are merged and are never deleted.
    """

    TABLE_NAME: str = "aggregate_interval_attestations"
    """Table name for aggregate buckets."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS aggregate_interval_attestations (
            value INTEGER NOT NULL,
            slot_number INTEGER NOT NULL,
            interval_size INTEGER NOT NULL,
            num_validators INTEGER NOT NULL,
            aggregate_signature TEXT NOT NULL,
            UNIQUE (value, slot_number, interval_size)
        )
    """
    """SQL to create the aggregate bucket table."""


# Singleton instances for convenient access
PRICE_VALUES = PriceValueNamespace()
PRICE_INTERVALS = PriceIntervalNamespace()
AGGREGATES = AggregateIntervalNamespace()
