"""Test helpers for oracle_attest unit tests."""

from __future__ import annotations

from .builders import (
    make_interval_message,
    make_keypair,
    make_oracle_message,
    make_value_message,
)
from .mocks import FailingDatabase, InMemoryDatabase, SlowDatabase

__all__ = [
    "FailingDatabase",
    "InMemoryDatabase",
    "SlowDatabase",
    "make_interval_message",
    "make_keypair",
    "make_oracle_message",
    "make_value_message",
]
