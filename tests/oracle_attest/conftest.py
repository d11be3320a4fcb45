"""
Shared pytest fixtures for all oracle_attest tests.

BLS signing and pairing checks are slow in pure Python, so key pairs and the
signatures reused across modules are built once per session.
"""

from __future__ import annotations

import pytest

from oracle_attest.subspecs.attestations import sign_message
from oracle_attest.subspecs.bls import BLSSignature, KeyPair
from oracle_attest.subspecs.containers import AggregateKey, IntervalInclusionMessage
from tests.oracle_attest.helpers import InMemoryDatabase, make_interval_message, make_keypair


@pytest.fixture(scope="session")
def keypair_a() -> KeyPair:
    """Validator A."""
    return make_keypair(1)


@pytest.fixture(scope="session")
def keypair_b() -> KeyPair:
    """Validator B."""
    return make_keypair(2)


@pytest.fixture(scope="session")
def keypair_c() -> KeyPair:
    """Validator C."""
    return make_keypair(3)


@pytest.fixture(scope="session")
def interval_claim() -> IntervalInclusionMessage:
    """The shared claim: value 100 held for 10 slots ending at slot 5."""
    return make_interval_message(value=100, interval_size=10, slot_number=5)


@pytest.fixture(scope="session")
def interval_key(interval_claim: IntervalInclusionMessage) -> AggregateKey:
    """Bucket key of `interval_claim`."""
    return AggregateKey.from_message(interval_claim)


@pytest.fixture(scope="session")
def signature_a(keypair_a: KeyPair, interval_claim: IntervalInclusionMessage) -> BLSSignature:
    """Validator A's signature over `interval_claim`."""
    return sign_message(keypair_a, interval_claim)


@pytest.fixture(scope="session")
def signature_b(keypair_b: KeyPair, interval_claim: IntervalInclusionMessage) -> BLSSignature:
    """Validator B's signature over `interval_claim`."""
    return sign_message(keypair_b, interval_claim)


@pytest.fixture(scope="session")
def signature_c(keypair_c: KeyPair, interval_claim: IntervalInclusionMessage) -> BLSSignature:
    """Validator C's signature over `interval_claim`."""
    return sign_message(keypair_c, interval_claim)


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    """Fresh dictionary-backed repository."""
    return InMemoryDatabase()
