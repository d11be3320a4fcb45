"""
Validator-side BLS key material.

The aggregator itself only ever verifies. Validators, test suites and the
key-generation script use these helpers to produce keys and signatures that
the aggregator accepts.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from py_ecc.bls import G2ProofOfPossession

from .containers import BLSPublicKey, BLSSignature

IKM_MIN_LENGTH = 32
"""Minimum input keying material length accepted by BLS KeyGen."""


@dataclass(frozen=True, slots=True)
class KeyPair:
    """A BLS secret scalar together with its public key."""

    secret_key: int
    """Secret scalar in [1, r)."""

    public_key: BLSPublicKey
    """Compressed public key derived from the secret."""

    @classmethod
    def from_ikm(cls, ikm: bytes) -> KeyPair:
        """
        Derive a key pair deterministically from input keying material.

        Raises:
            ValueError: If `ikm` is shorter than 32 bytes.
        """
        if len(ikm) < IKM_MIN_LENGTH:
            raise ValueError(f"IKM must be at least {IKM_MIN_LENGTH} bytes, got {len(ikm)}")
        secret_key = G2ProofOfPossession.KeyGen(ikm)
        return cls(
            secret_key=secret_key,
            public_key=BLSPublicKey(G2ProofOfPossession.SkToPk(secret_key)),
        )

    @classmethod
    def generate(cls) -> KeyPair:
        """Fresh key pair from the OS random source."""
        return cls.from_ikm(secrets.token_bytes(IKM_MIN_LENGTH))

    def sign(self, message: bytes) -> BLSSignature:
        """Sign raw message bytes (in practice always a 32-byte digest)."""
        return BLSSignature(G2ProofOfPossession.Sign(self.secret_key, message))
