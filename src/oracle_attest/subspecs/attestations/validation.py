"""Signature validation for individual claims."""

from __future__ import annotations

from oracle_attest.subspecs.bls import BLSPublicKey, BLSSignature, KeyPair
from oracle_attest.subspecs.digest import message_digest
from oracle_attest.types import Container


def validate_message(
    public_key: BLSPublicKey,
    message: Container,
    signature: BLSSignature,
) -> bool:
    """
    Check `signature` against `public_key` over the digest of `message`.

    Pure and side-effect free; safe to run on any worker thread.
    """
    return signature.verify(public_key, bytes(message_digest(message)))


def sign_message(keypair: KeyPair, message: Container) -> BLSSignature:
    """Produce the signature `validate_message` accepts for `keypair` and `message`."""
    return keypair.sign(bytes(message_digest(message)))
