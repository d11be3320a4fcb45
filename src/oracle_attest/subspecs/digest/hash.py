"""
Canonical message digest (`message_digest`).

Signatures are never computed over the JSON a validator sends. They are
computed over this digest: SHA3-256 of the fixed-layout encoding of the
message. Two messages with equal fields therefore always produce the same
digest on every platform, and the signature scheme stays independent of the
wire schema.
"""

from __future__ import annotations

import hashlib
from functools import singledispatch

from oracle_attest.types import Bytes32, Container
from oracle_attest.types.uint import BaseUint


@singledispatch
def message_digest(value: object) -> Bytes32:
    """
    Compute the 32-byte digest a signature is made over.

    Concrete specializations are registered below with `@message_digest.register(Type)`.

    Raises:
        TypeError: If `value` has no registered specialization.
    """
    raise TypeError(f"message_digest: unsupported value type {type(value).__name__}")


def _sha3(data: bytes) -> Bytes32:
    return Bytes32(hashlib.sha3_256(data).digest())


@message_digest.register
def _digest_container(value: Container) -> Bytes32:
    """Containers hash their field-ordered encoding."""
    return _sha3(value.encode_bytes())


@message_digest.register
def _digest_uint(value: BaseUint) -> Bytes32:
    """A lone integer hashes its little-endian encoding."""
    return _sha3(value.encode_bytes())
