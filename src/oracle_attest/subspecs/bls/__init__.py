"""BLS12-381 signatures: verification, aggregation and validator key material."""

from .aggregate import AggregateSignature, SignatureDecodeError, decode_signature_point
from .containers import BLSPublicKey, BLSSignature
from .keys import KeyPair

__all__ = [
    "AggregateSignature",
    "BLSPublicKey",
    "BLSSignature",
    "KeyPair",
    "SignatureDecodeError",
    "decode_signature_point",
]
