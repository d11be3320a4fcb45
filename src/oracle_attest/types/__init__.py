"""Reusable type definitions for the price oracle attestation service."""

from .base import StrictBaseModel
from .byte_arrays import ZERO_HASH, Bytes32, Bytes48, Bytes96
from .container import Container
from .exceptions import DecodeError, EncodingError, EncodingTypeError
from .ssz_base import SSZType
from .uint import Uint64

__all__ = [
    # Core types
    "Uint64",
    "Bytes32",
    "Bytes48",
    "Bytes96",
    "ZERO_HASH",
    "StrictBaseModel",
    "SSZType",
    "Container",
    # Exceptions
    "EncodingError",
    "EncodingTypeError",
    "DecodeError",
]
