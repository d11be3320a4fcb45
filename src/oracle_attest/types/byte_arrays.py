"""
Fixed-length byte vector types.

Hashes, BLS public keys and BLS signatures all travel as byte vectors of a
length known at the type level. On the wire they are hex strings.
"""

from __future__ import annotations

from typing import IO, Any, ClassVar, Iterable, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import DecodeError
from .ssz_base import SSZType


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts:
      - `bytes` / `bytearray` (returned as immutable `bytes`)
      - Iterables of integers in [0, 255]
      - Hex strings, with or without a '0x' prefix (e.g. "0xdeadbeef" or "deadbeef")

    Raises:
      ValueError / TypeError if conversion is not possible or out-of-range.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        # bytes.fromhex validates hex characters and rejects odd lengths
        return bytes.fromhex(value.removeprefix("0x"))
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    raise TypeError(f"Cannot interpret {type(value).__name__} as bytes")


class BaseBytes(bytes, SSZType):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set `LENGTH`, the exact number of bytes an instance holds.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new Bytes instance.

        Args:
            value: Any value coercible to bytes (see `_coerce_to_bytes`).

        Raises:
            ValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise ValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)

    @classmethod
    def get_byte_length(cls) -> int:
        """Get the byte length of this fixed-size type."""
        return cls.LENGTH

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the raw bytes to `stream`."""
        return stream.write(self)

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read exactly `LENGTH` bytes from `stream`."""
        data = stream.read(cls.LENGTH)
        if len(data) != cls.LENGTH:
            raise DecodeError(cls.__name__, f"expected {cls.LENGTH} bytes, got {len(data)}")
        return cls(data)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Instances pass through unchanged. Raw bytes and hex strings (the JSON
        form) are coerced and length-checked. Serialization emits 0x-prefixed hex.
        """

        def validate(value: Any) -> BaseBytes:
            if isinstance(value, cls):
                return value
            try:
                return cls(value)
            except TypeError as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: "0x" + x.hex()
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        tname = type(self).__name__
        return f"{tname}({self.hex()})"

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes (digests)."""

    LENGTH = 32


class Bytes48(BaseBytes):
    """Fixed-size byte array of exactly 48 bytes (compressed G1 points)."""

    LENGTH = 48


class Bytes96(BaseBytes):
    """Fixed-size byte array of exactly 96 bytes (compressed G2 points)."""

    LENGTH = 96


ZERO_HASH: Bytes32 = Bytes32.zero()
"""All-zero 32-byte value."""
