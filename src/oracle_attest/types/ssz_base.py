"""Base interface for every type with a fixed-width binary encoding."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import IO

from typing_extensions import Self

from .exceptions import DecodeError


class SSZType(ABC):
    """
    Abstract base class for fixed-size SSZ types.

    Every type that takes part in a signed message implements this interface.
    Only fixed-size types exist here: a signed claim is a flat sequence of
    integers, so offsets and variable-length sections are never needed.
    """

    @classmethod
    @abstractmethod
    def get_byte_length(cls) -> int:
        """Number of bytes in the encoding of any value of this type."""
        ...

    @abstractmethod
    def serialize(self, stream: IO[bytes]) -> int:
        """
        Write the encoding to a binary stream.

        Returns:
            The number of bytes written.
        """
        ...

    @classmethod
    @abstractmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read exactly `get_byte_length()` bytes from the stream and build a value."""
        ...

    def encode_bytes(self) -> bytes:
        """Serialize the value to a byte string."""
        with io.BytesIO() as stream:
            self.serialize(stream)
            return stream.getvalue()

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """Deserialize a byte string that holds exactly one value of this type."""
        with io.BytesIO(data) as stream:
            value = cls.deserialize(stream)
            if stream.read(1):
                raise DecodeError(cls.__name__, f"trailing bytes after {cls.get_byte_length()}")
            return value
