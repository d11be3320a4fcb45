"""Unsigned Integer Type Specification."""

from __future__ import annotations

from typing import IO, Any, ClassVar, SupportsInt

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import DecodeError
from .ssz_base import SSZType


class BaseUint(int, SSZType):
    """
    A base class for unsigned integer types that inherits from `int`.

    Values behave as plain integers in arithmetic and comparisons; the type
    only pins the range and the little-endian fixed-width encoding.
    """

    BITS: ClassVar[int]
    """The number of bits in the integer (overridden by subclasses)."""

    def __new__(cls, value: SupportsInt) -> Self:
        """
        Create and validate a new Uint instance.

        Raises:
            TypeError: If `value` is a bool or not an integer-like value.
            OverflowError: If `value` is outside the allowed range [0, 2**BITS - 1].
        """
        if isinstance(value, bool) or not isinstance(value, SupportsInt):
            raise TypeError(f"{cls.__name__} expects an integer, got {type(value).__name__}")
        int_value = int(value)
        if not (0 <= int_value < (2**cls.BITS)):
            raise OverflowError(f"{int_value} is out of range for {cls.__name__}")
        return super().__new__(cls, int_value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Hook into Pydantic's validation system."""

        def validate(value: Any) -> BaseUint:
            """Pydantic validation function that calls the class constructor."""
            if isinstance(value, cls):
                return value
            if not isinstance(value, int):
                raise ValueError(f"{cls.__name__} expects an integer, got {type(value).__name__}")
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.json_or_python_schema(
            json_schema=core_schema.chain_schema(
                [
                    core_schema.int_schema(ge=0),
                    core_schema.no_info_plain_validator_function(validate),
                ]
            ),
            python_schema=core_schema.no_info_plain_validator_function(validate),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: int(instance)
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Hook into Pydantic's JSON Schema generation system."""
        return {"type": "integer", "minimum": 0, "format": f"uint{cls.BITS}"}

    @classmethod
    def get_byte_length(cls) -> int:
        """Width of the little-endian encoding."""
        return cls.BITS // 8

    def serialize(self, stream: IO[bytes]) -> int:
        """Write the little-endian encoding to `stream`."""
        return stream.write(int(self).to_bytes(self.get_byte_length(), "little"))

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """Read a little-endian value of exactly `get_byte_length()` bytes."""
        size = cls.get_byte_length()
        data = stream.read(size)
        if len(data) != size:
            raise DecodeError(cls.__name__, f"expected {size} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "little"))

    def __repr__(self) -> str:
        """Return the official string representation of the object."""
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        """Return the informal, user-friendly string representation."""
        return str(int(self))


class Uint64(BaseUint):
    """A type representing a 64-bit unsigned integer (uint64)."""

    BITS = 64
