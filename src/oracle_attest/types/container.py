"""
Fixed-size SSZ Container: ordered heterogeneous collections with named fields.

Containers are how signed messages are defined. Because every field is itself
fixed-size, the encoding is simply the concatenation of the field encodings in
declaration order, with no offsets.
"""

from __future__ import annotations

from typing import IO, Type, cast

from typing_extensions import Self

from .base import StrictBaseModel
from .exceptions import EncodingTypeError
from .ssz_base import SSZType


class Container(StrictBaseModel, SSZType):
    """
    SSZ Container: A strict, ordered collection of fixed-size named fields.

    Example:
        >>> class IntervalInclusionMessage(Container):
        ...     value: Uint64
        ...     interval_size: Uint64
        ...     slot_number: Uint64

    Serialization format:
        [field_1][field_2]...[field_n]
    """

    @classmethod
    def _field_types(cls) -> list[tuple[str, Type[SSZType]]]:
        """Field names and their SSZ types, in declaration order."""
        fields = []
        for field_name, field_info in cls.model_fields.items():
            field_type = field_info.annotation
            if not (isinstance(field_type, type) and issubclass(field_type, SSZType)):
                raise EncodingTypeError(cls.__name__, field_name)
            fields.append((field_name, cast(Type[SSZType], field_type)))
        return fields

    @classmethod
    def get_byte_length(cls) -> int:
        """Total byte length of all fields summed together."""
        return sum(field_type.get_byte_length() for _, field_type in cls._field_types())

    def serialize(self, stream: IO[bytes]) -> int:
        """
        Serialize the container by writing each field in definition order.

        Args:
            stream: Binary stream to write serialized bytes to.

        Returns:
            Number of bytes written to the stream.
        """
        written = 0
        for field_name, _ in self._field_types():
            written += getattr(self, field_name).serialize(stream)
        return written

    @classmethod
    def deserialize(cls, stream: IO[bytes]) -> Self:
        """
        Deserialize a container by reading each field in definition order.

        Raises:
            DecodeError: If the stream ends before every field is read.
        """
        fields = {
            field_name: field_type.deserialize(stream)
            for field_name, field_type in cls._field_types()
        }
        return cls(**fields)
