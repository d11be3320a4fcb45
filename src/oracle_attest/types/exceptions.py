"""Exception hierarchy for the fixed-layout encoding."""

from __future__ import annotations


class EncodingError(Exception):
    """
    Base exception for all encoding-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class EncodingTypeError(EncodingError):
    """Raised when a container declares a field that has no fixed-width encoding."""

    def __init__(self, type_name: str, field_name: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(f"{type_name}.{field_name} has no fixed-width encoding")


class DecodeError(EncodingError):
    """
    Raised when decoding bytes to a value fails.

    Attributes:
        type_name: The type being decoded.
        detail: Description of what went wrong.
    """

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"Failed to decode {type_name}: {detail}")
