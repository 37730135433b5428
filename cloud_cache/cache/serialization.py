"""
Cloud Cache — Value Serialization

JSON codec applied at the backend boundary. Every backend stores the string
form produced here, so values round-trip identically whichever engine holds them:
strings, numbers, booleans, None and nested dicts/lists are preserved.

Output is ASCII-only (non-ASCII characters, lone surrogates included, become
\\uXXXX escapes) so every transport can encode it. NaN and infinity are
rejected because they have no JSON representation.
"""

import json
from typing import Any, Protocol, TypeVar

from ..errors import DeserializationError, SerializationError

T = TypeVar("T")


class Serializer(Protocol[T]):
    """Two-way conversion between a value type and its stored string form."""

    def dumps(self, value: T) -> str: ...

    def loads(self, data: str | bytes) -> T: ...


class JsonSerializer:
    """Compact JSON serializer used by all built-in backends."""

    def dumps(self, value: Any) -> str:
        return serialize(value)

    def loads(self, data: str | bytes) -> Any:
        return deserialize(data)


def serialize(value: Any) -> str:
    """
    Serialize a value to a JSON string.

    Raises:
        SerializationError: For circular structures, unsupported types, NaN/inf
    """
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(
            f"Failed to serialize value: {e}",
            details={"value_type": type(value).__name__, "error": str(e)},
        ) from e


def deserialize(data: str | bytes) -> Any:
    """
    Deserialize a JSON string (or UTF-8 bytes) back to a value.

    Raises:
        DeserializationError: If the data is not valid JSON
    """
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)
    except (TypeError, ValueError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise DeserializationError(
            f"Failed to deserialize value: {e}",
            details={"data_preview": str(data)[:100], "error": str(e)},
        ) from e


def is_serializable(value: Any) -> bool:
    """Check whether a value can be stored."""
    try:
        serialize(value)
    except SerializationError:
        return False
    return True
