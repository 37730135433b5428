"""
Cloud Cache — Serialization Tests
"""

import math
from typing import Any

import pytest

from cloud_cache.cache.serialization import JsonSerializer, deserialize, is_serializable, serialize
from cloud_cache.errors import DeserializationError, ErrorCode, SerializationError


class TestSerialization:
    """Test suite for the JSON codec."""

    def test_round_trip(self, sample_cache_data: dict[str, Any]) -> None:
        for value in sample_cache_data.values():
            assert deserialize(serialize(value)) == value

    def test_compact_ascii_output(self) -> None:
        assert serialize({"a": [1, 2], "b": "ü"}) == '{"a":[1,2],"b":"\\u00fc"}'

    def test_lone_surrogate_is_escaped(self) -> None:
        encoded = serialize("bad\ud800")
        assert encoded == '"bad\\ud800"'
        assert encoded.encode("utf-8")
        assert deserialize(encoded.encode("utf-8")) == "bad\ud800"

    def test_tuples_become_lists(self) -> None:
        assert deserialize(serialize((1, 2))) == [1, 2]

    def test_circular_structure_rejected(self) -> None:
        cyclic: list[Any] = []
        cyclic.append(cyclic)

        with pytest.raises(SerializationError) as exc_info:
            serialize(cyclic)

        assert exc_info.value.error_code == ErrorCode.SERIALIZATION_FAILURE
        assert exc_info.value.details["value_type"] == "list"

    @pytest.mark.parametrize("value", [object(), {1, 2}, b"bytes", math.nan, math.inf])
    def test_unrepresentable_values_rejected(self, value: Any) -> None:
        with pytest.raises(SerializationError):
            serialize(value)
        assert is_serializable(value) is False

    def test_is_serializable(self) -> None:
        assert is_serializable({"nested": [None, True, 1.5]}) is True

    def test_deserialize_bytes(self) -> None:
        assert deserialize('{"k":"é"}'.encode()) == {"k": "é"}

    @pytest.mark.parametrize("data", ["{not json", "", b"\xff\xfe", "undefined"])
    def test_malformed_input_rejected(self, data: str | bytes) -> None:
        with pytest.raises(DeserializationError):
            deserialize(data)

    def test_json_serializer_delegates(self) -> None:
        codec = JsonSerializer()
        assert codec.loads(codec.dumps({"x": 1})) == {"x": 1}
