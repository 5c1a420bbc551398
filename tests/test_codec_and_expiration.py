import math
from datetime import UTC, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from keyv.codec import Codec, JsonCodec, decode_text
from keyv.entry import Entry
from keyv.errors import SerializationError
from keyv.expiration import as_utc, expires_at_for, is_expired, normalize_ttl


_JSON_SCALARS = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=30)
)
_JSON_VALUES = st.recursive(
    _JSON_SCALARS,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=12), children, max_size=4),
    max_leaves=20,
)

_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@given(_JSON_VALUES)
def test_json_codec_roundtrips_json_values(value: object) -> None:
    codec = JsonCodec()
    assert codec.decode(codec.encode(value)) == value


def test_json_codec_satisfies_codec_protocol() -> None:
    assert isinstance(JsonCodec(), Codec)


def test_json_codec_rejects_cycles_and_unsupported_values() -> None:
    codec = JsonCodec()
    cyclic: list[object] = []
    cyclic.append(cyclic)

    with pytest.raises(SerializationError, match="cannot encode value of type list"):
        _ = codec.encode(cyclic)
    with pytest.raises(SerializationError, match="cannot encode value of type set"):
        _ = codec.encode({1, 2})
    with pytest.raises(SerializationError):
        _ = codec.encode(math.nan)


def test_json_codec_decode_failures_are_serialization_errors() -> None:
    codec = JsonCodec()
    with pytest.raises(SerializationError, match="cannot decode stored value"):
        _ = codec.decode("{not json")
    with pytest.raises(SerializationError, match="not valid UTF-8"):
        _ = codec.decode(b"\xff\xfe")
    assert codec.decode(b'{"a": 1}') == {"a": 1}


def test_decode_text_accepts_str_and_utf8_bytes() -> None:
    assert decode_text(None, "k") is None
    assert decode_text("caf\u00e9", "k") == "caf\u00e9"
    assert decode_text("caf\u00e9".encode(), "k") == "caf\u00e9"
    with pytest.raises(SerializationError, match="value stored under 'app:k' is not valid UTF-8"):
        _ = decode_text(b"\xff\xfe", "app:k")


def test_json_codec_uses_injected_callables() -> None:
    codec = JsonCodec(encoder=lambda value: f"<{value}>", decoder=lambda text: text.strip("<>"))
    assert codec.encode("x") == "<x>"
    assert codec.decode("<x>") == "x"


def test_serialization_error_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="cannot decode"):
        _ = JsonCodec().decode("")


def test_normalize_ttl_accepts_timedelta_and_seconds() -> None:
    assert normalize_ttl(None) is None
    assert normalize_ttl(5) == timedelta(seconds=5)
    assert normalize_ttl(0.5) == timedelta(milliseconds=500)
    assert normalize_ttl(timedelta(minutes=1)) == timedelta(minutes=1)


def test_normalize_ttl_rejects_invalid_values() -> None:
    with pytest.raises(ValueError, match="ttl must not be negative"):
        _ = normalize_ttl(-1)
    with pytest.raises(TypeError, match="not bool"):
        _ = normalize_ttl(True)
    with pytest.raises(TypeError, match="got str"):
        _ = normalize_ttl("10")  # type: ignore[arg-type]


def test_expires_at_for_counts_from_now() -> None:
    assert expires_at_for(None, _NOW) is None
    assert expires_at_for(30, _NOW) == _NOW + timedelta(seconds=30)
    assert expires_at_for(0, _NOW) == _NOW


def test_is_expired_boundaries() -> None:
    assert is_expired(Entry("k", "1"), _NOW) is False
    assert is_expired(Entry("k", "1", _NOW + timedelta(seconds=1)), _NOW) is False
    assert is_expired(Entry("k", "1", _NOW), _NOW) is True
    assert is_expired(Entry("k", "1", _NOW - timedelta(seconds=1)), _NOW) is True


def test_is_expired_compares_across_timezones_and_naive_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    deadline = datetime(2024, 1, 1, 13, 59, 59, tzinfo=plus_two)
    assert is_expired(Entry("k", "1", deadline), _NOW) is True

    naive_future = datetime(2024, 1, 1, 12, 0, 1)  # noqa: DTZ001
    assert is_expired(Entry("k", "1", naive_future), _NOW) is False
    assert as_utc(naive_future).tzinfo is UTC
