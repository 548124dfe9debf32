"""Unit tests for the cursor codec."""
from __future__ import annotations

import base64
import json
import math
from datetime import UTC, date, datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from keyset_paging.core.pagination.cursor import CursorCodec
from keyset_paging.core.pagination.exceptions import (
    CursorArityMismatch,
    CursorEncodeError,
    InvalidCursorFormat,
    PaginationError,
)


def _raw(cursor: str) -> str:
    return base64.urlsafe_b64decode(cursor + "=" * (-len(cursor) % 4)).decode()


def _token(payload: str) -> str:
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


class TestCursorEncoding:
    """Tests for the wire format."""

    def test_encode_known_key(self):
        """A (name, id) key should encode to tagged JSON in base64url."""
        cursor = CursorCodec().encode(("Brand:12", 13))

        assert cursor == "W1sicyIsIkJyYW5kOjEyIl0sWyJpIiwiMHhkIl1d"
        assert json.loads(_raw(cursor)) == [["s", "Brand:12"], ["i", "0xd"]]

    def test_encode_is_url_safe_without_padding(self):
        """Encoded cursors should never need escaping in URLs."""
        codec = CursorCodec()
        for key in [("a",), ("ab",), ("abc",), ("??>>~~",), (b"\xff\xfe",)]:
            cursor = codec.encode(key)
            assert "=" not in cursor
            assert "+" not in cursor
            assert "/" not in cursor

    def test_encode_is_deterministic(self):
        codec = CursorCodec()
        key = ("Product 1-3", 42, None)

        assert codec.encode(key) == codec.encode(key)

    def test_encode_unsupported_type(self):
        """Values without a tag should raise CursorEncodeError (a TypeError)."""
        with pytest.raises(CursorEncodeError) as exc_info:
            CursorCodec().encode((object(),))

        assert isinstance(exc_info.value, TypeError)
        assert isinstance(exc_info.value, PaginationError)


class TestCursorRoundTrip:
    """Tests for decode(encode(key)) == key."""

    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            False,
            0,
            -7,
            2**80,
            1.5,
            -0.1,
            "",
            "Brand:12",
            "ünïcødé | with pipe",
            Decimal("19.990"),
            datetime(2025, 1, 2, 3, 4, 5, 678901, tzinfo=UTC),
            datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5))),
            datetime(2025, 1, 2, 3, 4, 5),
            date(2025, 6, 30),
            time(23, 59, 1),
            UUID("12345678-1234-5678-1234-567812345678"),
            b"\x00\x01binary",
        ],
    )
    def test_round_trip_preserves_value_and_type(self, value):
        codec = CursorCodec()

        decoded = codec.decode(codec.encode((value, 1)), expected_arity=2)

        assert decoded == (value, 1)
        assert type(decoded[0]) is type(value)

    @pytest.mark.parametrize("value", [10**5000, -(2**20000)], ids=["huge", "huge-negative"])
    def test_round_trip_huge_int(self, value):
        codec = CursorCodec()

        assert codec.decode(codec.encode((value,)), 1) == (value,)

    def test_round_trip_special_floats(self):
        """inf and nan survive the float.hex() encoding."""
        codec = CursorCodec()

        inf, ninf, nan = codec.decode(codec.encode((math.inf, -math.inf, math.nan)), 3)

        assert inf == math.inf
        assert ninf == -math.inf
        assert math.isnan(nan)

    def test_bool_is_not_decoded_as_int(self):
        codec = CursorCodec()

        assert codec.decode(codec.encode((True,)), 1) == (True,)
        assert codec.decode(codec.encode((1,)), 1)[0] is not True


class TestCursorDecoding:
    """Tests for rejection of malformed cursors."""

    def test_arity_mismatch(self):
        codec = CursorCodec()
        cursor = codec.encode(("Brand:12",))

        with pytest.raises(CursorArityMismatch) as exc_info:
            codec.decode(cursor, expected_arity=2)

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1

    @pytest.mark.parametrize(
        "cursor",
        [
            "",
            "!!!not-base64!!!",
            _token("not json"),
            _token('{"a": 1}'),
            _token('[["s"]]'),
            _token('[["zz", 1]]'),
            _token('[["i", 12]]'),
            _token('[["i", "0xzz"]]'),
            _token('[["f", "0x1p99999"]]'),
            _token('[["n", 5]]'),
            _token('[["d", "not-a-number"]]'),
            _token('[["dt", "yesterday"]]'),
            _token('[["u", "not-a-uuid"]]'),
        ],
    )
    def test_invalid_cursor_format(self, cursor):
        with pytest.raises(InvalidCursorFormat) as exc_info:
            CursorCodec().decode(cursor, expected_arity=1)

        assert exc_info.value.cursor == cursor
        assert str(exc_info.value).startswith("invalid cursor:")

    @pytest.mark.parametrize(
        "payload",
        [
            '[["i", ' + "9" * 5000 + "]]",
            "[" * 100_000 + "]" * 100_000,
        ],
        ids=["json-int-over-digit-limit", "deeply-nested"],
    )
    def test_oversized_payload(self, payload):
        cursor = _token(payload)

        with pytest.raises(InvalidCursorFormat, match="not a key payload"):
            CursorCodec().decode(cursor, expected_arity=1)

    def test_inspect_ignores_arity(self):
        codec = CursorCodec()

        assert codec.inspect(codec.encode(("a", 1, None))) == ("a", 1, None)


class TestSignedCursors:
    """Tests for HMAC-signed cursors."""

    def test_signed_round_trip(self):
        codec = CursorCodec("s3cret")

        cursor = codec.encode(("Brand:12", 13))

        assert codec.signed
        assert codec.decode(cursor, 2) == ("Brand:12", 13)
        assert _raw(cursor).rpartition("|")[2] != ""

    def test_tampered_payload_rejected(self):
        codec = CursorCodec("s3cret")
        payload, _, signature = _raw(codec.encode(("Brand:12", 13))).rpartition("|")
        forged = _token(payload.replace("13", "14") + "|" + signature)

        with pytest.raises(InvalidCursorFormat, match="signature mismatch"):
            codec.decode(forged, 2)

    def test_unsigned_cursor_rejected_when_secret_set(self):
        cursor = CursorCodec().encode(("Brand:12", 13))

        with pytest.raises(InvalidCursorFormat, match="signature mismatch"):
            CursorCodec("s3cret").decode(cursor, 2)

    def test_other_secret_rejected(self):
        cursor = CursorCodec("one").encode((1,))

        with pytest.raises(InvalidCursorFormat):
            CursorCodec("two").decode(cursor, 1)

    def test_non_ascii_signature_rejected(self):
        forged = _token('[["i",1]]|ßignature')

        with pytest.raises(InvalidCursorFormat, match="signature mismatch"):
            CursorCodec("s3cret").decode(forged, 1)

    def test_empty_secret_means_unsigned(self):
        assert not CursorCodec("").signed
