"""Cursor encoding and decoding for pagination.

Cursors are opaque strings that encode the position of a row in a sort
order. They carry the row's sort-key values, in sort-field order, so the
next query can seek directly past that row. No ordering semantics live
in the cursor; the active sort specification supplies them.

The cursor format is:
1. JSON array of ``[tag, value]`` pairs, one per sort field
2. Optional ``|<hmac>`` suffix when a signing secret is configured
3. Base64 URL-safe encoded with the ``=`` padding stripped

Example cursor payload:
    [["s","Brand:12"],["i","0xd"]]

Encoded: W1sicyIsIkJyYW5kOjEyIl0sWyJpIiwiMHhkIl1d

Tags keep every value lossless: ints and floats go through ``hex()`` and
``float.hex()`` (no digit limit), decimals and datetimes through their string
forms, and ``None`` has its own marker.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from collections.abc import Callable, Sequence
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from keyset_paging.core.pagination.exceptions import (
    CursorArityMismatch,
    CursorEncodeError,
    InvalidCursorFormat,
)

# Order matters: bool before int, datetime before date.
_ENCODERS: tuple[tuple[type, str, Callable[[Any], Any]], ...] = (
    (bool, "b", lambda v: v),
    (int, "i", hex),
    (float, "f", lambda v: v.hex()),
    (str, "s", lambda v: v),
    (Decimal, "d", str),
    (datetime, "dt", lambda v: v.isoformat()),
    (date, "da", lambda v: v.isoformat()),
    (time, "t", lambda v: v.isoformat()),
    (UUID, "u", str),
    (bytes, "by", lambda v: base64.b64encode(v).decode("ascii")),
)


def _decode_bool(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise ValueError("expected boolean")
    return raw


def _decode_str(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError("expected string")
    return raw


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "b": _decode_bool,
    "i": lambda raw: int(_decode_str(raw), 16),
    "f": lambda raw: float.fromhex(_decode_str(raw)),
    "s": _decode_str,
    "d": lambda raw: Decimal(_decode_str(raw)),
    "dt": lambda raw: datetime.fromisoformat(_decode_str(raw)),
    "da": lambda raw: date.fromisoformat(_decode_str(raw)),
    "t": lambda raw: time.fromisoformat(_decode_str(raw)),
    "u": lambda raw: UUID(_decode_str(raw)),
    "by": lambda raw: base64.b64decode(_decode_str(raw), validate=True),
}


def _tag_value(value: Any) -> list[Any]:
    if value is None:
        return ["n", None]
    for value_type, tag, encode in _ENCODERS:
        if isinstance(value, value_type):
            return [tag, encode(value)]
    raise CursorEncodeError(value)


def _untag_value(entry: Any) -> Any:
    if not isinstance(entry, list) or len(entry) != 2 or not isinstance(entry[0], str):
        raise ValueError("expected [tag, value] pair")
    tag, raw = entry
    if tag == "n":
        if raw is not None:
            raise ValueError("null marker carries a value")
        return None
    decoder = _DECODERS.get(tag)
    if decoder is None:
        raise ValueError(f"unknown value tag {tag!r}")
    return decoder(raw)


class CursorCodec:
    """Encode and decode pagination cursors.

    Cursors are URL-safe base64 strings that encode the sort-key tuple of
    a row. When a secret is given, every cursor is signed with a truncated
    HMAC-SHA256 digest and decoding rejects tampered tokens.

    Usage:
        codec = CursorCodec()

        # Encoding
        cursor = codec.encode(("Brand:12", 13))

        # Decoding (arity must match the active sort)
        key = codec.decode(cursor, expected_arity=2)
        print(key)  # ("Brand:12", 13)
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: str | bytes | None = None) -> None:
        if isinstance(secret, str):
            secret = secret.encode()
        self._secret: bytes | None = secret or None

    @property
    def signed(self) -> bool:
        return self._secret is not None

    def _sign(self, payload: str) -> str:
        assert self._secret is not None
        return hmac.new(self._secret, payload.encode(), hashlib.sha256).hexdigest()[:16]

    def encode(self, key: Sequence[Any]) -> str:
        """Encode a key tuple to an opaque string.

        Args:
            key: Sort-key values in sort-field order

        Returns:
            URL-safe base64 string without padding

        Raises:
            CursorEncodeError: If a value type is not supported
        """
        payload = json.dumps([_tag_value(v) for v in key], separators=(",", ":"))
        if self._secret is not None:
            payload = f"{payload}|{self._sign(payload)}"
        return base64.urlsafe_b64encode(payload.encode()).decode("ascii").rstrip("=")

    def decode(self, cursor: str, expected_arity: int) -> tuple[Any, ...]:
        """Decode a cursor string to its key tuple.

        Args:
            cursor: Token previously produced by :meth:`encode`
            expected_arity: Number of fields in the active sort

        Returns:
            Key tuple with the original value types

        Raises:
            InvalidCursorFormat: If the token is malformed or its signature is wrong
            CursorArityMismatch: If the key length differs from ``expected_arity``
        """
        key = self.inspect(cursor)
        if len(key) != expected_arity:
            raise CursorArityMismatch(cursor, expected_arity, len(key))
        return key

    def inspect(self, cursor: str) -> tuple[Any, ...]:
        """Decode a cursor without checking it against a sort (tooling, logs)."""
        if not isinstance(cursor, str) or not cursor:
            raise InvalidCursorFormat(str(cursor), "empty cursor")

        try:
            padded = cursor + "=" * (-len(cursor) % 4)
            raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError) as exc:
            raise InvalidCursorFormat(cursor, "not base64") from exc

        payload = raw
        if self._secret is not None:
            payload, sep, signature = raw.rpartition("|")
            expected = self._sign(payload).encode()
            if not sep or not hmac.compare_digest(signature.encode(), expected):
                raise InvalidCursorFormat(cursor, "signature mismatch")

        try:
            entries = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            raise InvalidCursorFormat(cursor, "not a key payload") from exc
        if not isinstance(entries, list):
            raise InvalidCursorFormat(cursor, "not a key payload")

        try:
            key = tuple(_untag_value(entry) for entry in entries)
        except (ValueError, TypeError, OverflowError, InvalidOperation, binascii.Error) as exc:
            raise InvalidCursorFormat(cursor, str(exc) or "bad value") from exc
        return key


__all__ = ["CursorCodec"]
