"""Unit tests for cfdetect/utils/ulid.py — inference ID generation."""

from __future__ import annotations

import re

from cfdetect.utils.ulid import generate_ulid

# Crockford Base32 charset: 0-9 and A-Z, excluding I, L, O, U
ULID_CHARSET = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")


def test_generate_ulid_returns_string() -> None:
    assert isinstance(generate_ulid(), str)


def test_generate_ulid_format() -> None:
    result = generate_ulid()
    assert ULID_CHARSET.match(result), f"ULID {result!r} has an unexpected format"


def test_generate_ulid_unique() -> None:
    ids = [generate_ulid() for _ in range(1000)]
    assert len(set(ids)) == len(ids)


def test_generate_ulid_sortable_across_milliseconds() -> None:
    import time

    first = generate_ulid()
    time.sleep(0.002)
    second = generate_ulid()
    assert first < second
