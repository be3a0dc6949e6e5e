"""ULID generation utility for cfdetect.

Provides a single `generate_ulid()` function that returns a 26-character ULID
used as:
  - X-Inference-ID response header value (set on every /detect response)
  - inference_id field bound to every log entry for the same inference

Uses the `python-ulid` library — do NOT hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID as a 26-character uppercase string.

    Returns:
        str: A 26-character ULID string, Crockford Base32 charset
             ``[0-9A-HJKMNP-TV-Z]``.

    Example::

        inference_id = generate_ulid()
        assert len(inference_id) == 26
    """
    return str(ULID())
