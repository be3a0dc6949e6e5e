"""IPv4 CIDR containment for provider range lists.

Range entries come straight from the provider's published text lists:

  - An entry containing ``:`` is IPv6 and never matches (IPv6 containment is
    not implemented).
  - ``a.b.c.d/n``  → standard prefix mask of n leading one bits (0 ≤ n ≤ 32).
  - ``a.b.c.d/``   → empty prefix, treated as /0 (matches every address).
  - ``a.b.c.d``    → no slash, a single host (/32).

Addresses are parsed by ``ipaddress.IPv4Address`` (strict dotted quad, no
leading zeros); a bad address or a prefix outside 0..32 raises CidrParseError.
``ipv4_in_ranges`` treats an unparseable entry or candidate as non-matching
and logs it, so one bad line in a fetched list cannot fail an inference.
"""

from __future__ import annotations

import ipaddress
from typing import Iterable

from cfdetect.utils.logger import get_logger

logger = get_logger(__name__)

_FULL_MASK: int = 0xFFFFFFFF


class CidrParseError(ValueError):
    """Raised when an IPv4 address or CIDR entry cannot be parsed."""


def parse_ipv4(address: str) -> int:
    """Convert a dotted-quad string to a 32-bit unsigned integer (MSB first).

    Raises:
        CidrParseError: if ``address`` is not a strict IPv4 dotted quad.
    """
    try:
        return int(ipaddress.IPv4Address(address.strip()))
    except ipaddress.AddressValueError as exc:
        raise CidrParseError(f"invalid IPv4 address {address!r}: {exc}") from exc


def prefix_mask(prefix_length: int) -> int:
    """Return the 32-bit mask with ``prefix_length`` leading one bits."""
    if not 0 <= prefix_length <= 32:
        raise CidrParseError(f"prefix length {prefix_length} outside 0..32")
    return (_FULL_MASK << (32 - prefix_length)) & _FULL_MASK


def parse_cidr(entry: str) -> tuple[int, int]:
    """Parse an IPv4 range entry into ``(network, mask)`` integers.

    Raises:
        CidrParseError: on any malformed network address or prefix length.
    """
    network_text, slash, prefix_text = entry.strip().partition("/")
    network = parse_ipv4(network_text)

    if not slash:
        return network, _FULL_MASK

    prefix_text = prefix_text.strip()
    if prefix_text == "":
        return network, 0
    if not prefix_text.isascii() or not prefix_text.isdigit():
        raise CidrParseError(f"non-numeric prefix length in {entry!r}")
    return network, prefix_mask(int(prefix_text, 10))


def cidr_contains(entry: str, ip: str) -> bool:
    """Return True if IPv4 ``ip`` falls inside range ``entry``.

    IPv6 entries (containing ``:``) always return False.

    Raises:
        CidrParseError: if ``entry`` or ``ip`` is malformed.
    """
    if ":" in entry:
        return False
    network, mask = parse_cidr(entry)
    return (network & mask) == (parse_ipv4(ip) & mask)


def ipv4_in_ranges(ip: str, ranges: Iterable[str]) -> bool:
    """Return True if ``ip`` matches at least one entry in ``ranges``.

    Never raises: malformed entries are skipped, a malformed candidate matches
    nothing.
    """
    try:
        parse_ipv4(ip)
    except CidrParseError as exc:
        logger.warning("Unparseable IPv4 candidate — not matched", ip=ip, error=str(exc))
        return False

    for entry in ranges:
        try:
            if cidr_contains(entry, ip):
                return True
        except CidrParseError as exc:
            logger.warning("Skipping unparseable range entry", entry=entry, error=str(exc))
    return False
