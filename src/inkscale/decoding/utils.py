"""Decoding utilities: hex conversion, signature normalization, integer helpers."""

from __future__ import annotations

import re

from eth_utils import decode_hex, encode_hex, remove_0x_prefix, to_checksum_address

from inkscale.errors import DecodeError

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def normalize_signature(signature: str) -> str:
    """Lowercase hex without the 0x prefix (the catalog's signature key)."""
    return remove_0x_prefix(signature.strip()).lower()


def to_bytes(data: bytes | bytearray | str) -> bytes:
    """Accept raw bytes or a (0x-prefixed) hex string."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        return decode_hex(data.strip())
    except ValueError as exc:
        raise DecodeError(f"invalid hex payload {data[:18]!r}...: {exc}") from exc


def bytes_to_hex(raw: bytes) -> str:
    """Return lowercase 0x-prefixed hex."""
    return encode_hex(raw)


def format_address(raw: bytes, *, checksum: bool = False) -> str:
    """Render a 20-byte address as 0x hex (EIP-55 checksummed on request)."""
    h = bytes_to_hex(raw)
    return to_checksum_address(h) if checksum else h


def to_signed(value: int, bits: int) -> int:
    """Two's complement conversion of an unsigned little-endian read."""
    if value >= 2 ** (bits - 1):
        value -= 2**bits
    return value


def snake_case(label: str) -> str:
    """`NewGame` -> `new_game` (default external event type)."""
    return _CAMEL_BOUNDARY.sub(r"\1_\2", label).lower()
