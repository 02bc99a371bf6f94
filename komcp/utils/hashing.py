"""32-bit FNV hash functions."""

from __future__ import annotations

_OFFSET32 = 2166136261
_PRIME32 = 16777619
_MASK32 = 0xFFFFFFFF


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def fnv1_32(data: bytes | bytearray | memoryview | str) -> int:
    """FNV-1 32-bit hash: multiply, then xor each byte."""
    value = _OFFSET32
    for byte in _as_bytes(data):
        value = (value * _PRIME32) & _MASK32
        value ^= byte
    return value


def fnv1a_32(data: bytes | bytearray | memoryview | str) -> int:
    """FNV-1a 32-bit hash: xor each byte, then multiply."""
    value = _OFFSET32
    for byte in _as_bytes(data):
        value ^= byte
        value = (value * _PRIME32) & _MASK32
    return value