"""Hash functions and storage key helpers used by Substrate nodes."""

from __future__ import annotations

import hashlib
import struct

_MASK = (1 << 64) - 1

_P1 = 0x9E3779B185EBCA87
_P2 = 0xC2B2AE3D27D4EB4F
_P3 = 0x165667B19E3779F9
_P4 = 0x85EBCA77C2B2AE63
_P5 = 0x27D4EB2F165667C5


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (64 - bits))) & _MASK


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK
    return (_rotl(acc, 31) * _P1) & _MASK


def _merge(acc: int, lane: int) -> int:
    acc ^= _round(0, lane)
    return (acc * _P1 + _P4) & _MASK


def twox_64(data: bytes | str, seed: int = 0) -> int:
    """Return the 64-bit xxHash of ``data`` with the given seed."""
    raw = _as_bytes(data)
    length = len(raw)
    seed &= _MASK
    stripes_end = length - length % 32

    if length >= 32:
        v1 = (seed + _P1 + _P2) & _MASK
        v2 = (seed + _P2) & _MASK
        v3 = seed
        v4 = (seed - _P1) & _MASK
        for a, b, c, d in struct.iter_unpack("<4Q", raw[:stripes_end]):
            v1 = _round(v1, a)
            v2 = _round(v2, b)
            v3 = _round(v3, c)
            v4 = _round(v4, d)
        h = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _MASK
        for lane in (v1, v2, v3, v4):
            h = _merge(h, lane)
    else:
        h = (seed + _P5) & _MASK

    h = (h + length) & _MASK

    tail = raw[stripes_end:]
    lanes_end = len(tail) - len(tail) % 8
    for (lane,) in struct.iter_unpack("<Q", tail[:lanes_end]):
        h ^= _round(0, lane)
        h = (_rotl(h, 27) * _P1 + _P4) & _MASK
    tail = tail[lanes_end:]

    if len(tail) >= 4:
        (word,) = struct.unpack("<I", tail[:4])
        h ^= (word * _P1) & _MASK
        h = (_rotl(h, 23) * _P2 + _P3) & _MASK
        tail = tail[4:]

    for byte in tail:
        h ^= (byte * _P5) & _MASK
        h = (_rotl(h, 11) * _P1) & _MASK

    h ^= h >> 33
    h = (h * _P2) & _MASK
    h ^= h >> 29
    h = (h * _P3) & _MASK
    h ^= h >> 32
    return h


def twox_128(data: bytes | str) -> bytes:
    """Return the 128-bit twox hash: two seeded xxHash64 values, little endian."""
    raw = _as_bytes(data)
    return b"".join(twox_64(raw, seed).to_bytes(8, "little") for seed in (0, 1))


def blake2_256(data: bytes | str) -> bytes:
    """Return the 256-bit BLAKE2b digest of ``data``."""
    return hashlib.blake2b(_as_bytes(data), digest_size=32).digest()


def storage_key(module: str, storage_key_name: str) -> bytes:
    """Return the storage key of a plain storage value of ``module``."""
    return twox_128(module) + twox_128(storage_key_name)


def encode_hex(data: bytes) -> str:
    """Encode bytes as a ``0x``-prefixed lower-case hex string."""
    return "0x" + bytes(data).hex()


def decode_hex(value: str) -> bytes:
    """Decode a hex string, with or without the ``0x`` prefix."""
    text = value[2:] if value[:2] in ("0x", "0X") else value
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"invalid hex string: {value!r}") from exc