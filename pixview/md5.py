"""MD5 message digest (RFC 1321)."""

from __future__ import annotations

import math
import struct

_MASK = 0xFFFFFFFF
_BLOCK = 64

_SHIFTS = (
    [7, 12, 17, 22] * 4
    + [5, 9, 14, 20] * 4
    + [4, 11, 16, 23] * 4
    + [6, 10, 15, 21] * 4
)
_SINES = [int(abs(math.sin(i + 1)) * 2**32) & _MASK for i in range(64)]
_INITIAL = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)


def _rotate_left(value: int, amount: int) -> int:
    return ((value << amount) | (value >> (32 - amount))) & _MASK


def _compress(state: tuple[int, int, int, int], block: bytes) -> tuple[int, int, int, int]:
    words = struct.unpack("<16I", block)
    a, b, c, d = state
    for i in range(64):
        if i < 16:
            mixed = (b & c) | (~b & d)
            index = i
        elif i < 32:
            mixed = (b & d) | (c & ~d)
            index = (5 * i + 1) % 16
        elif i < 48:
            mixed = b ^ c ^ d
            index = (3 * i + 5) % 16
        else:
            mixed = c ^ (b | (~d & _MASK))
            index = (7 * i) % 16
        total = (a + (mixed & _MASK) + _SINES[i] + words[index]) & _MASK
        a, d, c, b = d, c, b, (b + _rotate_left(total, _SHIFTS[i])) & _MASK
    return (
        (state[0] + a) & _MASK,
        (state[1] + b) & _MASK,
        (state[2] + c) & _MASK,
        (state[3] + d) & _MASK,
    )


class MD5:
    """Incremental MD5 hasher with a hashlib-like interface."""

    name = "md5"
    digest_size = 16
    block_size = _BLOCK

    def __init__(self, data: bytes = b"") -> None:
        self._state = _INITIAL
        self._length = 0
        self._pending = b""
        if data:
            self.update(data)

    def update(self, data: bytes) -> None:
        """Feed more bytes into the digest."""
        if isinstance(data, str):
            raise TypeError("MD5 requires bytes, not str")
        chunk = self._pending + bytes(data)
        self._length += len(data)
        full = len(chunk) - len(chunk) % _BLOCK
        for start in range(0, full, _BLOCK):
            self._state = _compress(self._state, chunk[start:start + _BLOCK])
        self._pending = chunk[full:]

    def copy(self) -> MD5:
        """Return an independent hasher with the same state."""
        other = MD5()
        other._state = self._state
        other._length = self._length
        other._pending = self._pending
        return other

    def digest(self) -> bytes:
        """Return the 16-byte digest of everything fed so far."""
        padding = b"\x80" + b"\x00" * ((55 - self._length) % _BLOCK)
        tail = self._pending + padding + struct.pack("<Q", (self._length * 8) & (2**64 - 1))
        state = self._state
        for start in range(0, len(tail), _BLOCK):
            state = _compress(state, tail[start:start + _BLOCK])
        return struct.pack("<4I", *state)

    def hexdigest(self) -> str:
        """Return the digest as lower-case hexadecimal."""
        return self.digest().hex()


def md5_hexdigest(data: bytes) -> str:
    """Return the hexadecimal MD5 digest of ``data``."""
    return MD5(data).hexdigest()