"""
Resumable SHA-1 and MD4.

The library implementations never expose their chaining state, which is
exactly what a length-extension forgery has to set. These classes follow the
``hashlib`` object shape (``update``/``digest``/``hexdigest``/``copy``) and
add :meth:`MerkleDamgardHash.from_digest`, which loads the chaining words
straight from a published digest together with the number of bytes already
absorbed.
"""

from __future__ import annotations

import struct

from utils.errors import MalformedInput

_MASK = 0xFFFFFFFF


def _rotl(x: int, n: int) -> int:
    return ((x << n) | (x >> (32 - n))) & _MASK


class MerkleDamgardHash:
    name = "md"
    block_size = 64
    digest_size = 0
    endian = ">"
    initial_state: tuple[int, ...] = ()

    def __init__(self, data: bytes = b""):
        self._h = list(self.initial_state)
        self._buffer = b""
        self._length = 0
        if data:
            self.update(data)

    @classmethod
    def from_digest(cls, digest: bytes, length: int):
        """Resume from ``digest`` as if ``length`` bytes (a whole number of blocks) were hashed."""

        if len(digest) != cls.digest_size:
            raise MalformedInput(f"{cls.name} digest must be {cls.digest_size} bytes")
        if length % cls.block_size:
            raise MalformedInput("resumed length must be a multiple of the block size")
        obj = cls()
        obj._h = list(struct.unpack(f"{cls.endian}{len(cls.initial_state)}I", digest))
        obj._length = length
        return obj

    @classmethod
    def padding(cls, length: int) -> bytes:
        """Merkle-Damgard padding for a message of ``length`` bytes."""

        zeros = (cls.block_size - 9 - length) % cls.block_size
        bits = (length * 8) & 0xFFFFFFFFFFFFFFFF
        return b"\x80" + b"\x00" * zeros + struct.pack(f"{cls.endian}Q", bits)

    def _compress(self, h: list[int], block: bytes) -> list[int]:
        raise NotImplementedError

    def update(self, data: bytes) -> None:
        self._buffer += bytes(data)
        self._length += len(data)
        n = len(self._buffer) - len(self._buffer) % self.block_size
        for i in range(0, n, self.block_size):
            self._h = self._compress(self._h, self._buffer[i : i + self.block_size])
        self._buffer = self._buffer[n:]

    def copy(self):
        other = type(self)()
        other._h = list(self._h)
        other._buffer = self._buffer
        other._length = self._length
        return other

    def digest(self) -> bytes:
        h = list(self._h)
        tail = self._buffer + self.padding(self._length)
        for i in range(0, len(tail), self.block_size):
            h = self._compress(h, tail[i : i + self.block_size])
        return struct.pack(f"{self.endian}{len(h)}I", *h)

    def hexdigest(self) -> str:
        return self.digest().hex()


class SHA1(MerkleDamgardHash):
    name = "sha1"
    digest_size = 20
    endian = ">"
    initial_state = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)

    def _compress(self, h, block):
        w = list(struct.unpack(">16I", block))
        for t in range(16, 80):
            w.append(_rotl(w[t - 3] ^ w[t - 8] ^ w[t - 14] ^ w[t - 16], 1))
        a, b, c, d, e = h
        for t in range(80):
            if t < 20:
                f, k = (b & c) | (~b & d), 0x5A827999
            elif t < 40:
                f, k = b ^ c ^ d, 0x6ED9EBA1
            elif t < 60:
                f, k = (b & c) | (b & d) | (c & d), 0x8F1BBCDC
            else:
                f, k = b ^ c ^ d, 0xCA62C1D6
            tmp = (_rotl(a, 5) + (f & _MASK) + e + k + w[t]) & _MASK
            e, d, c, b, a = d, c, _rotl(b, 30), a, tmp
        return [(x + y) & _MASK for x, y in zip(h, (a, b, c, d, e))]


# (message word order, additive constant, shift cycle) for MD4 rounds 1-3
_MD4_ROUNDS = (
    (tuple(range(16)), 0x00000000, (3, 7, 11, 19)),
    ((0, 4, 8, 12, 1, 5, 9, 13, 2, 6, 10, 14, 3, 7, 11, 15), 0x5A827999, (3, 5, 9, 13)),
    ((0, 8, 4, 12, 2, 10, 6, 14, 1, 9, 5, 13, 3, 11, 7, 15), 0x6ED9EBA1, (3, 9, 11, 15)),
)


def _md4_f(x, y, z):
    return (x & y) | (~x & z)


def _md4_g(x, y, z):
    return (x & y) | (x & z) | (y & z)


def _md4_h(x, y, z):
    return x ^ y ^ z


class MD4(MerkleDamgardHash):
    name = "md4"
    digest_size = 16
    endian = "<"
    initial_state = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

    def _compress(self, h, block):
        x = struct.unpack("<16I", block)
        regs = list(h)
        for fn, (order, const, shifts) in zip((_md4_f, _md4_g, _md4_h), _MD4_ROUNDS):
            for i, k in enumerate(order):
                # registers updated in the order a, d, c, b
                t = -i % 4
                y = fn(regs[(t + 1) % 4], regs[(t + 2) % 4], regs[(t + 3) % 4]) & _MASK
                regs[t] = _rotl((regs[t] + y + x[k] + const) & _MASK, shifts[i % 4])
        return [(p + q) & _MASK for p, q in zip(h, regs)]


__all__ = ["MerkleDamgardHash", "SHA1", "MD4"]
