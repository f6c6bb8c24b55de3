"""Naive secret-prefix MAC: ``H(key || message)`` with SHA-1 or MD4."""

from __future__ import annotations

import hmac

from Crypto.Hash import MD4, SHA1

_ALGORITHMS = {"sha1": SHA1, "md4": MD4}


class PrefixMacServer:
    def __init__(self, key: bytes, algorithm: str = "sha1"):
        try:
            self._hash = _ALGORITHMS[algorithm.lower()]
        except KeyError:
            raise ValueError(f"unsupported algorithm {algorithm!r}") from None
        self._key = bytes(key)
        self.algorithm = algorithm.lower()

    def sign(self, message: bytes) -> bytes:
        return self._hash.new(self._key + message).digest()

    def verify(self, message: bytes, mac: bytes) -> bool:
        return hmac.compare_digest(self.sign(message), mac)


__all__ = ["PrefixMacServer"]
