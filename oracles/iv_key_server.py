"""CBC service that reuses its key as the IV and echoes bad plaintext back."""

from __future__ import annotations

from aes_modes.ecb_cbc_ctr import aes_cbc_decrypt, aes_cbc_encrypt


class IvKeyServer:
    def __init__(self, key: bytes):
        self._key = bytes(key)

    def encrypt(self, plaintext: bytes) -> bytes:
        return aes_cbc_encrypt(self._key, plaintext, self._key)

    def ascii_check(self, ciphertext: bytes) -> tuple[bool, bytes]:
        """Return ``(ok, plaintext)``; the plaintext is reported even when not ASCII."""

        plain = aes_cbc_decrypt(self._key, ciphertext, self._key)
        return all(c < 128 for c in plain), plain

    def has_key(self, candidate: bytes) -> bool:
        return candidate == self._key


__all__ = ["IvKeyServer"]
