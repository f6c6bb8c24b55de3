"""CTR storage service that lets the caller seek and rewrite the plaintext."""

from __future__ import annotations

from aes_modes.ecb_cbc_ctr import aes_ctr_apply
from utils.errors import MalformedInput


class RandomAccessCTR:
    def __init__(self, key: bytes, plaintext: bytes, nonce: bytes = b"2" * 8):
        self._key = bytes(key)
        self._nonce = bytes(nonce)
        self._plain = bytearray(plaintext)

    def ciphertext(self) -> bytes:
        return aes_ctr_apply(self._key, bytes(self._plain), self._nonce)

    def edit(self, offset: int, new_text: bytes) -> None:
        """Overwrite plaintext at ``offset``; writes past the end are dropped."""

        if not 0 <= offset <= len(self._plain):
            raise MalformedInput(f"offset {offset} outside 0..{len(self._plain)}")
        m = min(len(new_text), len(self._plain) - offset)
        self._plain[offset : offset + m] = new_text[:m]


__all__ = ["RandomAccessCTR"]
