"""
Cookie issuer for the bit-flipping exercises.

The user-controlled field is sandwiched between fixed comments and its
``;``/``=`` bytes are quoted, so an admin role can only appear through
ciphertext tampering.
"""

from __future__ import annotations

import random

from aes_modes.ecb_cbc_ctr import BLOCK, NONCE_SIZE, aes_cbc_decrypt, aes_cbc_encrypt, aes_ctr_apply
from utils.cookies import parse_cookie, quote_out

COOKIE_PREFIX = b"comment1=cooking%20MCs;userdata="
COOKIE_SUFFIX = b";comment2=%20like%20a%20pound%20of%20bacon"


class CookieServer:
    def __init__(self, mode: str = "cbc", seed: int | None = None):
        if mode not in ("cbc", "ctr"):
            raise ValueError(f"unsupported mode {mode!r}")
        rng = random.Random(seed)
        self.mode = mode
        self._key = rng.randbytes(16)
        self._iv = rng.randbytes(BLOCK)
        self._nonce = rng.randbytes(NONCE_SIZE)

    def encrypt(self, userdata: bytes) -> bytes:
        plain = COOKIE_PREFIX + quote_out(userdata) + COOKIE_SUFFIX
        if self.mode == "cbc":
            return aes_cbc_encrypt(self._key, plain, self._iv)
        return aes_ctr_apply(self._key, plain, self._nonce)

    def decrypt(self, ciphertext: bytes) -> bytes:
        if self.mode == "cbc":
            return aes_cbc_decrypt(self._key, ciphertext, self._iv)
        return aes_ctr_apply(self._key, ciphertext, self._nonce)

    def is_admin(self, ciphertext: bytes) -> bool:
        return parse_cookie(self.decrypt(ciphertext)).get(b"role") == b"admin"


__all__ = ["CookieServer", "COOKIE_PREFIX", "COOKIE_SUFFIX"]
