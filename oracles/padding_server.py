"""CBC server that leaks whether a ciphertext decrypts to valid PKCS#7 padding."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from aes_modes.ecb_cbc_ctr import BLOCK, aes_cbc_decrypt, aes_cbc_encrypt
from utils.errors import InvalidPadding
from utils.fixtures import PADDING_ORACLE_TEXTS

logger = logging.getLogger(__name__)


class PaddingOracleServer:
    def __init__(self, seed: int | None = 54321, texts: Sequence[bytes] = PADDING_ORACLE_TEXTS):
        self._rng = random.Random(seed)
        self._key = self._rng.randbytes(16)
        self._texts = list(texts)
        self.last_plaintext = b""
        self.checks = 0

    def encrypt(self, plaintext: bytes | None = None) -> tuple[bytes, bytes]:
        """Encrypt ``plaintext`` (or one of the stored texts) under a fresh IV.

        Returns ``(ciphertext, iv)``.
        """

        if plaintext is None:
            plaintext = self._rng.choice(self._texts)
        self.last_plaintext = bytes(plaintext)
        iv = self._rng.randbytes(BLOCK)
        logger.debug(
            "Encrypting %d-byte plaintext (%d padding checks answered so far)",
            len(self.last_plaintext),
            self.checks,
        )
        return aes_cbc_encrypt(self._key, self.last_plaintext, iv), iv

    def check_padding(self, ciphertext: bytes, iv: bytes) -> bool:
        self.checks += 1
        try:
            aes_cbc_decrypt(self._key, ciphertext, iv)
        except InvalidPadding:
            return False
        return True


__all__ = ["PaddingOracleServer"]
