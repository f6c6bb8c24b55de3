"""
User-profile token issuer for the ECB cut-and-paste exercise.

``query(email)`` encodes ``email=<email>&uid=<n>&role=user`` with ``&`` and
``=`` quoted out of the email, encrypts it under AES-ECB and bumps the uid.
``parse(token)`` decrypts and splits the profile back into fields.
"""

from __future__ import annotations

import logging
import random

from aes_modes.ecb_cbc_ctr import aes_ecb_decrypt, aes_ecb_encrypt
from utils.cookies import parse_cookie, quote_out

logger = logging.getLogger(__name__)

PROFILE_FIELD_SEP = b"&"


class ProfileServer:
    def __init__(self, seed: int | None = None, uid: int = 10):
        self._key = random.Random(seed).randbytes(16)
        self.uid = uid

    def profile_for(self, email: bytes) -> bytes:
        quoted = quote_out(email, specials=b"&=")
        return b"email=" + quoted + b"&uid=%d&role=user" % self.uid

    def query(self, email: bytes) -> bytes:
        plain = self.profile_for(email)
        self.uid += 1
        logger.debug("Issued %d-byte profile token", len(plain))
        return aes_ecb_encrypt(self._key, plain)

    def parse(self, token: bytes) -> dict[bytes, bytes]:
        return parse_cookie(aes_ecb_decrypt(self._key, token), sep=PROFILE_FIELD_SEP)


__all__ = ["ProfileServer"]
