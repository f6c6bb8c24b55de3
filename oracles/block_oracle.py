"""
Chosen-plaintext encryption oracle with a hidden key.

One configurable type covers every variant the attacks need:
  - fixed unknown prefix and/or suffix around the attacker's input
  - ECB, CBC or a fresh random choice of the two on every query
  - fixed IV or a fresh random IV on every query
  - optional random "fuzz" bytes prepended and appended per query

All randomness comes from the instance's own ``random.Random`` so runs are
reproducible from the seed.
"""

from __future__ import annotations

import enum
import logging
import random

from aes_modes.ecb_cbc_ctr import BLOCK, aes_cbc_encrypt, aes_ecb_encrypt
from utils.errors import MalformedInput

logger = logging.getLogger(__name__)


class CipherMode(enum.Enum):
    ECB = "ecb"
    CBC = "cbc"


class ModePolicy(enum.Enum):
    ECB = "ecb"
    CBC = "cbc"
    RANDOM = "random"


class IvPolicy(enum.Enum):
    FIXED = "fixed"
    RANDOM = "random"


class BlockOracle:
    """``query(x) = E_k(prefix || x || suffix)`` under the configured mode."""

    def __init__(
        self,
        *,
        prefix: bytes = b"",
        suffix: bytes = b"",
        mode: ModePolicy = ModePolicy.ECB,
        iv_policy: IvPolicy = IvPolicy.FIXED,
        fuzz: tuple[int, int] | None = None,
        seed: int | None = None,
        key: bytes | None = None,
    ):
        if fuzz is not None and not 0 <= fuzz[0] <= fuzz[1]:
            raise MalformedInput(f"invalid fuzz range {fuzz!r}")
        self._rng = random.Random(seed)
        self._key = key if key is not None else self._rng.randbytes(16)
        self._fixed_iv = self._rng.randbytes(BLOCK)
        self._prefix = bytes(prefix)
        self._suffix = bytes(suffix)
        self._mode = mode
        self._iv_policy = iv_policy
        self._fuzz = fuzz
        self.last_mode: CipherMode | None = None
        self.queries = 0

    @classmethod
    def ecb_or_cbc(cls, seed: int | None = None) -> "BlockOracle":
        """5-10 random bytes on each side, random mode and random IV per query."""

        return cls(mode=ModePolicy.RANDOM, iv_policy=IvPolicy.RANDOM, fuzz=(5, 10), seed=seed)

    @classmethod
    def secret_suffix(
        cls, suffix: bytes, prefix: bytes = b"", seed: int | None = None
    ) -> "BlockOracle":
        return cls(prefix=prefix, suffix=suffix, mode=ModePolicy.ECB, seed=seed)

    def _pick_mode(self) -> CipherMode:
        if self._mode is ModePolicy.RANDOM:
            return CipherMode.ECB if self._rng.getrandbits(1) else CipherMode.CBC
        return CipherMode(self._mode.value)

    def _random_bytes(self) -> bytes:
        lo, hi = self._fuzz
        return self._rng.randbytes(self._rng.randint(lo, hi))

    def query(self, plaintext: bytes) -> bytes:
        self.queries += 1
        mode = self._pick_mode()
        self.last_mode = mode
        if self._fuzz is not None:
            head, tail = self._random_bytes(), self._random_bytes()
        else:
            head = tail = b""
        text = head + self._prefix + bytes(plaintext) + self._suffix + tail
        logger.debug("query %d: %d-byte plaintext under %s", self.queries, len(text), mode.name)
        if mode is CipherMode.ECB:
            return aes_ecb_encrypt(self._key, text)
        if self._iv_policy is IvPolicy.RANDOM:
            iv = self._rng.randbytes(BLOCK)
        else:
            iv = self._fixed_iv
        return aes_cbc_encrypt(self._key, text, iv)


__all__ = ["CipherMode", "ModePolicy", "IvPolicy", "BlockOracle"]
