"""
Byte-at-a-time ECB decryption of an oracle's hidden suffix.

Oracle: query(x) = AES-ECB_k(prefix || x || suffix), prefix and suffix
fixed and unknown (prefix may be empty).

  Phase 1: block size and len(prefix) + len(suffix) from the length jump
  Phase 2: prefix length from the first pair of equal adjacent blocks
  Phase 3: pad the prefix to a block boundary, then recover the suffix one
           byte at a time by matching a chosen block against the block that
           ends in the unknown byte
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from oracles.block_oracle import BlockOracle
from utils.errors import AttackFailed, UnrecoverableByte
from utils.fixtures import SECRET_SUFFIX

logger = logging.getLogger(__name__)

QueryFn = Callable[[bytes], bytes]


@dataclass
class OracleProfile:
    """Geometry learned about the oracle before byte recovery."""

    block_size: int
    total_secret_length: int
    prefix_length: int

    @property
    def message_length(self) -> int:
        return self.total_secret_length - self.prefix_length


def discover_block_size(query: QueryFn, limit: int = 256) -> tuple[int, int]:
    """Return ``(block_size, len(prefix) + len(suffix))``."""

    baseline = len(query(b""))
    for n in range(1, limit + 1):
        length = len(query(b"a" * n))
        if length > baseline:
            # padding just grew by a whole block: prefix + n + suffix is aligned
            return length - baseline, baseline - n
    raise AttackFailed(f"ciphertext length never changed within {limit} filler bytes")


def discover_prefix_length(query: QueryFn, block_size: int) -> int:
    for k in range(2 * block_size, 3 * block_size):
        ct = query(b"\x00" * k)
        for i in range(len(ct) // block_size - 1):
            left = ct[block_size * i : block_size * (i + 1)]
            right = ct[block_size * (i + 1) : block_size * (i + 2)]
            if left == right:
                return block_size * (i + 2) - k
    raise AttackFailed("no repeated ciphertext blocks; the oracle does not behave like ECB")


def profile_oracle(query: QueryFn) -> OracleProfile:
    block_size, total = discover_block_size(query)
    prefix_length = discover_prefix_length(query, block_size)
    if prefix_length > total:
        raise AttackFailed(f"prefix length {prefix_length} exceeds total secret length {total}")
    profile = OracleProfile(block_size, total, prefix_length)
    logger.info(
        "Oracle geometry: block_size=%d prefix=%d suffix=%d",
        block_size,
        prefix_length,
        profile.message_length,
    )
    return profile


def recover_suffix(query: QueryFn, *, profile: OracleProfile | None = None) -> bytes:
    """Recover the oracle's hidden suffix, left to right."""

    if profile is None:
        profile = profile_oracle(query)
    bs = profile.block_size
    prefix_length = profile.prefix_length
    pad_len = bs - prefix_length % bs
    offset = prefix_length + pad_len
    trial_index = pad_len + bs - 1

    message = bytearray()
    for k in range(profile.message_length):
        if k >= bs - 1:
            window = bytes(message[k - (bs - 1) : k])
        else:
            window = b"\x00" * (bs - 1 - k) + bytes(message[:k])
        # filler pushes unknown byte k to the last slot of an aligned block
        filler = b"\x00" * (bs - 1 - k % bs)
        probe = bytearray(b"\x00" * pad_len + window + b"\x00" + filler)
        block_start = prefix_length + len(probe) + k - (bs - 1)
        for byte in range(256):
            probe[trial_index] = byte
            ct = query(bytes(probe))
            if ct[offset : offset + bs] == ct[block_start : block_start + bs]:
                message.append(byte)
                break
        else:
            raise UnrecoverableByte(k)
        if (k + 1) % bs == 0:
            logger.debug("Recovered %d/%d bytes", k + 1, profile.message_length)
    logger.info("Recovered %d-byte suffix", len(message))
    return bytes(message)


def demo_secret_suffix(prefix_length: int = 23, seed: int = 1337) -> dict[str, object]:
    prefix = bytes((i * 37 + 11) % 255 + 1 for i in range(prefix_length))
    oracle = BlockOracle.secret_suffix(SECRET_SUFFIX, prefix=prefix, seed=seed)
    profile = profile_oracle(oracle.query)
    recovered = recover_suffix(oracle.query, profile=profile)
    return {
        "profile": profile,
        "recovered": recovered,
        "ok": recovered == SECRET_SUFFIX,
        "queries": oracle.queries,
    }
