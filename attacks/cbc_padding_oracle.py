"""
CBC padding-oracle attack (Vaudenay).

Implements:
  Per block (last to first): forge the preceding block so the target block
  decrypts to valid padding of length 1, 2, ... 16, learning one
  intermediate byte D(C_i)[p] per padding length.
  Last-byte disambiguation: a hit at p = 15 may be genuine longer padding;
  flipping forged[14] and re-checking tells the two apart.
  Plaintext = intermediate XOR real preceding block (IV for block 0), and the
  final PKCS#7 padding is stripped.

The oracle answers with a plain bool; this module never sees an exception
from the padding check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from aes_modes.ecb_cbc_ctr import BLOCK, pkcs7_unpad, split_blocks, xor_bytes
from oracles.padding_server import PaddingOracleServer
from utils.errors import MalformedInput, UnrecoverableByte

logger = logging.getLogger(__name__)

CheckPaddingFn = Callable[[bytes, bytes], bool]


@dataclass
class AttackStats:
    """Oracle calls spent per ciphertext block (index order)."""

    queries_per_block: list[int] = field(default_factory=list)

    @property
    def total_queries(self) -> int:
        return sum(self.queries_per_block)


class _CountingOracle:
    def __init__(self, check_padding: CheckPaddingFn):
        self._check = check_padding
        self.calls = 0

    def __call__(self, ciphertext: bytes, iv: bytes) -> bool:
        self.calls += 1
        return self._check(ciphertext, iv)


def recover_block(
    target: bytes,
    preceding: bytes,
    check_padding: CheckPaddingFn,
    *,
    base_position: int = 0,
) -> bytes:
    """Recover the plaintext of ``target`` given the block that precedes it.

    ``base_position`` is only used to report absolute byte positions.
    """

    bs = len(target)
    if len(preceding) != bs:
        raise MalformedInput("preceding block and target block differ in length")
    forged = bytearray(preceding)
    intermediate = bytearray(bs)
    for p in range(bs - 1, -1, -1):
        pad_byte = bs - p
        for t in range(256):
            forged[p] ^= t
            if not check_padding(target, bytes(forged)):
                forged[p] ^= t
                continue
            if p == bs - 1 and bs > 1:
                # valid padding may be pre-existing 0x02 0x02 etc.
                forged[p - 1] ^= 1
                genuine = check_padding(target, bytes(forged))
                forged[p - 1] ^= 1
                if not genuine:
                    forged[p] ^= t
                    continue
            intermediate[p] = forged[p] ^ pad_byte
            # next round needs padding pad_byte + 1 on positions p..bs-1
            for j in range(p, bs):
                forged[j] ^= pad_byte ^ (pad_byte + 1)
            break
        else:
            raise UnrecoverableByte(base_position + p)
    return xor_bytes(bytes(intermediate), preceding)


def padding_oracle_attack(
    ciphertext: bytes,
    iv: bytes,
    check_padding: CheckPaddingFn,
    *,
    return_stats: bool = False,
) -> bytes | tuple[bytes, AttackStats]:
    """Decrypt ``ciphertext`` using only a padding-validity oracle."""

    bs = BLOCK
    if len(iv) != bs:
        raise MalformedInput(f"IV must be {bs} bytes, got {len(iv)}")
    if not ciphertext or len(ciphertext) % bs:
        raise MalformedInput(f"ciphertext must be a non-empty multiple of {bs} bytes")
    blocks = split_blocks(ciphertext, bs)
    counted = _CountingOracle(check_padding)
    plain_blocks: list[bytes] = [b""] * len(blocks)
    stats = AttackStats([0] * len(blocks))
    for i in range(len(blocks) - 1, -1, -1):
        preceding = iv if i == 0 else blocks[i - 1]
        before = counted.calls
        plain_blocks[i] = recover_block(blocks[i], preceding, counted, base_position=i * bs)
        stats.queries_per_block[i] = counted.calls - before
        logger.debug("Block %d/%d recovered in %d queries", i + 1, len(blocks), stats.queries_per_block[i])
    plaintext = pkcs7_unpad(b"".join(plain_blocks), bs)
    logger.info(
        "Padding oracle: %d block(s) decrypted with %d queries",
        len(blocks),
        stats.total_queries,
    )
    if return_stats:
        return plaintext, stats
    return plaintext


def demo_padding_oracle(rounds: int = 3, seed: int = 54321) -> dict[str, object]:
    server = PaddingOracleServer(seed=seed)
    results = []
    for _ in range(rounds):
        ct, iv = server.encrypt()
        recovered, stats = padding_oracle_attack(ct, iv, server.check_padding, return_stats=True)
        results.append(
            {
                "recovered": recovered,
                "expected": server.last_plaintext,
                "queries": stats.total_queries,
            }
        )
    return {
        "results": results,
        "ok": all(r["recovered"] == r["expected"] for r in results),
    }


__all__ = ["AttackStats", "recover_block", "padding_oracle_attack", "demo_padding_oracle"]

