"""
MT19937 state recovery.

Tempering is a chain of ``y ^= (y >> s) & m`` / ``y ^= (y << s) & m`` steps.
Each step is inverted by re-applying the shift to the running correction
until it vanishes (at most ceil(32 / s) rounds). Untempering 624 consecutive
outputs gives back the whole state array, so a clone predicts every future
output. Generators seeded from a recent Unix timestamp fall to a short
brute-force over candidate seeds.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

from prng.mt19937 import MT19937, N, B, C, D, L, S, T, U
from utils.errors import AttackFailed, MalformedInput

logger = logging.getLogger(__name__)

_MASK = 0xFFFFFFFF


def _inv_xor_rshift(y: int, shift: int, mask: int) -> int:
    res = 0
    while y:
        res ^= y
        y = (y >> shift) & mask
    return res


def _inv_xor_lshift(y: int, shift: int, mask: int) -> int:
    res = 0
    while y:
        res ^= y
        y = (y << shift) & mask & _MASK
    return res


def untemper(y: int) -> int:
    y = _inv_xor_rshift(y & _MASK, L, D)
    y = _inv_xor_lshift(y, T, C)
    y = _inv_xor_lshift(y, S, B)
    y = _inv_xor_rshift(y, U, D)
    return y


def clone_from_outputs(outputs: Sequence[int]) -> MT19937:
    """Rebuild a generator from exactly 624 consecutive 32-bit outputs."""

    if len(outputs) != N:
        raise MalformedInput(f"need exactly {N} consecutive outputs, got {len(outputs)}")
    return MT19937.from_state([untemper(y) for y in outputs], index=N)


def recover_timestamp_seed(first_output: int, now: int | None = None, window: int = 4096) -> int:
    """Find a seed in ``[now - window, now]`` whose first output is ``first_output``."""

    if now is None:
        now = int(time.time())
    for seed in range(now, now - window - 1, -1):
        if MT19937(seed).extract_number() == first_output:
            logger.info("Seed found %d second(s) before now", now - seed)
            return seed
    raise AttackFailed(f"no seed within {window}s of {now} reproduces the output")


def demo_mt19937(seed: int = 5489, now: int = 1_700_000_000, delay: int = 777) -> dict[str, object]:
    reference = MT19937(seed)
    outputs = [reference.extract_number() for _ in range(N)]
    clone = clone_from_outputs(outputs)
    predicted = [clone.extract_number() for _ in range(10)]
    actual = [reference.extract_number() for _ in range(10)]

    secret_seed = now - delay
    first = MT19937(secret_seed).extract_number()
    found = recover_timestamp_seed(first, now=now)
    return {
        "predicted": predicted,
        "actual": actual,
        "clone_ok": predicted == actual,
        "seed": secret_seed,
        "found_seed": found,
        "seed_ok": found == secret_seed,
    }
