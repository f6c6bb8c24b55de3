"""
ECB vs CBC detection from a single chosen-plaintext query.

Three full blocks of one repeated byte always contain two complete,
block-aligned filler blocks when at most one block of unknown bytes
precedes them. ECB maps those two to the same ciphertext block; CBC
chaining does not.

Without query access, the same repetition singles out the one ECB
ciphertext in a batch.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable, Sequence

from aes_modes.ecb_cbc_ctr import aes_cbc_encrypt, aes_ecb_encrypt
from oracles.block_oracle import BlockOracle, CipherMode
from utils.errors import AttackFailed, MalformedInput

logger = logging.getLogger(__name__)

QueryFn = Callable[[bytes], bytes]


def count_repeated_blocks(ciphertext: bytes, block_size: int = 16) -> int:
    counts = Counter(
        ciphertext[i : i + block_size] for i in range(0, len(ciphertext), block_size)
    )
    return sum(n - 1 for n in counts.values() if n > 1)


def detect_mode(query: QueryFn, *, block_size: int = 16, probe: bytes | None = None) -> CipherMode:
    if probe is None:
        probe = b"x" * (3 * block_size)
    ct = query(probe)
    blocks = [ct[i : i + block_size] for i in range(0, len(ct), block_size)]
    for left, right in zip(blocks, blocks[1:]):
        if left == right:
            return CipherMode.ECB
    return CipherMode.CBC


def find_ecb_ciphertext(ciphertexts: Sequence[bytes], block_size: int = 16) -> int:
    """Index of the ciphertext with the most repeated blocks."""

    if not ciphertexts:
        raise MalformedInput("no ciphertexts to search")
    scores = [count_repeated_blocks(ct, block_size) for ct in ciphertexts]
    best = max(range(len(scores)), key=scores.__getitem__)
    if scores[best] == 0:
        raise AttackFailed("no ciphertext repeats a block")
    logger.info("Ciphertext %d repeats %d block(s)", best, scores[best])
    return best


def demo_find_ecb(count: int = 20, seed: int = 8) -> dict[str, object]:
    """Hide one ECB ciphertext among CBC ones and pick it out by repetition."""

    rng = random.Random(seed)
    ecb_index = rng.randrange(count)
    haystack = []
    for i in range(count):
        key = rng.randbytes(16)
        plaintext = rng.randbytes(rng.randint(0, 40)) + b"YELLOW SUBMARINE" * 4
        if i == ecb_index:
            haystack.append(aes_ecb_encrypt(key, plaintext))
        else:
            haystack.append(aes_cbc_encrypt(key, plaintext, rng.randbytes(16)))
    found = find_ecb_ciphertext(haystack)
    return {
        "index": found,
        "truth": ecb_index,
        "repeats": count_repeated_blocks(haystack[found]),
        "count": count,
    }


def demo_detection(trials: int = 10, seed: int = 12345) -> dict[str, object]:
    """Run the detector against the random-mode oracle and report agreement."""

    oracle = BlockOracle.ecb_or_cbc(seed=seed)
    guesses = []
    truths = []
    for i in range(trials):
        guess = detect_mode(oracle.query, probe=b"x" * 64)
        guesses.append(guess)
        truths.append(oracle.last_mode)
        logger.debug("trial %d: guessed %s, actual %s", i, guess.name, oracle.last_mode.name)
    correct = sum(g is t for g, t in zip(guesses, truths))
    logger.info("ECB/CBC detector: %d/%d correct", correct, trials)
    return {
        "guesses": guesses,
        "truths": truths,
        "correct": correct,
        "trials": trials,
    }
