"""
File-signature server with an early-exit comparison.

Time is simulated: every compared byte costs ``base_time`` plus a uniform
integer jitter in ``[-jitter, jitter]`` (microseconds), and the comparison
stops at the first mismatch. The elapsed total is returned alongside the
verdict, which is all a remote attacker would observe.
"""

from __future__ import annotations

import random
from typing import Callable

from Crypto.Hash import HMAC, SHA1

CompareFn = Callable[[bytes], tuple[bool, int]]


class TimingServer:
    def __init__(
        self,
        key: bytes,
        *,
        base_time: int = 50,
        jitter: int = 10,
        seed: int | None = None,
    ):
        self._key = bytes(key)
        self._rng = random.Random(seed)
        self.base_time = base_time
        self.jitter = jitter
        self.comparisons = 0

    def insecure_compare(self, a: bytes, b: bytes) -> tuple[bool, int]:
        self.comparisons += 1
        total = 0
        for x, y in zip(a, b):
            total += self.base_time + self._rng.randint(-self.jitter, self.jitter)
            if x != y:
                return False, total
        return len(a) == len(b), total

    def signature(self, filename: bytes) -> bytes:
        return HMAC.new(self._key, filename, digestmod=SHA1).digest()

    def verify(self, filename: bytes, candidate: bytes) -> tuple[bool, int]:
        return self.insecure_compare(candidate, self.signature(filename))

    def compare_for(self, filename: bytes) -> CompareFn:
        """Bind ``filename`` and return the one-argument probe used by attacks."""

        expected = self.signature(filename)
        return lambda candidate: self.insecure_compare(candidate, expected)


__all__ = ["TimingServer", "CompareFn"]
