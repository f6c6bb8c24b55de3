"""MT19937, the 32-bit Mersenne Twister."""

from __future__ import annotations

from typing import Sequence

from utils.errors import MalformedInput

N = 624
M = 397
F = 1812433253
MATRIX_A = 0x9908B0DF
UPPER_MASK = 0x80000000
LOWER_MASK = 0x7FFFFFFF
_MASK = 0xFFFFFFFF

# tempering parameters
U, D = 11, 0xFFFFFFFF
S, B = 7, 0x9D2C5680
T, C = 15, 0xEFC60000
L = 18


def temper(y: int) -> int:
    y ^= (y >> U) & D
    y ^= (y << S) & B
    y ^= (y << T) & C
    y ^= y >> L
    return y & _MASK


class MT19937:
    def __init__(self, seed: int = 5489):
        state = [seed & _MASK]
        for i in range(1, N):
            prev = state[-1]
            state.append((F * (prev ^ (prev >> 30)) + i) & _MASK)
        self.state = state
        self.index = N

    @classmethod
    def from_state(cls, state: Sequence[int], index: int = N) -> "MT19937":
        if len(state) != N:
            raise MalformedInput(f"MT19937 state needs {N} words, got {len(state)}")
        obj = cls.__new__(cls)
        obj.state = [w & _MASK for w in state]
        obj.index = index
        return obj

    def twist(self) -> None:
        st = self.state
        for i in range(N):
            x = (st[i] & UPPER_MASK) | (st[(i + 1) % N] & LOWER_MASK)
            xa = x >> 1
            if x & 1:
                xa ^= MATRIX_A
            st[i] = st[(i + M) % N] ^ xa
        self.index = 0

    def extract_number(self) -> int:
        if self.index >= N:
            self.twist()
        y = temper(self.state[self.index])
        self.index += 1
        return y

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.extract_number()


__all__ = ["MT19937", "temper", "N"]
