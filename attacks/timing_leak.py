"""
Timing side channel against an early-exit byte comparison.

For each position, every candidate byte is submitted ``trials`` times and the
mean elapsed time recorded; a correct byte lets the comparison run one step
further, so the slowest candidate wins unless one reports an exact match.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from oracles.timing_server import CompareFn, TimingServer

logger = logging.getLogger(__name__)


@dataclass
class PositionStats:
    """Telemetry for one recovered byte position."""

    position: int
    byte: int
    best_mean: float
    runner_up_mean: float
    queries: int
    exact: bool = False

    @property
    def margin(self) -> float:
        return self.best_mean - self.runner_up_mean


def trials_for_jitter(base_time: float, jitter: float, length: int) -> int:
    """Repetitions needed so averaged noise stays well below one byte's cost.

    The noise of a summed comparison grows with sqrt(length) and the jitter
    width, and averaging shrinks it by sqrt(trials).
    """

    if base_time <= 0:
        raise ValueError("base_time must be positive")
    if jitter <= 0:
        return 1
    return max(1, math.ceil(24 * (jitter / base_time) ** 2 * (length + 1)))


def measure(compare: CompareFn, candidate: bytes, trials: int) -> tuple[bool, float]:
    total = 0
    for _ in range(trials):
        matched, elapsed = compare(candidate)
        if matched:
            return True, float(elapsed)
        total += elapsed
    return False, total / trials


def recover_secret(
    compare: CompareFn,
    length: int,
    *,
    trials: int = 1,
    return_trace: bool = False,
) -> bytes | tuple[bytes, list[PositionStats]]:
    """Recover a ``length``-byte secret one byte at a time."""

    known = bytearray()
    trace: list[PositionStats] = []
    for pos in range(length):
        padding = b"\x00" * (length - pos - 1)
        means: list[tuple[float, int]] = []
        exact = None
        for byte in range(256):
            matched, mean = measure(compare, bytes(known) + bytes([byte]) + padding, trials)
            if matched:
                exact = (mean, byte)
                break
            means.append((mean, byte))
        means.sort(reverse=True)
        if exact is not None:
            best_mean, best = exact
            runner_up = means[0][0] if means else 0.0
        else:
            (best_mean, best), (runner_up, _) = means[0], means[1]
        known.append(best)
        stats = PositionStats(
            position=pos,
            byte=best,
            best_mean=best_mean,
            runner_up_mean=runner_up,
            queries=(len(means) + (exact is not None)) * trials,
            exact=exact is not None,
        )
        trace.append(stats)
        logger.info(
            "Position %d -> 0x%02x (mean %.1f, margin %.1f)",
            pos,
            best,
            best_mean,
            stats.margin,
        )
    if return_trace:
        return bytes(known), trace
    return bytes(known)


def demo_timing_attack(
    base_time: int = 50, jitter: int = 10, seed: int = 31, filename: bytes = b"foo"
) -> dict[str, object]:
    server = TimingServer(b"timing leak key", base_time=base_time, jitter=jitter, seed=seed)
    trials = trials_for_jitter(base_time, jitter, 20)
    recovered, trace = recover_secret(
        server.compare_for(filename), 20, trials=trials, return_trace=True
    )
    return {
        "trials": trials,
        "recovered": recovered,
        "expected": server.signature(filename),
        "ok": server.verify(filename, recovered)[0],
        "trace": trace,
        "comparisons": server.comparisons,
    }
