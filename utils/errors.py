"""Error kinds shared by the mode engine, the oracles and the attacks."""
from __future__ import annotations


class InvalidPadding(ValueError):
    """PKCS#7 trailing bytes are inconsistent."""


class MalformedInput(ValueError):
    """A caller broke a precondition (lengths, alignment, ranges)."""


class AttackFailed(RuntimeError):
    """An attack could not reach a result under its assumptions."""


class UnrecoverableByte(AttackFailed):
    """All 256 candidates were tried at ``position`` without a definitive match."""

    def __init__(self, position: int, message: str | None = None):
        self.position = position
        super().__init__(message or f"no candidate byte matched at position {position}")


__all__ = ["InvalidPadding", "MalformedInput", "AttackFailed", "UnrecoverableByte"]
