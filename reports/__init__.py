from __future__ import annotations

from .timing_dashboard import plot_timing_margins

__all__ = ["plot_timing_margins"]
