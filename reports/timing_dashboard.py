from __future__ import annotations

from pathlib import Path
from typing import Sequence

from attacks.timing_leak import PositionStats
from utils.plotting import new_figure, nice_axes, save


def plot_timing_margins(trace: Sequence[PositionStats], destination: str | Path) -> Path:
    """Plot the winning and runner-up mean response time for every position."""

    if not trace:
        raise ValueError("No timing telemetry to plot")

    positions = [entry.position for entry in trace]
    best = [entry.best_mean for entry in trace]
    runner_up = [entry.runner_up_mean for entry in trace]

    fig, ax = new_figure()
    nice_axes(
        ax,
        "Early-exit comparison timing leak",
        xlabel="Secret byte position",
        ylabel="Mean elapsed time (simulated us)",
    )
    ax.plot(positions, best, marker="o", linewidth=1.5, label="Chosen byte")
    ax.plot(positions, runner_up, marker="x", linestyle="--", linewidth=1.0, label="Runner-up")
    exact = [entry.position for entry in trace if entry.exact]
    if exact:
        ax.scatter(exact, [trace[p].best_mean for p in exact], s=80, facecolors="none",
                   edgecolors="tab:green", label="Exact match")
    ax.legend()
    return save(fig, destination)
