from __future__ import annotations

from typing import Tuple

from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    overrides: int,
    duration_ms: float,
    stats: Tuple[int, int, int, int, float],
) -> TickMetrics:
    population, groups, flock_links, stranger_links, avg_speed = stats
    return TickMetrics(
        tick=tick,
        population=population,
        groups=groups,
        flock_links=flock_links,
        stranger_links=stranger_links,
        obstacle_overrides=overrides,
        average_speed=avg_speed,
        tick_duration_ms=duration_ms,
    )
