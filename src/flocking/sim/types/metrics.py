from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    groups: int
    flock_links: int
    stranger_links: int
    obstacle_overrides: int
    average_speed: float
    tick_duration_ms: float = 0.0
