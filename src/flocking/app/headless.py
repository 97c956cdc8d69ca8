from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "groups",
    "avg_speed",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "groups",
    "flock_links",
    "stranger_links",
    "obstacle_overrides",
    "avg_speed",
    "tick_ms",
    "flock_links_per_agent",
    "stranger_links_per_agent",
    "tick_ms_per_agent",
    "predators",
    "min_speed",
    "max_speed",
    "avg_trail_length",
    "centroid_x",
    "centroid_y",
]


def _format_basic_row(metrics: object, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.groups,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: object, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        flock_links_per_agent = 0.0
        stranger_links_per_agent = 0.0
        tick_ms_per_agent = 0.0
        predators = 0
        min_speed = 0.0
        max_speed = 0.0
        avg_trail_length = 0.0
        centroid_x = 0.0
        centroid_y = 0.0
    else:
        flock_links_per_agent = metrics.flock_links / population
        stranger_links_per_agent = metrics.stranger_links / population
        tick_ms_per_agent = tick_ms / population

        predators = 0
        min_speed = math.inf
        max_speed = 0.0
        trail_sum = 0
        x_sum = 0.0
        y_sum = 0.0
        for group in world.groups:
            if group.is_predator:
                predators += len(group.agents)
            for agent in group.agents:
                speed = math.hypot(agent.velocity.x, agent.velocity.y)
                min_speed = min(min_speed, speed)
                max_speed = max(max_speed, speed)
                trail_sum += len(agent.trail)
                x_sum += agent.location.x
                y_sum += agent.location.y
        avg_trail_length = trail_sum / population
        centroid_x = x_sum / population
        centroid_y = y_sum / population

    return [
        metrics.tick,
        population,
        metrics.groups,
        metrics.flock_links,
        metrics.stranger_links,
        metrics.obstacle_overrides,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
        f"{flock_links_per_agent:.4f}",
        f"{stranger_links_per_agent:.4f}",
        f"{tick_ms_per_agent:.4f}",
        predators,
        f"{min_speed:.4f}",
        f"{max_speed:.4f}",
        f"{avg_trail_length:.4f}",
        f"{centroid_x:.4f}",
        f"{centroid_y:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
) -> World:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    override_series: list[float] = []
    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            override_series.append(float(metrics.obstacle_overrides))
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info("headless run finished after %d steps (seed %d)", steps, config.seed)

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "population": sum(len(group.agents) for group in world.groups),
            "tick_ms": _summary_stats(tick_ms_series),
            "average_speed": _summary_stats(speed_series),
            "obstacle_overrides": _summary_stats(override_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "average_speed": _summary_stats(speed_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        config_path=args.config,
        summary_path=args.summary,
        summary_window=args.summary_window,
    )


if __name__ == "__main__":
    main()
