from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml


@dataclass
class CoefficientsConfig:
    cohesion: float = 0.01
    separation: float = 0.1
    alignment: float = 0.05
    intolerance: float = 0.05
    hunting: float = 0.02


@dataclass
class GroupConfig:
    name: str = "flock"
    count: int = 40
    speed_limit: float = 5.0
    view_range: float = 100.0
    is_predator: bool = False
    coefficients: CoefficientsConfig = field(default_factory=CoefficientsConfig)


@dataclass
class ObstacleConfig:
    position: tuple[float, float] = (0.0, 0.0)
    avoidance_radius: float = 40.0


def _default_groups() -> List[GroupConfig]:
    return [
        GroupConfig(name="starlings", count=60),
        GroupConfig(name="sparrows", count=40, speed_limit=4.0, view_range=80.0),
        GroupConfig(
            name="hawks",
            count=3,
            speed_limit=6.0,
            view_range=160.0,
            is_predator=True,
            coefficients=CoefficientsConfig(cohesion=0.0, separation=0.1, alignment=0.0, intolerance=0.0, hunting=0.05),
        ),
    ]


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    width: float = 1000.0
    height: float = 700.0
    min_speed: float = 1.0
    repulse_range: float = 20.0
    dead_angle: float = 45.0
    wall_margin: float = 150.0
    wall_force: float = 3.0
    seed: int = 42
    config_version: str = "v1"
    groups: List[GroupConfig] = field(default_factory=_default_groups)
    obstacles: List[ObstacleConfig] = field(default_factory=list)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return (float(value[0]), float(value[1]))
    return default


def _load_group(raw: dict) -> GroupConfig:
    coefficients = CoefficientsConfig(**raw.get("coefficients", {}))
    values = {k: v for k, v in raw.items() if k != "coefficients"}
    return GroupConfig(coefficients=coefficients, **values)


def _load_obstacle(raw: dict) -> ObstacleConfig:
    default = ObstacleConfig()
    return ObstacleConfig(
        position=_pair(raw.get("position"), default.position),
        avoidance_radius=float(raw.get("avoidance_radius", default.avoidance_radius)),
    )


def load_config(raw: dict) -> SimulationConfig:
    sim_values = {k: v for k, v in raw.items() if k not in {"groups", "obstacles"}}
    config = SimulationConfig(**sim_values)
    if "groups" in raw:
        config.groups = [_load_group(group) for group in raw["groups"] or []]
    if "obstacles" in raw:
        config.obstacles = [_load_obstacle(obstacle) for obstacle in raw["obstacles"] or []]
    return config
