from __future__ import annotations

import logging
import math
from time import perf_counter
from typing import Any, Dict, Iterator, List, Optional

from pygame.math import Vector2

from .agent import Agent
from .config import SimulationConfig
from .group import Group, GroupCoefficients
from .obstacle import Obstacle
from .rng import DeterministicRng
from ..systems import integration, metrics as metrics_system, perception, steering
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.math2d import heading, norm

logger = logging.getLogger(__name__)


class World:
    """Groups, obstacles and bounds shared by every agent during a tick."""

    def __init__(self, config: SimulationConfig):
        if config.min_speed <= 0:
            raise ValueError(f"min_speed must be positive, got {config.min_speed}")
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._groups: List[Group] = []
        self._obstacles: List[Obstacle] = []
        self._next_id = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def groups(self) -> List[Group]:
        return self._groups

    @property
    def obstacles(self) -> List[Obstacle]:
        return self._obstacles

    @property
    def width(self) -> float:
        return self._config.width

    @property
    def height(self) -> float:
        return self._config.height

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def agents(self) -> List[Agent]:
        return list(self.iter_agents())

    def iter_agents(self) -> Iterator[Agent]:
        for group in self._groups:
            yield from group.agents

    def group_of(self, agent: Agent) -> Group:
        return self._groups[agent.group_index]

    def reset(self) -> None:
        self._groups.clear()
        self._obstacles.clear()
        self._rng.reset()
        self._next_id = 0
        self._metrics = None
        self._bootstrap()

    def add_group(
        self,
        name: str,
        coefficients: GroupCoefficients | None = None,
        speed_limit: float = 5.0,
        view_range: float = 100.0,
        is_predator: bool = False,
    ) -> int:
        if speed_limit <= self._config.min_speed:
            raise ValueError(
                f"speed_limit ({speed_limit}) must be greater than min_speed ({self._config.min_speed})"
            )
        group = Group(
            name=name,
            coefficients=coefficients if coefficients is not None else GroupCoefficients(),
            speed_limit=speed_limit,
            view_range=view_range,
            is_predator=is_predator,
        )
        self._groups.append(group)
        return len(self._groups) - 1

    def add_obstacle(self, position: Vector2 | tuple[float, float], avoidance_radius: float) -> Obstacle:
        obstacle = Obstacle(position=Vector2(position), avoidance_radius=avoidance_radius)
        self._obstacles.append(obstacle)
        return obstacle

    def add_agent(
        self,
        group_index: int,
        location: Optional[Vector2 | tuple[float, float]] = None,
        velocity: Optional[Vector2 | tuple[float, float]] = None,
    ) -> Agent:
        if not 0 <= group_index < len(self._groups):
            raise ValueError(f"unknown group index {group_index}")
        group = self._groups[group_index]
        if location is None:
            location = self._rng.random_location(self._config.width, self._config.height)
        if velocity is None:
            velocity = self._rng.sample_velocity(group.speed_limit, self._config.min_speed)
        velocity = Vector2(velocity)
        if norm(velocity) == 0.0:
            raise ValueError("agent velocity must be non-zero")
        agent = Agent(
            id=self._next_id,
            group_index=group_index,
            location=Vector2(location),
            velocity=velocity,
        )
        self._next_id += 1
        group.agents.append(agent)
        return agent

    def remove_agent(self, agent: Agent) -> None:
        group = self._groups[agent.group_index]
        group.agents.remove(agent)
        for other in self.iter_agents():
            if agent in other.flock_neighbors:
                other.flock_neighbors.remove(agent)
            if agent in other.stranger_neighbors:
                other.stranger_neighbors.remove(agent)

    def clear_trails(self) -> None:
        for agent in self.iter_agents():
            agent.clear_trail()

    def find_neighbors(self, agent: Agent) -> tuple[list[Agent], list[Agent]]:
        return perception.find_neighbors(self, agent)

    def compute_force(self, agent: Agent) -> Vector2:
        self.find_neighbors(agent)
        return steering.compute_force(self, agent)

    def step(self, tick: int, dt: float = 1.0) -> TickMetrics:
        """Advance every agent once; later agents see the already-moved earlier ones."""
        start = perf_counter()
        min_speed = self._config.min_speed
        population = 0
        flock_links = 0
        stranger_links = 0
        overrides = 0
        speed_sum = 0.0

        for group in self._groups:
            for agent in group.agents:
                perception.find_neighbors(self, agent)
                force, overridden = steering.compute_force(self, agent, return_override=True)
                integration.integrate(agent, force, group.speed_limit, min_speed, dt)

                population += 1
                flock_links += len(agent.flock_neighbors)
                stranger_links += len(agent.stranger_neighbors)
                overrides += int(overridden)
                speed_sum += norm(agent.velocity)

        elapsed_ms = (perf_counter() - start) * 1000.0
        avg_speed = speed_sum / population if population else 0.0
        stats = (population, len(self._groups), flock_links, stranger_links, avg_speed)
        metrics = metrics_system.create_metrics(tick, overrides, elapsed_ms, stats)
        self._metrics = metrics
        logger.debug(
            "tick %d: %d agents, %d flock links, %d stranger links, %.3f ms",
            tick,
            population,
            flock_links,
            stranger_links,
            elapsed_ms,
        )
        return metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self._snapshot_metrics_from_state(tick)
        metadata = SnapshotMetadata(
            sim_dt=self._config.time_step,
            tick_rate=0.0 if self._config.time_step <= 0 else 1.0 / self._config.time_step,
            seed=self._config.seed,
            min_speed=self._config.min_speed,
            config_version=self._config.config_version,
        )
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self.iter_agents()],
            groups=[self._group_snapshot(index, group) for index, group in enumerate(self._groups)],
            obstacles=[
                {"x": obstacle.position.x, "y": obstacle.position.y, "avoidance_radius": obstacle.avoidance_radius}
                for obstacle in self._obstacles
            ],
            world=SnapshotWorld(width=self._config.width, height=self._config.height),
            metadata=metadata,
        )

    def _bootstrap(self) -> None:
        for group_config in self._config.groups:
            coefficients = GroupCoefficients(
                cohesion=group_config.coefficients.cohesion,
                separation=group_config.coefficients.separation,
                alignment=group_config.coefficients.alignment,
                intolerance=group_config.coefficients.intolerance,
                hunting=group_config.coefficients.hunting,
            )
            index = self.add_group(
                group_config.name,
                coefficients=coefficients,
                speed_limit=group_config.speed_limit,
                view_range=group_config.view_range,
                is_predator=group_config.is_predator,
            )
            for _ in range(group_config.count):
                self.add_agent(index)
        for obstacle_config in self._config.obstacles:
            self.add_obstacle(obstacle_config.position, obstacle_config.avoidance_radius)
        logger.info(
            "world %.0fx%.0f bootstrapped with %d groups, %d agents, %d obstacles (seed %d)",
            self._config.width,
            self._config.height,
            len(self._groups),
            sum(len(group) for group in self._groups),
            len(self._obstacles),
            self._config.seed,
        )

    def _snapshot_metrics_from_state(self, tick: int) -> TickMetrics:
        agents = self.agents
        population = len(agents)
        avg_speed = sum(norm(agent.velocity) for agent in agents) / population if population else 0.0
        flock_links = sum(len(agent.flock_neighbors) for agent in agents)
        stranger_links = sum(len(agent.stranger_neighbors) for agent in agents)
        stats = (population, len(self._groups), flock_links, stranger_links, avg_speed)
        return metrics_system.create_metrics(tick, 0, 0.0, stats)

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "group": agent.group_index,
            "x": agent.location.x,
            "y": agent.location.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "heading": heading(agent.velocity),
            "speed": math.hypot(agent.velocity.x, agent.velocity.y),
            "trail": [[point.x, point.y] for point in agent.trail],
        }

    @staticmethod
    def _group_snapshot(index: int, group: Group) -> Dict[str, Any]:
        coefficients = group.coefficients
        return {
            "index": index,
            "name": group.name,
            "is_predator": group.is_predator,
            "speed_limit": group.speed_limit,
            "view_range": group.view_range,
            "size": len(group.agents),
            "coefficients": {
                "cohesion": coefficients.cohesion,
                "separation": coefficients.separation,
                "alignment": coefficients.alignment,
                "intolerance": coefficients.intolerance,
                "hunting": coefficients.hunting,
            },
        }
