from __future__ import annotations

import math
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import heading, norm, wrap_angle

if TYPE_CHECKING:
    from ..core.world import World


def in_dead_angle(velocity: Vector2, offset: Vector2, dead_angle_deg: float) -> bool:
    """True when ``offset`` points into the blind cone centred behind ``velocity``."""
    half_width = math.radians(dead_angle_deg) / 2.0
    relative = wrap_angle(heading(offset) - heading(velocity))
    return math.pi - half_width <= relative <= math.pi + half_width


def find_neighbors(world: World, agent: Agent) -> tuple[list[Agent], list[Agent]]:
    """Rebuild ``agent.flock_neighbors`` and ``agent.stranger_neighbors`` from the live world."""
    group = world.groups[agent.group_index]
    view_range = group.view_range
    dead_angle = world.config.dead_angle
    flock: list[Agent] = []
    strangers: list[Agent] = []

    for group_index, other_group in enumerate(world.groups):
        for other in other_group.agents:
            if other is agent:
                continue
            offset = other.location - agent.location
            if norm(offset) > view_range:
                continue
            if in_dead_angle(agent.velocity, offset, dead_angle):
                continue
            if group_index == agent.group_index:
                flock.append(other)
            else:
                strangers.append(other)

    agent.flock_neighbors = flock
    agent.stranger_neighbors = strangers
    return flock, strangers
