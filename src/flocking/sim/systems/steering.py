from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent
from ..core.group import GroupCoefficients
from ..core.obstacle import Obstacle
from ..utils.math2d import centroid, divide, heading, norm, normalized, scalar_product, signed_angle

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


def cohesion(agent: Agent, coefficients: GroupCoefficients) -> Vector2:
    if not agent.flock_neighbors:
        return Vector2()
    center = centroid(other.location for other in agent.flock_neighbors)
    return (center - agent.location - agent.velocity) * coefficients.cohesion


def separation(agent: Agent, coefficients: GroupCoefficients, repulse_range: float) -> Vector2:
    # Only the last neighbour inside the repulse range contributes.
    force = Vector2()
    for other in agent.flock_neighbors + agent.stranger_neighbors:
        away = agent.location - other.location
        if norm(away) <= repulse_range:
            force = (away - agent.velocity) * coefficients.separation
    return force


def alignment(agent: Agent, coefficients: GroupCoefficients) -> Vector2:
    if not agent.flock_neighbors:
        return Vector2()
    total = Vector2()
    for other in agent.flock_neighbors:
        total += other.velocity
    return divide(total, len(agent.flock_neighbors)) * coefficients.alignment


def intolerance(agent: Agent, coefficients: GroupCoefficients) -> Vector2:
    force = Vector2()
    for other in agent.stranger_neighbors:
        force -= other.velocity
    if norm(force) > 0.0:
        force = divide(force, len(agent.stranger_neighbors))
    return force * coefficients.intolerance


def hunting(world: World, agent: Agent, coefficients: GroupCoefficients) -> Vector2:
    preys = [other for other in agent.stranger_neighbors if not world.groups[other.group_index].is_predator]
    if not preys:
        return Vector2()
    center = centroid(other.location for other in preys)
    return (center - agent.location) * coefficients.hunting


def fleeing(world: World, agent: Agent) -> Vector2:
    closest: Agent | None = None
    closest_distance = math.inf
    for other in agent.stranger_neighbors:
        if not world.groups[other.group_index].is_predator:
            continue
        distance = norm(other.location - agent.location)
        if closest is None or distance < closest_distance:
            closest = other
            closest_distance = distance
    if closest is None:
        return Vector2()
    return agent.location - closest.location


def will_collide(agent: Agent, obstacle: Obstacle, repulse_range: float) -> bool:
    to_obstacle = obstacle.position - agent.location
    distance = norm(to_obstacle)
    projection = scalar_product(to_obstacle, normalized(agent.velocity))
    miss_distance = math.sqrt(max(0.0, distance * distance - projection * projection))
    return (
        distance <= repulse_range + obstacle.avoidance_radius
        and miss_distance < obstacle.avoidance_radius
        and projection >= 0.0
    )


def obstacle_avoidance(agent: Agent, obstacle: Obstacle) -> tuple[Vector2, bool]:
    """Tangential deflection around ``obstacle``; the flag is True when the agent is inside its radius."""
    to_obstacle = obstacle.position - agent.location
    distance = norm(to_obstacle)
    radius = obstacle.avoidance_radius
    direction = normalized(agent.velocity)

    if distance >= radius:
        m = radius * radius / distance
    else:
        m = distance
    q = math.sqrt(max(0.0, radius * radius - m * m))

    toward = direction if distance == 0.0 else to_obstacle / distance
    if signed_angle(heading(toward) - heading(direction)) < 0.0:
        around = Vector2(-toward.y, toward.x)
    else:
        around = Vector2(toward.y, -toward.x)

    force = toward * (distance - m) + around * q
    return force, distance <= radius


def wall_avoidance(world: World, agent: Agent) -> Vector2:
    config = world.config
    reach = config.repulse_range
    margin = config.wall_margin
    intensity = config.wall_force
    force = Vector2()

    if agent.location.x - reach <= margin:
        force.x += intensity
    elif agent.location.x + reach >= world.width - margin:
        force.x -= intensity

    if agent.location.y - reach <= margin:
        force.y += intensity
    elif agent.location.y + reach >= world.height - margin:
        force.y -= intensity

    return force


def compute_force(
    world: World,
    agent: Agent,
    return_override: bool = False,
) -> tuple[Vector2, bool] | Vector2:
    """Sum every steering contribution for ``agent`` from its current neighbour lists."""
    group = world.groups[agent.group_index]
    coefficients = group.coefficients
    repulse_range = world.config.repulse_range

    force = Vector2()
    force += cohesion(agent, coefficients)
    force += separation(agent, coefficients, repulse_range)
    force += alignment(agent, coefficients)

    if group.is_predator:
        force += hunting(world, agent, coefficients)
    else:
        force += intolerance(agent, coefficients)
        force += fleeing(world, agent)

    overridden = False
    for obstacle in world.obstacles:
        if not will_collide(agent, obstacle, repulse_range):
            continue
        avoidance, inside = obstacle_avoidance(agent, obstacle)
        if inside:
            force = avoidance
            overridden = True
            logger.debug("agent %d inside obstacle at %s, steering overridden", agent.id, tuple(obstacle.position))
        else:
            force += avoidance * 0.5

    # An agent already inside an obstacle only steers out of it.
    if not overridden:
        force += wall_avoidance(world, agent)
    return (force, overridden) if return_override else force
