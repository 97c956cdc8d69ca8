from __future__ import annotations

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import norm, scale_to


def clamp_speed(velocity: Vector2, fallback: Vector2, speed_limit: float, min_speed: float) -> Vector2:
    """Rescale ``velocity`` in place into ``[min_speed, speed_limit]``."""
    speed = norm(velocity)
    if speed > speed_limit:
        scale_to(velocity, speed_limit)
    elif speed < min_speed:
        if speed == 0.0:
            # Forces cancelled the motion exactly; keep the previous direction.
            velocity.update(fallback)
        scale_to(velocity, min_speed)
    return velocity


def integrate(agent: Agent, force: Vector2, speed_limit: float, min_speed: float, dt: float = 1.0) -> None:
    agent.trail.append(Vector2(agent.location))
    previous = Vector2(agent.velocity)
    agent.velocity += force
    clamp_speed(agent.velocity, previous, speed_limit, min_speed)
    agent.location += agent.velocity * dt
