from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

from pygame.math import Vector2

MAX_TRAILS = 50


def _new_trail() -> Deque[Vector2]:
    return deque(maxlen=MAX_TRAILS)


@dataclass(slots=True, eq=False)
class Agent:
    id: int
    group_index: int
    location: Vector2
    velocity: Vector2
    trail: Deque[Vector2] = field(default_factory=_new_trail)
    flock_neighbors: List["Agent"] = field(default_factory=list)
    stranger_neighbors: List["Agent"] = field(default_factory=list)

    def clear_trail(self) -> None:
        self.trail.clear()

    def __repr__(self) -> str:
        return f"Agent(id={self.id}, group={self.group_index}, location=({self.location.x:.2f}, {self.location.y:.2f}))"
