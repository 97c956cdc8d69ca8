from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2


@dataclass(frozen=True, slots=True)
class Obstacle:
    position: Vector2 = field(default_factory=Vector2)
    avoidance_radius: float = 0.0

    def __post_init__(self) -> None:
        # Frozen dataclasses still hand out the mutable Vector2; keep a private copy.
        object.__setattr__(self, "position", Vector2(self.position))
