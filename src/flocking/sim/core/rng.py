from __future__ import annotations

import math
import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def random_location(self, width: float, height: float) -> Vector2:
        return Vector2(self.next_range(0.0, width), self.next_range(0.0, height))

    def sample_velocity(self, speed_limit: float, min_speed: float) -> Vector2:
        """Rejection-sample a velocity in the ``speed_limit`` box that is at least ``min_speed`` long."""
        if min_speed >= speed_limit:
            raise ValueError(
                f"min_speed ({min_speed}) must be lower than the speed limit ({speed_limit})"
            )
        while True:
            velocity = Vector2(
                self.next_range(-speed_limit, speed_limit),
                self.next_range(-speed_limit, speed_limit),
            )
            if math.hypot(velocity.x, velocity.y) >= min_speed:
                return velocity
