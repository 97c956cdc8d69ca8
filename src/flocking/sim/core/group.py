from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .agent import Agent


@dataclass(slots=True)
class GroupCoefficients:
    cohesion: float = 0.0
    separation: float = 0.0
    alignment: float = 0.0
    intolerance: float = 0.0
    hunting: float = 0.0


@dataclass(slots=True)
class Group:
    """A flock: agents sharing steering coefficients and a predator/prey role."""

    name: str
    coefficients: GroupCoefficients = field(default_factory=GroupCoefficients)
    speed_limit: float = 5.0
    view_range: float = 100.0
    is_predator: bool = False
    agents: List["Agent"] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.agents)
