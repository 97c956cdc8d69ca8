from __future__ import annotations

import math

import pytest
from pygame.math import Vector2

from flocking.sim.core.config import SimulationConfig
from flocking.sim.core.world import World
from flocking.sim.systems.perception import find_neighbors, in_dead_angle


def _empty_world() -> World:
    return World(SimulationConfig(groups=[], obstacles=[]))


def _polar(center: Vector2, distance: float, angle_deg: float) -> Vector2:
    angle = math.radians(angle_deg)
    return center + Vector2(math.cos(angle), math.sin(angle)) * distance


@pytest.mark.parametrize("distance", [1.0, 50.0, 100.0, 100.5])
@pytest.mark.parametrize("angle_deg", [180.0, 160.0, 200.0, -170.0])
def test_agents_in_dead_angle_are_never_perceived(distance, angle_deg):
    world = _empty_world()
    flock = world.add_group("flock", view_range=100.0)
    strangers = world.add_group("strangers")
    center = Vector2(500.0, 350.0)
    observer = world.add_agent(flock, location=center, velocity=(2.0, 0.0))
    world.add_agent(flock, location=_polar(center, distance, angle_deg), velocity=(1.0, 0.0))
    world.add_agent(strangers, location=_polar(center, distance, angle_deg), velocity=(1.0, 0.0))

    flock_neighbors, stranger_neighbors = find_neighbors(world, observer)

    assert flock_neighbors == []
    assert stranger_neighbors == []


@pytest.mark.parametrize("angle_deg", [155.0, -155.0, 90.0, 0.0])
def test_agents_just_outside_dead_angle_are_perceived(angle_deg):
    world = _empty_world()
    flock = world.add_group("flock", view_range=100.0)
    center = Vector2(500.0, 350.0)
    observer = world.add_agent(flock, location=center, velocity=(2.0, 0.0))
    other = world.add_agent(flock, location=_polar(center, 10.0, angle_deg), velocity=(1.0, 0.0))

    flock_neighbors, _ = find_neighbors(world, observer)

    assert flock_neighbors == [other]


def test_dead_angle_follows_heading():
    heading_up = Vector2(0.0, 3.0)
    assert in_dead_angle(heading_up, Vector2(0.0, -5.0), 45.0)
    assert in_dead_angle(heading_up, Vector2(1.0, -5.0), 45.0)
    assert not in_dead_angle(heading_up, Vector2(0.0, 5.0), 45.0)
    assert not in_dead_angle(heading_up, Vector2(-5.0, 0.0), 45.0)

    heading_left_down = Vector2(-1.0, -1.0)
    assert in_dead_angle(heading_left_down, Vector2(4.0, 4.0), 45.0)
    assert not in_dead_angle(heading_left_down, Vector2(-4.0, -4.0), 45.0)


def test_view_range_boundary_is_inclusive():
    world = _empty_world()
    flock = world.add_group("flock", view_range=100.0)
    observer = world.add_agent(flock, location=(500.0, 350.0), velocity=(2.0, 0.0))
    on_boundary = world.add_agent(flock, location=(600.0, 350.0), velocity=(1.0, 0.0))
    world.add_agent(flock, location=(500.0, 450.5), velocity=(1.0, 0.0))

    flock_neighbors, _ = find_neighbors(world, observer)

    assert flock_neighbors == [on_boundary]


def test_neighbors_are_split_by_group_and_exclude_self():
    world = _empty_world()
    flock = world.add_group("flock", view_range=100.0)
    strangers = world.add_group("strangers", view_range=10.0)
    observer = world.add_agent(flock, location=(500.0, 350.0), velocity=(2.0, 0.0))
    mate = world.add_agent(flock, location=(530.0, 360.0), velocity=(1.0, 0.0))
    stranger = world.add_agent(strangers, location=(520.0, 340.0), velocity=(1.0, 0.0))

    flock_neighbors, stranger_neighbors = find_neighbors(world, observer)

    assert flock_neighbors == [mate]
    assert stranger_neighbors == [stranger]
    assert observer.flock_neighbors is flock_neighbors
    assert observer.stranger_neighbors is stranger_neighbors
    assert all(other.group_index == observer.group_index for other in observer.flock_neighbors)

    # The stranger's own, shorter view range decides what it sees.
    find_neighbors(world, stranger)
    assert stranger.flock_neighbors == []
    assert stranger.stranger_neighbors == []


def test_neighbor_lists_are_rebuilt_each_call():
    world = _empty_world()
    flock = world.add_group("flock", view_range=100.0)
    observer = world.add_agent(flock, location=(500.0, 350.0), velocity=(2.0, 0.0))
    mate = world.add_agent(flock, location=(530.0, 350.0), velocity=(1.0, 0.0))

    find_neighbors(world, observer)
    assert observer.flock_neighbors == [mate]

    mate.location.update(800.0, 350.0)
    find_neighbors(world, observer)
    assert observer.flock_neighbors == []
