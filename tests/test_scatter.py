import math
import random

import pytest

from layoutgen.generation.config import GenerationConfig
from layoutgen.generation.scatter import roundm, sample_point_in_disc, sample_room_size, scatter_complete, scatter_room
from layoutgen.generation.state import GenerationState
from tests.layout_test_utils import FakePhysicsWorld


@pytest.mark.parametrize(
    "n,expected",
    [(0, 0), (1, 4), (4, 4), (5, 8), (-1, 0), (-4, -4), (-5, -4), (35, 36), (8, 8)],
)
def test_roundm_rounds_up_to_multiple(n, expected):
    assert roundm(n, 4) == expected


@pytest.mark.parametrize("radius", [0.0, 10.0, 100.0, 250.0])
def test_sample_point_in_disc_stays_inside_radius(radius):
    rng = random.Random(1234)
    for _ in range(2000):
        x, y = sample_point_in_disc(radius, rng, grid=4, offset=(0.0, 0.0))
        # Snapping moves each axis by less than one grid step.
        assert math.hypot(x, y) <= radius + 4 * math.sqrt(2)


def test_sample_point_is_grid_snapped_and_offset():
    rng = random.Random(99)
    for _ in range(500):
        x, y = sample_point_in_disc(100.0, rng)
        assert x % 4 == 0 and y % 4 == 0
        assert 300 - 108 <= x <= 300 + 108
        assert 300 - 108 <= y <= 300 + 108


def test_sample_point_uses_folded_radial_fraction():
    class Scripted:
        def __init__(self, values):
            self.values = list(values)

        def random(self):
            return self.values.pop(0)

    # t = 0, u = 0.75 + 0.75 = 1.5 folds to r = 0.5 -> x = 50, snapped up to 52
    assert sample_point_in_disc(100.0, Scripted([0.0, 0.75, 0.75]), offset=(0, 0)) == (52.0, 0.0)
    # u = 0.25 + 0.5 stays unfolded -> r = 0.75 -> x = 75, snapped up to 76
    assert sample_point_in_disc(100.0, Scripted([0.0, 0.25, 0.5]), offset=(300, 300)) == (376.0, 300.0)


def test_room_sizes_are_doubled_grid_multiples():
    rng = random.Random(5)
    for _ in range(500):
        w, h = sample_room_size(rng, 8, 35)
        for v in (w, h):
            assert v % 8 == 0
            assert 16 <= v <= 72


def test_scatter_phase_appends_one_room_until_threshold_crossed():
    config = GenerationConfig(seed=1, room_threshold=10)
    state = GenerationState(seed=1)
    physics = FakePhysicsWorld()
    rng = random.Random(config.seed)
    ticks = 0
    while not scatter_complete(state, config):
        scatter_room(state, config, rng, physics)
        ticks += 1
    assert len(state.rooms) == config.room_threshold + 1
    assert ticks == config.room_threshold + 1
    assert len({r.id for r in state.rooms}) == len(state.rooms)
