import math
import random

import pytest

from app.services.geodesy import (
    haversine_distance,
    PairwiseScan,
    GridScan,
    get_pair_strategy,
)


def pairs_within(strategy, points, max_distance):
    return {
        (i, j)
        for i, j in strategy.candidate_pairs(points, max_distance)
        if haversine_distance(*points[i], *points[j]) <= max_distance
    }


def test_identity_is_zero():
    assert haversine_distance(40.4168, -3.7038, 40.4168, -3.7038) == 0


def test_symmetry():
    a = haversine_distance(40.4168, -3.7038, 41.3874, 2.1686)
    b = haversine_distance(41.3874, 2.1686, 40.4168, -3.7038)
    assert a == pytest.approx(b)


def test_one_millidegree_of_latitude():
    assert haversine_distance(40.0, -3.0, 40.001, -3.0) == pytest.approx(111.195, abs=0.01)


def test_madrid_barcelona():
    # ~505 km great-circle distance
    assert haversine_distance(40.4168, -3.7038, 41.3874, 2.1686) == pytest.approx(505_000, rel=0.01)


def test_nan_propagates():
    assert math.isnan(haversine_distance(float("nan"), 0.0, 0.0, 0.0))


def test_pairwise_yields_each_unordered_pair_once():
    pairs = list(PairwiseScan().candidate_pairs([(0, 0)] * 4, 100))
    assert pairs == [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]


@pytest.mark.parametrize("center", [(40.42, -3.70), (-33.45, -70.66), (69.65, 18.96)])
def test_grid_finds_the_same_pairs_as_pairwise(center):
    rng = random.Random(42)
    lat0, lon0 = center
    points = [
        (lat0 + rng.uniform(-0.02, 0.02), lon0 + rng.uniform(-0.03, 0.03))
        for _ in range(250)
    ]
    for max_distance in (50, 200, 750):
        expected = pairs_within(PairwiseScan(), points, max_distance)
        assert pairs_within(GridScan(), points, max_distance) == expected


def test_grid_falls_back_near_the_pole():
    points = [(86.0, 10.0), (86.0005, 10.01), (86.001, 170.0)]
    assert set(GridScan().candidate_pairs(points, 200)) == set(PairwiseScan().candidate_pairs(points, 200))


def test_grid_handles_tiny_inputs():
    assert list(GridScan().candidate_pairs([], 200)) == []
    assert list(GridScan().candidate_pairs([(1.0, 1.0)], 200)) == []


def test_get_pair_strategy():
    assert isinstance(get_pair_strategy("pairwise"), PairwiseScan)
    assert isinstance(get_pair_strategy("grid"), GridScan)
    with pytest.raises(ValueError):
        get_pair_strategy("kdtree")
