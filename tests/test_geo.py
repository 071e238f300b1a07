import math

import pytest

from locationkit.core.geo import Coordinate, distance_km


NEW_YORK = Coordinate(latitude=40.7128, longitude=-74.0060)
LONDON = Coordinate(latitude=51.5074, longitude=-0.1278)


def test_distance_new_york_to_london():
    assert distance_km(NEW_YORK, LONDON) == pytest.approx(5570, abs=10)


@pytest.mark.parametrize(
    "a,b",
    [
        (NEW_YORK, LONDON),
        (Coordinate(0.0, 0.0), Coordinate(0.0, 180.0)),
        (Coordinate(-33.8688, 151.2093), Coordinate(35.6762, 139.6503)),
    ],
)
def test_distance_is_symmetric(a, b):
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))


def test_distance_to_self_is_zero():
    assert distance_km(LONDON, LONDON) == pytest.approx(0.0, abs=1e-9)


def test_distance_propagates_nan():
    assert math.isnan(distance_km(Coordinate(float("nan"), 0.0), LONDON))
