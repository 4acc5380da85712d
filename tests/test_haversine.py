import math

import pytest

from lokalaku.models.domain import Coordinate
from lokalaku.utils.haversine import R, haversine, haversine_km

MONAS = Coordinate(latitude=-6.175392, longitude=106.827153)
BUNDARAN_HI = Coordinate(latitude=-6.195000, longitude=106.823000)
POINTS = [
    MONAS,
    BUNDARAN_HI,
    Coordinate(latitude=0.0, longitude=0.0),
    Coordinate(latitude=89.9, longitude=-179.9),
    Coordinate(latitude=-45.5, longitude=170.25),
]


@pytest.mark.parametrize("point", POINTS)
def test_distance_to_self_is_zero(point):
    assert haversine_km(point, point) == 0


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_distance_is_symmetric(a, b):
    assert haversine_km(a, b) == haversine_km(b, a)


def test_known_distance_monas_to_bundaran_hi():
    # Roughly 2.2 km along Jalan MH Thamrin
    assert haversine_km(MONAS, BUNDARAN_HI) == pytest.approx(2.228, abs=0.01)


def test_one_degree_of_latitude():
    assert haversine(0.0, 0.0, 1.0, 0.0) == pytest.approx(R * math.pi / 180)


def test_antipodal_points_do_not_fail():
    assert haversine(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * R)


def test_distance_grows_with_separation():
    near = haversine(-6.2, 106.8, -6.201, 106.8)
    far = haversine(-6.2, 106.8, -6.21, 106.8)
    assert 0 < near < far
