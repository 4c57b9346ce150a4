"""Unit tests for geospatial helpers."""

import pytest

from estate_locator.models import Coordinates
from estate_locator.utils.geo import distance_km, haversine_distance, quantize


class TestHaversineDistance:
    def test_same_point_is_zero(self) -> None:
        assert haversine_distance(6.5244, 3.3792, 6.5244, 3.3792) == 0.0

    def test_symmetric(self) -> None:
        a = haversine_distance(6.605, 3.355, 9.035, 7.495)
        b = haversine_distance(9.035, 7.495, 6.605, 3.355)
        assert a == pytest.approx(b)

    def test_one_degree_latitude(self) -> None:
        # One degree of latitude is about 111.2 km on a 6371 km sphere
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.19, abs=0.01)

    def test_lagos_to_abuja(self) -> None:
        d = distance_km(
            Coordinates(latitude=6.5244, longitude=3.3792),
            Coordinates(latitude=9.0765, longitude=7.3986),
        )
        assert 520 < d < 540

    def test_antipodal_points_do_not_fail(self) -> None:
        d = haversine_distance(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(20015.09, abs=0.1)


class TestQuantize:
    def test_four_places(self) -> None:
        assert quantize(6.6051234) == "6.6051"
        assert quantize(3.35) == "3.3500"

    def test_negative_zero_normalised(self) -> None:
        assert quantize(-0.00001) == "0.0000"
        assert quantize(0.00001) == "0.0000"

    def test_negative_values_kept(self) -> None:
        assert quantize(-12.34567) == "-12.3457"
