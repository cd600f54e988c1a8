import math
import random

import pytest

from models.base import Coordinate
from services.geo import distance, blur, parse_point, METERS_PER_DEGREE

KANDY = Coordinate(latitude=7.2906, longitude=80.6337)
GALLE = Coordinate(latitude=6.0535, longitude=80.2210)


class TestDistance:
    def test_same_point_is_zero(self, colombo):
        """Distance from a point to itself is zero"""
        assert distance(colombo, colombo) == 0.0
        assert distance(KANDY, KANDY) == 0.0

    def test_symmetric(self, colombo):
        """Distance does not depend on argument order"""
        assert distance(colombo, KANDY) == pytest.approx(distance(KANDY, colombo))
        assert distance(GALLE, KANDY) == pytest.approx(distance(KANDY, GALLE))

    def test_one_degree_of_latitude(self):
        """One degree of latitude is about 111.19 km"""
        a = Coordinate(latitude=0.0, longitude=0.0)
        b = Coordinate(latitude=1.0, longitude=0.0)
        assert distance(a, b) == pytest.approx(math.pi * 6371 / 180)

    def test_known_city_distance(self, colombo):
        """Colombo to Kandy is roughly 94 km as the crow flies"""
        assert distance(colombo, KANDY) == pytest.approx(94.5, abs=2.0)

    def test_antipodal_points(self):
        """Half the globe apart is half the circumference"""
        a = Coordinate(latitude=0.0, longitude=0.0)
        b = Coordinate(latitude=0.0, longitude=180.0)
        assert distance(a, b) == pytest.approx(math.pi * 6371)

    def test_triangle_inequality(self, colombo):
        """Going via a third point is never shorter"""
        assert distance(colombo, GALLE) <= distance(colombo, KANDY) + distance(KANDY, GALLE) + 1e-9
        assert distance(KANDY, GALLE) <= distance(KANDY, colombo) + distance(colombo, GALLE) + 1e-9


class TestBlur:
    def test_stays_within_radius(self, colombo):
        """Blurred points stay within the requested radius"""
        rng = random.Random(1234)
        max_degrees = 200 / METERS_PER_DEGREE
        for _ in range(500):
            blurred = blur(colombo, 200, rng=rng)
            offset = math.hypot(blurred.latitude - colombo.latitude, blurred.longitude - colombo.longitude)
            assert offset <= max_degrees + 1e-12

    def test_default_radius_is_200_meters(self, colombo):
        """Default blur stays within 200 m"""
        max_degrees = 200 / METERS_PER_DEGREE
        for _ in range(100):
            blurred = blur(colombo)
            offset = math.hypot(blurred.latitude - colombo.latitude, blurred.longitude - colombo.longitude)
            assert offset <= max_degrees + 1e-12

    def test_successive_calls_differ(self, colombo):
        """Blurring twice gives different points"""
        assert blur(colombo) != blur(colombo)

    def test_seeded_rng_is_reproducible(self, colombo):
        """A seeded random source gives repeatable output"""
        assert blur(colombo, rng=random.Random(7)) == blur(colombo, rng=random.Random(7))

    def test_zero_radius_returns_same_point(self, colombo):
        """Zero radius leaves the point where it is"""
        assert blur(colombo, 0) == colombo

    def test_does_not_modify_input(self, colombo):
        """The input coordinate is left untouched"""
        before = colombo.model_dump()
        blur(colombo)
        assert colombo.model_dump() == before

    def test_negative_radius_rejected(self, colombo):
        """A negative radius is an error"""
        with pytest.raises(ValueError):
            blur(colombo, -1)


class TestParsePoint:
    def test_wkt_point_is_lng_lat(self):
        """WKT points are read as longitude then latitude"""
        assert parse_point("POINT(79.8612 6.9271)") == Coordinate(latitude=6.9271, longitude=79.8612)

    def test_negative_wkt_values(self):
        """Negative WKT components are parsed"""
        assert parse_point("POINT(-58.38 -34.60)") == Coordinate(latitude=-34.60, longitude=-58.38)

    def test_mappings(self):
        """lat/lng and latitude/longitude mappings are accepted"""
        expected = Coordinate(latitude=6.9271, longitude=79.8612)
        assert parse_point({"lat": 6.9271, "lng": 79.8612}) == expected
        assert parse_point({"latitude": 6.9271, "longitude": 79.8612}) == expected

    def test_coordinate_passthrough(self, colombo):
        """Coordinates are returned as they are"""
        assert parse_point(colombo) is colombo

    @pytest.mark.parametrize("value", [None, "", "POINT()", "LINESTRING(1 2, 3 4)", {"lat": 1.0}, {"lat": "x", "lng": 2}, 42])
    def test_unreadable_values(self, value):
        """Anything unreadable parses to None"""
        assert parse_point(value) is None
