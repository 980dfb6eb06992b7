"""Unit tests for haversine distance and coordinate extraction."""

import math
import pytest

from civic_dedup.dedup.geo import (
    DEFAULT_PARSERS,
    CoordinateParser,
    extract_coordinates,
    format_coordinates,
    haversine_km,
)
from civic_dedup.models import Coordinates

pytestmark = [pytest.mark.unit, pytest.mark.geo]


class TestHaversine:
    def test_same_point_is_zero(self):
        p = Coordinates(40.7128, -74.0060)
        assert haversine_km(p, p) == 0.0

    def test_symmetric(self):
        a = Coordinates(40.7128, -74.0060)
        b = Coordinates(40.7589, -73.9851)
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))

    def test_one_degree_of_latitude(self):
        a = Coordinates(0.0, 0.0)
        b = Coordinates(1.0, 0.0)
        assert haversine_km(a, b) == pytest.approx(6371.0 * math.pi / 180, rel=1e-9)

    def test_scenario_one_distance_is_about_fourteen_meters(self):
        a = Coordinates(40.7128, -74.0060)
        b = Coordinates(40.7129, -74.0061)
        assert haversine_km(a, b) == pytest.approx(0.01395, abs=0.0002)

    def test_antipodes(self):
        a = Coordinates(0.0, 0.0)
        b = Coordinates(0.0, 180.0)
        assert haversine_km(a, b) == pytest.approx(math.pi * 6371.0)


class TestCoordinatesValue:
    def test_out_of_range_latitude_raises(self):
        with pytest.raises(ValueError):
            Coordinates(90.5, 0.0)

    def test_out_of_range_longitude_raises(self):
        with pytest.raises(ValueError):
            Coordinates(0.0, -180.1)

    def test_try_create_returns_none_out_of_range(self):
        assert Coordinates.try_create(91, 0) is None
        assert Coordinates.try_create(45, 45) == Coordinates(45.0, 45.0)


class TestParserStrategies:
    """Each strategy in the chain recognises its own format."""

    def _parser(self, name):
        return next(p for p in DEFAULT_PARSERS if p.name == name)

    def test_chain_order(self):
        assert [p.name for p in DEFAULT_PARSERS] == [
            "lat_lng_pair",
            "lat_lng_labels",
            "latitude_longitude_labels",
            "parenthesized_pair",
        ]

    def test_lat_lng_pair(self):
        assert self._parser("lat_lng_pair").parse("40.7128,-74.0060") == Coordinates(40.7128, -74.006)

    def test_lat_lng_pair_with_space(self):
        assert self._parser("lat_lng_pair").parse("40.7128, -74.0060") == Coordinates(40.7128, -74.006)

    def test_lat_lng_labels(self):
        parser = self._parser("lat_lng_labels")
        assert parser.parse("LAT: 12.5, Lng: 77.25") == Coordinates(12.5, 77.25)
        assert parser.parse("lat: 12.5 lng: 77.25") == Coordinates(12.5, 77.25)

    def test_latitude_longitude_labels(self):
        parser = self._parser("latitude_longitude_labels")
        assert parser.parse("Latitude: -33.86, Longitude: 151.2") == Coordinates(-33.86, 151.2)
        assert self._parser("lat_lng_labels").parse("Latitude: -33.86, Longitude: 151.2") is None

    def test_parenthesized_pair(self):
        assert self._parser("parenthesized_pair").parse("near (51.5, -0.12)") == Coordinates(51.5, -0.12)

    def test_parser_rejects_out_of_range(self):
        assert self._parser("lat_lng_pair").parse("123.0,45.0") is None

    def test_custom_parser(self):
        parser = CoordinateParser("semicolon", r"(-?\d+\.?\d*);(-?\d+\.?\d*)")
        assert extract_coordinates("10.5;20.25", parsers=[parser]) == Coordinates(10.5, 20.25)


class TestExtractCoordinates:
    @pytest.mark.parametrize("location", [None, "", "Main Street, Downtown", "Park Avenue"])
    def test_no_coordinates(self, location):
        assert extract_coordinates(location) is None

    def test_non_string_returns_none(self):
        assert extract_coordinates(12345) is None

    def test_out_of_bounds_returns_none(self):
        assert extract_coordinates("95.0,200.0") is None

    def test_out_of_range_match_falls_through_to_later_parser(self):
        # First pair is out of range; the labelled pair later in the text is valid.
        text = "grid 500,600 lat: 10.0, lng: 20.0"
        assert extract_coordinates(text) == Coordinates(10.0, 20.0)

    def test_address_with_embedded_pair(self):
        assert extract_coordinates("Main St (40.71, -74.0)") == Coordinates(40.71, -74.0)

    @pytest.mark.parametrize(
        "coords",
        [
            Coordinates(40.7128, -74.0060),
            Coordinates(-33.8688, 151.2093),
            Coordinates(0.0, 0.0),
            Coordinates(89.999999, -179.999999),
            Coordinates(0.00001, -0.00001),
        ],
    )
    def test_canonical_format_is_re_extracted(self, coords):
        first = extract_coordinates(format_coordinates(coords))
        assert first.lat == pytest.approx(coords.lat, abs=1e-6)
        assert first.lng == pytest.approx(coords.lng, abs=1e-6)
        assert extract_coordinates(format_coordinates(first)) == first
