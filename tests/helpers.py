"""Geometry helpers shared by the test modules."""

import math

from civic_dedup.models import Coordinates

MAIN_STREET = Coordinates(40.7128, -74.0060)


def offset_north(origin: Coordinates, meters: float) -> Coordinates:
    """Point ``meters`` due north of ``origin`` (exact under the haversine model)."""
    return Coordinates(origin.lat + math.degrees(meters / 1000.0 / 6371.0), origin.lng)


def location_text(coords: Coordinates) -> str:
    return f"{coords.lat!r},{coords.lng!r}"
