"""Great-circle distance and coordinate extraction from free-form locations.

Stored issues keep their location as text. Most of it was produced by the
location picker (``"40.7128,-74.006"``), but older or hand-typed reports use
other shapes. ``extract_coordinates`` runs an ordered chain of independent
parsers and returns the first in-range pair, or ``None``.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Sequence

from civic_dedup.models import Coordinates

EARTH_RADIUS_KM = 6371.0

_NUMBER = r"(-?\d+\.?\d*)"


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Distance in kilometers between two points on a spherical Earth."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class CoordinateParser:
    """One location format, recognised by a regular expression.

    The pattern must capture latitude then longitude as groups 1 and 2.
    """

    def __init__(self, name: str, pattern: str, flags: int = 0):
        self.name = name
        self.regex = re.compile(pattern, flags)

    def parse(self, text: str) -> Optional[Coordinates]:
        match = self.regex.search(text)
        if not match:
            return None
        try:
            lat = float(match.group(1))
            lng = float(match.group(2))
        except ValueError:
            return None
        return Coordinates.try_create(lat, lng)

    def __repr__(self) -> str:
        return f"CoordinateParser({self.name!r})"


DEFAULT_PARSERS: Sequence[CoordinateParser] = (
    CoordinateParser("lat_lng_pair", _NUMBER + r",\s*" + _NUMBER),
    CoordinateParser("lat_lng_labels", r"lat:\s*" + _NUMBER + r",?\s*lng:\s*" + _NUMBER, re.IGNORECASE),
    CoordinateParser("latitude_longitude_labels",
                     r"latitude:\s*" + _NUMBER + r",?\s*longitude:\s*" + _NUMBER, re.IGNORECASE),
    CoordinateParser("parenthesized_pair", r"\(" + _NUMBER + r",\s*" + _NUMBER + r"\)"),
)


def extract_coordinates(
    location: Optional[str],
    parsers: Sequence[CoordinateParser] = DEFAULT_PARSERS,
) -> Optional[Coordinates]:
    """Parse a location string into coordinates.

    Parsers are tried in order. A parser that matches but yields an
    out-of-range pair does not stop the chain.

    Returns:
        The first valid ``Coordinates``, or ``None``. Never raises.
    """
    if not location or not isinstance(location, str):
        return None
    for parser in parsers:
        coords = parser.parse(location)
        if coords is not None:
            return coords
    return None


def format_coordinates(coords: Coordinates) -> str:
    """Canonical ``"lat,lng"`` text that ``extract_coordinates`` reads back."""
    return f"{coords.lat:.6f},{coords.lng:.6f}"
