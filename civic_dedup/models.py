"""Read-only value types shared by the issue store and the detection engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees.

    Raises:
        ValueError: If either component falls outside its legal range.
    """

    lat: float
    lng: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"longitude out of range: {self.lng}")

    @classmethod
    def try_create(cls, lat: float, lng: float) -> Optional["Coordinates"]:
        """Return coordinates, or ``None`` when the pair is out of bounds."""
        try:
            return cls(float(lat), float(lng))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class IssueSummary:
    """Projection of a stored issue with only the fields scoring needs.

    Attributes:
        id: Issue identifier in the store.
        title: Short title entered by the reporter.
        description: Free-text description.
        location: Free-form location text, often ``"lat,lng"`` or an address.
        image: Reference (URL) of the issue photo, if any.
        category: Category label such as ``"Electricity"``.
        created_at: Creation time, timezone-aware.
        created_by: Identifier of the reporter.
        status: Workflow status (``"reported"``, ``"assigned"``, ``"resolved"``...).
    """

    id: str
    title: str
    description: str
    location: str
    created_at: datetime
    image: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class ReportDraft:
    """A report being submitted, before it is stored."""

    description: str
    location: str = ""
    coordinates: Optional[Coordinates] = None
    image: Optional[bytes] = None
    category: Optional[str] = None
