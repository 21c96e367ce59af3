"""
Geo Point Module
================

Named WGS84 points and the compass ordering used to lay them out.

Design:
- Immutable points (frozen dataclass pattern)
- Stable point_id survives coordinate edits
- Fixed rank table for the eight canonical directions
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple


CANONICAL_DIRECTIONS: Tuple[str, ...] = (
    "north",
    "north-east",
    "east",
    "south-east",
    "south",
    "south-west",
    "west",
    "north-west",
)

# Clockwise from north
POINT_ORDER: Dict[str, int] = {
    name: rank for rank, name in enumerate(CANONICAL_DIRECTIONS, start=1)
}

GENERATED_NAME_PREFIX = "point"


def is_canonical(name: str) -> bool:
    """True if name is one of the eight compass directions."""
    return name in POINT_ORDER


def validate_coordinate(lat: float, lon: float) -> None:
    """
    Check WGS84 bounds.

    Raises:
        ValueError: If lat is outside [-90, 90] or lon outside [-180, 180]
    """
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"lat must be in [-90, 90], got {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"lon must be in [-180, 180], got {lon}")


def _new_point_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class GeoPoint:
    """
    Immutable named coordinate.

    Attributes:
        name: Canonical direction or generated "point<N>" label
        lat: Latitude in degrees (WGS84)
        lon: Longitude in degrees (WGS84)
        point_id: Opaque identifier, kept across coordinate updates

    Example:
        >>> p = GeoPoint(name="north", lat=48.85, lon=2.35)
        >>> p.coordinate
        (48.85, 2.35)
    """

    name: str
    lat: float
    lon: float
    point_id: str = field(default_factory=_new_point_id, compare=False)

    def __post_init__(self):
        """Validate name and coordinates."""
        if not self.name:
            raise ValueError("GeoPoint name cannot be empty")
        validate_coordinate(self.lat, self.lon)

    @property
    def coordinate(self) -> Tuple[float, float]:
        """(lat, lon) pair."""
        return (self.lat, self.lon)

    @property
    def rank(self) -> Optional[int]:
        """Compass rank (1-8), None for free-drawn points."""
        return POINT_ORDER.get(self.name)

    def matches(self, lat: float, lon: float) -> bool:
        """Exact coordinate equality."""
        return self.lat == lat and self.lon == lon

    def with_coordinates(self, lat: float, lon: float) -> "GeoPoint":
        """Copy with new coordinates; name and point_id are preserved."""
        return replace(self, lat=lat, lon=lon)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "point_id": self.point_id,
        }


def sort_points(
    points: Iterable[GeoPoint],
    order_table: Optional[Dict[str, int]] = None,
) -> List[GeoPoint]:
    """
    Order points by compass rank.

    Names missing from the table sort after every ranked name, keeping
    their insertion order (sorted() is stable).

    Args:
        points: Points in insertion order
        order_table: Rank table (default: POINT_ORDER)

    Returns:
        New list, canonical points first
    """
    table = POINT_ORDER if order_table is None else order_table
    unranked = len(table) + 1
    return sorted(points, key=lambda p: table.get(p.name, unranked))
