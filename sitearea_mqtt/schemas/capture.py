"""
Capture Message Schema
======================

Bounded Context: Camera Capture Records

One record per captured direction. Image bytes travel elsewhere; the
core only needs the direction and the (possibly missing) position.

Message Flow:
    Camera UI → CaptureMessage → MQTT → Subscriber → AnnotationService
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sitearea_geo.geometry.points import CANONICAL_DIRECTIONS, is_canonical
from .common import SCHEMA_VERSION, Timestamp, parse_optional_float


@dataclass(frozen=True)
class CaptureMessage:
    """
    Attributes:
        schema_version: Message schema version
        timestamp: ISO 8601 capture time
        direction: Canonical direction
        lat: Latitude, None when geolocation failed
        lon: Longitude, None when geolocation failed

    Invariants:
        - direction is canonical
        - lat and lon are both set or both None
    """
    schema_version: str
    timestamp: Timestamp
    direction: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    def __post_init__(self):
        """Validate invariants."""
        if not is_canonical(self.direction):
            raise ValueError(
                f"Invalid direction: {self.direction}. Must be one of {CANONICAL_DIRECTIONS}"
            )
        if (self.lat is None) != (self.lon is None):
            raise ValueError("lat and lon must both be set or both be null")

    @classmethod
    def create(
        cls,
        direction: str,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> 'CaptureMessage':
        return cls(SCHEMA_VERSION, Timestamp.now(), direction, lat, lon)

    @property
    def has_location(self) -> bool:
        return self.lat is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'direction': self.direction,
            'lat': self.lat,
            'lon': self.lon,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CaptureMessage':
        """
        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=data['timestamp']),
                direction=str(data['direction']),
                lat=parse_optional_float(data.get('lat')),
                lon=parse_optional_float(data.get('lon')),
            )
        except KeyError as e:
            raise ValueError(f"Missing required CaptureMessage field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid CaptureMessage data: {e}")
