"""
Annotation Message Schema
=========================

Bounded Context: Renderer-facing State

What the map renderer needs after every change: sorted points for
markers and the list panel, the ring for the polygon, and the area.

Message Flow:
    AnnotationSyncController → AnnotationSnapshot → AnnotationMessage → MQTT → Renderer
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sitearea_geo.annotation.sync import AnnotationSnapshot
from sitearea_geo.geometry.area import AreaMeasurement
from sitearea_geo.geometry.points import GeoPoint
from sitearea_geo.geometry.ring import RingMode
from .common import SCHEMA_VERSION, Timestamp, parse_coordinate


@dataclass(frozen=True)
class AnnotationMessage:
    """
    Attributes:
        schema_version: Message schema version
        timestamp: ISO 8601 timestamp of message creation
        session_id: Annotation session identifier
        points: Points in compass order
        ring: Working ring (not closed)
        mode: Source of the ring
        area: Area of the closed ring
    """
    schema_version: str
    timestamp: Timestamp
    session_id: str
    points: List[GeoPoint] = field(default_factory=list)
    ring: List[Tuple[float, float]] = field(default_factory=list)
    mode: RingMode = RingMode.DERIVED_FROM_POINTS
    area: AreaMeasurement = AreaMeasurement(0.0, 0.0)

    def __post_init__(self):
        if not self.session_id:
            raise ValueError("session_id cannot be empty")

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: AnnotationSnapshot) -> 'AnnotationMessage':
        return cls(
            schema_version=SCHEMA_VERSION,
            timestamp=Timestamp.now(),
            session_id=session_id,
            points=list(snapshot.points),
            ring=list(snapshot.ring),
            mode=snapshot.mode,
            area=snapshot.measurement,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'session_id': self.session_id,
            'points': [p.to_dict() for p in self.points],
            'ring': [list(v) for v in self.ring],
            'mode': self.mode.value,
            'area': self.area.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnnotationMessage':
        """
        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            area = data.get('area', {})
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=data['timestamp']),
                session_id=str(data['session_id']),
                points=[
                    GeoPoint(
                        name=str(p['name']),
                        lat=float(p['lat']),
                        lon=float(p['lon']),
                        point_id=str(p['point_id']),
                    )
                    for p in data.get('points', [])
                ],
                ring=[parse_coordinate(v) for v in data.get('ring', [])],
                mode=RingMode(data.get('mode', RingMode.DERIVED_FROM_POINTS.value)),
                area=AreaMeasurement(
                    square_meters=float(area.get('square_meters', 0.0)),
                    square_feet=float(area.get('square_feet', 0.0)),
                ),
            )
        except KeyError as e:
            raise ValueError(f"Missing required AnnotationMessage field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid AnnotationMessage data: {e}")

    @property
    def point_count(self) -> int:
        return len(self.points)

    def get_point_by_name(self, name: str) -> Optional[GeoPoint]:
        for point in self.points:
            if point.name == name:
                return point
        return None
