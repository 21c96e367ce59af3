"""
Draw Event Message Schema
=========================

Bounded Context: Drawing-layer Data Structures

Schema for create / edit / delete events sent by the map drawing toolkit.

Message Flow:
    Drawing toolkit → DrawEventMessage → MQTT → Subscriber → AnnotationSyncController

Wire format:
    {
        "schema_version": "1.0",
        "timestamp": "2026-10-19T15:30:45+00:00",
        "event_type": "edited",
        "shapes": [
            {"kind": "marker", "coordinates": [[48.85, 2.29]],
             "previous": [48.84, 2.29], "handle": "leaflet_41"},
            {"kind": "polygon", "coordinates": [[48.85, 2.29], [48.86, 2.30], [48.84, 2.31]]}
        ]
    }
"""

from dataclasses import dataclass
from typing import Any, Dict

from sitearea_geo.annotation.sync import DrawEvent, DrawEventType, DrawnShape, ShapeKind
from sitearea_geo.geometry.points import validate_coordinate
from .common import SCHEMA_VERSION, Timestamp, parse_coordinate


def shape_to_dict(shape: DrawnShape) -> Dict[str, Any]:
    """Serialize a DrawnShape to a JSON-compatible dict."""
    result: Dict[str, Any] = {
        'kind': shape.kind.value,
        'coordinates': [list(c) for c in shape.coordinates],
    }
    if shape.previous is not None:
        result['previous'] = list(shape.previous)
    if shape.handle is not None:
        result['handle'] = shape.handle
    return result


def shape_from_dict(data: Dict[str, Any]) -> DrawnShape:
    """
    Deserialize a DrawnShape.

    Raises:
        ValueError: If required keys missing or a coordinate is
            invalid (out of WGS84 bounds included)
    """
    try:
        previous = data.get('previous')
        handle = data.get('handle')
        coordinates = tuple(parse_coordinate(c) for c in data['coordinates'])
        for lat, lon in coordinates:
            validate_coordinate(lat, lon)
        return DrawnShape(
            kind=ShapeKind(data['kind']),
            coordinates=coordinates,
            previous=parse_coordinate(previous) if previous is not None else None,
            handle=str(handle) if handle is not None else None,
        )
    except KeyError as e:
        raise ValueError(f"Missing required shape field: {e}")
    except TypeError as e:
        raise ValueError(f"Invalid shape data: {e}")


@dataclass(frozen=True)
class DrawEventMessage:
    """
    Drawing-layer event with metadata.

    Attributes:
        schema_version: Message schema version (for evolution)
        timestamp: ISO 8601 timestamp of the edit
        event: Core draw event (type + shapes)
    """
    schema_version: str
    timestamp: Timestamp
    event: DrawEvent

    @classmethod
    def create(cls, event: DrawEvent) -> 'DrawEventMessage':
        return cls(schema_version=SCHEMA_VERSION, timestamp=Timestamp.now(), event=event)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'event_type': self.event.event_type.value,
            'shapes': [shape_to_dict(s) for s in self.event.shapes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DrawEventMessage':
        """
        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=data['timestamp']),
                event=DrawEvent(
                    event_type=DrawEventType(data['event_type']),
                    shapes=tuple(shape_from_dict(s) for s in data.get('shapes', [])),
                ),
            )
        except KeyError as e:
            raise ValueError(f"Missing required DrawEventMessage field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid DrawEventMessage data: {e}")

    @property
    def shape_count(self) -> int:
        return len(self.event.shapes)
