"""
SiteArea MQTT Schemas
=====================

Bounded Context: Data Structures

Immutable, typed message structures for MQTT.

Design:
- Frozen dataclasses (immutability)
- to_dict() for JSON serialization, from_dict() for deserialization
- Schema versioning for evolution

Public API
----------
    Timestamp: ISO 8601 timestamp wrapper
    DrawEventMessage: Drawing-layer create / edit / delete event
    CaptureMessage: Camera capture record
    AnnotationMessage: Points, ring and area for the renderer
"""

from .common import SCHEMA_VERSION, Timestamp, parse_coordinate
from .draw_event import DrawEventMessage, shape_from_dict, shape_to_dict
from .capture import CaptureMessage
from .annotation import AnnotationMessage

__all__ = [
    'SCHEMA_VERSION',
    'Timestamp',
    'parse_coordinate',
    'DrawEventMessage',
    'shape_from_dict',
    'shape_to_dict',
    'CaptureMessage',
    'AnnotationMessage',
]
