"""
Annotation Layer
================

Bounded Context: Stateful editing session over the geometry layer.

Responsibilities:
- Own the GeoPoint store (mutable)
- Translate drawing-layer events into store / ring changes
- Track the focused point for camera-follow
"""

from sitearea_geo.annotation.store import GeoPointStore
from sitearea_geo.annotation.sync import (
    AnnotationSnapshot,
    AnnotationSyncController,
    DrawEvent,
    DrawEventType,
    DrawnShape,
    ShapeKind,
    SyncState,
)
from sitearea_geo.annotation.selection import SelectionController, SelectionResult

__all__ = [
    "GeoPointStore",
    "AnnotationSnapshot",
    "AnnotationSyncController",
    "DrawEvent",
    "DrawEventType",
    "DrawnShape",
    "ShapeKind",
    "SyncState",
    "SelectionController",
    "SelectionResult",
]
