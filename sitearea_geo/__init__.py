"""
SiteArea Geo Engine v1.0
========================

Bounded Context: Geo-annotation of a photographed site.

Design Philosophy:
- Separation of Concerns: Geometry, Annotation, Capture separated
- Single source of truth: the GeoPoint store owns every named point
- Derived state (ring, area) rebuilt after every event, never patched
- Soft failure: drawing-layer jitter degrades to no-op, never to a crash

Architecture:

    sitearea_geo/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── points.py      # GeoPoint, compass ordering
    │   ├── ring.py        # RingBuilder, RingMode
    │   └── area.py        # AreaCalculator, AreaMeasurement
    │
    ├── annotation/        # Editing session (stateful)
    │   ├── store.py       # GeoPointStore
    │   ├── sync.py        # AnnotationSyncController, draw events
    │   └── selection.py   # SelectionController
    │
    └── capture/           # Photo capture per direction
        ├── ports.py       # Camera, Geolocator, DeviceEnumerator protocols
        └── session.py     # CaptureSession, CameraSelector

Usage:

    from sitearea_geo import (
        AnnotationSyncController, DrawEvent, DrawEventType, DrawnShape,
    )

    controller = AnnotationSyncController()
    controller.add_captured_point("north", 48.8590, 2.2940)
    controller.add_captured_point("east", 48.8580, 2.2960)
    controller.add_captured_point("south", 48.8570, 2.2940)

    snapshot = controller.handle(
        DrawEvent(DrawEventType.CREATED, [DrawnShape.marker(48.8580, 2.2920)])
    )
    print(snapshot.measurement.format())
"""

# Geometry Layer (immutable, stateless)
from sitearea_geo.geometry import (
    CANONICAL_DIRECTIONS,
    POINT_ORDER,
    AreaCalculator,
    AreaMeasurement,
    GeoPoint,
    RingBuilder,
    RingMode,
    sort_points,
)

# Annotation Layer (stateful)
from sitearea_geo.annotation import (
    AnnotationSnapshot,
    AnnotationSyncController,
    DrawEvent,
    DrawEventType,
    DrawnShape,
    GeoPointStore,
    SelectionController,
    SelectionResult,
    ShapeKind,
    SyncState,
)

# Capture Layer
from sitearea_geo.capture import CameraSelector, CapturedImage, CaptureSession

__all__ = [
    # Geometry
    "CANONICAL_DIRECTIONS",
    "POINT_ORDER",
    "AreaCalculator",
    "AreaMeasurement",
    "GeoPoint",
    "RingBuilder",
    "RingMode",
    "sort_points",
    # Annotation
    "AnnotationSnapshot",
    "AnnotationSyncController",
    "DrawEvent",
    "DrawEventType",
    "DrawnShape",
    "GeoPointStore",
    "SelectionController",
    "SelectionResult",
    "ShapeKind",
    "SyncState",
    # Capture
    "CameraSelector",
    "CapturedImage",
    "CaptureSession",
]

__version__ = "1.0.0"
