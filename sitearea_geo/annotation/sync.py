"""
Annotation Sync Module
======================

Reconciles drawing-layer events (create / edit / delete) with the
GeoPoint store and the working ring.

Design:
- One event is handled to completion before the next (no overlap)
- Derived state (ring, area) rebuilt from scratch after every event
- Shapes validated up front; a rejected event leaves the store untouched
- Correlation misses are silent no-ops (coordinate jitter must not crash)
- Drawing-layer handles bound to point_id when the layer provides them,
  exact coordinate match otherwise
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sitearea_geo.annotation.store import GeoPointStore
from sitearea_geo.geometry.area import AreaCalculator, AreaMeasurement
from sitearea_geo.geometry.points import GeoPoint, validate_coordinate
from sitearea_geo.geometry.ring import Ring, RingBuilder, RingMode

logger = logging.getLogger(__name__)


class ShapeKind(str, Enum):
    """Point-shaped vs area-shaped drawing-layer geometry."""
    MARKER = "marker"
    POLYGON = "polygon"


class DrawEventType(str, Enum):
    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


class SyncState(str, Enum):
    """Momentary controller state; back to IDLE once an event is handled."""
    IDLE = "idle"
    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


@dataclass(frozen=True)
class DrawnShape:
    """
    One shape reported by the drawing layer.

    Attributes:
        kind: MARKER (one coordinate) or POLYGON (vertex list)
        coordinates: Current (lat, lon) vertices
        previous: Marker position before an edit, used for correlation
        handle: Drawing-layer identifier, if the layer exposes one

    Invariants:
        - MARKER has exactly one coordinate
    """

    kind: ShapeKind
    coordinates: Tuple[Tuple[float, float], ...]
    previous: Optional[Tuple[float, float]] = None
    handle: Optional[str] = None

    def __post_init__(self):
        """Validate invariants."""
        object.__setattr__(
            self, "coordinates", tuple(tuple(c) for c in self.coordinates)
        )
        if self.kind == ShapeKind.MARKER and len(self.coordinates) != 1:
            raise ValueError(
                f"Marker shapes must have exactly 1 coordinate, got {len(self.coordinates)}"
            )
        if self.previous is not None:
            object.__setattr__(self, "previous", tuple(self.previous))

    @classmethod
    def marker(
        cls,
        lat: float,
        lon: float,
        previous: Optional[Tuple[float, float]] = None,
        handle: Optional[str] = None,
    ) -> "DrawnShape":
        return cls(ShapeKind.MARKER, ((lat, lon),), previous=previous, handle=handle)

    @classmethod
    def polygon(
        cls,
        vertices: Sequence[Tuple[float, float]],
        handle: Optional[str] = None,
    ) -> "DrawnShape":
        return cls(ShapeKind.POLYGON, tuple(vertices), handle=handle)

    @property
    def position(self) -> Tuple[float, float]:
        """Marker position (first coordinate)."""
        return self.coordinates[0]

    @property
    def match_coordinate(self) -> Tuple[float, float]:
        """Coordinate used to find the stored point."""
        return self.previous if self.previous is not None else self.position


@dataclass(frozen=True)
class DrawEvent:
    event_type: DrawEventType
    shapes: Tuple[DrawnShape, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "shapes", tuple(self.shapes))


@dataclass(frozen=True)
class AnnotationSnapshot:
    """
    Renderer-facing view after an event.

    Attributes:
        points: Points in compass order
        ring: Working ring (not closed)
        mode: Source of the ring
        measurement: Area of the closed ring
    """

    points: Tuple[GeoPoint, ...]
    ring: Tuple[Tuple[float, float], ...]
    mode: RingMode
    measurement: AreaMeasurement


SnapshotListener = Callable[[AnnotationSnapshot], None]


class AnnotationSyncController:
    """
    Applies drawing-layer events to the store and the ring.

    Policy per event kind:
    - CREATED marker: append point<N>, ring regenerated from points
    - CREATED polygon: ring := drawn vertices, store untouched
    - EDITED marker: overwrite matched point, ring regenerated afterwards
      (point-derived ring wins over a polygon edit in the same event)
    - EDITED polygon: ring := edited vertices
    - DELETED marker: remove matched point, ring regenerated
    - DELETED polygon: ring := [], store untouched

    With sticky_manual_ring=True a ring that came from a drawn polygon is
    kept until rebind_ring() is called.

    Usage:
        controller = AnnotationSyncController(store)
        snapshot = controller.handle(
            DrawEvent(DrawEventType.CREATED, [DrawnShape.marker(10.0, 10.0)])
        )
        print(snapshot.measurement.format())
    """

    def __init__(
        self,
        store: Optional[GeoPointStore] = None,
        sticky_manual_ring: bool = False,
        order_table: Optional[Dict[str, int]] = None,
    ):
        self.store = store if store is not None else GeoPointStore()
        self.sticky_manual_ring = sticky_manual_ring
        self.order_table = order_table

        self._state = SyncState.IDLE
        self._mode = RingMode.DERIVED_FROM_POINTS
        self._ring: Ring = RingBuilder.from_points(self.sorted_points())

        # drawing-layer handle -> point_id
        self._handles: Dict[str, str] = {}
        self._listeners: List[SnapshotListener] = []

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def mode(self) -> RingMode:
        return self._mode

    @property
    def ring(self) -> Ring:
        return list(self._ring)

    def sorted_points(self) -> List[GeoPoint]:
        return self.store.sorted_view(self.order_table)

    def measurement(self) -> AreaMeasurement:
        return AreaCalculator.measure(self._ring)

    def snapshot(self) -> AnnotationSnapshot:
        return AnnotationSnapshot(
            points=tuple(self.sorted_points()),
            ring=tuple(self._ring),
            mode=self._mode,
            measurement=self.measurement(),
        )

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callback invoked with the snapshot after each change."""
        self._listeners.append(listener)

    def _publish(self) -> AnnotationSnapshot:
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)
        return snapshot

    # ===== Ring sources =====

    def _regenerate_from_points(self) -> None:
        if self.sticky_manual_ring and self._mode == RingMode.MANUALLY_EDITED:
            logger.debug("Ring is manually edited; point-derived ring not applied")
            return
        self._ring = RingBuilder.from_points(self.sorted_points())
        self._mode = RingMode.DERIVED_FROM_POINTS

    def _replace_ring(self, vertices) -> None:
        self._ring = RingBuilder.replace_from_polygon_edit(vertices)
        self._mode = RingMode.MANUALLY_EDITED

    def rebind_ring(self) -> AnnotationSnapshot:
        """Make the ring follow the points again."""
        self._ring = RingBuilder.from_points(self.sorted_points())
        self._mode = RingMode.DERIVED_FROM_POINTS
        return self._publish()

    # ===== Correlation =====

    def _locate(self, shape: DrawnShape) -> Optional[GeoPoint]:
        if shape.handle is not None and shape.handle in self._handles:
            point = self.store.find_by_id(self._handles[shape.handle])
            if point is not None:
                return point
        lat, lon = shape.match_coordinate
        return self.store.find_by_coordinate(lat, lon)

    @staticmethod
    def _check_shapes(shapes: Sequence[DrawnShape]) -> None:
        """
        Raises:
            ValueError: If any shape carries a vertex outside WGS84 bounds
        """
        for shape in shapes:
            for lat, lon in RingBuilder.replace_from_polygon_edit(shape.coordinates):
                validate_coordinate(lat, lon)

    # ===== Event handlers =====

    def handle(self, event: DrawEvent) -> AnnotationSnapshot:
        """Dispatch a drawing-layer event by type."""
        if event.event_type == DrawEventType.CREATED:
            return self.handle_created(event.shapes)
        elif event.event_type == DrawEventType.EDITED:
            return self.handle_edited(event.shapes)
        elif event.event_type == DrawEventType.DELETED:
            return self.handle_deleted(event.shapes)
        raise ValueError(f"Unknown draw event type: {event.event_type}")

    def handle_created(self, shapes: Sequence[DrawnShape]) -> AnnotationSnapshot:
        self._check_shapes(shapes)
        self._state = SyncState.CREATED
        try:
            for shape in shapes:
                if shape.kind == ShapeKind.MARKER:
                    lat, lon = shape.position
                    point = self.store.append(
                        GeoPoint(name=self.store.next_generated_name(), lat=lat, lon=lon)
                    )
                    if shape.handle is not None:
                        self._handles[shape.handle] = point.point_id
                    logger.debug(f"Created {point.name} at ({lat}, {lon})")
                    self._regenerate_from_points()
                else:
                    self._replace_ring(shape.coordinates)
            return self._publish()
        finally:
            self._state = SyncState.IDLE

    def handle_edited(self, shapes: Sequence[DrawnShape]) -> AnnotationSnapshot:
        self._check_shapes(shapes)
        self._state = SyncState.EDITED
        try:
            markers_changed = False
            for shape in shapes:
                if shape.kind == ShapeKind.MARKER:
                    point = self._locate(shape)
                    if point is None:
                        logger.debug(
                            f"No point matches edited marker at {shape.match_coordinate}; ignored"
                        )
                        continue
                    lat, lon = shape.position
                    self.store.update_by_id(point.point_id, lat, lon)
                    markers_changed = True
                else:
                    self._replace_ring(shape.coordinates)

            if markers_changed:
                self._regenerate_from_points()
            return self._publish()
        finally:
            self._state = SyncState.IDLE

    def handle_deleted(self, shapes: Sequence[DrawnShape]) -> AnnotationSnapshot:
        self._state = SyncState.DELETED
        try:
            markers_changed = False
            for shape in shapes:
                if shape.kind == ShapeKind.MARKER:
                    point = self._locate(shape)
                    if point is None:
                        logger.debug(
                            f"No point matches deleted marker at {shape.match_coordinate}; ignored"
                        )
                        continue
                    self.store.remove_by_id(point.point_id)
                    self._unbind(point.point_id)
                    markers_changed = True
                else:
                    self._ring = []
                    self._mode = RingMode.MANUALLY_EDITED

            if markers_changed:
                self._regenerate_from_points()
            return self._publish()
        finally:
            self._state = SyncState.IDLE

    def _unbind(self, point_id: str) -> None:
        for handle in [h for h, pid in self._handles.items() if pid == point_id]:
            del self._handles[handle]

    # ===== Capture path =====

    def add_captured_point(self, direction: str, lat: float, lon: float) -> AnnotationSnapshot:
        """Append a point recorded by the camera for a compass direction."""
        self.store.append(GeoPoint(name=direction, lat=lat, lon=lon))
        self._regenerate_from_points()
        return self._publish()

    def reset(self) -> AnnotationSnapshot:
        """Drop all points, handles and the ring."""
        self.store.clear()
        self._handles.clear()
        self._ring = []
        self._mode = RingMode.DERIVED_FROM_POINTS
        return self._publish()
