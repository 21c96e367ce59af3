"""
Annotation Sync Tests
=====================

Drawing-layer events against the store and the ring.

Usage:
    pytest test_annotation_sync.py
"""

import pytest

from sitearea_geo import (
    AnnotationSyncController,
    DrawEvent,
    DrawEventType,
    DrawnShape,
    GeoPoint,
    GeoPointStore,
    RingMode,
    ShapeKind,
    SyncState,
)


def make_controller(sticky: bool = False) -> AnnotationSyncController:
    store = GeoPointStore([
        GeoPoint("north", 2.0, 2.0),
        GeoPoint("east", 1.0, 3.0),
        GeoPoint("south", 0.0, 2.0),
    ])
    return AnnotationSyncController(store, sticky_manual_ring=sticky)


def created(*shapes) -> DrawEvent:
    return DrawEvent(DrawEventType.CREATED, shapes)


def edited(*shapes) -> DrawEvent:
    return DrawEvent(DrawEventType.EDITED, shapes)


def deleted(*shapes) -> DrawEvent:
    return DrawEvent(DrawEventType.DELETED, shapes)


# ===== Create =====

def test_initial_ring_follows_existing_points():
    controller = make_controller()

    assert controller.ring == [(2.0, 2.0), (1.0, 3.0), (0.0, 2.0)]
    assert controller.mode == RingMode.DERIVED_FROM_POINTS
    assert controller.state == SyncState.IDLE


def test_create_marker_appends_generated_point():
    controller = make_controller()

    snapshot = controller.handle(created(DrawnShape.marker(10.0, 10.0)))

    assert len(controller.store) == 4
    assert controller.store.find_by_coordinate(10.0, 10.0).name == "point4"
    assert len(controller.ring) == 4
    assert snapshot.ring[-1] == (10.0, 10.0)
    assert snapshot.measurement.square_meters > 0.0
    assert controller.state == SyncState.IDLE


def test_generated_name_skips_taken_label():
    controller = make_controller()
    controller.handle(created(DrawnShape.marker(10.0, 10.0)))  # point4
    controller.handle(deleted(DrawnShape.marker(2.0, 2.0)))    # 3 points left

    controller.handle(created(DrawnShape.marker(11.0, 11.0)))

    names = controller.store.names()
    assert names.count("point4") == 1
    assert "point5" in names


def test_create_polygon_replaces_ring_only():
    controller = make_controller()
    vertices = [(5.0, 5.0), (5.0, 6.0), (6.0, 6.0)]

    snapshot = controller.handle(created(DrawnShape.polygon(vertices)))

    assert len(controller.store) == 3
    assert list(snapshot.ring) == vertices
    assert snapshot.mode == RingMode.MANUALLY_EDITED


# ===== Edit =====

def test_edit_marker_moves_point_and_regenerates_ring():
    controller = make_controller()

    controller.handle(edited(DrawnShape.marker(2.5, 2.5, previous=(2.0, 2.0))))

    north = controller.store.find_by_name("north")
    assert north.coordinate == (2.5, 2.5)
    assert controller.ring[0] == (2.5, 2.5)


def test_edit_unknown_marker_is_silent_noop():
    controller = make_controller()
    points_before = controller.store.snapshot()
    ring_before = controller.ring

    snapshot = controller.handle(edited(DrawnShape.marker(5.0, 5.0)))

    assert controller.store.snapshot() == points_before
    assert controller.ring == ring_before
    assert list(snapshot.ring) == ring_before
    assert controller.state == SyncState.IDLE


def test_edit_miss_keeps_manual_ring():
    controller = make_controller()
    manual = [(5.0, 5.0), (5.0, 6.0), (6.0, 6.0)]
    controller.handle(created(DrawnShape.polygon(manual)))

    controller.handle(edited(DrawnShape.marker(7.0, 7.0)))

    assert controller.ring == manual
    assert controller.mode == RingMode.MANUALLY_EDITED


def test_edit_polygon_replaces_ring():
    controller = make_controller()
    edited_ring = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]

    controller.handle(edited(DrawnShape.polygon(edited_ring)))

    assert controller.ring == edited_ring
    assert controller.mode == RingMode.MANUALLY_EDITED


def test_edit_marker_and_polygon_in_same_event_points_win():
    controller = make_controller()

    controller.handle(edited(
        DrawnShape.polygon([(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]),
        DrawnShape.marker(2.5, 2.5, previous=(2.0, 2.0)),
    ))

    assert controller.ring == [(2.5, 2.5), (1.0, 3.0), (0.0, 2.0)]
    assert controller.mode == RingMode.DERIVED_FROM_POINTS


def test_handle_binding_survives_coordinate_drift():
    controller = make_controller()
    controller.handle(created(DrawnShape.marker(10.0, 10.0, handle="m1")))

    # Drawing layer reports a drifted "previous" position; the handle still binds
    controller.handle(edited(DrawnShape.marker(10.5, 10.5, previous=(10.0000001, 10.0), handle="m1")))

    point = controller.store.find_by_name("point4")
    assert point.coordinate == (10.5, 10.5)

    controller.handle(deleted(DrawnShape.marker(0.5, 0.5, handle="m1")))
    assert controller.store.find_by_name("point4") is None


# ===== Delete =====

def test_delete_marker_removes_point():
    controller = make_controller()

    controller.handle(deleted(DrawnShape.marker(1.0, 3.0)))

    assert controller.store.names() == ["north", "south"]
    assert controller.ring == [(2.0, 2.0), (0.0, 2.0)]
    assert controller.measurement().square_meters == 0.0


def test_delete_polygon_clears_ring_keeps_points():
    controller = make_controller()

    snapshot = controller.handle(deleted(DrawnShape.polygon([(2.0, 2.0), (1.0, 3.0), (0.0, 2.0)])))

    assert controller.ring == []
    assert snapshot.measurement.square_meters == 0.0
    assert len(controller.store) == 3


def test_delete_unknown_marker_is_silent_noop():
    controller = make_controller()

    controller.handle(deleted(DrawnShape.marker(5.0, 5.0)))

    assert len(controller.store) == 3
    assert len(controller.ring) == 3


# ===== Ring source policy =====

def test_last_writer_wins_by_default():
    controller = make_controller()
    controller.handle(created(DrawnShape.polygon([(5.0, 5.0), (5.0, 6.0), (6.0, 6.0)])))

    controller.handle(created(DrawnShape.marker(10.0, 10.0)))

    assert controller.mode == RingMode.DERIVED_FROM_POINTS
    assert len(controller.ring) == 4


def test_sticky_manual_ring_requires_rebind():
    controller = make_controller(sticky=True)
    manual = [(5.0, 5.0), (5.0, 6.0), (6.0, 6.0)]
    controller.handle(created(DrawnShape.polygon(manual)))

    controller.handle(created(DrawnShape.marker(10.0, 10.0)))
    assert controller.ring == manual

    controller.rebind_ring()
    assert controller.mode == RingMode.DERIVED_FROM_POINTS
    assert len(controller.ring) == 4


# ===== Capture path + listeners =====

def test_add_captured_point_and_listeners():
    controller = AnnotationSyncController()
    published = []
    controller.subscribe(published.append)

    controller.add_captured_point("east", 1.0, 1.0)
    controller.add_captured_point("north", 2.0, 2.0)

    assert len(published) == 2
    assert [p.name for p in published[-1].points] == ["north", "east"]
    assert list(published[-1].ring) == [(2.0, 2.0), (1.0, 1.0)]
    assert published[-1].measurement.square_meters == 0.0


def test_reset_drops_everything():
    controller = make_controller()

    snapshot = controller.reset()

    assert snapshot.points == ()
    assert snapshot.ring == ()
    assert len(controller.store) == 0


def test_marker_shape_requires_single_coordinate():
    with pytest.raises(ValueError):
        DrawnShape(ShapeKind.MARKER, ((1.0, 1.0), (2.0, 2.0)))


def test_out_of_range_edit_is_rejected_before_any_change():
    controller = make_controller()
    seen = []
    controller.subscribe(seen.append)

    with pytest.raises(ValueError):
        controller.handle(edited(
            DrawnShape.marker(2.5, 2.5, previous=(2.0, 2.0)),
            DrawnShape.marker(95.0, 3.0, previous=(1.0, 3.0)),
        ))

    assert controller.store.find_by_name("north").coordinate == (2.0, 2.0)
    assert controller.ring == [(2.0, 2.0), (1.0, 3.0), (0.0, 2.0)]
    assert controller.state == SyncState.IDLE
    assert seen == []


def test_out_of_range_create_adds_nothing():
    controller = make_controller()

    with pytest.raises(ValueError):
        controller.handle(created(
            DrawnShape.marker(5.0, 5.0),
            DrawnShape.polygon([(0.0, 0.0), (0.0, 200.0), (1.0, 1.0)]),
        ))

    assert controller.store.names() == ["north", "east", "south"]
    assert controller.mode == RingMode.DERIVED_FROM_POINTS
