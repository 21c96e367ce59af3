"""
Capture Session Tests
=====================

Camera and geolocation replaced by in-memory fakes.

Usage:
    pytest test_capture_session.py
"""

import pytest

from sitearea_geo import (
    AnnotationSyncController,
    CameraSelector,
    CaptureSession,
)
from sitearea_geo.capture.ports import VideoDevice


class FakeCamera:
    def __init__(self, frame=b"jpeg-bytes"):
        self.frame = frame
        self.calls = 0

    def get_screenshot(self):
        self.calls += 1
        return self.frame


class DeferredGeolocator:
    """Holds callbacks until the test resolves them."""

    def __init__(self):
        self.pending = []
        self.high_accuracy = None

    def get_current_position(self, on_success, on_error, high_accuracy=True):
        self.high_accuracy = high_accuracy
        self.pending.append((on_success, on_error))

    def succeed(self, lat, lon):
        on_success, _ = self.pending.pop(0)
        on_success(lat, lon)

    def fail(self, error):
        _, on_error = self.pending.pop(0)
        on_error(error)


def make_session(camera=None, geolocator=None):
    controller = AnnotationSyncController()
    session = CaptureSession(
        controller,
        camera if camera is not None else FakeCamera(),
        geolocator if geolocator is not None else DeferredGeolocator(),
    )
    return controller, session


def test_successful_capture_adds_point():
    geolocator = DeferredGeolocator()
    controller, session = make_session(geolocator=geolocator)

    session.open_direction("north")
    assert session.capture()
    assert session.in_progress

    geolocator.succeed(48.8584, 2.2945)

    image = session.images["north"]
    assert image.has_location
    assert image.image == b"jpeg-bytes"
    assert controller.store.find_by_name("north").coordinate == (48.8584, 2.2945)
    assert not session.in_progress
    assert not session.camera_open
    assert session.current_direction is None
    assert geolocator.high_accuracy is True


def test_reentrant_capture_is_rejected():
    camera = FakeCamera()
    geolocator = DeferredGeolocator()
    _, session = make_session(camera, geolocator)

    session.open_direction("east")
    assert session.capture()
    assert not session.capture()

    assert camera.calls == 1
    assert len(geolocator.pending) == 1


def test_geolocation_failure_keeps_image_without_point(caplog):
    geolocator = DeferredGeolocator()
    controller, session = make_session(geolocator=geolocator)

    session.open_direction("south")
    session.capture()
    geolocator.fail(RuntimeError("permission denied"))

    image = session.images["south"]
    assert image.lat is None and image.lon is None
    assert not image.has_location
    assert len(controller.store) == 0
    assert not session.in_progress
    assert "Error getting location" in caplog.text


def test_out_of_range_fix_is_kept_without_point():
    geolocator = DeferredGeolocator()
    controller, session = make_session(geolocator=geolocator)

    session.open_direction("north")
    session.capture()
    geolocator.succeed(95.0, 0.0)

    assert not session.in_progress
    assert not session.images["north"].has_location
    assert len(controller.store) == 0

    # next attempt is not blocked
    session.open_direction("east")
    assert session.capture()


def test_geolocator_error_resets_capture_flag():
    class BrokenGeolocator:
        def get_current_position(self, on_success, on_error, high_accuracy=True):
            raise RuntimeError("geolocation unavailable")

    _, session = make_session(geolocator=BrokenGeolocator())
    session.open_direction("north")

    with pytest.raises(RuntimeError):
        session.capture()

    assert not session.in_progress
    assert session.images == {}


def test_missing_screenshot_aborts_attempt():
    geolocator = DeferredGeolocator()
    _, session = make_session(FakeCamera(frame=None), geolocator)

    session.open_direction("west")

    assert not session.capture()
    assert not session.in_progress
    assert session.images == {}
    assert geolocator.pending == []


def test_missing_camera_aborts_attempt():
    controller = AnnotationSyncController()
    session = CaptureSession(controller, None, DeferredGeolocator())
    session.open_direction("west")

    assert not session.capture()
    assert not session.in_progress


def test_open_direction_validation():
    geolocator = DeferredGeolocator()
    _, session = make_session(geolocator=geolocator)

    with pytest.raises(ValueError):
        session.open_direction("up")

    session.open_direction("north")
    session.capture()
    geolocator.succeed(1.0, 1.0)

    with pytest.raises(ValueError):
        session.open_direction("north")


def test_map_available_after_three_points():
    geolocator = DeferredGeolocator()
    _, session = make_session(geolocator=geolocator)

    for direction, coord in [("north", (2.0, 2.0)), ("east", (1.0, 3.0))]:
        session.open_direction(direction)
        session.capture()
        geolocator.succeed(*coord)

    assert not session.can_view_map()

    session.open_direction("south")
    session.capture()
    geolocator.succeed(0.0, 2.0)

    assert session.can_view_map()
    assert "north" not in session.pending_directions()
    assert len(session.pending_directions()) == 5


# ===== CameraSelector =====

def test_camera_preference_back_then_front_then_first():
    devices = [
        VideoDevice("a", "Front Camera"),
        VideoDevice("b", "Back Camera"),
        VideoDevice("c", "USB"),
    ]
    assert CameraSelector(devices).selected_id == "b"

    assert CameraSelector(devices[::2]).selected_id == "a"
    assert CameraSelector([VideoDevice("c", "USB"), VideoDevice("d", "")]).selected_id == "c"
    assert CameraSelector([]).selected_id is None


def test_camera_switch_cycles_devices():
    selector = CameraSelector([
        VideoDevice("a", "Front Camera"),
        VideoDevice("b", "Back Camera"),
        VideoDevice("m", "Mic", kind="audioinput"),
    ])

    assert selector.selected_id == "b"
    assert selector.switch() == "a"
    assert selector.switch() == "b"
