"""
Capture Session Module
======================

Per-direction photo capture with geotagging.

Design:
- Device access through injected ports (Camera, Geolocator)
- In-progress flag rejects re-entrant capture requests
- A capture is never dropped on geolocation failure: the image is kept
  with null coordinates, only the point is not created
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sitearea_geo.annotation.sync import AnnotationSyncController
from sitearea_geo.capture.ports import Camera, DeviceEnumerator, Geolocator, VideoDevice
from sitearea_geo.geometry.points import CANONICAL_DIRECTIONS, is_canonical

logger = logging.getLogger(__name__)

# Map view needs at least a triangle
MIN_POINTS_FOR_MAP = 3


@dataclass(frozen=True)
class CapturedImage:
    """
    Image taken for one direction.

    Attributes:
        direction: Canonical direction
        image: Encoded frame (opaque)
        lat: Latitude, None if geolocation failed
        lon: Longitude, None if geolocation failed
    """

    direction: str
    image: bytes
    lat: Optional[float] = None
    lon: Optional[float] = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lon is not None


class CameraSelector:
    """
    Picks a video input and cycles through the others.

    Preference: label containing "back", then "front", then the first device.
    """

    def __init__(self, devices: List[VideoDevice]):
        self.devices = [d for d in devices if d.kind == "videoinput"]
        self.selected_id: Optional[str] = self._preferred_id()

    @classmethod
    def from_enumerator(cls, enumerator: DeviceEnumerator) -> "CameraSelector":
        return cls(enumerator.enumerate_devices())

    def _find_label(self, needle: str) -> Optional[VideoDevice]:
        for device in self.devices:
            if needle in device.label.lower():
                return device
        return None

    def _preferred_id(self) -> Optional[str]:
        preferred = (
            self._find_label("back")
            or self._find_label("front")
            or (self.devices[0] if self.devices else None)
        )
        return preferred.device_id if preferred else None

    def switch(self) -> Optional[str]:
        """Select the next device (wraps around)."""
        if not self.devices:
            return None
        ids = [d.device_id for d in self.devices]
        current = ids.index(self.selected_id) if self.selected_id in ids else -1
        self.selected_id = ids[(current + 1) % len(ids)]
        return self.selected_id


class CaptureSession:
    """
    Drives the eight-direction capture flow.

    Usage:
        session = CaptureSession(controller, camera, geolocator)
        session.open_direction("north")
        session.capture()
        if session.can_view_map():
            ...
    """

    def __init__(
        self,
        controller: AnnotationSyncController,
        camera: Optional[Camera],
        geolocator: Geolocator,
        high_accuracy: bool = True,
    ):
        self.controller = controller
        self.camera = camera
        self.geolocator = geolocator
        self.high_accuracy = high_accuracy

        self.images: Dict[str, CapturedImage] = {}
        self.current_direction: Optional[str] = None
        self.camera_open = False
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def open_direction(self, direction: str) -> None:
        """
        Open the camera for a direction.

        Raises:
            ValueError: If direction is not canonical or already captured
        """
        if not is_canonical(direction):
            raise ValueError(
                f"Invalid direction: {direction}. Must be one of {CANONICAL_DIRECTIONS}"
            )
        if direction in self.images:
            raise ValueError(f"Direction '{direction}' already captured")
        self.current_direction = direction
        self.camera_open = True

    def pending_directions(self) -> List[str]:
        return [d for d in CANONICAL_DIRECTIONS if d not in self.images]

    def can_view_map(self) -> bool:
        return len(self.controller.store) >= MIN_POINTS_FOR_MAP

    def capture(self) -> bool:
        """
        Grab a frame and geotag it.

        Returns:
            True if a geolocation request was issued, False if the attempt
            was rejected (already capturing) or aborted (no frame)
        """
        if self._in_progress:
            return False

        self._in_progress = True

        if self.camera is None:
            logger.error("Camera reference not available")
            self._in_progress = False
            return False

        if self.current_direction is None:
            logger.error("No direction selected for capture")
            self._in_progress = False
            return False

        image = self.camera.get_screenshot()
        if not image:
            logger.error("Failed to capture image")
            self._in_progress = False
            return False

        direction = self.current_direction

        def on_success(lat: float, lon: float) -> None:
            try:
                self.controller.add_captured_point(direction, lat, lon)
            except ValueError as e:
                # an unusable fix is kept like a failed one
                on_error(e)
                return
            try:
                self.images[direction] = CapturedImage(direction, image, lat, lon)
            finally:
                self._finish()

        def on_error(error: Exception) -> None:
            try:
                logger.error(f"Error getting location: {error}")
                self.images[direction] = CapturedImage(direction, image, None, None)
            finally:
                self._finish()

        try:
            self.geolocator.get_current_position(
                on_success, on_error, high_accuracy=self.high_accuracy
            )
        except Exception:
            self._finish()
            raise
        return True

    def _finish(self) -> None:
        self.camera_open = False
        self.current_direction = None
        self._in_progress = False
