"""
Annotation Service - Session orchestrator.

This module provides the AnnotationService class which wires the
annotation core (store, ring, area, selection) to MQTT: draw events and
capture records come in through the subscriber, commands through the
control plane, and every state change goes out as a retained
AnnotationMessage.

Threading Model:
- Subscriber Thread (paho-mqtt internal, draw events + captures)
- Control Plane Thread (paho-mqtt internal, command handlers)
- Main Thread (blocks in wait())

Every handler takes the same lock, so events are applied one at a time
and a handler never observes a half-applied event.
"""

import logging
import threading
from dataclasses import asdict
from typing import Any, Dict, Optional

from sitearea_geo.annotation import (
    AnnotationSnapshot,
    AnnotationSyncController,
    SelectionController,
)
from sitearea_mqtt.schemas import AnnotationMessage, CaptureMessage, DrawEventMessage
from sitearea_service.config import ServiceConfig

logger = logging.getLogger(__name__)


class AnnotationService:
    """
    Annotation session service.

    Commands registered on the control plane:
    - select {lat, lon}: focus a point
    - rebind_ring: make the ring follow the points again
    - status: points, ring, mode, area and focus
    - reset: drop points, ring, captures and focus

    Usage:
        config = ServiceConfig.from_yaml("config/annotation_service.yaml")
        control_plane = MQTTControlPlane(...)
        publisher = AnnotationPublisher(...)
        subscriber = MessageSubscriber(
            ...,
            on_draw_event=lambda msg: service.handle_draw_message(msg),
            on_capture=lambda msg: service.handle_capture_message(msg),
        )

        service = AnnotationService(config, control_plane, publisher, subscriber)
        service.setup()
        service.start()
        service.wait()  # Blocks until stopped
    """

    def __init__(
        self,
        config: ServiceConfig,
        control_plane,  # MQTTControlPlane
        publisher,  # AnnotationPublisher
        subscriber=None,  # MessageSubscriber
    ):
        self.config = config
        self.control_plane = control_plane
        self.publisher = publisher
        self.subscriber = subscriber

        self.controller = AnnotationSyncController(
            sticky_manual_ring=config.annotation_config.sticky_manual_ring,
        )
        self.selection = SelectionController(**config.map_config.zoom_levels())
        self.controller.subscribe(self._seed_focus)
        self.controller.subscribe(self._publish_snapshot)

        # direction -> last capture record
        self.captures: Dict[str, CaptureMessage] = {}
        self._focus_pinned = False

        self._lock = threading.Lock()
        self._running = False
        self._stop_event = threading.Event()

        logger.info(f"AnnotationService initialized for session_id={config.session_id}")

    # ===== Setup =====

    def setup(self) -> None:
        """Register command handlers with the control plane. Must be called before start()."""
        registry = self.control_plane.command_registry

        registry.register("select", self.select_point, "Focus a point (lat, lon)")
        registry.register("rebind_ring", self.rebind_ring, "Rebuild the ring from the points")
        registry.register("status", self.status, "Report points, ring and area")
        registry.register("reset", self.reset, "Drop all points and the ring")

        logger.info("Control handlers registered")

    # ===== Inbound data (Subscriber Thread) =====

    def handle_draw_message(self, draw_msg: DrawEventMessage) -> Optional[AnnotationSnapshot]:
        with self._lock:
            try:
                snapshot = self.controller.handle(draw_msg.event)
            except ValueError as e:
                logger.error(f"❌ Draw event rejected: {e}")
                return None

        logger.info(
            f"✏️ {draw_msg.event.event_type.value} event applied: "
            f"{len(snapshot.points)} points, {snapshot.measurement.square_meters:.2f} m²"
        )
        return snapshot

    def handle_capture_message(self, capture_msg: CaptureMessage) -> Optional[AnnotationSnapshot]:
        """
        Record a capture and add its point when it carries a location.

        A capture without a location is kept as a record only. A second
        located capture for a direction that already has a point is ignored.
        """
        with self._lock:
            self.captures[capture_msg.direction] = capture_msg

            if not capture_msg.has_location:
                logger.warning(
                    f"⚠️ Capture for {capture_msg.direction} has no location; no point added"
                )
                return None

            if self.controller.store.find_by_name(capture_msg.direction) is not None:
                logger.warning(
                    f"⚠️ Point {capture_msg.direction} already exists; capture ignored"
                )
                return None

            snapshot = self.controller.add_captured_point(
                capture_msg.direction, capture_msg.lat, capture_msg.lon
            )

        logger.info(
            f"📷 Captured {capture_msg.direction} at ({capture_msg.lat}, {capture_msg.lon})"
        )
        return snapshot

    # ===== Commands (Control Plane Thread) =====

    def select_point(self, command_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            KeyError: If lat or lon is missing
            ValueError: If lat or lon is not a number
        """
        lat = float(command_data["lat"])
        lon = float(command_data["lon"])

        with self._lock:
            result = self.selection.select(lat, lon)
            self._focus_pinned = True

        if result.fly_to:
            logger.info(f"🎯 Flying to ({lat}, {lon}) at zoom {result.zoom}")
        else:
            logger.info(f"🎯 Recentering on ({lat}, {lon}) at zoom {result.zoom}")
        return asdict(result)

    def rebind_ring(self, command_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with self._lock:
            snapshot = self.controller.rebind_ring()
        logger.info("🔗 Ring rebound to points")
        return self._summary(snapshot)

    def status(self, command_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with self._lock:
            return self._summary(self.controller.snapshot())

    def reset(self, command_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with self._lock:
            snapshot = self.controller.reset()
            self.selection.clear()
            self._focus_pinned = False
            self.captures.clear()
        logger.info("🧹 Session reset")
        return self._summary(snapshot)

    def _summary(self, snapshot: AnnotationSnapshot) -> Dict[str, Any]:
        return {
            "session_id": self.config.session_id,
            "points": [point.to_dict() for point in snapshot.points],
            "ring": [list(vertex) for vertex in snapshot.ring],
            "mode": snapshot.mode.value,
            "area": snapshot.measurement.to_dict(),
            "active_point": self.selection.active_point,
            "zoom": self.selection.zoom,
            "captures": sorted(self.captures),
        }

    def _seed_focus(self, snapshot: AnnotationSnapshot) -> None:
        # focus follows the first point in compass order until a select
        if not self._focus_pinned and snapshot.points:
            self.selection.focus(*snapshot.points[0].coordinate)

    # ===== Outbound =====

    def _publish_snapshot(self, snapshot: AnnotationSnapshot) -> None:
        message = AnnotationMessage.from_snapshot(self.config.session_id, snapshot)
        if not self.publisher.publish_annotation(message):
            logger.warning("⚠️ Annotation snapshot not published")

    # ===== Lifecycle =====

    def start(self) -> None:
        """
        Start the service (non-blocking).

        Lifecycle:
        1. Connect control plane
        2. Connect annotation publisher
        3. Connect subscriber (draw events + captures)
        4. Publish the initial (empty) snapshot
        """
        if self._running:
            logger.warning("Service already running")
            return

        logger.info("Starting annotation service")

        if not self.control_plane.connect(timeout=5.0):
            raise RuntimeError("Failed to connect to MQTT broker (control plane)")

        if not self.publisher.connect():
            raise RuntimeError("Failed to connect to MQTT broker (annotation publisher)")

        if self.subscriber is not None and not self.subscriber.connect():
            raise RuntimeError("Failed to connect to MQTT broker (subscriber)")

        with self._lock:
            self._publish_snapshot(self.controller.snapshot())

        self._running = True
        self._stop_event.clear()
        self.control_plane.publish_status("running")
        logger.info("✅ Annotation service started")

    def wait(self) -> None:
        """Block until stop() is called."""
        if not self._running:
            logger.warning("Service not running")
            return

        try:
            while not self._stop_event.wait(timeout=0.5):
                pass
        except KeyboardInterrupt:
            logger.info("Received KeyboardInterrupt, stopping...")
            self.stop()

    def stop(self) -> None:
        """
        Stop the service gracefully.

        Lifecycle:
        1. Stop subscriber
        2. Disconnect publisher
        3. Disconnect control plane
        """
        if not self._running:
            logger.warning("Service not running")
            return

        logger.info("Stopping annotation service")

        if self.subscriber is not None:
            self.subscriber.stop()

        self.publisher.disconnect()

        self.control_plane.publish_status("stopped")
        self.control_plane.disconnect()

        self._running = False
        self._stop_event.set()
        logger.info("✅ Annotation service stopped")

    @property
    def is_running(self) -> bool:
        return self._running
