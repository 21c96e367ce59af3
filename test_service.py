"""
Service, Config and Control Plane Tests
=======================================

Broker-free: publishers and MQTT clients are replaced by recording fakes.

Usage:
    pytest test_service.py
"""

import json

import pytest

from sitearea_control import CommandNotAvailableError, CommandRegistry, MQTTControlPlane
from sitearea_geo import DrawEvent, DrawEventType, DrawnShape, RingMode
from sitearea_mqtt.schemas import CaptureMessage, DrawEventMessage
from sitearea_service import (
    AnnotationConfig,
    AnnotationService,
    MapConfig,
    MQTTConfig,
    ServiceConfig,
)
from sitearea_cli.cli import build_command, build_draw_message, build_parser


class RecordingPublisher:
    def __init__(self):
        self.messages = []

    def publish_annotation(self, annotation_msg):
        self.messages.append(annotation_msg)
        return True


class RecordingClient:
    def __init__(self):
        self.published = []

    def publish(self, topic, payload, qos=0, retain=False):
        self.published.append((topic, json.loads(payload), qos, retain))


def make_control_plane():
    plane = MQTTControlPlane(
        broker_host="localhost",
        broker_port=1883,
        command_topic="sitearea/control/test/commands",
        status_topic="sitearea/control/test/status",
        client_id="annotation_test",
    )
    plane.client = RecordingClient()
    return plane


def make_service(sticky=False):
    config = ServiceConfig(
        session_id="test",
        annotation_config=AnnotationConfig(sticky_manual_ring=sticky),
    )
    plane = make_control_plane()
    publisher = RecordingPublisher()
    service = AnnotationService(config, plane, publisher)
    service.setup()
    return service, plane, publisher


def capture(direction, lat=None, lon=None):
    return CaptureMessage.create(direction, lat, lon)


# ===== Config =====

def test_config_from_yaml(tmp_path):
    path = tmp_path / "service.yaml"
    path.write_text(
        "session_id: site_07\n"
        "map_config:\n"
        "  focus_zoom: 17\n"
        "annotation_config:\n"
        "  sticky_manual_ring: true\n"
        "mqtt_config:\n"
        "  broker: mqtt.local\n"
        "  port: 1884\n"
    )

    config = ServiceConfig.from_yaml(path)

    assert config.session_id == "site_07"
    assert config.map_config.focus_zoom == 17
    assert config.map_config.default_zoom == 13
    assert config.annotation_config.sticky_manual_ring is True
    assert config.mqtt_config.port == 1884
    assert config.topics["draw"] == "sitearea/data/draw/site_07"
    assert config.topics["status"] == "sitearea/control/site_07/status"


def test_config_validation():
    with pytest.raises(ValueError):
        ServiceConfig(session_id="")
    with pytest.raises(ValueError):
        ServiceConfig(session_id="a/b")
    with pytest.raises(ValueError):
        MQTTConfig(port=0)
    with pytest.raises(ValueError):
        MQTTConfig(qos=3)
    with pytest.raises(ValueError):
        MapConfig(fly_to_zoom=30)
    with pytest.raises(ValueError):
        ServiceConfig.from_dict({})


# ===== Registry =====

def test_registry_rejects_duplicates_and_unknown_commands():
    registry = CommandRegistry()
    registry.register("status", lambda data: {"ok": True}, "Status")

    with pytest.raises(ValueError):
        registry.register("status", lambda data: None, "Again")
    with pytest.raises(CommandNotAvailableError):
        registry.execute("pause")

    assert registry.execute("status") == {"ok": True}
    assert registry.available_commands == {"status"}
    assert registry.get_help() == {"status": "Status"}


# ===== Service =====

def test_service_registers_commands():
    service, plane, _ = make_service()

    assert plane.command_registry.available_commands == {"select", "rebind_ring", "status", "reset"}


def test_captures_build_the_ring_and_publish():
    service, _, publisher = make_service()

    service.handle_capture_message(capture("east", 1.0, 1.0))
    service.handle_capture_message(capture("north", 2.0, 2.0))

    assert len(publisher.messages) == 2
    last = publisher.messages[-1]
    assert [p.name for p in last.points] == ["north", "east"]
    assert last.ring == [(2.0, 2.0), (1.0, 1.0)]
    assert last.area.square_meters == 0.0
    assert last.session_id == "test"


def test_capture_without_location_is_recorded_only():
    service, _, publisher = make_service()

    assert service.handle_capture_message(capture("south")) is None

    assert "south" in service.captures
    assert len(service.controller.store) == 0
    assert publisher.messages == []


def test_repeated_capture_for_direction_is_ignored():
    service, _, _ = make_service()

    service.handle_capture_message(capture("west", 1.0, 1.0))
    service.handle_capture_message(capture("west", 3.0, 3.0))

    assert service.controller.store.names() == ["west"]
    assert service.controller.store.find_by_name("west").coordinate == (1.0, 1.0)


def test_first_sorted_point_is_initial_focus():
    service, _, _ = make_service()
    for direction, coord in [("east", (1.0, 3.0)), ("north", (2.0, 2.0)), ("south", (0.0, 2.0))]:
        service.handle_capture_message(capture(direction, *coord))

    assert service.selection.active_point == (2.0, 2.0)

    result = service.select_point({"lat": 2.0, "lon": 2.0})

    assert result["recenter_requested"] is True
    assert result["fly_to"] is False
    assert result["zoom"] == 16


def test_selected_focus_is_kept_across_new_points():
    service, _, _ = make_service()
    service.handle_capture_message(capture("east", 1.0, 3.0))
    service.select_point({"lat": 1.0, "lon": 3.0})

    service.handle_capture_message(capture("north", 2.0, 2.0))

    assert service.selection.active_point == (1.0, 3.0)


def test_rejected_edit_leaves_points_and_ring_in_sync():
    service, _, publisher = make_service()
    for direction, coord in [("north", (2.0, 2.0)), ("east", (1.0, 3.0)), ("south", (0.0, 2.0))]:
        service.handle_capture_message(capture(direction, *coord))
    published = len(publisher.messages)

    snapshot = service.handle_draw_message(DrawEventMessage.create(DrawEvent(
        DrawEventType.EDITED,
        [
            DrawnShape.marker(2.5, 2.5, previous=(2.0, 2.0)),
            DrawnShape.marker(95.0, 3.0, previous=(1.0, 3.0)),
        ],
    )))

    assert snapshot is None
    assert service.controller.store.find_by_name("north").coordinate == (2.0, 2.0)
    assert service.controller.ring[0] == (2.0, 2.0)
    assert len(publisher.messages) == published


def test_draw_message_applies_event():
    service, _, publisher = make_service()
    for direction, coord in [("north", (2.0, 2.0)), ("east", (1.0, 3.0)), ("south", (0.0, 2.0))]:
        service.handle_capture_message(capture(direction, *coord))

    snapshot = service.handle_draw_message(DrawEventMessage.create(
        DrawEvent(DrawEventType.CREATED, [DrawnShape.marker(10.0, 10.0)])
    ))

    assert len(snapshot.points) == 4
    assert snapshot.points[-1].name == "point4"
    assert publisher.messages[-1].point_count == 4


def test_commands_through_control_plane():
    service, plane, _ = make_service(sticky=True)
    service.handle_capture_message(capture("north", 2.0, 2.0))
    service.handle_capture_message(capture("east", 1.0, 3.0))
    service.handle_capture_message(capture("south", 0.0, 2.0))
    service.handle_draw_message(DrawEventMessage.create(
        DrawEvent(DrawEventType.EDITED, [DrawnShape.polygon([(5.0, 5.0), (5.0, 6.0), (6.0, 6.0)])])
    ))
    assert service.controller.mode == RingMode.MANUALLY_EDITED

    plane.handle_command({"command": "rebind_ring"})
    plane.handle_command({"command": "select", "lat": 1.0, "lon": 3.0})
    plane.handle_command({"command": "select", "lat": 1.0, "lon": 3.0})
    plane.handle_command({"command": "status"})

    statuses = [payload for _, payload, _, _ in plane.client.published]
    assert [s["status"] for s in statuses] == ["ok", "ok", "ok", "ok"]

    rebind, first_select, second_select, status = statuses
    assert rebind["details"]["result"]["mode"] == "derived_from_points"
    assert first_select["details"]["result"]["fly_to"] is True
    assert second_select["details"]["result"]["recenter_requested"] is True
    assert second_select["details"]["result"]["zoom"] == 16
    assert len(status["details"]["result"]["points"]) == 3
    assert all(retain for _, _, _, retain in plane.client.published)


def test_invalid_commands_report_errors():
    service, plane, _ = make_service()

    plane.handle_command({"command": "pause", "request_id": "r-1"})
    plane.handle_command({"command": "select", "lat": "north"})
    plane.handle_command({"lat": 1.0})

    statuses = [payload for _, payload, _, _ in plane.client.published]
    assert [s["status"] for s in statuses] == ["error", "error", "error"]
    assert statuses[0]["details"]["command"] == "pause"
    assert statuses[0]["details"]["request_id"] == "r-1"
    assert "select" in statuses[0]["details"]["error"]


def test_reset_command_clears_session():
    service, plane, publisher = make_service()
    service.handle_capture_message(capture("north", 2.0, 2.0))
    service.select_point({"lat": 2.0, "lon": 2.0})

    result = service.reset()

    assert result["points"] == []
    assert result["active_point"] is None
    assert result["zoom"] == 13
    assert service.captures == {}
    assert publisher.messages[-1].point_count == 0


# ===== CLI payloads =====

def test_cli_builds_command_payloads():
    parser = build_parser()

    assert build_command(parser.parse_args(["select", "2.5", "3.5"])) == \
        {"command": "select", "lat": 2.5, "lon": 3.5}
    assert build_command(parser.parse_args(["rebind-ring"])) == {"command": "rebind_ring"}
    assert build_command(parser.parse_args(["--session-id", "x", "status"])) == {"command": "status"}


def test_cli_builds_draw_message():
    message = build_draw_message({
        "event_type": "created",
        "shapes": [{"kind": "marker", "coordinates": [[10.0, 10.0]], "handle": "m1"}],
    })

    assert message.event.event_type == DrawEventType.CREATED
    assert message.event.shapes[0].handle == "m1"

    with pytest.raises(ValueError):
        build_draw_message({"event_type": "created", "shapes": [{"kind": "circle", "coordinates": []}]})
