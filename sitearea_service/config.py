"""
Configuration schema for the AnnotationService.

This module defines the configuration structure for the annotation service:
session identity, map zoom levels, ring policy and MQTT topics.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import yaml

from sitearea_geo.annotation.selection import DEFAULT_ZOOM, FOCUS_ZOOM, FLY_TO_ZOOM


MIN_ZOOM = 0
MAX_ZOOM = 22


@dataclass(frozen=True)
class MapConfig:
    """Zoom levels used by the selection controller."""

    default_zoom: int = DEFAULT_ZOOM
    focus_zoom: int = FOCUS_ZOOM
    fly_to_zoom: int = FLY_TO_ZOOM

    def __post_init__(self):
        for name in ("default_zoom", "focus_zoom", "fly_to_zoom"):
            value = getattr(self, name)
            if not MIN_ZOOM <= value <= MAX_ZOOM:
                raise ValueError(
                    f"{name} must be in [{MIN_ZOOM}, {MAX_ZOOM}], got {value}"
                )

    def zoom_levels(self) -> dict:
        """Keyword arguments for SelectionController."""
        return {
            "default_zoom": self.default_zoom,
            "focus_zoom": self.focus_zoom,
            "fly_to_zoom": self.fly_to_zoom,
        }


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""

    broker: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    qos: int = 1

    draw_topic: str = "sitearea/data/draw/{session_id}"
    capture_topic: str = "sitearea/data/captures/{session_id}"
    annotation_topic: str = "sitearea/data/annotation/{session_id}"
    command_topic: str = "sitearea/control/{session_id}/commands"
    status_topic: str = "sitearea/control/{session_id}/status"

    def __post_init__(self):
        """Validate MQTT configuration."""
        if not self.broker:
            raise ValueError("MQTT broker cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ValueError(
                f"MQTT port must be in [1, 65535], got {self.port}"
            )

        if self.qos not in {0, 1, 2}:
            raise ValueError(
                f"MQTT QoS must be 0, 1, or 2, got {self.qos}"
            )

    def topics_for(self, session_id: str) -> dict:
        """Topic templates with {session_id} substituted."""
        return {
            "draw": self.draw_topic.format(session_id=session_id),
            "capture": self.capture_topic.format(session_id=session_id),
            "annotation": self.annotation_topic.format(session_id=session_id),
            "command": self.command_topic.format(session_id=session_id),
            "status": self.status_topic.format(session_id=session_id),
        }


@dataclass(frozen=True)
class AnnotationConfig:
    """
    Ring policy.

    sticky_manual_ring: keep a ring drawn on the map until an explicit
    rebind_ring command, instead of letting the next point change
    regenerate it.
    """

    sticky_manual_ring: bool = False


@dataclass(frozen=True)
class ServiceConfig:
    """
    Main configuration for the AnnotationService.

    Loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    session_id: str
    map_config: MapConfig = field(default_factory=MapConfig)
    mqtt_config: MQTTConfig = field(default_factory=MQTTConfig)
    annotation_config: AnnotationConfig = field(default_factory=AnnotationConfig)

    def __post_init__(self):
        if not self.session_id:
            raise ValueError("session_id cannot be empty")

        if any(ch in self.session_id for ch in "/#+"):
            raise ValueError(
                f"session_id cannot contain MQTT topic characters, got {self.session_id!r}"
            )

    @property
    def topics(self) -> dict:
        return self.mqtt_config.topics_for(self.session_id)

    @classmethod
    def from_dict(cls, data: dict) -> "ServiceConfig":
        if not data or "session_id" not in data:
            raise ValueError("Missing required field: session_id")

        return cls(
            session_id=str(data["session_id"]),
            map_config=MapConfig(**data.get("map_config", {})),
            mqtt_config=MQTTConfig(**data.get("mqtt_config", {})),
            annotation_config=AnnotationConfig(**data.get("annotation_config", {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ServiceConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            session_id: "site_01"

            map_config:
              default_zoom: 13
              focus_zoom: 16
              fly_to_zoom: 18

            annotation_config:
              sticky_manual_ring: false

            mqtt_config:
              broker: "localhost"
              port: 1883
              username: null
              password: null
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data)
