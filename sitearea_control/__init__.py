"""
sitearea_control - Control Plane for the annotation service

Bounded Context: MQTT-based command-and-control
Responsibilities:
  - MQTT connection management (Control Plane)
  - Command registration and validation
  - Command execution delegation

Commands (registered by AnnotationService):
  - select {lat, lon}: focus a point (marker / list click)
  - rebind_ring: make the ring follow the points again
  - status: current points, ring and area
  - reset: drop all points and the ring

Design Philosophy:
  - Explicit registration (fail-fast, no runtime surprises)
  - Clear error messages (lists available commands on error)
"""

from .registry import CommandRegistry, CommandNotAvailableError
from .plane import MQTTControlPlane

__all__ = [
    "CommandRegistry",
    "CommandNotAvailableError",
    "MQTTControlPlane",
]
