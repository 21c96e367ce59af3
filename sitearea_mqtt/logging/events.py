"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging.

Event Naming Convention:
    <component>.<category>.<action>

    component: mqtt, draw, capture, annotation, error

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.session_id
    | filter event = "annotation.published"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - mqtt.*: MQTT broker interactions
    - draw.*: Drawing-layer events
    - capture.*: Camera capture records
    - annotation.*: Point / ring / area updates
    - error.*: Error conditions
    """

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection lost."""

    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    """Message successfully published to broker."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Message publication failed."""

    # ========== Draw Events ==========
    DRAW_EVENT_RECEIVED = "draw.event.received"
    """Drawing-layer event received by subscriber."""

    # ========== Capture Events ==========
    CAPTURE_RECEIVED = "capture.received"
    """Capture record received by subscriber."""

    # ========== Annotation Events ==========
    ANNOTATION_SERIALIZED = "annotation.serialized"
    """Annotation snapshot serialized to JSON."""

    ANNOTATION_PUBLISHED = "annotation.published"
    """Annotation snapshot published to renderer topic."""

    # ========== Error Events ==========
    SERIALIZATION_ERROR = "error.serialization"
    """Failed to serialize message to JSON."""

    DESERIALIZATION_ERROR = "error.deserialization"
    """Failed to deserialize message from JSON."""

    SCHEMA_VALIDATION_ERROR = "error.schema_validation"
    """Message failed schema validation."""

    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""

