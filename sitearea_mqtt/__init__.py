"""
SiteArea MQTT Communication Package
===================================

Bounded Context: Communication Protocol for the Annotation Service

MQTT messaging between the capture UI / map drawing toolkit and the
annotation service.

Architecture:
- schemas/: Immutable data structures with type safety
- publishers/: Message producers (AnnotationPublisher)
- subscriber.py: Inbound draw events and capture records
- logging/: Structured JSON logging for observability

Design Philosophy:
- Cohesion > Location: Each module has one reason to change
- Immutability: Frozen dataclasses for message DTOs
- Observability: Structured logs (JSON) for production queries

Example (Renderer side):
    >>> from sitearea_mqtt import create_logger
    >>> from sitearea_mqtt.schemas import DrawEventMessage
    >>> from sitearea_geo import DrawEvent, DrawEventType, DrawnShape
    >>>
    >>> msg = DrawEventMessage.create(
    ...     DrawEvent(DrawEventType.CREATED, [DrawnShape.marker(48.85, 2.29)])
    ... )
    >>> payload = json.dumps(msg.to_dict())
"""

__version__ = "1.0.0"

# Schemas
from .schemas import (
    SCHEMA_VERSION,
    Timestamp,
    DrawEventMessage,
    CaptureMessage,
    AnnotationMessage,
)

# Publishers
from .publishers import (
    BasePublisher,
    AnnotationPublisher,
)

# Subscriber
from .subscriber import MessageSubscriber

# Logging
from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    # Schemas
    'SCHEMA_VERSION',
    'Timestamp',
    'DrawEventMessage',
    'CaptureMessage',
    'AnnotationMessage',
    # Publishers
    'BasePublisher',
    'AnnotationPublisher',
    # Subscriber
    'MessageSubscriber',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
