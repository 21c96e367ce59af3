"""
SiteArea Annotation Service

Long-running MQTT service that keeps one annotation session (points,
ring, area, focus) and publishes its state after every change.
"""

from sitearea_service.config import (
    AnnotationConfig,
    MapConfig,
    MQTTConfig,
    ServiceConfig,
)
from sitearea_service.service import AnnotationService

__all__ = [
    "AnnotationConfig",
    "AnnotationService",
    "MapConfig",
    "MQTTConfig",
    "ServiceConfig",
]
