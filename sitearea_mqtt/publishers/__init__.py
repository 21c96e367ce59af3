"""
MQTT Publishers
==============

Bounded Context: Message Production

Public API
----------
    BasePublisher: Abstract publisher (for custom publishers)
    AnnotationPublisher: Points / ring / area snapshot publisher
"""

from .base import BasePublisher
from .annotation import AnnotationPublisher

__all__ = [
    'BasePublisher',
    'AnnotationPublisher',
]
