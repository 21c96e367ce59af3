"""
Capture Layer
=============

Bounded Context: Photo capture per compass direction.

Device access (camera, geolocation, enumeration) is injected through
ports so the flow runs the same against real devices and test fakes.
"""

from sitearea_geo.capture.ports import Camera, DeviceEnumerator, Geolocator, VideoDevice
from sitearea_geo.capture.session import CameraSelector, CapturedImage, CaptureSession

__all__ = [
    "Camera",
    "DeviceEnumerator",
    "Geolocator",
    "VideoDevice",
    "CameraSelector",
    "CapturedImage",
    "CaptureSession",
]
