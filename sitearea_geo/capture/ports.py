"""
Capture Ports
=============

Device capabilities injected into the capture session.

Design:
- Protocols only; real adapters live with the UI, fakes live in tests
- Geolocation reports through two callbacks (success / failure)
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol


@dataclass(frozen=True)
class VideoDevice:
    """Media device entry as reported by the platform."""
    device_id: str
    label: str = ""
    kind: str = "videoinput"


class Camera(Protocol):
    """Protocol for the frame grabber (interface)."""

    def get_screenshot(self) -> Optional[bytes]:
        """Current frame as encoded image bytes, None if unavailable."""
        ...


class Geolocator(Protocol):
    """Protocol for position lookups (interface)."""

    def get_current_position(
        self,
        on_success: Callable[[float, float], None],
        on_error: Callable[[Exception], None],
        high_accuracy: bool = True,
    ) -> None:
        """
        Request the device position.

        Exactly one of the callbacks is invoked, possibly later.
        """
        ...


class DeviceEnumerator(Protocol):
    """Protocol for media device discovery (interface)."""

    def enumerate_devices(self) -> List[VideoDevice]:
        ...
