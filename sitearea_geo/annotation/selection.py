"""
Selection Controller Module
===========================

Tracks the active point for camera-follow behaviour.

Design:
- Two states: idle (nothing focused) or focused on a coordinate
- A new selection always preempts an in-flight pan/zoom (no queue)
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from sitearea_geo.geometry.points import GeoPoint

DEFAULT_ZOOM = 13
FOCUS_ZOOM = 16
FLY_TO_ZOOM = 18


@dataclass(frozen=True)
class SelectionResult:
    """
    Outcome of a marker / list click.

    Attributes:
        active_point: Focused (lat, lon) after the click
        recenter_requested: Same point clicked again, zoom in only
        fly_to: Pan + zoom animation to the new point requested
        zoom: Zoom level the map should end at
    """

    active_point: Tuple[float, float]
    recenter_requested: bool
    fly_to: bool
    zoom: int


class SelectionController:
    """
    Usage:
        selection = SelectionController.from_points(store.sorted_view())
        result = selection.select(2.0, 2.0)
        if result.fly_to:
            renderer.fly_to(result.active_point, result.zoom)
    """

    def __init__(
        self,
        active_point: Optional[Tuple[float, float]] = None,
        default_zoom: int = DEFAULT_ZOOM,
        focus_zoom: int = FOCUS_ZOOM,
        fly_to_zoom: int = FLY_TO_ZOOM,
    ):
        self._active = active_point
        self._center = active_point
        self.default_zoom = default_zoom
        self._zoom = default_zoom
        self.focus_zoom = focus_zoom
        self.fly_to_zoom = fly_to_zoom

    @classmethod
    def from_points(cls, points: Sequence[GeoPoint], **zoom_levels) -> "SelectionController":
        """Start focused on the first point of the sorted view."""
        active = points[0].coordinate if points else None
        return cls(active_point=active, **zoom_levels)

    @property
    def active_point(self) -> Optional[Tuple[float, float]]:
        return self._active

    @property
    def center(self) -> Optional[Tuple[float, float]]:
        return self._center

    @property
    def zoom(self) -> int:
        return self._zoom

    def select(self, lat: float, lon: float) -> SelectionResult:
        if self._active == (lat, lon):
            self._zoom = self.focus_zoom
            return SelectionResult(
                active_point=self._active,
                recenter_requested=True,
                fly_to=False,
                zoom=self._zoom,
            )

        self._active = (lat, lon)
        self._center = (lat, lon)
        self._zoom = self.fly_to_zoom
        return SelectionResult(
            active_point=self._active,
            recenter_requested=False,
            fly_to=True,
            zoom=self._zoom,
        )

    def focus(self, lat: float, lon: float) -> None:
        """Set the active point without requesting any camera movement."""
        self._active = (lat, lon)
        self._center = (lat, lon)

    def clear(self) -> None:
        self._active = None
        self._center = None
        self._zoom = self.default_zoom
