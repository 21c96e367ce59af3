"""
GeoPoint Store Module
=====================

Ordered collection of named points; single source of truth for
directional data.

Design:
- Mutable list of immutable GeoPoints (insertion order kept)
- Lookups by coordinate (exact float equality), name or point_id
- Misses return None instead of raising
- Caller must synchronize if multi-threaded
"""

from typing import Dict, Iterator, List, Optional, Tuple, Union

from sitearea_geo.geometry.points import (
    GENERATED_NAME_PREFIX,
    POINT_ORDER,
    GeoPoint,
    sort_points,
)

PointKey = Union[str, Tuple[float, float]]


class GeoPointStore:
    """
    Insertion-ordered point collection.

    Name uniqueness is the caller's responsibility: capture only uses unused
    canonical names and map-create uses next_generated_name().

    Usage:
        store = GeoPointStore()
        store.append(GeoPoint("east", 1.0, 1.0))
        point = store.find_by_coordinate(1.0, 1.0)
        store.update("east", 1.5, 1.5)
        ordered = store.sorted_view()
    """

    def __init__(self, points: Optional[List[GeoPoint]] = None):
        self._points: List[GeoPoint] = list(points or [])

    def append(self, point: GeoPoint) -> GeoPoint:
        """Add a point at the end. Duplicate names are not rejected here."""
        self._points.append(point)
        return point

    def _index_by_coordinate(self, lat: float, lon: float) -> Optional[int]:
        for idx, point in enumerate(self._points):
            if point.matches(lat, lon):
                return idx
        return None

    def _index_by_name(self, name: str) -> Optional[int]:
        for idx, point in enumerate(self._points):
            if point.name == name:
                return idx
        return None

    def _index_by_id(self, point_id: str) -> Optional[int]:
        for idx, point in enumerate(self._points):
            if point.point_id == point_id:
                return idx
        return None

    def _index_by_key(self, key: PointKey) -> Optional[int]:
        if isinstance(key, str):
            return self._index_by_name(key)
        lat, lon = key
        return self._index_by_coordinate(lat, lon)

    def find_by_coordinate(self, lat: float, lon: float) -> Optional[GeoPoint]:
        """First point whose coordinates equal (lat, lon) exactly."""
        idx = self._index_by_coordinate(lat, lon)
        return None if idx is None else self._points[idx]

    def find_by_name(self, name: str) -> Optional[GeoPoint]:
        idx = self._index_by_name(name)
        return None if idx is None else self._points[idx]

    def find_by_id(self, point_id: str) -> Optional[GeoPoint]:
        idx = self._index_by_id(point_id)
        return None if idx is None else self._points[idx]

    def _replace_at(self, idx: Optional[int], lat: float, lon: float) -> Optional[GeoPoint]:
        if idx is None:
            return None
        updated = self._points[idx].with_coordinates(lat, lon)
        self._points[idx] = updated
        return updated

    def update(self, key: PointKey, new_lat: float, new_lon: float) -> Optional[GeoPoint]:
        """
        Replace a point's coordinates in place.

        Args:
            key: Point name, or (lat, lon) of the point before the edit
            new_lat: New latitude
            new_lon: New longitude

        Returns:
            The updated point, or None if nothing matched
        """
        return self._replace_at(self._index_by_key(key), new_lat, new_lon)

    def update_by_id(self, point_id: str, new_lat: float, new_lon: float) -> Optional[GeoPoint]:
        return self._replace_at(self._index_by_id(point_id), new_lat, new_lon)

    def remove(self, lat: float, lon: float) -> Optional[GeoPoint]:
        """Remove the first point matching (lat, lon). None on a miss."""
        idx = self._index_by_coordinate(lat, lon)
        if idx is None:
            return None
        return self._points.pop(idx)

    def remove_by_id(self, point_id: str) -> Optional[GeoPoint]:
        idx = self._index_by_id(point_id)
        if idx is None:
            return None
        return self._points.pop(idx)

    def sorted_view(self, order_table: Optional[Dict[str, int]] = None) -> List[GeoPoint]:
        """
        Points in compass order.

        Canonical names follow the rank table; other names come after them
        in insertion order.
        """
        return sort_points(self._points, POINT_ORDER if order_table is None else order_table)

    def next_generated_name(self) -> str:
        """
        Label for a free-drawn point: point<count+1>.

        After deletions that label can already exist; the counter is bumped
        until the name is unused.
        """
        taken = set(self.names())
        index = len(self._points) + 1
        while f"{GENERATED_NAME_PREFIX}{index}" in taken:
            index += 1
        return f"{GENERATED_NAME_PREFIX}{index}"

    def names(self) -> List[str]:
        return [point.name for point in self._points]

    def snapshot(self) -> Tuple[GeoPoint, ...]:
        """Immutable copy in insertion order."""
        return tuple(self._points)

    def clear(self) -> None:
        self._points.clear()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(list(self._points))

    def __repr__(self) -> str:
        return f"GeoPointStore(points={len(self._points)})"
