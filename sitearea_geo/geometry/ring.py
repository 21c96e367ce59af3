"""
Ring Module
===========

Polygon boundary derived from points or taken verbatim from a drawn shape.

Design:
- Pure functions (no state)
- Rings are plain lists of (lat, lon) tuples
- Closing compares vertices by value
"""

from enum import Enum
from numbers import Real
from typing import Iterable, List, Sequence, Tuple

from sitearea_geo.geometry.points import GeoPoint

Vertex = Tuple[float, float]
Ring = List[Vertex]


class RingMode(str, Enum):
    """Which geometry source produced the current ring."""
    DERIVED_FROM_POINTS = "derived_from_points"
    MANUALLY_EDITED = "manually_edited"


def _as_vertex(vertex: Sequence[float]) -> Vertex:
    if len(vertex) != 2:
        raise ValueError(f"Ring vertex must be a (lat, lon) pair, got {vertex!r}")
    lat, lon = vertex
    if not isinstance(lat, Real) or not isinstance(lon, Real):
        raise ValueError(f"Ring vertex must be numeric, got {vertex!r}")
    return (float(lat), float(lon))


class RingBuilder:
    """
    Stateless ring construction.

    All methods are static and return new lists; inputs are never mutated.

    Usage:
        ring = RingBuilder.from_points(store.sorted_view())
        closed = RingBuilder.close(ring)
    """

    @staticmethod
    def from_points(points: Iterable[GeoPoint]) -> Ring:
        """Map points to (lat, lon), keeping order. The ring is not closed."""
        return [point.coordinate for point in points]

    @staticmethod
    def replace_from_polygon_edit(vertices: Iterable[Sequence[float]]) -> Ring:
        """
        Ring taken directly from a drawn polygon.

        Point identity is not consulted; the result is independent of the
        GeoPoint store.

        Raises:
            ValueError: If a vertex is not a numeric pair
        """
        return [_as_vertex(vertex) for vertex in vertices]

    @staticmethod
    def is_closed(ring: Sequence[Vertex]) -> bool:
        return len(ring) > 0 and tuple(ring[0]) == tuple(ring[-1])

    @staticmethod
    def close(ring: Sequence[Vertex]) -> Ring:
        """
        Append the first vertex when the last one differs.

        Idempotent: close(close(r)) == close(r). An empty ring stays empty.
        """
        closed = [tuple(vertex) for vertex in ring]
        if closed and closed[0] != closed[-1]:
            closed.append(closed[0])
        return closed
