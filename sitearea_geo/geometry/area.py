"""
Area Calculator Module
======================

Enclosed area of a ring on the WGS84 ellipsoid.

Design:
- Pure functions, recomputed on every ring change (no caching)
- Geodesic area via pyproj.Geod (same ellipsoid as GPS fixes)
- Absolute value: vertex winding does not change the result
- Degenerate rings yield 0.0, never an error
"""

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
from pyproj import Geod

from sitearea_geo.geometry.ring import RingBuilder, Vertex

SQUARE_FEET_PER_SQUARE_METER = 10.7639

# Reused across calls
_GEOD = Geod(ellps="WGS84")


@dataclass(frozen=True)
class AreaMeasurement:
    """
    Derived area snapshot.

    Attributes:
        square_meters: Enclosed area in m²
        square_feet: Same area in ft² (factor 10.7639)
    """

    square_meters: float
    square_feet: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "square_meters": self.square_meters,
            "square_feet": self.square_feet,
        }

    def format(self) -> str:
        """Two-decimal display used by the map panel."""
        return (
            f"Calculated Area: {self.square_meters:.2f} square meters\n"
            f"Calculated Area: {self.square_feet:.2f} square foot"
        )


class AreaCalculator:
    """
    Stateless area computation over (lat, lon) rings.

    Usage:
        measurement = AreaCalculator.measure(ring)
        print(measurement.format())
    """

    @staticmethod
    def _closed_vertices(ring: Sequence[Vertex]) -> np.ndarray:
        closed = RingBuilder.close(ring)
        return np.asarray(closed, dtype=np.float64).reshape(-1, 2)

    @staticmethod
    def _is_degenerate(vertices: np.ndarray) -> bool:
        if len(vertices) <= 2:
            return True
        # A closed ring over two distinct vertices encloses nothing
        return len(np.unique(vertices, axis=0)) < 3

    @staticmethod
    def area(ring: Sequence[Vertex]) -> float:
        """
        Geodesic area in square meters.

        The ring is closed before measuring. Self-intersecting rings give an
        undefined (but finite) result.

        Args:
            ring: Sequence of (lat, lon) vertices

        Returns:
            Absolute area in m², 0.0 for degenerate rings
        """
        vertices = AreaCalculator._closed_vertices(ring)
        if AreaCalculator._is_degenerate(vertices):
            return 0.0

        lats, lons = vertices[:, 0], vertices[:, 1]
        signed_area, _ = _GEOD.polygon_area_perimeter(lons, lats)
        return abs(float(signed_area))

    @staticmethod
    def perimeter(ring: Sequence[Vertex]) -> float:
        """Geodesic length of the closed boundary in meters."""
        vertices = AreaCalculator._closed_vertices(ring)
        if len(vertices) < 2:
            return 0.0

        lats, lons = vertices[:, 0], vertices[:, 1]
        _, length = _GEOD.polygon_area_perimeter(lons, lats)
        return float(length)

    @staticmethod
    def to_square_feet(square_meters: float) -> float:
        return square_meters * SQUARE_FEET_PER_SQUARE_METER

    @staticmethod
    def measure(ring: Sequence[Vertex]) -> AreaMeasurement:
        square_meters = AreaCalculator.area(ring)
        return AreaMeasurement(
            square_meters=square_meters,
            square_feet=AreaCalculator.to_square_feet(square_meters),
        )
