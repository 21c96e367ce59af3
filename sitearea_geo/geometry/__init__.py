"""
Geometry Layer
==============

Bounded Context: Pure geo shapes and measurements.

Responsibilities:
- Point representation and compass ordering (immutable)
- Ring construction and closing
- Geodesic area and unit conversion
- NO state, NO event handling

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation on construction
"""

from sitearea_geo.geometry.points import (
    CANONICAL_DIRECTIONS,
    POINT_ORDER,
    GeoPoint,
    is_canonical,
    sort_points,
)
from sitearea_geo.geometry.ring import Ring, RingBuilder, RingMode, Vertex
from sitearea_geo.geometry.area import (
    SQUARE_FEET_PER_SQUARE_METER,
    AreaCalculator,
    AreaMeasurement,
)

__all__ = [
    "CANONICAL_DIRECTIONS",
    "POINT_ORDER",
    "GeoPoint",
    "is_canonical",
    "sort_points",
    "Ring",
    "RingBuilder",
    "RingMode",
    "Vertex",
    "SQUARE_FEET_PER_SQUARE_METER",
    "AreaCalculator",
    "AreaMeasurement",
]
