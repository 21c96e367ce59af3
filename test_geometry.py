"""
Geometry Tests (points, ring, area)
===================================

Pure functions only; no broker, no devices.

Usage:
    pytest test_geometry.py
"""

import pytest

from sitearea_geo import (
    AreaCalculator,
    AreaMeasurement,
    GeoPoint,
    GeoPointStore,
    RingBuilder,
    sort_points,
)
from sitearea_geo.geometry.area import SQUARE_FEET_PER_SQUARE_METER

# ~1.1 km square on the equator
SQUARE = [(0.0, 0.0), (0.0, 0.01), (0.01, 0.01), (0.01, 0.0)]


# ===== GeoPoint =====

def test_geopoint_rejects_out_of_range_coordinates():
    with pytest.raises(ValueError):
        GeoPoint("north", 91.0, 0.0)
    with pytest.raises(ValueError):
        GeoPoint("north", 0.0, -180.5)
    with pytest.raises(ValueError):
        GeoPoint("", 0.0, 0.0)


def test_with_coordinates_keeps_name_and_id():
    point = GeoPoint("east", 1.0, 1.0)
    moved = point.with_coordinates(1.5, 1.5)

    assert moved.name == "east"
    assert moved.point_id == point.point_id
    assert moved.coordinate == (1.5, 1.5)
    assert point.coordinate == (1.0, 1.0)


def test_sort_points_canonical_order_then_insertion_order():
    points = [
        GeoPoint("point1", 5.0, 5.0),
        GeoPoint("west", 1.0, 1.0),
        GeoPoint("north", 2.0, 2.0),
        GeoPoint("point2", 6.0, 6.0),
        GeoPoint("south-east", 3.0, 3.0),
    ]

    names = [p.name for p in sort_points(points)]

    assert names == ["north", "south-east", "west", "point1", "point2"]


def test_sorted_view_restricted_to_present_names():
    store = GeoPointStore()
    store.append(GeoPoint("south", 1.0, 1.0))
    store.append(GeoPoint("north-east", 2.0, 2.0))

    assert [p.name for p in store.sorted_view()] == ["north-east", "south"]


# ===== RingBuilder =====

def test_ring_from_points_east_north_scenario():
    store = GeoPointStore()
    store.append(GeoPoint("east", 1.0, 1.0))
    store.append(GeoPoint("north", 2.0, 2.0))

    ring = RingBuilder.from_points(store.sorted_view())
    closed = RingBuilder.close(ring)

    assert [p.name for p in store.sorted_view()] == ["north", "east"]
    assert ring == [(2.0, 2.0), (1.0, 1.0)]
    assert closed == [(2.0, 2.0), (1.0, 1.0), (2.0, 2.0)]
    assert AreaCalculator.area(ring) == 0.0


def test_close_is_idempotent():
    once = RingBuilder.close(SQUARE)
    twice = RingBuilder.close(once)

    assert once == twice
    assert len(once) == len(SQUARE) + 1
    assert RingBuilder.is_closed(once)
    assert not RingBuilder.is_closed(SQUARE)


def test_close_compares_vertices_by_value():
    ring = [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [0.0, 0.0]]

    assert RingBuilder.close(ring) == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (0.0, 0.0)]


def test_close_empty_ring_stays_empty():
    assert RingBuilder.close([]) == []


def test_replace_from_polygon_edit_validates_vertices():
    ring = RingBuilder.replace_from_polygon_edit([[1, 2], (3.5, 4.5)])
    assert ring == [(1.0, 2.0), (3.5, 4.5)]

    with pytest.raises(ValueError):
        RingBuilder.replace_from_polygon_edit([(1.0, 2.0, 3.0)])
    with pytest.raises(ValueError):
        RingBuilder.replace_from_polygon_edit([("a", 2.0)])


# ===== AreaCalculator =====

def test_square_area_is_geodesic_square_meters():
    area = AreaCalculator.area(SQUARE)

    assert 1.2e6 < area < 1.25e6


def test_area_invariant_under_rotation_and_reversal():
    reference = AreaCalculator.area(SQUARE)

    for shift in range(len(SQUARE)):
        rotated = SQUARE[shift:] + SQUARE[:shift]
        assert AreaCalculator.area(rotated) == pytest.approx(reference, rel=1e-9)

    assert AreaCalculator.area(list(reversed(SQUARE))) == pytest.approx(reference, rel=1e-9)


def test_area_same_for_open_and_closed_ring():
    assert AreaCalculator.area(RingBuilder.close(SQUARE)) == pytest.approx(
        AreaCalculator.area(SQUARE), rel=1e-9
    )


@pytest.mark.parametrize("ring", [
    [],
    [(1.0, 1.0)],
    [(1.0, 1.0), (2.0, 2.0)],
    [(1.0, 1.0), (2.0, 2.0), (1.0, 1.0), (2.0, 2.0)],
])
def test_degenerate_rings_have_zero_area(ring):
    assert AreaCalculator.area(ring) == 0.0
    assert AreaCalculator.measure(ring) == AreaMeasurement(0.0, 0.0)


def test_square_feet_conversion():
    assert AreaCalculator.to_square_feet(100.0) == 100.0 * 10.7639
    assert SQUARE_FEET_PER_SQUARE_METER == 10.7639

    measurement = AreaCalculator.measure(SQUARE)
    assert measurement.square_feet == pytest.approx(measurement.square_meters * 10.7639)


def test_perimeter_of_square():
    perimeter = AreaCalculator.perimeter(SQUARE)

    assert 4400.0 < perimeter < 4450.0
    assert AreaCalculator.perimeter([]) == 0.0


def test_measurement_format_two_decimals():
    text = AreaMeasurement(12.346, 132.88).format()

    assert "Calculated Area: 12.35 square meters" in text
    assert "Calculated Area: 132.88 square foot" in text
