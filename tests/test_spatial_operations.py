import math

import pytest

from regionfence.models.geofence import BoundaryRegion, Coordinate
from regionfence.modules.geofence_manager.spatial_operations import EARTH_RADIUS_KM, SpatialOperations

ONE_DEGREE_KM = math.pi / 180 * EARTH_RADIUS_KM


def ring(*positions):
    return [Coordinate(lat=lat, lng=lng) for lat, lng in positions]


@pytest.fixture
def ops():
    return SpatialOperations()


@pytest.fixture
def unit_square():
    return BoundaryRegion.from_rings("TestState", [ring((0, 0), (0, 1), (1, 1), (1, 0), (0, 0))])


@pytest.fixture
def square_with_hole():
    return BoundaryRegion.from_rings("HoleState", [
        ring((10, 10), (10, 14), (14, 14), (14, 10), (10, 10)),
        ring((11, 11), (11, 13), (13, 13), (13, 11), (11, 11))
    ])


def test_haversine_one_degree_on_equator(ops):
    assert ops.haversine_distance(0, 0, 0, 1) == pytest.approx(ONE_DEGREE_KM)
    assert ONE_DEGREE_KM == pytest.approx(111.195, abs=1e-3)


@pytest.mark.parametrize("a, b", [
    ((28.6139, 77.2090), (19.0760, 72.8777)),
    ((12.9716, 77.5946), (22.5726, 88.3639)),
    ((0.0, 0.0), (1.05, 0.5)),
])
def test_haversine_matches_great_circle(ops, a, b):
    haversine = ops.haversine_distance(*a, *b)
    great_circle = ops.calculate_distance(*a, *b)
    assert haversine == pytest.approx(great_circle, rel=1e-6)


def test_bearing_due_north_and_east(ops):
    assert ops.calculate_bearing(0, 0, 1, 0) == pytest.approx(0.0)
    assert ops.calculate_bearing(0, 0, 0, 1) == pytest.approx(90.0)


def test_point_in_region_interior_and_exterior(ops, unit_square):
    assert ops.point_in_region(Coordinate(0.5, 0.5), unit_square)
    assert not ops.point_in_region(Coordinate(2, 2), unit_square)


@pytest.mark.parametrize("lat, lng", [(0, 0), (1, 1), (0, 0.5), (0.5, 1), (1, 0.25)])
def test_boundary_points_are_inside(ops, unit_square, lat, lng):
    assert ops.point_in_region(Coordinate(lat, lng), unit_square)


def test_hole_points_are_outside(ops, square_with_hole):
    assert ops.point_in_region(Coordinate(10.5, 10.5), square_with_hole)
    assert not ops.point_in_region(Coordinate(12, 12), square_with_hole)


def test_bounding_box_reject(ops, unit_square):
    assert ops.bounding_box_reject(Coordinate(-0.1, 0.5), unit_square)
    assert not ops.bounding_box_reject(Coordinate(1, 1), unit_square)


def test_distance_is_zero_inside(ops, unit_square):
    assert ops.distance_to_region_boundary(Coordinate(0.5, 0.5), unit_square) == 0.0


def test_distance_to_nearest_edge(ops, unit_square):
    distance = ops.distance_to_region_boundary(Coordinate(1.05, 0.5), unit_square)
    assert distance == pytest.approx(0.05 * ONE_DEGREE_KM, abs=0.05)


def test_distance_beyond_segment_uses_nearest_vertex(ops, unit_square):
    distance = ops.distance_to_region_boundary(Coordinate(2, 2), unit_square)
    assert distance == pytest.approx(ops.haversine_distance(2, 2, 1, 1), rel=1e-6)


def test_distance_from_hole_measures_outer_ring(ops, square_with_hole):
    point = Coordinate(12, 12)
    expected = ops.haversine_distance(12, 12, 12, 10)
    assert ops.distance_to_region_boundary(point, square_with_hole) == pytest.approx(expected, rel=1e-3)


def test_distance_to_unclosed_ring(ops):
    open_ring = tuple(ring((0, 0), (0, 1), (1, 1), (1, 0)))
    # The closing edge lng=0 is nearest to this point
    distance = ops.distance_to_ring(Coordinate(0.5, -0.05), open_ring)
    assert distance == pytest.approx(0.05 * ONE_DEGREE_KM, rel=1e-3)


def test_region_centroid(ops, unit_square):
    centroid = ops.region_centroid(unit_square)
    assert centroid.lat == pytest.approx(0.5)
    assert centroid.lng == pytest.approx(0.5)
