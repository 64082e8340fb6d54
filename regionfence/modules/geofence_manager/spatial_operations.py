"""
Spatial Operations - Geographic and geometric calculations for geofencing

This module provides:
- Distance calculations on a spherical Earth (haversine, R = 6371.0 km)
- Point-in-region testing with holes and inclusive boundaries
- Point to region boundary distance
- Bounding box fast rejection
- Region centroid helper

Distances follow the haversine formula on a mean Earth radius of 6371.0 km:

    a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
    d = 2R · atan2(√a, √(1 − a))

Point to segment distance uses the spherical cross-track / along-track
decomposition. When the perpendicular foot falls outside the segment the
nearer endpoint distance is used instead.

Longitudes are not unwrapped across the antimeridian. Boundary data is
assumed to lie within a single longitude span (India: 68°E to 98°E).
"""

import math
import numpy as np
from geopy.distance import great_circle
from shapely.geometry import Point

from regionfence.models.geofence import BoundaryRegion, Coordinate, Ring

EARTH_RADIUS_KM = 6371.0

def haversine_angle(lat1, lng1, lat2, lng2):
    """Central angle in radians between points given in radians (numpy broadcasting)"""

    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    return 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

def initial_bearing(lat1, lng1, lat2, lng2):
    """Initial bearing in radians between points given in radians (numpy broadcasting)"""

    dlng = lng2 - lng1
    y = np.sin(dlng) * np.cos(lat2)
    x = np.cos(lat1) * np.sin(lat2) - np.sin(lat1) * np.cos(lat2) * np.cos(dlng)
    return np.arctan2(y, x)

class SpatialOperations:
    """Spatial predicates for region geofencing"""

    def __init__(self, earth_radius_km: float = EARTH_RADIUS_KM):
        self.earth_radius_km = earth_radius_km

    def calculate_distance(self, lat1: float, lng1: float,
                           lat2: float, lng2: float) -> float:
        """Great-circle distance between two points in kilometers"""

        return great_circle((lat1, lng1), (lat2, lng2), radius=self.earth_radius_km).kilometers

    def haversine_distance(self, lat1: float, lng1: float,
                           lat2: float, lng2: float) -> float:
        """Haversine distance between two points in kilometers"""

        angle = haversine_angle(math.radians(lat1), math.radians(lng1),
                                math.radians(lat2), math.radians(lng2))
        return float(angle * self.earth_radius_km)

    def calculate_bearing(self, lat1: float, lng1: float,
                          lat2: float, lng2: float) -> float:
        """Initial bearing from point 1 to point 2 in degrees (0-360)"""

        bearing_rad = initial_bearing(math.radians(lat1), math.radians(lng1),
                                      math.radians(lat2), math.radians(lng2))
        return (math.degrees(float(bearing_rad)) + 360) % 360

    def bounding_box_reject(self, point: Coordinate, region: BoundaryRegion) -> bool:
        """True when the point lies outside the region's bounding box"""

        return not region.bounds.contains(point)

    def point_in_region(self, point: Coordinate, region: BoundaryRegion) -> bool:
        """
        Check if a point lies inside a region.

        Points on an edge or vertex count as inside. Points strictly inside a
        hole ring are outside.
        """

        if self.bounding_box_reject(point, region):
            return False

        return region.prepared.covers(Point(float(point.lng), float(point.lat)))

    def segment_distances(self, point: Coordinate, ring: Ring) -> np.ndarray:
        """Distance in kilometers from a point to every segment of a ring"""

        coords = np.radians(np.array([(c.lat, c.lng) for c in ring], dtype=float))
        if len(coords) == 0:
            return np.array([], dtype=float)
        if len(coords) == 1:
            coords = np.vstack([coords, coords])

        lat_p = math.radians(point.lat)
        lng_p = math.radians(point.lng)
        lat1, lng1 = coords[:-1, 0], coords[:-1, 1]
        lat2, lng2 = coords[1:, 0], coords[1:, 1]

        d13 = haversine_angle(lat1, lng1, lat_p, lng_p)
        d23 = haversine_angle(lat2, lng2, lat_p, lng_p)
        d12 = haversine_angle(lat1, lng1, lat2, lng2)

        theta13 = initial_bearing(lat1, lng1, lat_p, lng_p)
        theta12 = initial_bearing(lat1, lng1, lat2, lng2)
        delta = theta13 - theta12

        cross_track = np.arcsin(np.clip(np.sin(d13) * np.sin(delta), -1.0, 1.0))
        with np.errstate(divide="ignore", invalid="ignore"):
            along_track = np.arccos(np.clip(np.cos(d13) / np.cos(cross_track), -1.0, 1.0))

        # Foot of the perpendicular before the start, past the end, or on the segment
        angle = np.where(np.cos(delta) < 0, d13,
                         np.where(along_track > d12, d23, np.abs(cross_track)))
        angle = np.where(d12 == 0, d13, angle)
        angle = np.minimum(angle, np.minimum(d13, d23))

        return angle * self.earth_radius_km

    def distance_to_ring(self, point: Coordinate, ring: Ring) -> float:
        """Minimum distance in kilometers from a point to a closed ring"""

        closed = tuple(ring)
        if closed and closed[0] != closed[-1]:
            closed = closed + (closed[0],)

        distances = self.segment_distances(point, closed)
        if distances.size == 0:
            return math.inf
        return float(distances.min())

    def distance_to_region_boundary(self, point: Coordinate, region: BoundaryRegion) -> float:
        """
        Minimum distance in kilometers from a point to the region's outer boundary.

        Returns 0.0 for points inside the region so that tolerance checks
        short-circuit.
        """

        if self.point_in_region(point, region):
            return 0.0

        return min(self.distance_to_ring(point, ring) for ring in region.outer_rings)

    def region_centroid(self, region: BoundaryRegion) -> Coordinate:
        """Planar centroid of the region geometry"""

        centroid = region.geometry.centroid
        return Coordinate(lat=centroid.y, lng=centroid.x)

