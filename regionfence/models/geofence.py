"""
Geofence Models - Value types shared by the geofence manager

This module provides:
- Coordinate and bounding box value types
- Immutable boundary regions with cached shapely geometry
- Geofence policy configuration
- Validation results and violation log entries
"""

import math
import numbers
from decimal import Decimal
from typing import Dict, List, Any, Optional, Sequence, Tuple
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum

from shapely.geometry import Polygon, MultiPolygon
from shapely.prepared import prep
from shapely.validation import explain_validity

from regionfence.exceptions import InvalidRegionGeometryError

class ViolationType(Enum):
    """Classification attached to a validation result"""
    OUTSIDE_ALL_REGIONS = "outside_all_regions"
    INVALID_COORDINATES = "invalid_coordinates"
    NEAR_BORDER_WARNING = "near_border_warning"
    DATA_UNAVAILABLE = "data_unavailable"
    UNKNOWN_VIOLATION = "unknown_violation"

@dataclass(frozen=True)
class Coordinate:
    """Geographic point in decimal degrees"""
    lat: float
    lng: float

    def is_within_range(self) -> bool:
        """Check latitude/longitude ranges; NaN and infinities fail"""

        if not (isinstance(self.lat, (numbers.Real, Decimal)) and isinstance(self.lng, (numbers.Real, Decimal))):
            return False
        if isinstance(self.lat, bool) or isinstance(self.lng, bool):
            return False
        if math.isnan(self.lat) or math.isnan(self.lng):
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def parse(cls, value: Any) -> "Coordinate":
        """Build a coordinate from a Coordinate, (lat, lng) pair or {"lat", "lng"} mapping"""

        if isinstance(value, Coordinate):
            return value
        if isinstance(value, dict):
            return cls(lat=value["lat"], lng=value["lng"])
        if isinstance(value, (list, tuple)) and len(value) >= 2:
            return cls(lat=value[0], lng=value[1])
        raise ValueError(f"Cannot interpret {value!r} as a coordinate")

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box in degrees"""
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def contains(self, point: Coordinate) -> bool:
        """Inclusive containment test"""
        return (self.min_lat <= point.lat <= self.max_lat and
                self.min_lng <= point.lng <= self.max_lng)

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[Coordinate]) -> "BoundingBox":
        lats = [c.lat for c in coordinates]
        lngs = [c.lng for c in coordinates]
        return cls(min_lat=min(lats), min_lng=min(lngs), max_lat=max(lats), max_lng=max(lngs))

Ring = Tuple[Coordinate, ...]

def _ring_to_xy(ring: Ring) -> List[Tuple[float, float]]:
    # shapely works in (x, y) = (lng, lat)
    return [(c.lng, c.lat) for c in ring]

def _build_polygon(region_name: str, rings: Sequence[Ring]) -> Polygon:
    if not rings:
        raise InvalidRegionGeometryError(region_name, "polygon has no rings")

    try:
        polygon = Polygon(_ring_to_xy(rings[0]), holes=[_ring_to_xy(r) for r in rings[1:]] or None)
    except ValueError as e:
        raise InvalidRegionGeometryError(region_name, str(e)) from e

    if not polygon.is_valid:
        raise InvalidRegionGeometryError(region_name, explain_validity(polygon))

    return polygon

@dataclass(frozen=True)
class BoundaryRegion:
    """
    One administrative region's shape.

    rings holds the primary polygon: the outer boundary first, holes after.
    parts holds additional polygons (islands, exclaves) in the same layout.
    """
    name: str
    rings: Tuple[Ring, ...]
    bounds: BoundingBox
    parts: Tuple[Tuple[Ring, ...], ...] = ()
    geometry: Any = field(init=False, repr=False, compare=False)
    prepared: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        polygons = [_build_polygon(self.name, rings) for rings in self.polygons]
        geometry = polygons[0] if len(polygons) == 1 else MultiPolygon(polygons)

        object.__setattr__(self, "geometry", geometry)
        object.__setattr__(self, "prepared", prep(geometry))

    @property
    def polygons(self) -> Tuple[Tuple[Ring, ...], ...]:
        """Primary polygon followed by any extra parts"""
        return (self.rings,) + tuple(self.parts)

    @property
    def outer_rings(self) -> List[Ring]:
        return [rings[0] for rings in self.polygons]

    @classmethod
    def from_rings(cls, name: str, rings: Sequence[Sequence[Coordinate]],
                   parts: Sequence[Sequence[Sequence[Coordinate]]] = ()) -> "BoundaryRegion":
        """Build a region and compute its bounding box from the outer rings"""

        frozen_rings = tuple(tuple(ring) for ring in rings)
        frozen_parts = tuple(tuple(tuple(ring) for ring in part) for part in parts)

        if not frozen_rings or not frozen_rings[0]:
            raise InvalidRegionGeometryError(name, "polygon has no rings")

        outer = list(frozen_rings[0])
        for part in frozen_parts:
            if not part:
                raise InvalidRegionGeometryError(name, "polygon part has no rings")
            outer.extend(part[0])

        return cls(
            name=name,
            rings=frozen_rings,
            bounds=BoundingBox.from_coordinates(outer),
            parts=frozen_parts
        )

@dataclass(frozen=True)
class GeofenceConfig:
    """Policy applied to a validation call"""
    strict_mode: bool = True
    show_warnings: bool = True
    allow_near_border: bool = False
    border_tolerance: float = 10.0  # kilometers
    assigned_states: Optional[Tuple[str, ...]] = None
    user_id: Optional[str] = None

    def __post_init__(self):
        if self.border_tolerance < 0:
            raise ValueError(f"border_tolerance must be non-negative, got {self.border_tolerance}")
        if self.assigned_states is not None and not isinstance(self.assigned_states, tuple):
            object.__setattr__(self, "assigned_states", tuple(self.assigned_states))

    @property
    def is_restricted(self) -> bool:
        return bool(self.assigned_states)

    @classmethod
    def for_user(cls, user_id: str, assigned_states: Sequence[str], **overrides: Any) -> "GeofenceConfig":
        """Default policy scoped to a user's assigned states"""
        return cls(assigned_states=tuple(assigned_states), user_id=user_id, **overrides)

@dataclass
class ValidationResult:
    """Outcome of validating a point or path"""
    is_valid: bool
    violation_type: Optional[ViolationType] = None
    message: Optional[str] = None
    violating_point: Optional[Coordinate] = None
    suggested_action: Optional[str] = None
    allowed_states: Optional[List[str]] = None
    nearest_region: Optional[str] = None
    nearest_distance_km: Optional[float] = None
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "violation_type": self.violation_type.value if self.violation_type else None,
            "message": self.message,
            "violating_point": self.violating_point.to_dict() if self.violating_point else None,
            "suggested_action": self.suggested_action,
            "allowed_states": self.allowed_states,
            "nearest_region": self.nearest_region,
            "nearest_distance_km": self.nearest_distance_km,
            "warnings": list(self.warnings)
        }

@dataclass(frozen=True)
class GeofenceViolation:
    """Violation log entry"""
    point: Coordinate
    timestamp: datetime
    type: str
    message: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "point": self.point.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "type": self.type,
            "message": self.message,
            "user_id": self.user_id
        }

@dataclass(frozen=True)
class ReferenceLocation:
    """Named landmark used for suggestions (e.g. a major city)"""
    name: str
    lat: float
    lng: float
    state: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)
