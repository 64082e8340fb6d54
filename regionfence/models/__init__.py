"""
regionfence models - Value types for region geofencing
"""

from regionfence.models.geofence import (
    BoundaryRegion,
    BoundingBox,
    Coordinate,
    GeofenceConfig,
    GeofenceViolation,
    ReferenceLocation,
    ValidationResult,
    ViolationType
)
from regionfence.models.region_assignment import (
    AssignmentViolationType,
    BulkAssignmentResult,
    RegionAssignmentCheck,
    RegionAssignmentResult,
    UserLocationDecision,
    UserRegionConfig,
    UserRegionRestrictions
)

__all__ = [
    "BoundaryRegion",
    "BoundingBox",
    "Coordinate",
    "GeofenceConfig",
    "GeofenceViolation",
    "ReferenceLocation",
    "ValidationResult",
    "ViolationType",
    "AssignmentViolationType",
    "BulkAssignmentResult",
    "RegionAssignmentCheck",
    "RegionAssignmentResult",
    "UserLocationDecision",
    "UserRegionConfig",
    "UserRegionRestrictions"
]
