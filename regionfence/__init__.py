"""
regionfence - Region assignment geofencing for GIS map tools

Validates points and paths against the states or regions assigned to a
user, with strict and near-border policies.
"""

from regionfence.config import GeofencingSettings
from regionfence.exceptions import (
    DataLoadError,
    GeofenceError,
    InvalidRegionGeometryError,
    RegionDataUnavailableError
)
from regionfence.models import (
    BoundaryRegion,
    Coordinate,
    GeofenceConfig,
    GeofenceViolation,
    ReferenceLocation,
    ValidationResult,
    ViolationType
)
from regionfence.modules.geofence_manager import (
    BoundaryDataStore,
    GeofencingService,
    GeoDataFrameSource,
    GeoJSONFileSource,
    HttpBoundarySource,
    InMemoryBoundarySource
)

__all__ = [
    "GeofencingSettings",
    "DataLoadError",
    "GeofenceError",
    "InvalidRegionGeometryError",
    "RegionDataUnavailableError",
    "BoundaryRegion",
    "Coordinate",
    "GeofenceConfig",
    "GeofenceViolation",
    "ReferenceLocation",
    "ValidationResult",
    "ViolationType",
    "BoundaryDataStore",
    "GeofencingService",
    "GeoDataFrameSource",
    "GeoJSONFileSource",
    "HttpBoundarySource",
    "InMemoryBoundarySource"
]

__version__ = "1.0.0"
