"""
Geofence Manager Module Package - Region-restricted geofencing

This package provides:
- Boundary data loading and caching
- Point-in-region and boundary distance calculations
- Assigned region resolution
- Strict / near-border policy decisions for points and paths
- Violation logging
- Region assignment validation
"""

from regionfence.modules.geofence_manager.geofence_controller import GeofencingService
from regionfence.modules.geofence_manager.boundary_store import (
    BoundaryDataStore,
    BoundarySource,
    GeoDataFrameSource,
    GeoJSONFileSource,
    HttpBoundarySource,
    InMemoryBoundarySource,
    source_for_location
)
from regionfence.modules.geofence_manager.data_cache import GeofenceDataCache
from regionfence.modules.geofence_manager.policy_engine import GeofencePolicyEngine
from regionfence.modules.geofence_manager.region_resolver import RegionResolver, RegionMatch, ResolvedRegions
from regionfence.modules.geofence_manager.spatial_operations import SpatialOperations, EARTH_RADIUS_KM
from regionfence.modules.geofence_manager.violation_log import ViolationLog
from regionfence.modules.geofence_manager.zone_validator import RegionAssignmentValidator

__all__ = [
    "GeofencingService",
    "BoundaryDataStore",
    "BoundarySource",
    "GeoDataFrameSource",
    "GeoJSONFileSource",
    "HttpBoundarySource",
    "InMemoryBoundarySource",
    "source_for_location",
    "GeofenceDataCache",
    "GeofencePolicyEngine",
    "RegionResolver",
    "RegionMatch",
    "ResolvedRegions",
    "SpatialOperations",
    "EARTH_RADIUS_KM",
    "ViolationLog",
    "RegionAssignmentValidator"
]
