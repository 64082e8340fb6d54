"""
Exceptions - Named failures raised by regionfence

Expected outcomes (invalid input, no match, missing data) are encoded in
ValidationResult. Only the conditions below surface as exceptions.
"""

from typing import Optional

class GeofenceError(Exception):
    """Base class for geofence manager errors"""

class DataLoadError(GeofenceError):
    """Boundary data source is unreachable or malformed"""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source

class InvalidRegionGeometryError(GeofenceError):
    """Region geometry cannot support a point-in-polygon test"""

    def __init__(self, region_name: str, reason: str):
        super().__init__(f"Invalid geometry for region '{region_name}': {reason}")
        self.region_name = region_name
        self.reason = reason

class RegionDataUnavailableError(GeofenceError):
    """Boundary data is not resident when a validation needs it"""
