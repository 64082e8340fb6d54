"""
Geofencing Service - Region-restricted validation for map tools

This module handles:
- Point and path validation against a user's assigned regions
- Boundary data preloading shared across callers
- Violation recording for audit and UI display
- User location checks with suggested alternative locations
"""

import math
from typing import Any, List, Optional, Sequence, Union
from datetime import datetime

from regionfence.config import GeofencingSettings
from regionfence.exceptions import DataLoadError
from regionfence.models.geofence import (
    Coordinate,
    GeofenceConfig,
    GeofenceViolation,
    ReferenceLocation,
    ValidationResult,
    ViolationType
)
from regionfence.models.region_assignment import UserLocationDecision, UserRegionRestrictions
from regionfence.modules.geofence_manager.boundary_store import (
    BoundaryDataStore,
    BoundarySource,
    source_for_location
)
from regionfence.modules.geofence_manager.data_cache import GeofenceDataCache
from regionfence.modules.geofence_manager.policy_engine import GeofencePolicyEngine
from regionfence.modules.geofence_manager.region_resolver import RegionResolver
from regionfence.modules.geofence_manager.spatial_operations import SpatialOperations
from regionfence.modules.geofence_manager.violation_log import ViolationLog
from regionfence.modules.geofence_manager.zone_validator import RegionAssignmentValidator
from regionfence.utils.logger import configure_logging, get_logger

class GeofencingService:
    """Geofence validation for one session, with its own store and violation log"""

    def __init__(self, store: Union[BoundaryDataStore, BoundarySource],
                 config: Optional[GeofenceConfig] = None,
                 settings: Optional[GeofencingSettings] = None,
                 violation_log: Optional[ViolationLog] = None,
                 reference_locations: Optional[Sequence[ReferenceLocation]] = None):

        self.settings = settings or GeofencingSettings()
        self.logger = get_logger(__name__)

        if isinstance(store, BoundarySource):
            store = BoundaryDataStore(store, name_property=self.settings.name_property)

        self.store = store
        self.cache = GeofenceDataCache(store)
        self.spatial_ops = SpatialOperations()
        self.resolver = RegionResolver(store, self.spatial_ops)
        self.policy = GeofencePolicyEngine(self.resolver, reference_locations)
        self.assignments = RegionAssignmentValidator(store)
        self.config = config or self.settings.default_geofence_config()
        self.violations = violation_log if violation_log is not None else ViolationLog(self.settings.violation_log_size)

    @classmethod
    def from_settings(cls, settings: GeofencingSettings, **kwargs: Any) -> "GeofencingService":
        """Service reading boundary data from settings.boundary_source"""

        configure_logging(settings.log_level)
        source = source_for_location(settings.boundary_source or "", settings.name_property,
                                     settings.http_timeout_seconds)
        return cls(source, settings=settings, **kwargs)

    @property
    def is_data_loaded(self) -> bool:
        return self.cache.is_loaded()

    @property
    def is_loading(self) -> bool:
        return self.cache.is_loading()

    def start_preload(self) -> None:
        """Begin loading boundary data in the background"""
        self.cache.start_preload()

    async def preload_geofence_data(self) -> bool:
        """Load boundary data; returns False (and logs) when loading fails"""

        try:
            await self.cache.preload()
        except DataLoadError as e:
            self.logger.warning(f"Failed to preload geofence data: {e}")
            return False
        return True

    def available_regions(self) -> List[str]:
        return self.store.names()

    def _resolve_config(self, config: Optional[GeofenceConfig]) -> GeofenceConfig:
        return config if config is not None else self.config

    async def _await_data(self, config: GeofenceConfig) -> None:
        if config.is_restricted and not self.cache.is_loaded():
            await self.cache.wait_ready()

    async def validate_point(self, lat: float, lng: float,
                             config: Optional[GeofenceConfig] = None) -> ValidationResult:
        """Validate a single point against the configured regions"""

        config = self._resolve_config(config)
        await self._await_data(config)

        result = self.policy.evaluate_point(lat, lng, config)

        if not result.is_valid:
            self._record_violation(result, Coordinate(lat, lng), config)

        return result

    async def validate_path(self, points: Sequence[Any],
                            config: Optional[GeofenceConfig] = None) -> ValidationResult:
        """Validate an ordered list of points, stopping at the first failure"""

        config = self._resolve_config(config)
        await self._await_data(config)

        result = self.policy.evaluate_path(points, config)

        if not result.is_valid:
            # Unparseable entries have no coordinate to report
            point = result.violating_point if result.violating_point is not None else Coordinate(math.nan, math.nan)
            self._record_violation(result, point, config)

        return result

    async def is_point_valid(self, lat: float, lng: float,
                             config: Optional[GeofenceConfig] = None) -> bool:
        result = await self.validate_point(lat, lng, config)
        return result.is_valid

    def _record_violation(self, result: ValidationResult, point: Coordinate, config: GeofenceConfig) -> None:
        violation_type = result.violation_type or ViolationType.UNKNOWN_VIOLATION

        self.violations.record(GeofenceViolation(
            point=point,
            timestamp=datetime.now(),
            type=violation_type.value,
            message=result.message,
            user_id=config.user_id
        ))

        self.logger.info(f"Geofence violation ({violation_type.value}) at ({point.lat}, {point.lng}) "
                         f"for user {config.user_id or 'unknown'}")

    def get_recent_violations(self, count: int = 10) -> List[GeofenceViolation]:
        return self.violations.recent(count)

    def clear_violations(self) -> None:
        self.violations.clear()

    async def validate_user_location(self, user_id: str, location: Any, assigned_states: Sequence[str],
                                     restrictions: Optional[UserRegionRestrictions] = None) -> UserLocationDecision:
        """Check whether a user may work at a location, suggesting one inside their regions if not"""

        restrictions = restrictions or UserRegionRestrictions()
        config = restrictions.to_geofence_config(user_id, assigned_states,
                                                 show_warnings=self.settings.show_warnings)

        try:
            point = Coordinate.parse(location)
        except (ValueError, KeyError, TypeError):
            result = ValidationResult(
                is_valid=False,
                violation_type=ViolationType.INVALID_COORDINATES,
                message=f"Invalid coordinates provided: {location!r}"
            )
            self._record_violation(result, Coordinate(math.nan, math.nan), config)
            return UserLocationDecision(
                is_allowed=False,
                message=result.message,
                violation_type=result.violation_type.value
            )

        result = await self.validate_point(point.lat, point.lng, config)

        if result.is_valid:
            return UserLocationDecision(
                is_allowed=True,
                message=result.message or "Location is within assigned regions",
                violation_type=result.violation_type.value if result.violation_type else None
            )

        suggested = None
        if assigned_states and point.is_within_range():
            nearest = self.policy.nearest_reference_location(point, assigned_states)
            if nearest is not None:
                suggested = nearest[0].coordinate
            elif self.store.loaded:
                region = next((self.store.get(s) for s in assigned_states if self.store.get(s)), None)
                if region is not None:
                    suggested = self.spatial_ops.region_centroid(region)

        return UserLocationDecision(
            is_allowed=False,
            message=result.message or "Location is outside assigned regions",
            violation_type=result.violation_type.value if result.violation_type else None,
            suggested_location=suggested
        )
