"""
Geofence Policy Engine - Pass / fail / warn decisions for points and paths

Decision order for a single point:
1. No assigned states: valid (unrestricted user)
2. Coordinates out of range: invalid_coordinates
3. Boundary data not resident: valid, tagged data_unavailable
4. Inside any assigned region: valid
5. Strict mode: outside_all_regions
6. Near-border allowance (distance <= tolerance): valid, near_border_warning
   when warnings are shown
7. Otherwise: outside_all_regions

Unexpected errors while evaluating are reported as unknown_violation.
"""

import math
from typing import Any, Iterable, List, Optional, Sequence

from regionfence.exceptions import RegionDataUnavailableError
from regionfence.models.geofence import (
    Coordinate,
    GeofenceConfig,
    ReferenceLocation,
    ValidationResult,
    ViolationType
)
from regionfence.modules.geofence_manager.region_resolver import RegionResolver, ResolvedRegions
from regionfence.utils.logger import get_logger

class GeofencePolicyEngine:
    """Single source of truth for geofence decisions"""

    def __init__(self, resolver: RegionResolver,
                 reference_locations: Optional[Sequence[ReferenceLocation]] = None):
        self.resolver = resolver
        self.spatial_ops = resolver.spatial_ops
        self.reference_locations = list(reference_locations or [])
        self.logger = get_logger(__name__)

    def evaluate_point(self, lat: float, lng: float, config: GeofenceConfig,
                       resolved: Optional[ResolvedRegions] = None) -> ValidationResult:
        """Validate one point; never raises"""

        try:
            return self._evaluate_point(lat, lng, config, resolved)
        except RegionDataUnavailableError as e:
            self.logger.warning(f"data_unavailable: {e}; allowing ({lat}, {lng})")
            return self.data_unavailable_result()
        except Exception as e:
            self.logger.exception(f"Geofence evaluation failed for ({lat}, {lng}): {e}")
            return ValidationResult(
                is_valid=False,
                violation_type=ViolationType.UNKNOWN_VIOLATION,
                message="Validation error occurred",
                violating_point=Coordinate(lat, lng)
            )

    def _evaluate_point(self, lat: float, lng: float, config: GeofenceConfig,
                        resolved: Optional[ResolvedRegions]) -> ValidationResult:

        if not config.is_restricted:
            return ValidationResult(is_valid=True, message="No geographic restriction applies")

        point = Coordinate(lat, lng)
        if not point.is_within_range():
            self.logger.debug(f"Rejected out-of-range coordinates ({lat}, {lng})")
            return ValidationResult(
                is_valid=False,
                violation_type=ViolationType.INVALID_COORDINATES,
                message=f"Invalid coordinates provided: lat={lat}, lng={lng}",
                suggested_action="Provide a latitude between -90 and 90 and a longitude between -180 and 180",
                violating_point=point
            )

        if resolved is None:
            resolved = self.resolver.resolve(config.assigned_states)

        allowed_states = list(config.assigned_states)
        match = self.resolver.is_in_any_region(point, resolved.regions)

        if match.matched:
            self.logger.debug(f"({lat}, {lng}) inside {match.matched_region.name}")
            return ValidationResult(
                is_valid=True,
                message=f"Location validated within {match.matched_region.name}",
                nearest_region=match.matched_region.name,
                nearest_distance_km=0.0,
                warnings=resolved.warnings
            )

        nearest_name = match.nearest_region.name if match.nearest_region else None
        nearest_distance = match.nearest_distance if match.nearest_region else None

        if not config.strict_mode and config.allow_near_border and match.nearest_region is not None \
                and match.nearest_distance <= config.border_tolerance:
            message = (f"Location is {match.nearest_distance:.1f} km outside {nearest_name}, "
                       f"within the {config.border_tolerance:.1f} km border tolerance")
            self.logger.debug(f"({lat}, {lng}) accepted near border of {nearest_name}")
            return ValidationResult(
                is_valid=True,
                violation_type=ViolationType.NEAR_BORDER_WARNING if config.show_warnings else None,
                message=message,
                nearest_region=nearest_name,
                nearest_distance_km=nearest_distance,
                warnings=resolved.warnings + ([message] if config.show_warnings else [])
            )

        return ValidationResult(
            is_valid=False,
            violation_type=ViolationType.OUTSIDE_ALL_REGIONS,
            message=self._outside_message(point, allowed_states, resolved, nearest_name, nearest_distance),
            suggested_action=f"Select a location within your assigned regions: {', '.join(allowed_states)}",
            allowed_states=allowed_states,
            violating_point=point,
            nearest_region=nearest_name,
            nearest_distance_km=nearest_distance,
            warnings=resolved.warnings
        )

    def _outside_message(self, point: Coordinate, allowed_states: List[str], resolved: ResolvedRegions,
                         nearest_name: Optional[str], nearest_distance: Optional[float]) -> str:

        if nearest_name is None:
            return (f"None of the assigned regions could be resolved: {', '.join(resolved.unknown)}. "
                    f"Location cannot be validated")

        message = (f"Location is not within your assigned regions ({', '.join(allowed_states)}). "
                   f"Nearest region is {nearest_name}, {nearest_distance:.1f} km away")

        reference = self.nearest_reference_location(point, allowed_states)
        if reference is not None:
            location, distance = reference
            message += f". Nearest reference location is {location.name}, {location.state} ({distance:.1f} km away)"

        return message

    def nearest_reference_location(self, point: Coordinate, states: Optional[Iterable[str]] = None):
        """Closest reference location, optionally limited to the given states"""

        candidates = self.reference_locations
        if states is not None:
            allowed = set(states)
            candidates = [loc for loc in candidates if loc.state in allowed]

        best = None
        best_distance = math.inf
        for location in candidates:
            distance = self.spatial_ops.calculate_distance(point.lat, point.lng, location.lat, location.lng)
            if distance < best_distance:
                best = location
                best_distance = distance

        if best is None:
            return None
        return best, best_distance

    def data_unavailable_result(self) -> ValidationResult:
        message = "Boundary data unavailable; location accepted without geofence check"
        return ValidationResult(
            is_valid=True,
            violation_type=ViolationType.DATA_UNAVAILABLE,
            message=message,
            warnings=[message]
        )

    def evaluate_path(self, points: Sequence[Any], config: GeofenceConfig) -> ValidationResult:
        """
        Validate points in order and stop at the first failure.

        The failing result carries violating_point and a "Point N:" prefix.
        When every point passes, warnings from individual points are
        concatenated (duplicates dropped) on the single aggregate result.
        """

        if not points:
            return ValidationResult(is_valid=True, message="No points to validate")

        if not config.is_restricted:
            return ValidationResult(is_valid=True, message="No geographic restriction applies")

        resolved = None
        if self.resolver.store.loaded:
            resolved = self.resolver.resolve(config.assigned_states)

        warnings: List[str] = []
        flags = set()

        for index, raw_point in enumerate(points):
            try:
                point = Coordinate.parse(raw_point)
            except (ValueError, KeyError, TypeError):
                return ValidationResult(
                    is_valid=False,
                    violation_type=ViolationType.INVALID_COORDINATES,
                    message=f"Point {index + 1}: Invalid coordinates provided: {raw_point!r}",
                    suggested_action="Provide each point as a {lat, lng} pair"
                )

            result = self.evaluate_point(point.lat, point.lng, config, resolved)

            if not result.is_valid:
                result.message = f"Point {index + 1}: {result.message}"
                result.violating_point = point
                return result

            if result.violation_type is not None:
                flags.add(result.violation_type)
            for warning in result.warnings:
                if warning not in warnings:
                    warnings.append(warning)

        violation_type = None
        if ViolationType.DATA_UNAVAILABLE in flags:
            violation_type = ViolationType.DATA_UNAVAILABLE
        elif ViolationType.NEAR_BORDER_WARNING in flags:
            violation_type = ViolationType.NEAR_BORDER_WARNING

        return ValidationResult(
            is_valid=True,
            violation_type=violation_type,
            message=f"All {len(points)} points validated successfully",
            warnings=warnings
        )
