"""
Region Assignment Validator - Validate and build user region assignments

This module provides:
- Available region listing from boundary data
- Region grouping (North, South, ...) filtered to known regions
- State assignment validation (empty, unknown, duplicate, expiry)
- User region configuration creation, update and bulk assignment
"""

from typing import Dict, List, Optional, Sequence
from datetime import datetime

from regionfence.models.region_assignment import (
    AssignmentViolationType,
    BulkAssignmentResult,
    RegionAssignmentCheck,
    RegionAssignmentResult,
    UserRegionConfig,
    UserRegionRestrictions
)
from regionfence.modules.geofence_manager.boundary_store import BoundaryDataStore
from regionfence.utils.logger import get_logger

DEFAULT_REGION_GROUPS: Dict[str, List[str]] = {
    "North": [
        "Delhi", "Haryana", "Himachal Pradesh", "Jammu and Kashmir",
        "Ladakh", "Punjab", "Uttarakhand", "Uttar Pradesh"
    ],
    "South": [
        "Andhra Pradesh", "Karnataka", "Kerala", "Tamil Nadu", "Telangana", "Puducherry"
    ],
    "East": ["West Bengal", "Jharkhand", "Odisha", "Bihar"],
    "West": [
        "Gujarat", "Maharashtra", "Rajasthan", "Goa",
        "Daman and Diu", "Dadra and Nagar Haveli"
    ],
    "Northeast": [
        "Assam", "Meghalaya", "Manipur", "Mizoram",
        "Nagaland", "Tripura", "Arunachal Pradesh", "Sikkim"
    ],
    "Central": ["Madhya Pradesh", "Chhattisgarh"],
    "Islands": ["Andaman and Nicobar Islands", "Lakshadweep"]
}

class RegionAssignmentValidator:
    """Validate region assignments against loaded boundary data"""

    def __init__(self, store: BoundaryDataStore,
                 region_groups: Optional[Dict[str, List[str]]] = None):
        self.store = store
        self.region_groups = region_groups if region_groups is not None else DEFAULT_REGION_GROUPS
        self.logger = get_logger(__name__)

    def available_states(self) -> List[str]:
        """Sorted names of all regions that can be assigned"""
        return self.store.names()

    def group_states_by_region(self) -> Dict[str, List[str]]:
        """Region groups limited to states present in the boundary data"""

        available = set(self.available_states())
        return {
            group: [state for state in states if state in available]
            for group, states in self.region_groups.items()
        }

    def validate_state_assignments(self, states: Sequence[str]) -> RegionAssignmentCheck:
        """Validate a proposed list of assigned states"""

        result = RegionAssignmentCheck(is_valid=True, message="")

        if not self._validate_not_empty(states, result):
            return result

        if not self._validate_known_states(states, result):
            return result

        if not self._validate_no_duplicates(states, result):
            return result

        result.message = f"Successfully validated {len(states)} state assignments"
        return result

    def _validate_not_empty(self, states: Sequence[str], result: RegionAssignmentCheck) -> bool:
        if not states:
            result.is_valid = False
            result.message = "At least one state must be assigned"
            result.violation_type = AssignmentViolationType.NO_STATES
        return result.is_valid

    def _validate_known_states(self, states: Sequence[str], result: RegionAssignmentCheck) -> bool:
        available = self.available_states()
        invalid = [state for state in states if state not in self.store]

        if invalid:
            result.is_valid = False
            result.message = f"Invalid states found: {', '.join(invalid)}"
            result.violation_type = AssignmentViolationType.INVALID_STATE
            result.invalid_states = invalid
            result.suggestions = self._suggest_states(invalid, available)
        return result.is_valid

    def _validate_no_duplicates(self, states: Sequence[str], result: RegionAssignmentCheck) -> bool:
        if len(set(states)) != len(states):
            result.is_valid = False
            result.message = "Duplicate states found in assignment"
            result.violation_type = AssignmentViolationType.DUPLICATE_STATE
        return result.is_valid

    def _validate_expiry(self, valid_until: Optional[datetime], result: RegionAssignmentCheck) -> bool:
        if valid_until is not None and valid_until <= datetime.now():
            result.is_valid = False
            result.message = f"Assignment expiry {valid_until.isoformat()} is not in the future"
            result.violation_type = AssignmentViolationType.EXPIRED
        return result.is_valid

    def _suggest_states(self, invalid: Sequence[str], available: Sequence[str]) -> List[str]:
        """Case-insensitive substring matches for misspelled state names"""

        suggestions = []
        for name in invalid:
            lowered = name.lower()
            for candidate in available:
                candidate_lowered = candidate.lower()
                if lowered in candidate_lowered or candidate_lowered in lowered:
                    if candidate not in suggestions:
                        suggestions.append(candidate)
                    break
        return suggestions

    def create_user_region_config(self, user_id: str, assigned_states: Sequence[str], created_by: str,
                                  restrictions: Optional[UserRegionRestrictions] = None,
                                  valid_until: Optional[datetime] = None) -> RegionAssignmentResult:
        """Validate states and build the user's region configuration"""

        restrictions = restrictions or UserRegionRestrictions()
        check = self.validate_state_assignments(assigned_states)
        if check.is_valid:
            self._validate_expiry(valid_until, check)

        if not check.is_valid:
            self.logger.warning(f"Region assignment for {user_id} rejected: {check.message}")
            return RegionAssignmentResult(
                success=False,
                message=check.message,
                assigned_states=[],
                geofence_config=restrictions.to_geofence_config(user_id, []),
                validation_errors=list(check.invalid_states)
            )

        states = list(dict.fromkeys(assigned_states))
        user_config = UserRegionConfig(
            user_id=user_id,
            assigned_states=states,
            restrictions=restrictions,
            created_by=created_by,
            valid_until=valid_until
        )

        self.logger.info(f"Assigned {len(states)} states to {user_id} (by {created_by})")

        return RegionAssignmentResult(
            success=True,
            message=f"Successfully assigned {len(states)} states to user",
            assigned_states=states,
            geofence_config=user_config.geofence_config(),
            user_config=user_config
        )

    def update_user_region_config(self, current: UserRegionConfig, updated_by: str,
                                  assigned_states: Optional[Sequence[str]] = None,
                                  restrictions: Optional[UserRegionRestrictions] = None,
                                  valid_until: Optional[datetime] = None) -> RegionAssignmentResult:
        """Apply changes to an existing assignment"""

        if assigned_states is not None or valid_until is not None or current.is_expired():
            check = RegionAssignmentCheck(is_valid=True, message="")
            if valid_until is None and current.is_expired():
                check.is_valid = False
                check.message = "Assignment has expired; provide a new valid_until to renew it"
                check.violation_type = AssignmentViolationType.EXPIRED
            elif assigned_states is not None:
                check = self.validate_state_assignments(assigned_states)
            if check.is_valid:
                self._validate_expiry(valid_until, check)
            if not check.is_valid:
                return RegionAssignmentResult(
                    success=False,
                    message=check.message,
                    assigned_states=list(current.assigned_states),
                    geofence_config=current.geofence_config(),
                    user_config=current,
                    validation_errors=list(check.invalid_states)
                )

        user_config = UserRegionConfig(
            user_id=current.user_id,
            assigned_states=list(assigned_states) if assigned_states is not None else list(current.assigned_states),
            restrictions=restrictions or current.restrictions,
            created_by=current.created_by,
            created_at=current.created_at,
            updated_at=datetime.now(),
            valid_until=valid_until if valid_until is not None else current.valid_until
        )

        self.logger.info(f"Region assignment for {current.user_id} updated by {updated_by}")

        return RegionAssignmentResult(
            success=True,
            message="User region configuration updated successfully",
            assigned_states=list(user_config.assigned_states),
            geofence_config=user_config.geofence_config(),
            user_config=user_config
        )

    def bulk_assign_states(self, user_ids: Sequence[str], assigned_states: Sequence[str], created_by: str,
                           restrictions: Optional[UserRegionRestrictions] = None,
                           valid_until: Optional[datetime] = None) -> BulkAssignmentResult:
        """Assign the same states to several users"""

        check = self.validate_state_assignments(assigned_states)
        if not check.is_valid:
            return BulkAssignmentResult(
                successful=[],
                failed=[{"user_id": user_id, "error": check.message} for user_id in user_ids],
                summary=f"Bulk assignment failed: {check.message}"
            )

        successful = []
        failed = []

        for user_id in user_ids:
            result = self.create_user_region_config(user_id, assigned_states, created_by, restrictions, valid_until)
            if result.success:
                successful.append(user_id)
            else:
                failed.append({"user_id": user_id, "error": result.message})

        return BulkAssignmentResult(
            successful=successful,
            failed=failed,
            summary=f"Bulk assignment completed: {len(successful)} successful, {len(failed)} failed"
        )
