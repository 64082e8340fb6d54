"""
Region Assignment Models - User to region assignment records
"""

from typing import Dict, List, Any, Optional, Sequence
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum

from regionfence.models.geofence import Coordinate, GeofenceConfig

class AssignmentViolationType(Enum):
    """Reasons a region assignment is rejected"""
    NO_STATES = "no_states"
    INVALID_STATE = "invalid_state"
    DUPLICATE_STATE = "duplicate_state"
    EXPIRED = "expired"

@dataclass
class UserRegionRestrictions:
    """Geofencing restrictions attached to a user's assignment"""
    strict_geofencing: bool = True
    allow_near_border: bool = False
    border_tolerance: float = 10.0  # kilometers

    def to_geofence_config(self, user_id: str, assigned_states: Sequence[str],
                           show_warnings: bool = True) -> GeofenceConfig:
        return GeofenceConfig(
            strict_mode=self.strict_geofencing,
            show_warnings=show_warnings,
            allow_near_border=self.allow_near_border,
            border_tolerance=self.border_tolerance,
            assigned_states=tuple(assigned_states),
            user_id=user_id
        )

@dataclass
class UserRegionConfig:
    """A user's region assignment"""
    user_id: str
    assigned_states: List[str]
    restrictions: UserRegionRestrictions
    created_by: str
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    valid_until: Optional[datetime] = None

    def is_expired(self, at: Optional[datetime] = None) -> bool:
        """True once valid_until has passed; assignments without an expiry never expire"""
        if self.valid_until is None:
            return False
        return (at or datetime.now()) >= self.valid_until

    def geofence_config(self) -> GeofenceConfig:
        return self.restrictions.to_geofence_config(self.user_id, self.assigned_states)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "assigned_states": list(self.assigned_states),
            "restrictions": {
                "strict_geofencing": self.restrictions.strict_geofencing,
                "allow_near_border": self.restrictions.allow_near_border,
                "border_tolerance": self.restrictions.border_tolerance
            },
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "valid_until": self.valid_until.isoformat() if self.valid_until else None
        }

@dataclass
class RegionAssignmentCheck:
    """Validation of a proposed list of states"""
    is_valid: bool
    message: str
    violation_type: Optional[AssignmentViolationType] = None
    invalid_states: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

@dataclass
class RegionAssignmentResult:
    """Outcome of assigning states to a user"""
    success: bool
    message: str
    assigned_states: List[str]
    geofence_config: GeofenceConfig
    user_config: Optional[UserRegionConfig] = None
    validation_errors: List[str] = field(default_factory=list)

@dataclass
class BulkAssignmentResult:
    """Outcome of assigning the same states to many users"""
    successful: List[str]
    failed: List[Dict[str, str]]
    summary: str

@dataclass
class UserLocationDecision:
    """Whether a user may work at a location"""
    is_allowed: bool
    message: str
    violation_type: Optional[str] = None
    suggested_location: Optional[Coordinate] = None
