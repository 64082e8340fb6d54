"""
Geofencing Settings - Process-level configuration for regionfence

This module provides:
- Default geofence policy values
- Boundary source location (file, URL, vector dataset)
- Loading settings from dicts, JSON files and environment variables
"""

import json
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, Union, Mapping

from regionfence.models.geofence import GeofenceConfig

DEFAULT_NAME_PROPERTY = "st_nm"

ENV_PREFIX = "REGIONFENCE_"

def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ["true", "1", "yes", "on"]

@dataclass
class GeofencingSettings:
    """Settings shared by every GeofencingService in the process"""
    strict_mode: bool = True
    show_warnings: bool = True
    allow_near_border: bool = False
    border_tolerance_km: float = 10.0
    name_property: str = DEFAULT_NAME_PROPERTY
    boundary_source: Optional[str] = None
    http_timeout_seconds: float = 30.0
    violation_log_size: Optional[int] = 1000
    log_level: str = "INFO"

    def __post_init__(self):
        if self.border_tolerance_km < 0:
            raise ValueError("border_tolerance_km must be non-negative")
        if self.violation_log_size is not None and self.violation_log_size <= 0:
            raise ValueError("violation_log_size must be positive")

    def default_geofence_config(self, user_id: Optional[str] = None,
                                assigned_states: Optional[list] = None) -> GeofenceConfig:
        """Geofence policy built from these defaults"""

        return GeofenceConfig(
            strict_mode=self.strict_mode,
            show_warnings=self.show_warnings,
            allow_near_border=self.allow_near_border,
            border_tolerance=self.border_tolerance_km,
            assigned_states=tuple(assigned_states) if assigned_states is not None else None,
            user_id=user_id
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeofencingSettings":
        """Build settings, ignoring unknown keys"""

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "GeofencingSettings":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GeofencingSettings":
        """Read REGIONFENCE_* variables, e.g. REGIONFENCE_BORDER_TOLERANCE_KM=5"""

        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue

            if f.name in ["strict_mode", "show_warnings", "allow_near_border"]:
                data[f.name] = _parse_bool(raw)
            elif f.name in ["border_tolerance_km", "http_timeout_seconds"]:
                data[f.name] = float(raw)
            elif f.name == "violation_log_size":
                data[f.name] = int(raw) if raw.strip() else None
            else:
                data[f.name] = raw

        return cls(**data)
