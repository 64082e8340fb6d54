"""
Region Resolver - Turn assigned region names into a permitted area test

This module provides:
- Name to geometry resolution with unknown-name diagnostics
- Multi-region containment with bounding box fast path
- Nearest region lookup for border tolerance checks
"""

import math
from typing import List, Optional, Sequence
from dataclasses import dataclass, field

from regionfence.exceptions import RegionDataUnavailableError
from regionfence.models.geofence import BoundaryRegion, Coordinate
from regionfence.modules.geofence_manager.boundary_store import BoundaryDataStore
from regionfence.modules.geofence_manager.spatial_operations import SpatialOperations
from regionfence.utils.logger import get_logger

@dataclass
class ResolvedRegions:
    """Regions found for a set of names, plus the names that were not"""
    regions: List[BoundaryRegion]
    unknown: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [f"Unknown region '{name}' ignored" for name in self.unknown]

@dataclass
class RegionMatch:
    """Outcome of testing a point against several regions"""
    matched: bool
    matched_region: Optional[BoundaryRegion] = None
    nearest_region: Optional[BoundaryRegion] = None
    nearest_distance: float = math.inf  # kilometers

class RegionResolver:
    """Resolves assigned region names and tests points against them"""

    def __init__(self, store: BoundaryDataStore, spatial_ops: Optional[SpatialOperations] = None):
        self.store = store
        self.spatial_ops = spatial_ops or SpatialOperations()
        self.logger = get_logger(__name__)

    def resolve(self, names: Sequence[str]) -> ResolvedRegions:
        """Look up each name; unknown names are skipped and reported"""

        if not self.store.loaded:
            raise RegionDataUnavailableError("Boundary data has not been loaded")

        regions: List[BoundaryRegion] = []
        unknown: List[str] = []
        seen = set()

        for name in names:
            if name in seen:
                continue
            seen.add(name)

            region = self.store.get(name)
            if region is None:
                self.logger.warning(f"Assigned region '{name}' not found in boundary data")
                unknown.append(name)
            else:
                regions.append(region)

        return ResolvedRegions(regions=regions, unknown=unknown)

    def is_in_any_region(self, point: Coordinate, regions: Sequence[BoundaryRegion]) -> RegionMatch:
        """
        Test a point against regions in order.

        Stops at the first containing region. Only when nothing matches is the
        nearest boundary distance computed; on ties the earliest region wins.
        """

        for region in regions:
            if self.spatial_ops.bounding_box_reject(point, region):
                continue
            if self.spatial_ops.point_in_region(point, region):
                return RegionMatch(matched=True, matched_region=region,
                                   nearest_region=region, nearest_distance=0.0)

        nearest_region = None
        nearest_distance = math.inf

        for region in regions:
            distance = self.spatial_ops.distance_to_region_boundary(point, region)
            if distance < nearest_distance:
                nearest_region = region
                nearest_distance = distance

        return RegionMatch(matched=False, nearest_region=nearest_region,
                           nearest_distance=nearest_distance)
