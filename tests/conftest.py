"""
Shared fixtures for regionfence tests

Boundary data uses small synthetic regions near the equator so distances are
easy to reason about (0.05 degrees of latitude is about 5.56 km).
"""

import asyncio
from typing import Any, Dict, List

import pytest
import pytest_asyncio

from regionfence.exceptions import DataLoadError
from regionfence.models.geofence import GeofenceConfig, ReferenceLocation
from regionfence.modules.geofence_manager.boundary_store import (
    BoundaryDataStore,
    BoundarySource,
    InMemoryBoundarySource
)
from regionfence.modules.geofence_manager.geofence_controller import GeofencingService


def square(min_lng: float, min_lat: float, max_lng: float, max_lat: float) -> List[List[float]]:
    """Closed counter-clockwise ring of [lng, lat] positions"""
    return [
        [min_lng, min_lat],
        [max_lng, min_lat],
        [max_lng, max_lat],
        [min_lng, max_lat],
        [min_lng, min_lat]
    ]


def feature(name: str, geometry: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "Feature", "properties": {"st_nm": name}, "geometry": geometry}


def polygon(*rings: List[List[float]]) -> Dict[str, Any]:
    return {"type": "Polygon", "coordinates": list(rings)}


def feature_collection(*features: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": list(features)}


class CountingSource(BoundarySource):
    """Source that counts fetches and yields to the loop before answering"""

    def __init__(self, data: Dict[str, Any], delay: float = 0.01):
        self.data = data
        self.delay = delay
        self.fetch_count = 0

    async def fetch(self) -> Dict[str, Any]:
        self.fetch_count += 1
        await asyncio.sleep(self.delay)
        return self.data


class FlakySource(BoundarySource):
    """Fails the first `failures` fetches, then succeeds"""

    def __init__(self, data: Dict[str, Any], failures: int = 1):
        self.data = data
        self.failures = failures
        self.fetch_count = 0

    async def fetch(self) -> Dict[str, Any]:
        self.fetch_count += 1
        if self.fetch_count <= self.failures:
            raise DataLoadError("boundary server unavailable", source="flaky")
        return self.data


@pytest.fixture
def boundary_data() -> Dict[str, Any]:
    return feature_collection(
        feature("TestState", polygon(square(0.0, 0.0, 1.0, 1.0))),
        feature("OtherState", polygon(square(5.0, 5.0, 6.0, 6.0))),
        feature("HoleState", polygon(square(10.0, 10.0, 14.0, 14.0), square(11.0, 11.0, 13.0, 13.0))),
        feature("Archipelago", {
            "type": "MultiPolygon",
            "coordinates": [
                [square(20.0, 0.0, 21.0, 1.0)],
                [square(22.0, 0.0, 23.0, 1.0)]
            ]
        })
    )


@pytest.fixture
def store(boundary_data) -> BoundaryDataStore:
    return BoundaryDataStore(InMemoryBoundarySource(boundary_data))


@pytest_asyncio.fixture
async def loaded_store(store) -> BoundaryDataStore:
    await store.load()
    return store


@pytest.fixture
def reference_locations() -> List[ReferenceLocation]:
    return [
        ReferenceLocation("Center City", 0.5, 0.5, "TestState"),
        ReferenceLocation("Far City", 5.5, 5.5, "OtherState")
    ]


@pytest.fixture
def service(store, reference_locations) -> GeofencingService:
    return GeofencingService(store, reference_locations=reference_locations)


@pytest_asyncio.fixture
async def loaded_service(service) -> GeofencingService:
    assert await service.preload_geofence_data()
    return service


@pytest.fixture
def strict_config() -> GeofenceConfig:
    return GeofenceConfig(assigned_states=("TestState",), user_id="user-1")


@pytest.fixture
def lenient_config() -> GeofenceConfig:
    return GeofenceConfig(
        strict_mode=False,
        allow_near_border=True,
        border_tolerance=10.0,
        assigned_states=("TestState",),
        user_id="user-1"
    )
