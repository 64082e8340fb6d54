import json

import geopandas as gpd
import pytest
from shapely.geometry import box

from regionfence.exceptions import DataLoadError, InvalidRegionGeometryError
from regionfence.models.geofence import Coordinate
from regionfence.modules.geofence_manager.boundary_store import (
    BoundaryDataStore,
    BoundarySource,
    GeoDataFrameSource,
    GeoJSONFileSource,
    HttpBoundarySource,
    InMemoryBoundarySource,
    parse_region_feature,
    source_for_location
)
from regionfence.modules.geofence_manager.spatial_operations import SpatialOperations

from conftest import feature, feature_collection, polygon, square


@pytest.mark.asyncio
async def test_load_populates_regions(loaded_store):
    assert loaded_store.loaded
    assert len(loaded_store) == 4
    assert loaded_store.names() == ["Archipelago", "HoleState", "OtherState", "TestState"]
    assert "TestState" in loaded_store


@pytest.mark.asyncio
async def test_unknown_region_is_none(loaded_store):
    assert loaded_store.get("Atlantis") is None


@pytest.mark.asyncio
async def test_region_rings_and_bounds(loaded_store):
    region = loaded_store.get("HoleState")
    assert len(region.rings) == 2
    assert region.bounds.min_lat == 10.0
    assert region.bounds.max_lng == 14.0
    # GeoJSON [lng, lat] becomes Coordinate(lat, lng)
    assert region.rings[0][1] == Coordinate(lat=10.0, lng=14.0)


@pytest.mark.asyncio
async def test_multipolygon_region_has_parts(loaded_store):
    region = loaded_store.get("Archipelago")
    assert len(region.parts) == 1
    assert region.bounds.min_lng == 20.0
    assert region.bounds.max_lng == 23.0

    ops = SpatialOperations()
    assert ops.point_in_region(Coordinate(0.5, 20.5), region)
    assert ops.point_in_region(Coordinate(0.5, 22.5), region)
    assert not ops.point_in_region(Coordinate(0.5, 21.5), region)


@pytest.mark.asyncio
async def test_load_is_idempotent(loaded_store):
    before = loaded_store.get("TestState")
    await loaded_store.load()
    assert loaded_store.get("TestState") is before


@pytest.mark.asyncio
async def test_unclosed_ring_is_closed():
    open_ring = square(0.0, 0.0, 1.0, 1.0)[:-1]
    store = BoundaryDataStore(InMemoryBoundarySource(
        feature_collection(feature("TestState", polygon(open_ring)))
    ))
    await store.load()

    ring = store.get("TestState").rings[0]
    assert len(ring) == 5
    assert ring[0] == ring[-1]


@pytest.mark.asyncio
async def test_self_intersecting_ring_fails_load():
    bowtie = [[0.0, 0.0], [1.0, 1.0], [1.0, 0.0], [0.0, 1.0], [0.0, 0.0]]
    store = BoundaryDataStore(InMemoryBoundarySource(
        feature_collection(feature("Bowtie", polygon(bowtie)))
    ))

    with pytest.raises(DataLoadError) as exc_info:
        await store.load()

    assert isinstance(exc_info.value.__cause__, InvalidRegionGeometryError)
    assert not store.loaded


def test_parse_feature_rejects_short_ring():
    with pytest.raises(InvalidRegionGeometryError):
        parse_region_feature(feature("Tiny", polygon([[0.0, 0.0], [1.0, 0.0], [0.0, 0.0]])))


@pytest.mark.parametrize("data", [
    [],
    {"type": "Feature"},
    {"type": "FeatureCollection"},
    {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": {}, "geometry": None}]},
    {"type": "FeatureCollection", "features": [feature("Broken", polygon([["a", "b"]]))]},
])
@pytest.mark.asyncio
async def test_malformed_data_raises_data_load_error(data):
    store = BoundaryDataStore(InMemoryBoundarySource(data))

    with pytest.raises(DataLoadError):
        await store.load()


@pytest.mark.asyncio
async def test_non_areal_features_are_skipped():
    store = BoundaryDataStore(InMemoryBoundarySource(feature_collection(
        feature("Capital", {"type": "Point", "coordinates": [0.5, 0.5]}),
        feature("TestState", polygon(square(0.0, 0.0, 1.0, 1.0)))
    )))
    await store.load()

    assert store.names() == ["TestState"]


@pytest.mark.asyncio
async def test_duplicate_names_keep_first_definition():
    store = BoundaryDataStore(InMemoryBoundarySource(feature_collection(
        feature("TestState", polygon(square(0.0, 0.0, 1.0, 1.0))),
        feature("TestState", polygon(square(5.0, 5.0, 6.0, 6.0)))
    )))
    await store.load()

    assert store.get("TestState").bounds.max_lat == 1.0


@pytest.mark.asyncio
async def test_custom_name_property():
    data = {"type": "FeatureCollection", "features": [{
        "type": "Feature",
        "properties": {"name": "TestState"},
        "geometry": polygon(square(0.0, 0.0, 1.0, 1.0))
    }]}
    store = BoundaryDataStore(InMemoryBoundarySource(data), name_property="name")
    await store.load()

    assert store.names() == ["TestState"]


@pytest.mark.asyncio
async def test_unexpected_source_error_is_wrapped():
    class BrokenSource(BoundarySource):
        async def fetch(self):
            raise RuntimeError("socket closed")

    with pytest.raises(DataLoadError, match="socket closed"):
        await BoundaryDataStore(BrokenSource()).load()


@pytest.mark.asyncio
async def test_geojson_file_source(tmp_path, boundary_data):
    path = tmp_path / "india.json"
    path.write_text(json.dumps(boundary_data), encoding="utf-8")

    store = BoundaryDataStore(GeoJSONFileSource(path))
    await store.load()

    assert "TestState" in store


@pytest.mark.asyncio
async def test_geojson_file_source_missing_file(tmp_path):
    source = GeoJSONFileSource(tmp_path / "missing.json")

    with pytest.raises(DataLoadError) as exc_info:
        await source.fetch()
    assert exc_info.value.source == str(tmp_path / "missing.json")


@pytest.mark.asyncio
async def test_geojson_file_source_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DataLoadError):
        await GeoJSONFileSource(path).fetch()


@pytest.mark.asyncio
async def test_geodataframe_source():
    frame = gpd.GeoDataFrame({"st_nm": ["TestState"]}, geometry=[box(0.0, 0.0, 1.0, 1.0)], crs="EPSG:4326")
    store = BoundaryDataStore(GeoDataFrameSource(frame))
    await store.load()

    region = store.get("TestState")
    assert SpatialOperations().point_in_region(Coordinate(0.5, 0.5), region)


@pytest.mark.asyncio
async def test_geodataframe_source_reprojects_to_wgs84():
    frame = gpd.GeoDataFrame(
        {"st_nm": ["TestState"]}, geometry=[box(0.0, 0.0, 1.0, 1.0)], crs="EPSG:4326"
    ).to_crs("EPSG:3857")

    store = BoundaryDataStore(GeoDataFrameSource(frame))
    await store.load()

    bounds = store.get("TestState").bounds
    assert bounds.max_lat == pytest.approx(1.0, abs=1e-6)
    assert bounds.max_lng == pytest.approx(1.0, abs=1e-6)


@pytest.mark.asyncio
async def test_geodataframe_source_missing_column():
    frame = gpd.GeoDataFrame({"name": ["TestState"]}, geometry=[box(0.0, 0.0, 1.0, 1.0)], crs="EPSG:4326")

    with pytest.raises(DataLoadError):
        await BoundaryDataStore(GeoDataFrameSource(frame)).load()


def test_source_for_location(tmp_path):
    assert isinstance(source_for_location("https://maps.example.com/india.json"), HttpBoundarySource)
    assert isinstance(source_for_location(str(tmp_path / "india.geojson")), GeoJSONFileSource)

    with pytest.raises(ValueError):
        source_for_location("")

    with pytest.raises(DataLoadError):
        source_for_location(str(tmp_path / "missing.shp"))
