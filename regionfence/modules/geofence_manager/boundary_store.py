"""
Boundary Data Store - Load and serve immutable region geometry

This module provides:
- Boundary sources (embedded GeoJSON, GeoJSON file, HTTP, GeoDataFrame)
- GeoJSON Polygon / MultiPolygon parsing into BoundaryRegion objects
- Source selection from a configured location
- A store that loads once and serves regions by name
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence, Union

import aiohttp
import geopandas as gpd
from pyproj import CRS
from shapely.geometry import mapping

from regionfence.config import DEFAULT_NAME_PROPERTY
from regionfence.exceptions import DataLoadError, InvalidRegionGeometryError
from regionfence.models.geofence import BoundaryRegion, Coordinate
from regionfence.utils.logger import get_logger

WGS84 = CRS.from_epsg(4326)

class BoundarySource(ABC):
    """Supplies a GeoJSON FeatureCollection of named regions"""

    @abstractmethod
    async def fetch(self) -> Dict[str, Any]:
        """Return a GeoJSON FeatureCollection dict"""

    def describe(self) -> str:
        return self.__class__.__name__

class InMemoryBoundarySource(BoundarySource):
    """Embedded FeatureCollection"""

    def __init__(self, feature_collection: Dict[str, Any]):
        self.feature_collection = feature_collection

    async def fetch(self) -> Dict[str, Any]:
        return self.feature_collection

class GeoJSONFileSource(BoundarySource):
    """FeatureCollection stored in a GeoJSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def fetch(self) -> Dict[str, Any]:
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except OSError as e:
            raise DataLoadError(f"Cannot read boundary file {self.path}: {e}", source=str(self.path)) from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise DataLoadError(f"Boundary file {self.path} is not valid JSON: {e}", source=str(self.path)) from e

    def describe(self) -> str:
        return str(self.path)

class HttpBoundarySource(BoundarySource):
    """FeatureCollection served over HTTP (e.g. /india.json)"""

    def __init__(self, url: str, timeout_seconds: float = 30.0):
        self.url = url
        self.timeout_seconds = timeout_seconds

    async def fetch(self) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.url) as response:
                    if response.status != 200:
                        raise DataLoadError(
                            f"Failed to load boundary data: HTTP {response.status}", source=self.url
                        )
                    return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DataLoadError(f"Boundary data request failed: {e}", source=self.url) from e
        except json.JSONDecodeError as e:
            raise DataLoadError(f"Boundary data is not valid JSON: {e}", source=self.url) from e

    def describe(self) -> str:
        return self.url

class GeoDataFrameSource(BoundarySource):
    """Regions held in a GeoDataFrame, reprojected to WGS84 when needed"""

    def __init__(self, frame: gpd.GeoDataFrame, name_column: str = DEFAULT_NAME_PROPERTY):
        self.frame = frame
        self.name_column = name_column

    @classmethod
    def from_file(cls, path: Union[str, Path], name_column: str = DEFAULT_NAME_PROPERTY) -> "GeoDataFrameSource":
        """Read any vector format geopandas understands (shapefile, GeoPackage, GeoJSON)"""

        try:
            frame = gpd.read_file(path)
        except Exception as e:
            raise DataLoadError(f"Cannot read boundary file {path}: {e}", source=str(path)) from e
        return cls(frame, name_column=name_column)

    async def fetch(self) -> Dict[str, Any]:
        if self.name_column not in self.frame.columns:
            raise DataLoadError(f"GeoDataFrame has no '{self.name_column}' column")

        frame = self.frame
        if frame.crs is not None and not frame.crs.equals(WGS84):
            frame = frame.to_crs(WGS84)

        features = []
        for name, geometry in zip(frame[self.name_column], frame.geometry):
            features.append({
                "type": "Feature",
                "properties": {self.name_column: name},
                "geometry": mapping(geometry) if geometry is not None else None
            })

        return {"type": "FeatureCollection", "features": features}

    def describe(self) -> str:
        return f"GeoDataFrame[{len(self.frame)} rows]"

def source_for_location(location: str, name_property: str = DEFAULT_NAME_PROPERTY,
                        timeout_seconds: float = 30.0) -> BoundarySource:
    """Pick a source for a URL, GeoJSON path or other vector dataset path"""

    if not location:
        raise ValueError("Boundary source location is not configured")

    if location.startswith(("http://", "https://")):
        return HttpBoundarySource(location, timeout_seconds=timeout_seconds)

    if Path(location).suffix.lower() in [".json", ".geojson"]:
        return GeoJSONFileSource(location)

    return GeoDataFrameSource.from_file(location, name_column=name_property)

def _parse_ring(region_name: str, positions: Sequence[Any]) -> List[Coordinate]:
    if not isinstance(positions, (list, tuple)):
        raise InvalidRegionGeometryError(region_name, "ring must be a list of positions")

    ring = []
    for position in positions:
        if not isinstance(position, (list, tuple)) or len(position) < 2:
            raise InvalidRegionGeometryError(region_name, f"invalid position {position!r}")
        # GeoJSON positions are [lng, lat]
        ring.append(Coordinate(lat=float(position[1]), lng=float(position[0])))

    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])

    if len(ring) < 4:
        raise InvalidRegionGeometryError(region_name, "ring must have at least 4 positions")

    return ring

def parse_region_feature(feature: Dict[str, Any], name_property: str = DEFAULT_NAME_PROPERTY) -> Optional[BoundaryRegion]:
    """Convert one GeoJSON feature into a BoundaryRegion, None when it is not areal"""

    name = (feature.get("properties") or {}).get(name_property)
    if not name:
        raise InvalidRegionGeometryError("<unnamed>", f"feature has no '{name_property}' property")

    geometry = feature.get("geometry") or {}
    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")

    if geometry_type == "Polygon":
        polygons = [coordinates]
    elif geometry_type == "MultiPolygon":
        polygons = coordinates
    else:
        return None

    if not polygons:
        raise InvalidRegionGeometryError(name, "geometry has no polygons")

    parsed = [[_parse_ring(name, ring) for ring in polygon] for polygon in polygons]
    return BoundaryRegion.from_rings(name, parsed[0], parts=parsed[1:])

class BoundaryDataStore:
    """Loads region geometry once and serves it by name"""

    def __init__(self, source: BoundarySource, name_property: str = DEFAULT_NAME_PROPERTY):
        self.source = source
        self.name_property = name_property
        self.logger = get_logger(__name__)
        self._regions: Dict[str, BoundaryRegion] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> None:
        """Fetch and parse all regions; raises DataLoadError on failure"""

        if self._loaded:
            return

        self.logger.info(f"Loading boundary data from {self.source.describe()}")

        try:
            data = await self.source.fetch()
        except DataLoadError:
            raise
        except Exception as e:
            raise DataLoadError(f"Boundary source failed: {e}", source=self.source.describe()) from e

        regions = self._parse_feature_collection(data)

        self._regions = regions
        self._loaded = True
        self.logger.info(f"Loaded {len(regions)} boundary regions")

    def _parse_feature_collection(self, data: Any) -> Dict[str, BoundaryRegion]:
        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise DataLoadError("Boundary data must be a GeoJSON FeatureCollection",
                                source=self.source.describe())

        features = data.get("features")
        if not isinstance(features, list):
            raise DataLoadError("FeatureCollection has no features list", source=self.source.describe())

        regions: Dict[str, BoundaryRegion] = {}
        for index, feature in enumerate(features):
            try:
                region = parse_region_feature(feature, self.name_property)
            except InvalidRegionGeometryError as e:
                raise DataLoadError(f"Feature {index}: {e}", source=self.source.describe()) from e
            except (TypeError, ValueError, AttributeError) as e:
                raise DataLoadError(f"Feature {index} is malformed: {e}", source=self.source.describe()) from e

            if region is None:
                geometry_type = ((feature.get("geometry") or {}).get("type"))
                self.logger.warning(f"Skipping feature {index}: unsupported geometry type {geometry_type}")
                continue

            if region.name in regions:
                self.logger.warning(f"Duplicate region name '{region.name}', keeping first definition")
                continue

            regions[region.name] = region

        return regions

    def get(self, name: str) -> Optional[BoundaryRegion]:
        """Region by name, None when unknown"""
        return self._regions.get(name)

    def names(self) -> List[str]:
        """Sorted names of all loaded regions"""
        return sorted(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, name: str) -> bool:
        return name in self._regions
