import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AreaSource(str, Enum):
    API_PROVIDED = "api-provided"
    CALCULATED = "calculated"


class FeatureType(str, Enum):
    RESIDENTIAL_BUILDING = "residential_building"
    COMMERCIAL_BUILDING = "commercial_building"
    AGRICULTURAL_BUILDING = "agricultural_building"
    BUILDING = "building"
    AGRICULTURAL_LAND = "agricultural_land"
    GARDEN_RECREATION = "garden_recreation"
    NATURAL_LAND = "natural_land"
    LAND = "land"
    WATER = "water"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


class Geometry(BaseModel):
    """
    GeoJSON geometry in WGS84 lon/lat.

    Type and coordinates are kept exactly as received, valid or not; only
    Polygon and MultiPolygon are measured downstream.
    """
    model_config = ConfigDict(extra="allow")

    type: Any = None
    coordinates: Any = None


class FeatureProperties(BaseModel):
    """
    Typed view of a survey feature's property bag.

    OSMasterMap values arrive with braces (e.g. "{Buildings}"); they are
    kept raw here and normalised during classification.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    fid: Optional[str] = None
    toid: Optional[str] = None
    primary_uprn: Optional[str] = Field(default=None, alias="primaryUPRN")

    theme: Optional[str] = None
    descriptive_group: Optional[str] = Field(default=None, alias="descriptiveGroup")
    descriptive_term: Optional[str] = Field(default=None, alias="descriptiveTerm")

    # Areas pre-computed by the survey API (square metres)
    area_m2: Optional[float] = None
    area: Optional[float] = None
    calculated_area: Optional[float] = Field(default=None, alias="calculatedArea")

    @field_validator("fid", "toid", "primary_uprn", mode="before")
    @classmethod
    def coerce_identifier(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator("theme", "descriptive_group", "descriptive_term", mode="before")
    @classmethod
    def coerce_hint(cls, v):
        """Hints are sometimes delivered as lists of OSMasterMap terms."""
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return ",".join(str(item) for item in v)
        return str(v)

    @field_validator("area_m2", "area", "calculated_area", mode="before")
    @classmethod
    def coerce_area(cls, v):
        """Unparseable area values are treated as absent."""
        if v is None or v == "":
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        return value if math.isfinite(value) else None

    def api_area(self) -> Optional[tuple[float, str]]:
        """Return the first usable API-supplied area and the field it came from."""
        for field_name, value in (
            ("area_m2", self.area_m2),
            ("area", self.area),
            ("calculatedArea", self.calculated_area),
        ):
            if value is not None and value > 0:
                return value, field_name
        return None


class RawFeature(BaseModel):
    """A GeoJSON feature as delivered by the survey feature provider."""
    model_config = ConfigDict(extra="allow")

    type: Any = "Feature"
    geometry: Optional[Geometry] = None
    properties: FeatureProperties = Field(default_factory=FeatureProperties)

    @field_validator("geometry", mode="before")
    @classmethod
    def wrap_malformed_geometry(cls, v):
        """Non-object geometry is carried through as raw coordinates."""
        if v is None or isinstance(v, (Mapping, Geometry)):
            return v
        return {"type": None, "coordinates": v}

    @field_validator("properties", mode="before")
    @classmethod
    def default_properties(cls, v):
        if v is None or not isinstance(v, (Mapping, FeatureProperties)):
            return {}
        return v


class ProcessedFeature(BaseModel):
    """A feature with resolved area and classification."""
    area: float = Field(ge=0)  # square metres
    area_hectares: float = Field(ge=0)
    area_acres: float = Field(ge=0)
    area_source: AreaSource
    area_source_field: Optional[str] = None
    classified_type: str = FeatureType.UNKNOWN.value
    geometry: Optional[Geometry] = None
    source_properties: FeatureProperties = Field(default_factory=FeatureProperties)

    @property
    def is_classified(self) -> bool:
        return self.classified_type != FeatureType.UNKNOWN.value
