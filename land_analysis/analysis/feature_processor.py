import math
from typing import Optional

import structlog

from land_analysis.analysis.classification import classify
from land_analysis.models.feature import (
    AreaSource,
    FeatureProperties,
    FeatureType,
    Geometry,
    ProcessedFeature,
    RawFeature,
)

logger = structlog.get_logger()

# Web Mercator half-circumference (metres)
WEB_MERCATOR_EXTENT = 20037508.34

SQUARE_METERS_PER_HECTARE = 10000
SQUARE_METERS_PER_ACRE = 4046.86


def sqm_to_hectares(sqm: float) -> float:
    return sqm / SQUARE_METERS_PER_HECTARE


def sqm_to_acres(sqm: float) -> float:
    return sqm / SQUARE_METERS_PER_ACRE


def to_web_mercator(lon: float, lat: float) -> tuple[float, float]:
    """Project a WGS84 lon/lat pair to Web Mercator metres."""
    x = lon * WEB_MERCATOR_EXTENT / 180
    y = math.log(math.tan((90 + lat) * math.pi / 360)) / (math.pi / 180)
    y = y * WEB_MERCATOR_EXTENT / 180
    return x, y


def calculate_ring_area(ring) -> float:
    """
    Planar area of a lon/lat ring using the shoelace formula.

    The ring is projected to Web Mercator first. Good for parcel-scale areas,
    not geodesically exact.
    """
    if not ring or not isinstance(ring, (list, tuple)) or len(ring) < 3:
        return 0.0

    projected = [to_web_mercator(float(coord[0]), float(coord[1])) for coord in ring]

    area = 0.0
    n = len(projected)
    for i in range(n):
        j = (i + 1) % n
        area += projected[i][0] * projected[j][1]
        area -= projected[j][0] * projected[i][1]

    return abs(area) / 2


def calculate_geometry_area(geometry: Optional[Geometry]) -> float:
    """
    Area in square metres of a Polygon or MultiPolygon.

    Only outer rings are measured; holes are not subtracted. Other geometry
    types have zero area.
    """
    if geometry is None or not geometry.coordinates:
        return 0.0

    if geometry.type == "Polygon":
        return calculate_ring_area(geometry.coordinates[0])

    if geometry.type == "MultiPolygon":
        total = 0.0
        for polygon in geometry.coordinates:
            if polygon:
                total += calculate_ring_area(polygon[0])
        return total

    return 0.0


def process_feature(feature: Optional[RawFeature]) -> ProcessedFeature:
    """
    Resolve area and classification for a single survey feature.

    Area from the survey API wins over geometric calculation. Malformed
    geometry degrades to zero area; this function does not raise.
    """
    # Features without geometry cannot be measured or trusted for classification
    if feature is None or feature.geometry is None:
        return ProcessedFeature(
            area=0,
            area_hectares=0,
            area_acres=0,
            area_source=AreaSource.CALCULATED,
            classified_type=FeatureType.UNKNOWN.value,
            geometry=None,
            source_properties=feature.properties if feature is not None else FeatureProperties(),
        )

    properties = feature.properties
    geometry = feature.geometry
    fid = properties.fid or "unknown"

    api_area = properties.api_area()
    if api_area is not None:
        area, source_field = api_area
        area_source = AreaSource.API_PROVIDED
        logger.debug("Using API area", fid=fid, area_m2=area, field=source_field)
    else:
        source_field = None
        area_source = AreaSource.CALCULATED
        try:
            area = calculate_geometry_area(geometry)
        except (TypeError, ValueError, IndexError, KeyError) as e:
            logger.warning(
                "Failed to calculate area from geometry",
                fid=fid,
                geometry_type=geometry.type,
                error=str(e),
            )
            area = 0.0

        if not math.isfinite(area):
            logger.warning("Non-finite geometry area", fid=fid, geometry_type=geometry.type)
            area = 0.0

    logger.debug("Feature area resolved", fid=fid, area_m2=round(area, 2), source=area_source.value)

    return ProcessedFeature(
        area=area,
        area_hectares=sqm_to_hectares(area),
        area_acres=sqm_to_acres(area),
        area_source=area_source,
        area_source_field=source_field,
        classified_type=classify(properties),
        geometry=geometry,
        source_properties=properties,
    )
