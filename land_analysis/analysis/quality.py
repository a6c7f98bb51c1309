from typing import Optional

from pydantic import BaseModel, Field

from land_analysis.models.feature import ProcessedFeature, RawFeature


class DataQuality(BaseModel):
    score: int
    grade: str
    issues: list[str] = Field(default_factory=list)
    summary: str


def _has_valid_geometry(feature: Optional[RawFeature]) -> bool:
    if feature is None:
        return False
    geometry = feature.geometry
    return (
        geometry is not None
        and geometry.type in ("Polygon", "MultiPolygon")
        and bool(geometry.coordinates)
    )


def assess_data_quality(
    features: list[Optional[RawFeature]],
    processed: Optional[list[ProcessedFeature]] = None,
) -> DataQuality:
    """
    Score a plan's feature data out of 100.

    25 points each for: features present, valid geometry, resolved area,
    and attribute completeness (theme and descriptive group).
    """
    processed = processed or []
    total = len(features)
    score = 0
    issues = []

    # Feature completeness
    if total > 0:
        score += 25
    else:
        issues.append("No features found")

    # Geometry validity
    valid = sum(1 for f in features if _has_valid_geometry(f))
    validity_ratio = valid / total if total else 0
    if validity_ratio > 0.9:
        score += 25
    elif validity_ratio > 0.7:
        score += 15
        issues.append("Some invalid geometries")
    else:
        issues.append("Many invalid geometries")

    # Area calculation
    if any(p.area > 0 for p in processed):
        score += 25
    else:
        issues.append("Area calculation failed")

    # Attribute completeness
    attributed = sum(
        1 for f in features
        if f is not None and f.properties.theme and f.properties.descriptive_group
    )
    completeness = attributed / max(total, 1)
    if completeness > 0.8:
        score += 25
    elif completeness > 0.5:
        score += 15
        issues.append("Some features lack detailed attributes")
    else:
        issues.append("Many features lack attributes")

    if score >= 80:
        grade = "High"
    elif score >= 60:
        grade = "Medium"
    else:
        grade = "Low"

    return DataQuality(
        score=score,
        grade=grade,
        issues=issues,
        summary=f"{valid}/{total} valid features, {completeness * 100:.0f}% attribute completeness",
    )
