from typing import Optional

from pydantic import BaseModel, Field
import structlog

from land_analysis.analysis.feature_processor import (
    SQUARE_METERS_PER_ACRE,
    SQUARE_METERS_PER_HECTARE,
    process_feature,
)
from land_analysis.models.feature import ProcessedFeature
from land_analysis.models.plan import PlanFeatures, PlanRef

logger = structlog.get_logger()

DISPLAY_NAMES = {
    "residential_building": "Residential Buildings",
    "commercial_building": "Commercial Buildings",
    "agricultural_building": "Agricultural Buildings",
    "building": "Other Buildings",
    "agricultural_land": "Agricultural Land",
    "garden_recreation": "Gardens & Recreation",
    "natural_land": "Natural Areas",
    "land": "Other Land",
    "water": "Water Features",
    "transport": "Roads & Paths",
    "unknown": "Unclassified Features",
}


class FeatureGroup(BaseModel):
    """All features sharing one classified type. Overlaps are not removed."""
    type: str
    features: list[ProcessedFeature] = Field(default_factory=list)
    total_area: float = 0
    total_area_hectares: float = 0
    total_area_acres: float = 0

    def add(self, feature: ProcessedFeature) -> None:
        self.features.append(feature)
        self.total_area += feature.area
        self.total_area_hectares += feature.area_hectares
        self.total_area_acres += feature.area_acres


class GroupedFeatures(BaseModel):
    feature_groups: dict[str, FeatureGroup] = Field(default_factory=dict)
    total_area: float = 0
    total_area_hectares: float = 0
    total_area_acres: float = 0
    feature_count: int = 0

    @property
    def classified_count(self) -> int:
        return sum(
            1 for group in self.feature_groups.values()
            for f in group.features if f.is_classified
        )


class PlanAnalysis(GroupedFeatures):
    plan: PlanRef


class GeometryAnalysis(BaseModel):
    global_analysis: GroupedFeatures = Field(default_factory=GroupedFeatures)
    plan_analysis: dict[str, PlanAnalysis] = Field(default_factory=dict)
    total_features: int = 0
    plan_count: int = 0
    warnings: list[str] = Field(default_factory=list)


class AreaTotals(BaseModel):
    area: float = 0
    hectares: float = 0
    acres: float = 0
    features: int = 0


class AreaByType(BaseModel):
    type: str
    display_name: str
    area: float
    hectares: float
    acres: float
    features: int
    percentage: float


class AreaByPlan(BaseModel):
    plan_id: str
    plan_name: str
    plan_type: str
    area: float
    hectares: float
    acres: float
    features: int


class AreaSummary(BaseModel):
    total: AreaTotals = Field(default_factory=AreaTotals)
    by_type: list[AreaByType] = Field(default_factory=list)
    by_plan: list[AreaByPlan] = Field(default_factory=list)


def display_name(feature_type: str) -> str:
    """Human readable name for a classified type."""
    if feature_type in DISPLAY_NAMES:
        return DISPLAY_NAMES[feature_type]
    return feature_type.replace("_", " ").title()


def format_area(area_sqm: float, unit: str = "hectares") -> str:
    """Format an area in square metres for display."""
    if unit == "hectares":
        return f"{area_sqm / SQUARE_METERS_PER_HECTARE:.2f} ha"
    if unit == "acres":
        return f"{area_sqm / SQUARE_METERS_PER_ACRE:.2f} acres"
    return f"{area_sqm:.0f} m²"


def percentage(part: float, whole: float) -> float:
    """Percentage to one decimal place; 0 when the whole is zero."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def deduplicate_geometries(features: list[ProcessedFeature]) -> GroupedFeatures:
    """
    Group processed features by classified type and total their areas.

    No spatial intersection is performed: overlapping parcels of the same
    type are summed.
    """
    groups: dict[str, FeatureGroup] = {}

    for feature in features:
        group = groups.get(feature.classified_type)
        if group is None:
            group = FeatureGroup(type=feature.classified_type)
            groups[feature.classified_type] = group
        group.add(feature)

    total_area = sum(group.total_area for group in groups.values())

    return GroupedFeatures(
        feature_groups=groups,
        total_area=total_area,
        total_area_hectares=total_area / SQUARE_METERS_PER_HECTARE,
        total_area_acres=total_area / SQUARE_METERS_PER_ACRE,
        feature_count=len(features),
    )


def analyze_plans_geometry(
    plans: list[PlanRef],
    features_by_plan: Optional[dict[str, PlanFeatures]],
) -> GeometryAnalysis:
    """
    Process each plan's features and aggregate per plan and globally.

    A plan with no loaded features contributes nothing and adds a warning.
    """
    if not plans:
        logger.warning("No plans provided for geometry analysis")
        return GeometryAnalysis(warnings=["No plans provided for geometry analysis"])

    features_by_plan = features_by_plan or {}
    warnings = []
    all_processed: list[ProcessedFeature] = []
    plan_analysis: dict[str, PlanAnalysis] = {}

    logger.info("Analyzing geometry for plans", plan_ids=[p.id for p in plans])

    for plan in plans:
        if not plan.id:
            logger.warning("Skipping plan without id", plan_name=plan.name)
            warnings.append(f"Skipped plan '{plan.name}' without an id")
            continue

        plan_data = features_by_plan.get(plan.id)
        features = plan_data.features if plan_data else []

        if not features:
            logger.warning("No features found for plan", plan_id=plan.id, plan_name=plan.name)
            warnings.append(
                f"No features found for plan {plan.id} ({plan.name}). "
                "Features may need to be loaded first."
            )
        else:
            logger.info("Processing plan features", plan_id=plan.id, feature_count=len(features))

        processed = [process_feature(feature) for feature in features]
        all_processed.extend(processed)

        grouped = deduplicate_geometries(processed)
        plan_analysis[plan.id] = PlanAnalysis(plan=plan, **dict(grouped))

    global_analysis = deduplicate_geometries(all_processed)

    logger.info(
        "Geometry analysis completed",
        total_features=len(all_processed),
        plan_count=len(plans),
        total_area=round(global_analysis.total_area, 2),
    )

    return GeometryAnalysis(
        global_analysis=global_analysis,
        plan_analysis=plan_analysis,
        total_features=len(all_processed),
        plan_count=len(plans),
        warnings=warnings,
    )


def generate_area_summary(analysis: Optional[GeometryAnalysis]) -> AreaSummary:
    """Summarise total area, area by classified type, and area by plan."""
    if analysis is None:
        logger.warning("Analysis result is missing, returning empty area summary")
        return AreaSummary()

    global_analysis = analysis.global_analysis
    grand_total = global_analysis.total_area

    by_type = [
        AreaByType(
            type=feature_type,
            display_name=display_name(feature_type),
            area=group.total_area,
            hectares=group.total_area_hectares,
            acres=group.total_area_acres,
            features=len(group.features),
            percentage=percentage(group.total_area, grand_total),
        )
        for feature_type, group in global_analysis.feature_groups.items()
    ]

    by_plan = [
        AreaByPlan(
            plan_id=plan_id,
            plan_name=plan.plan.name,
            plan_type=plan.plan.plan_type,
            area=plan.total_area,
            hectares=plan.total_area_hectares,
            acres=plan.total_area_acres,
            features=plan.feature_count,
        )
        for plan_id, plan in analysis.plan_analysis.items()
    ]

    return AreaSummary(
        total=AreaTotals(
            area=grand_total,
            hectares=global_analysis.total_area_hectares,
            acres=global_analysis.total_area_acres,
            features=global_analysis.feature_count,
        ),
        by_type=by_type,
        by_plan=by_plan,
    )
