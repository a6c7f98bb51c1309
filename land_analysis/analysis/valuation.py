from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
import structlog

from land_analysis.analysis.buildings import BuildingPortfolio
from land_analysis.analysis.feature_processor import SQUARE_METERS_PER_HECTARE
from land_analysis.analysis.geometry import GeometryAnalysis
from land_analysis.analysis.rates import DEFAULT_VALUATION_RATES, ValuationRates

logger = structlog.get_logger()

HIGH_CONFIDENCE_RATE = 0.9
MEDIUM_CONFIDENCE_RATE = 0.7


class ConfidenceLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class LandUseValue(BaseModel):
    area: float  # hectares
    value_per_ha: float
    total_value: float


class BuildingTypeValue(BaseModel):
    count: int
    total_area: float  # m²
    average_area: float
    value_per_sqm: float
    total_value: float


class ValuationBreakdown(BaseModel):
    land_value: float = 0
    building_value: float = 0
    development_potential: float = 0
    total_value: float = 0
    by_land_use: dict[str, LandUseValue] = Field(default_factory=dict)
    by_building_type: dict[str, BuildingTypeValue] = Field(default_factory=dict)
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    classification_rate: float = 0


def confidence_from_rate(classification_rate: float) -> ConfidenceLevel:
    """Map a classified-feature ratio to an advisory confidence level."""
    if classification_rate > HIGH_CONFIDENCE_RATE:
        return ConfidenceLevel.HIGH
    if classification_rate > MEDIUM_CONFIDENCE_RATE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


class ValuationEngine:
    """Value a holding from its aggregated geometry and building portfolio."""

    def __init__(self, rates: Optional[ValuationRates] = None):
        self.rates = rates or DEFAULT_VALUATION_RATES

    def value_land(self, geometry_analysis: GeometryAnalysis) -> dict[str, LandUseValue]:
        """Area (ha) × base rate for every non-building feature group."""
        by_land_use = {}
        for feature_type, group in geometry_analysis.global_analysis.feature_groups.items():
            if "building" in feature_type:
                continue

            rate = self.rates.land_rate(feature_type)
            area_ha = group.total_area_hectares
            by_land_use[feature_type] = LandUseValue(
                area=area_ha,
                value_per_ha=rate if area_ha > 0 else 0,
                total_value=area_ha * rate,
            )
        return by_land_use

    def value_buildings(self, portfolio: BuildingPortfolio) -> dict[str, BuildingTypeValue]:
        """Footprint area (m²) × default sub-tier rate for each building type."""
        by_building_type = {}
        for building_type, summary in portfolio.building_types.items():
            rate = self.rates.building_rate(building_type)
            by_building_type[building_type] = BuildingTypeValue(
                count=summary.count,
                total_area=summary.total_area,
                average_area=summary.average_area,
                value_per_sqm=rate if summary.total_area > 0 else 0,
                total_value=summary.total_area * rate,
            )
        return by_building_type

    def development_potential(self, land_hectares: float, building_area: float) -> float:
        """
        Uplift for sparsely built holdings.

        Applies only when building coverage is below the policy threshold
        and the land exceeds the minimum size.
        """
        policy = self.rates.development_potential
        if land_hectares <= 0:
            return 0.0

        coverage = building_area / (land_hectares * SQUARE_METERS_PER_HECTARE)
        if coverage < policy.max_building_coverage and land_hectares > policy.min_land_hectares:
            return land_hectares * policy.developable_fraction * self.rates.development_rate()
        return 0.0

    def classification_rate(self, geometry_analysis: GeometryAnalysis) -> float:
        total = geometry_analysis.total_features
        if not total:
            return 0.0
        return geometry_analysis.global_analysis.classified_count / total

    def confidence_level(self, geometry_analysis: GeometryAnalysis) -> ConfidenceLevel:
        return confidence_from_rate(self.classification_rate(geometry_analysis))

    def calculate_valuation(
        self,
        geometry_analysis: GeometryAnalysis,
        portfolio: BuildingPortfolio,
    ) -> ValuationBreakdown:
        """Land value + building value + development potential."""
        by_land_use = self.value_land(geometry_analysis)
        by_building_type = self.value_buildings(portfolio)

        land_value = sum(v.total_value for v in by_land_use.values())
        building_value = sum(v.total_value for v in by_building_type.values())
        development = self.development_potential(
            geometry_analysis.global_analysis.total_area_hectares,
            portfolio.total_building_area,
        )
        classification_rate = self.classification_rate(geometry_analysis)

        valuation = ValuationBreakdown(
            land_value=land_value,
            building_value=building_value,
            development_potential=development,
            total_value=land_value + building_value + development,
            by_land_use=by_land_use,
            by_building_type=by_building_type,
            confidence_level=confidence_from_rate(classification_rate),
            classification_rate=classification_rate,
        )

        logger.info(
            "Valuation calculated",
            land_value=round(land_value),
            building_value=round(building_value),
            development_potential=round(development),
            confidence=valuation.confidence_level.value,
        )
        return valuation
