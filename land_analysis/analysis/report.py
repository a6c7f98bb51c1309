from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, Field

from land_analysis.analysis.buildings import BuildingPortfolio, EnergyPerformance
from land_analysis.analysis.geometry import AreaByPlan, AreaByType, AreaSummary, format_area
from land_analysis.analysis.quality import DataQuality
from land_analysis.analysis.rates import DEFAULT_VALUATION_RATES, ValuationRates
from land_analysis.analysis.valuation import (
    HIGH_CONFIDENCE_RATE,
    MEDIUM_CONFIDENCE_RATE,
    BuildingTypeValue,
    ConfidenceLevel,
    ValuationBreakdown,
)

LIMITATIONS = [
    "Uniform national rates (no location-specific multipliers)",
    "Standard building rates by type (no condition or age assessment)",
    "Building values use footprint area, not floor area",
    "Simplified development potential (density-based only)",
    "Interior rings (holes) are not subtracted from polygon areas",
    "Overlapping parcels of the same type are summed, not spatially deduplicated",
    "No planning constraint integration",
]

DATA_ELEMENTS = [
    "OS MasterMap feature geometry and classification",
    "Land use categorisation and area calculations",
    "Building footprints and types",
    "Energy Performance Certificate (EPC) data",
]

FUTURE_DATA_ELEMENTS = [
    "Land Registry price paid data and comparables",
    "Local authority planning constraints and designations",
    "Environment Agency flood risk assessments",
    "Historic England heritage designations",
    "Agricultural Land Classification (ALC) grades",
]

QUALITY_INDICATORS = {
    "data_completeness": "Percentage of features with full attribution",
    "spatial_accuracy": "OS MasterMap precision standards (±1m for buildings)",
    "temporal_currency": "Age of data sources (OS MasterMap: monthly updates, EPC: per lodgement)",
    "confidence_scoring": (
        f"Classified feature ratio (High: >{HIGH_CONFIDENCE_RATE:.0%}, "
        f"Medium: >{MEDIUM_CONFIDENCE_RATE:.0%}, Low otherwise)"
    ),
}


def _round_half_up(value: Decimal, places: str = "1") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_currency(value: float) -> str:
    """£X.XXM for millions, £Xk for thousands, whole pounds otherwise. Halves round up."""
    amount = Decimal(str(value))
    if value >= 1_000_000:
        return f"£{_round_half_up(amount / 1_000_000, '0.01'):f}M"
    if value >= 1_000:
        return f"£{_round_half_up(amount / 1_000):f}k"
    return f"£{_round_half_up(amount):f}"


class AreaHeadline(BaseModel):
    hectares: float
    acres: float
    formatted: str


class ValueHeadline(BaseModel):
    land: float
    buildings: float
    development: float
    total: float
    formatted: str


class ExecutiveSummary(BaseModel):
    map_name: str
    total_plans: int
    total_area: AreaHeadline
    total_features: int
    total_value: ValueHeadline
    average_value_per_hectare: float
    confidence_level: ConfidenceLevel
    key_insights: list[str] = Field(default_factory=list)


class LandUseRow(AreaByType):
    value: float = 0
    value_per_ha: float = 0
    formatted_value: str = "£0"


class PlanRow(AreaByPlan):
    data_quality: Optional[DataQuality] = None


class BuildingPortfolioSection(BaseModel):
    summary: BuildingPortfolio
    valuation: dict[str, BuildingTypeValue] = Field(default_factory=dict)
    energy_performance: Optional[EnergyPerformance] = None


class Methodology(BaseModel):
    """Static description of how the valuation was produced."""
    name: str = "Land Holding Valuation"
    land_formula: str = "Land Value = Σ(Area (ha) × Base Rate(land use))"
    building_formula: str = "Building Value = Σ(Footprint Area (m²) × Base Rate(building type, default sub-tier))"
    development_formula: str = (
        "Development Potential = Land (ha) × developable fraction × residential potential rate, "
        "when building coverage < threshold and land > minimum size"
    )
    total_formula: str = "Total Value = Land Value + Building Value + Development Potential"
    confidence_scoring: str = QUALITY_INDICATORS["confidence_scoring"]
    base_rates: ValuationRates = DEFAULT_VALUATION_RATES
    data_elements: list[str] = Field(default_factory=lambda: list(DATA_ELEMENTS))
    future_data_elements: list[str] = Field(default_factory=lambda: list(FUTURE_DATA_ELEMENTS))
    quality_indicators: dict[str, str] = Field(default_factory=lambda: dict(QUALITY_INDICATORS))
    limitations: list[str] = Field(default_factory=lambda: list(LIMITATIONS))
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    last_updated: str = ""


class ProcessingMetadata(BaseModel):
    processing_time_ms: float
    processing_time: str
    geometry_service: str = "OSMasterMap feature analysis"
    deduplication_method: str = "Feature type grouping"
    coordinate_system: str = "WGS84 with Web Mercator projection"
    area_calculation_method: str = "Shoelace formula on Web Mercator projected outer rings"


class AnalysisReport(BaseModel):
    executive: ExecutiveSummary
    land_use_breakdown: list[LandUseRow] = Field(default_factory=list)
    building_portfolio: BuildingPortfolioSection
    plan_breakdown: list[PlanRow] = Field(default_factory=list)
    valuation: ValuationBreakdown
    valuation_details: Methodology
    metadata: ProcessingMetadata
    warnings: list[str] = Field(default_factory=list)


class ReportComposer:
    """Assemble the analysis report from the computed parts."""

    def __init__(self, rates: Optional[ValuationRates] = None):
        self.rates = rates or DEFAULT_VALUATION_RATES

    def generate_key_insights(
        self,
        area_summary: AreaSummary,
        portfolio: BuildingPortfolio,
        valuation: ValuationBreakdown,
    ) -> list[str]:
        insights = []
        hectares = area_summary.total.hectares

        # Dominant land use
        if area_summary.by_type:
            largest = max(area_summary.by_type, key=lambda t: t.area)
            insights.append(
                f"{largest.display_name} comprises {largest.percentage:.1f}% of total area "
                f"({format_area(largest.area)})"
            )

        # Building density
        if portfolio.total_buildings > 0 and hectares > 0:
            density = portfolio.total_buildings / hectares
            insights.append(
                f"{portfolio.total_buildings} buildings across {hectares:.1f} hectares "
                f"({density:.1f} buildings/ha)"
            )

        # Value per hectare
        if hectares > 0:
            insights.append(
                f"Average land value: {format_currency(valuation.total_value / hectares)} per hectare"
            )

        # Development potential
        if valuation.development_potential > 0:
            insights.append(
                f"Development potential adds {format_currency(valuation.development_potential)} to total value"
            )

        return insights

    def compose(
        self,
        map_name: str,
        plan_count: int,
        area_summary: AreaSummary,
        portfolio: BuildingPortfolio,
        valuation: ValuationBreakdown,
        processing_time_ms: float,
        plan_quality: Optional[dict[str, DataQuality]] = None,
        warnings: Optional[list[str]] = None,
    ) -> AnalysisReport:
        plan_quality = plan_quality or {}
        total = area_summary.total

        executive = ExecutiveSummary(
            map_name=map_name,
            total_plans=plan_count,
            total_area=AreaHeadline(
                hectares=round(total.hectares, 2),
                acres=round(total.acres, 2),
                formatted=format_area(total.area, "hectares"),
            ),
            total_features=total.features,
            total_value=ValueHeadline(
                land=valuation.land_value,
                buildings=valuation.building_value,
                development=valuation.development_potential,
                total=valuation.total_value,
                formatted=format_currency(valuation.total_value),
            ),
            average_value_per_hectare=valuation.total_value / total.hectares if total.hectares > 0 else 0,
            confidence_level=valuation.confidence_level,
            key_insights=self.generate_key_insights(area_summary, portfolio, valuation),
        )

        land_use_rows = []
        for row in area_summary.by_type:
            land_value = valuation.by_land_use.get(row.type)
            value = land_value.total_value if land_value else 0
            land_use_rows.append(LandUseRow(
                **dict(row),
                value=value,
                value_per_ha=land_value.value_per_ha if land_value else 0,
                formatted_value=format_currency(value),
            ))

        plan_rows = [
            PlanRow(**dict(row), data_quality=plan_quality.get(row.plan_id))
            for row in area_summary.by_plan
        ]

        return AnalysisReport(
            executive=executive,
            land_use_breakdown=land_use_rows,
            building_portfolio=BuildingPortfolioSection(
                summary=portfolio,
                valuation=valuation.by_building_type,
                energy_performance=portfolio.energy_performance,
            ),
            plan_breakdown=plan_rows,
            valuation=valuation,
            valuation_details=Methodology(
                base_rates=self.rates,
                confidence_level=valuation.confidence_level,
                last_updated=datetime.now(timezone.utc).isoformat(),
            ),
            metadata=ProcessingMetadata(
                processing_time_ms=round(processing_time_ms, 2),
                processing_time=f"{processing_time_ms:.0f}ms",
            ),
            warnings=list(warnings or []),
        )
