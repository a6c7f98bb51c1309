from typing import Optional

from pydantic import BaseModel, Field
import structlog

from land_analysis.analysis.geometry import GeometryAnalysis
from land_analysis.models.epc import EPC_RATING_BANDS, BuildingEPCMatch
from land_analysis.models.feature import ProcessedFeature

logger = structlog.get_logger()


class BuildingTypeSummary(BaseModel):
    count: int = 0
    total_area: float = 0
    average_area: float = 0


class BuildingDetail(BaseModel):
    """Flat display row for one building footprint."""
    type: str
    area: float
    area_formatted: str
    area_source: str
    theme: str = "Unknown"
    descriptive_group: str = "Unknown"
    descriptive_term: str = "Unknown"
    fid: str = "Unknown"


class EnergyPerformance(BaseModel):
    rating_distribution: dict[str, int] = Field(default_factory=dict)
    average_efficiency: Optional[float] = None
    total_co2_emissions: float = 0
    average_co2_per_building: float = 0
    potential_efficiency_improvement: float = 0
    buildings_with_epc: int = 0
    epc_coverage_percentage: float = 0


class BuildingPortfolio(BaseModel):
    total_buildings: int = 0
    total_building_area: float = 0
    building_types: dict[str, BuildingTypeSummary] = Field(default_factory=dict)
    building_details: list[BuildingDetail] = Field(default_factory=list)
    energy_performance: Optional[EnergyPerformance] = None


def extract_building_features(geometry_analysis: GeometryAnalysis) -> list[ProcessedFeature]:
    """Collect building features from every plan's feature groups."""
    buildings = []
    for plan in geometry_analysis.plan_analysis.values():
        for feature_type, group in plan.feature_groups.items():
            if "building" in feature_type:
                buildings.extend(group.features)
    return buildings


def _building_detail(building: ProcessedFeature) -> BuildingDetail:
    props = building.source_properties
    return BuildingDetail(
        type=building.classified_type,
        area=building.area,
        area_formatted=f"{building.area:.0f} m²" if building.area else "Unknown",
        area_source=building.area_source.value,
        theme=props.theme or "Unknown",
        descriptive_group=props.descriptive_group or "Unknown",
        descriptive_term=props.descriptive_term or "Unknown",
        fid=props.fid or "Unknown",
    )


def analyze_energy_performance(
    matches: list[BuildingEPCMatch],
    total_buildings: int,
) -> EnergyPerformance:
    """
    Aggregate energy certificate data over matched buildings.

    Matches without a certificate are ignored. Efficiency means use only
    certificates carrying a current efficiency; uplift uses only those with
    both current and potential efficiency.
    """
    ratings = {band: 0 for band in EPC_RATING_BANDS}
    total_efficiency = 0.0
    rated_buildings = 0
    total_co2 = 0.0
    total_uplift = 0.0
    uplift_buildings = 0
    certified = 0

    for match in matches:
        cert = match.certificate
        if cert is None:
            continue
        certified += 1

        if cert.current_rating in ratings:
            ratings[cert.current_rating] += 1
        elif cert.current_rating:
            logger.warning(
                "Ignoring EPC rating outside A-G",
                building_id=match.building_id,
                rating=cert.current_rating,
            )

        if cert.current_efficiency is not None:
            total_efficiency += cert.current_efficiency
            rated_buildings += 1

        if cert.co2 is not None:
            total_co2 += cert.co2

        if cert.current_efficiency is not None and cert.potential_efficiency is not None:
            total_uplift += cert.potential_efficiency - cert.current_efficiency
            uplift_buildings += 1

    return EnergyPerformance(
        rating_distribution=ratings,
        average_efficiency=round(total_efficiency / rated_buildings, 1) if rated_buildings else None,
        total_co2_emissions=round(total_co2, 1),
        average_co2_per_building=round(total_co2 / certified, 1) if certified else 0,
        potential_efficiency_improvement=round(total_uplift / uplift_buildings, 1) if uplift_buildings else 0,
        buildings_with_epc=certified,
        epc_coverage_percentage=min(round(certified / total_buildings * 100, 1), 100.0) if total_buildings else 0,
    )


def analyze_building_portfolio(
    geometry_analysis: GeometryAnalysis,
    epc_matches: Optional[list[BuildingEPCMatch]] = None,
) -> BuildingPortfolio:
    """Summarise building footprints by type, optionally with EPC data."""
    buildings = extract_building_features(geometry_analysis)
    logger.info("Analyzing building portfolio", building_count=len(buildings))

    portfolio = BuildingPortfolio(total_buildings=len(buildings))

    for building in buildings:
        portfolio.building_details.append(_building_detail(building))

        summary = portfolio.building_types.setdefault(
            building.classified_type, BuildingTypeSummary()
        )
        summary.count += 1
        summary.total_area += building.area
        portfolio.total_building_area += building.area

    for summary in portfolio.building_types.values():
        summary.average_area = summary.total_area / summary.count if summary.count else 0

    if epc_matches:
        portfolio.energy_performance = analyze_energy_performance(
            epc_matches, portfolio.total_buildings
        )
        logger.info(
            "Energy performance analysed",
            matches=len(epc_matches),
            buildings_with_epc=portfolio.energy_performance.buildings_with_epc,
        )

    return portfolio
