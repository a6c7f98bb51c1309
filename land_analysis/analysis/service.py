import time
from typing import Optional

import structlog

from land_analysis.analysis.buildings import analyze_building_portfolio
from land_analysis.analysis.geometry import analyze_plans_geometry, generate_area_summary
from land_analysis.analysis.quality import DataQuality, assess_data_quality
from land_analysis.analysis.rates import DEFAULT_VALUATION_RATES, ValuationRates
from land_analysis.analysis.report import AnalysisReport, ReportComposer
from land_analysis.analysis.valuation import ValuationEngine
from land_analysis.models.epc import BuildingEPCMatch
from land_analysis.models.plan import PlanFeatures, PlanRef

logger = structlog.get_logger()


class LandAnalysisError(Exception):
    """Raised when a holding cannot be analysed at all."""


class LandAnalysisService:
    """
    Run the full land analysis for a set of plans.

    Pipeline:
    1. Process and group features per plan and globally
    2. Summarise areas
    3. Analyse building portfolio (with EPC matches if supplied)
    4. Value land, buildings and development potential
    5. Compose report
    """

    def __init__(
        self,
        rates: Optional[ValuationRates] = None,
        valuation_engine: Optional[ValuationEngine] = None,
        composer: Optional[ReportComposer] = None,
    ):
        self.rates = rates or DEFAULT_VALUATION_RATES
        self.valuation_engine = valuation_engine or ValuationEngine(self.rates)
        self.composer = composer or ReportComposer(self.rates)

    def analyze_holding(
        self,
        map_name: str,
        plans: list[PlanRef],
        plan_features: Optional[dict[str, PlanFeatures]],
        epc_matches: Optional[list[BuildingEPCMatch]] = None,
    ) -> AnalysisReport:
        """Analyse and value a holding. Raises LandAnalysisError if nothing is usable."""
        if not plans:
            raise LandAnalysisError("Land analysis failed: no plans selected")

        start = time.perf_counter()
        logger.info("Starting land analysis", map_name=map_name, plan_count=len(plans))

        geometry_analysis = analyze_plans_geometry(plans, plan_features)
        if geometry_analysis.total_features == 0:
            logger.error("No features available for analysis", map_name=map_name)
            raise LandAnalysisError(
                f"Land analysis failed: none of the {len(plans)} selected plans has loaded features"
            )
        if not any(
            f.area > 0
            for group in geometry_analysis.global_analysis.feature_groups.values()
            for f in group.features
        ):
            logger.error(
                "No measurable features available for analysis",
                map_name=map_name,
                total_features=geometry_analysis.total_features,
            )
            raise LandAnalysisError(
                f"Land analysis failed: none of the {geometry_analysis.total_features} loaded features has a usable area"
            )

        area_summary = generate_area_summary(geometry_analysis)
        portfolio = analyze_building_portfolio(geometry_analysis, epc_matches)
        valuation = self.valuation_engine.calculate_valuation(geometry_analysis, portfolio)
        plan_quality = self._assess_plans(geometry_analysis.plan_analysis, plan_features or {})

        elapsed_ms = (time.perf_counter() - start) * 1000
        report = self.composer.compose(
            map_name=map_name,
            plan_count=len(plans),
            area_summary=area_summary,
            portfolio=portfolio,
            valuation=valuation,
            processing_time_ms=elapsed_ms,
            plan_quality=plan_quality,
            warnings=geometry_analysis.warnings,
        )

        logger.info(
            "Land analysis completed",
            map_name=map_name,
            total_value=round(valuation.total_value),
            warnings=len(geometry_analysis.warnings),
            elapsed_ms=round(elapsed_ms, 1),
        )
        return report

    def _assess_plans(self, plan_analysis, plan_features: dict[str, PlanFeatures]) -> dict[str, DataQuality]:
        quality = {}
        for plan_id, analysis in plan_analysis.items():
            plan_data = plan_features.get(plan_id)
            raw = plan_data.features if plan_data else []
            processed = [f for group in analysis.feature_groups.values() for f in group.features]
            quality[plan_id] = assess_data_quality(raw, processed)
        return quality
