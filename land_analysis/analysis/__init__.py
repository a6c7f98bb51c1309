from land_analysis.analysis.classification import classify, clean_value, ClassificationRule, CLASSIFICATION_RULES
from land_analysis.analysis.feature_processor import process_feature, calculate_geometry_area, to_web_mercator
from land_analysis.analysis.geometry import (
    FeatureGroup,
    GeometryAnalysis,
    AreaSummary,
    deduplicate_geometries,
    analyze_plans_geometry,
    generate_area_summary,
    display_name,
    format_area,
)
from land_analysis.analysis.buildings import BuildingPortfolio, analyze_building_portfolio, analyze_energy_performance
from land_analysis.analysis.rates import ValuationRates, DEFAULT_VALUATION_RATES
from land_analysis.analysis.valuation import ValuationEngine, ValuationBreakdown, ConfidenceLevel
from land_analysis.analysis.quality import DataQuality, assess_data_quality
from land_analysis.analysis.report import AnalysisReport, ReportComposer, format_currency
from land_analysis.analysis.service import LandAnalysisService, LandAnalysisError

__all__ = [
    "classify",
    "clean_value",
    "ClassificationRule",
    "CLASSIFICATION_RULES",
    "process_feature",
    "calculate_geometry_area",
    "to_web_mercator",
    "FeatureGroup",
    "GeometryAnalysis",
    "AreaSummary",
    "deduplicate_geometries",
    "analyze_plans_geometry",
    "generate_area_summary",
    "display_name",
    "format_area",
    "BuildingPortfolio",
    "analyze_building_portfolio",
    "analyze_energy_performance",
    "ValuationRates",
    "DEFAULT_VALUATION_RATES",
    "ValuationEngine",
    "ValuationBreakdown",
    "ConfidenceLevel",
    "DataQuality",
    "assess_data_quality",
    "AnalysisReport",
    "ReportComposer",
    "format_currency",
    "LandAnalysisService",
    "LandAnalysisError",
]
