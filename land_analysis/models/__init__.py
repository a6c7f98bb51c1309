from land_analysis.models.feature import (
    AreaSource,
    FeatureType,
    Geometry,
    FeatureProperties,
    RawFeature,
    ProcessedFeature,
)
from land_analysis.models.plan import PlanRef, PlanFeatures
from land_analysis.models.epc import EPC_RATING_BANDS, EnergyCertificate, BuildingEPCMatch

__all__ = [
    "AreaSource",
    "FeatureType",
    "Geometry",
    "FeatureProperties",
    "RawFeature",
    "ProcessedFeature",
    "PlanRef",
    "PlanFeatures",
    "EPC_RATING_BANDS",
    "EnergyCertificate",
    "BuildingEPCMatch",
]
