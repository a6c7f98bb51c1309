"""API endpoints for land holding analysis and valuation."""
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
import structlog

from land_analysis.analysis.feature_processor import process_feature
from land_analysis.analysis.quality import DataQuality, assess_data_quality
from land_analysis.analysis.rates import ValuationRates
from land_analysis.analysis.report import AnalysisReport
from land_analysis.analysis.service import LandAnalysisError, LandAnalysisService
from land_analysis.config import get_settings
from land_analysis.models.epc import BuildingEPCMatch
from land_analysis.models.plan import PlanFeatures, PlanRef

logger = structlog.get_logger()
router = APIRouter(prefix="/land-analysis", tags=["land-analysis"])


class HoldingAnalysisRequest(BaseModel):
    map_name: Optional[str] = None
    plans: list[PlanRef]
    plan_features: dict[str, PlanFeatures] = Field(default_factory=dict)
    epc_matches: Optional[list[BuildingEPCMatch]] = None


@lru_cache
def get_analysis_service() -> LandAnalysisService:
    return LandAnalysisService()


@router.post("", response_model=AnalysisReport)
def analyze_holding(
    request: HoldingAnalysisRequest,
    service: LandAnalysisService = Depends(get_analysis_service),
):
    """
    Analyse and value the selected plans of a holding.

    Plans without loaded features are reported as warnings. Malformed
    features count with zero area. Returns 422 when no plan has a feature with a usable area.
    """
    map_name = request.map_name or get_settings().default_map_name
    logger.info("Land analysis requested", map_name=map_name, plans=len(request.plans))

    try:
        return service.analyze_holding(
            map_name=map_name,
            plans=request.plans,
            plan_features=request.plan_features,
            epc_matches=request.epc_matches,
        )
    except LandAnalysisError as e:
        logger.warning("Land analysis rejected", map_name=map_name, error=str(e))
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/rates", response_model=ValuationRates)
def get_valuation_rates(service: LandAnalysisService = Depends(get_analysis_service)):
    """Base valuation rates used by the service."""
    return service.rates


@router.post("/plans/{plan_id}/quality", response_model=DataQuality)
def plan_data_quality(plan_id: str, plan_data: PlanFeatures):
    """Assess completeness and validity of one plan's feature data."""
    processed = [process_feature(feature) for feature in plan_data.features]
    quality = assess_data_quality(plan_data.features, processed)
    logger.info("Plan data quality assessed", plan_id=plan_id, score=quality.score)
    return quality
