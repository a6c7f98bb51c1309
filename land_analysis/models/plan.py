from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from land_analysis.models.feature import RawFeature


class PlanRef(BaseModel):
    """A land-management plan (scheme submission) selected for analysis."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str = "Unknown Plan"
    plan_type: str = Field(default="Unknown", alias="planType")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)


class PlanFeatures(BaseModel):
    """
    Features loaded for one plan by the feature-fetch provider.

    Entries that are not feature objects are kept as None so they count as
    unmeasurable features instead of rejecting the whole plan.
    """
    plan: Optional[PlanRef] = None
    features: list[Optional[RawFeature]] = Field(default_factory=list)

    @field_validator("features", mode="before")
    @classmethod
    def keep_malformed_entries(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return [None]
        return [item if isinstance(item, (Mapping, RawFeature)) else None for item in v]
