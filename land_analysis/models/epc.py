from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EPC_RATING_BANDS = ("A", "B", "C", "D", "E", "F", "G")


class EnergyCertificate(BaseModel):
    """
    Subset of an EPC Open Data row used for portfolio analysis.

    Field aliases follow the hyphenated keys of the EPC API.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    lmk_key: Optional[str] = Field(default=None, alias="lmk-key")
    address: Optional[str] = None
    current_rating: Optional[str] = Field(default=None, alias="current-energy-rating")
    current_efficiency: Optional[float] = Field(default=None, alias="current-energy-efficiency")
    potential_efficiency: Optional[float] = Field(default=None, alias="potential-energy-efficiency")
    co2_emissions: Optional[float] = Field(default=None, alias="co2-emissions-current")
    co2_per_floor_area: Optional[float] = Field(default=None, alias="co2-emiss-curr-per-floor-area")

    @field_validator("current_rating", mode="before")
    @classmethod
    def normalize_rating(cls, v):
        if v is None:
            return None
        v = str(v).strip().upper()
        return v or None

    @field_validator(
        "current_efficiency",
        "potential_efficiency",
        "co2_emissions",
        "co2_per_floor_area",
        mode="before",
    )
    @classmethod
    def coerce_number(cls, v):
        if v is None or v == "":
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    @property
    def co2(self) -> Optional[float]:
        """Current CO2 emissions, falling back to the per-floor-area figure."""
        if self.co2_emissions is not None:
            return self.co2_emissions
        return self.co2_per_floor_area


class BuildingEPCMatch(BaseModel):
    """A building footprint matched to an energy certificate upstream."""
    model_config = ConfigDict(populate_by_name=True)

    building_id: Optional[str] = None
    uprn: Optional[str] = None
    match_confidence: Optional[float] = None
    certificate: Optional[EnergyCertificate] = Field(default=None, alias="epc_data")
