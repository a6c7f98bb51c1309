"""
Valuation rate table.

Rates are UK base values with no regional multiplier. Land rates are per
hectare, building rates per square metre of footprint.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class AgriculturalLandRates(_FrozenModel):
    arable: float = 25000          # £10,000/acre
    pasture: float = 20000         # £8,000/acre
    rough_grazing: float = 5000    # £2,000/acre
    woodland: float = 12000        # £5,000/acre


class ResidentialPotentialRates(_FrozenModel):
    high: float = 1250000   # £500k/acre
    medium: float = 625000  # £250k/acre
    low: float = 125000     # £50k/acre


class ResidentialBuildingRates(_FrozenModel):
    detached: float = 2500
    semidetached: float = 2000
    terraced: float = 1800
    flat: float = 1500


class CommercialBuildingRates(_FrozenModel):
    office: float = 3000
    retail: float = 2500
    industrial: float = 1000
    warehouse: float = 800


class AgriculturalBuildingRates(_FrozenModel):
    modern: float = 500
    traditional: float = 300


class BuildingRates(_FrozenModel):
    residential_building: ResidentialBuildingRates = Field(default_factory=ResidentialBuildingRates)
    commercial_building: CommercialBuildingRates = Field(default_factory=CommercialBuildingRates)
    agricultural_building: AgriculturalBuildingRates = Field(default_factory=AgriculturalBuildingRates)


class SubTierDefaults(_FrozenModel):
    """
    Sub-tier used for each category when no finer condition signal exists.

    Survey features carry no construction or condition data, so every
    residential footprint is valued as detached, every commercial one as
    office, and so on.
    """
    agricultural_land: str = "arable"
    residential_building: str = "detached"
    commercial_building: str = "office"
    agricultural_building: str = "modern"


class DevelopmentPotentialPolicy(_FrozenModel):
    """
    Density heuristic for development uplift.

    Placeholder thresholds: uplift applies when building coverage is below
    max_building_coverage and land exceeds min_land_hectares.
    """
    max_building_coverage: float = 0.10
    min_land_hectares: float = 1.0
    developable_fraction: float = 0.10
    potential_tier: str = "low"


class ValuationRates(_FrozenModel):
    agricultural_land: AgriculturalLandRates = Field(default_factory=AgriculturalLandRates)
    residential_potential: ResidentialPotentialRates = Field(default_factory=ResidentialPotentialRates)
    garden_recreation: float = 30000
    natural_land: float = 8000
    transport: float = 5000
    water: float = 2000
    default_land: float = 15000      # unclassified land, per ha
    buildings: BuildingRates = Field(default_factory=BuildingRates)
    default_building: float = 1000   # other buildings, per m²
    sub_tier_defaults: SubTierDefaults = Field(default_factory=SubTierDefaults)
    development_potential: DevelopmentPotentialPolicy = Field(default_factory=DevelopmentPotentialPolicy)

    def land_rate(self, feature_type: str) -> float:
        """Per-hectare rate for a non-building classified type."""
        if feature_type == "agricultural_land":
            return getattr(self.agricultural_land, self.sub_tier_defaults.agricultural_land)
        if feature_type in ("garden_recreation", "natural_land", "transport", "water"):
            return getattr(self, feature_type)
        return self.default_land

    def building_rate(self, building_type: str, sub_tier: Optional[str] = None) -> float:
        """Per-square-metre rate for a building type at a sub-tier."""
        if building_type not in BuildingRates.model_fields:
            return self.default_building

        tiers = getattr(self.buildings, building_type)
        tier = sub_tier or getattr(self.sub_tier_defaults, building_type)
        if tier not in type(tiers).model_fields:
            raise ValueError(f"Unknown sub-tier '{tier}' for {building_type}")
        return getattr(tiers, tier)

    def development_rate(self) -> float:
        return getattr(self.residential_potential, self.development_potential.potential_tier)

    @model_validator(mode="after")
    def check_defaults(self) -> "ValuationRates":
        """Every configured default must name an existing sub-tier."""
        defaults = self.sub_tier_defaults
        checks = [
            (defaults.agricultural_land, AgriculturalLandRates, "agricultural_land"),
            (defaults.residential_building, ResidentialBuildingRates, "residential_building"),
            (defaults.commercial_building, CommercialBuildingRates, "commercial_building"),
            (defaults.agricultural_building, AgriculturalBuildingRates, "agricultural_building"),
            (self.development_potential.potential_tier, ResidentialPotentialRates, "residential_potential"),
        ]
        for tier, rates_model, category in checks:
            if tier not in rates_model.model_fields:
                raise ValueError(f"Unknown sub-tier '{tier}' for {category}")
        return self

    def with_overrides(self, overrides: dict) -> "ValuationRates":
        """Return a new rate table with nested overrides applied."""
        merged = _deep_merge(self.model_dump(), overrides)
        return ValuationRates.model_validate(merged)


def _deep_merge(base: dict, overrides: dict) -> dict:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


DEFAULT_VALUATION_RATES = ValuationRates()
