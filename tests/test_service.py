"""End-to-end tests for LandAnalysisService."""
import pytest

from land_analysis.analysis.rates import DEFAULT_VALUATION_RATES
from land_analysis.analysis.service import LandAnalysisError, LandAnalysisService
from land_analysis.models.epc import BuildingEPCMatch
from land_analysis.models.feature import RawFeature
from land_analysis.models.plan import PlanFeatures, PlanRef

SQUARE = [[[-1.5, 52.0], [-1.4999, 52.0], [-1.4999, 52.0001], [-1.5, 52.0001], [-1.5, 52.0]]]


def feature(area_m2, theme, group="", term="", fid=None) -> RawFeature:
    return RawFeature.model_validate({
        "geometry": {"type": "Polygon", "coordinates": SQUARE},
        "properties": {
            "fid": fid,
            "theme": theme,
            "descriptiveGroup": group,
            "descriptiveTerm": term,
            "area_m2": area_m2,
        },
    })


class TestAnalyzeHolding:
    """Tests for the full analysis pipeline."""

    def _plans(self):
        return [
            PlanRef(id="p1", name="Home Farm", planType="SFI"),
            PlanRef(id="p2", name="Woodland", planType="CS"),
        ]

    def _features(self):
        return {
            "p1": PlanFeatures(features=[
                feature(30000, "{Land}", "{Agricultural Land}"),
                feature(200, "{Buildings}", "{Building}", "{Detached House}", fid="house"),
            ]),
            "p2": PlanFeatures(features=[
                feature(20000, "{Land}", "{Natural Environment}"),
            ]),
        }

    def test_full_report(self):
        report = LandAnalysisService().analyze_holding("Home Farm", self._plans(), self._features())

        land_value = 3 * 25000 + 2 * 8000
        building_value = 200 * 2500
        total_ha = 5.02
        development = total_ha * 0.10 * 125000

        assert report.valuation.land_value == pytest.approx(land_value)
        assert report.valuation.building_value == pytest.approx(building_value)
        assert report.valuation.development_potential == pytest.approx(development)
        assert report.executive.total_value.total == pytest.approx(land_value + building_value + development)
        assert report.executive.total_features == 3
        assert report.executive.confidence_level.value == "High"
        assert report.building_portfolio.summary.total_buildings == 1
        assert report.building_portfolio.valuation["residential_building"].total_value == building_value
        assert {row.plan_id for row in report.plan_breakdown} == {"p1", "p2"}
        assert report.warnings == []

    def test_plan_quality_included(self):
        report = LandAnalysisService().analyze_holding("Home Farm", self._plans(), self._features())
        rows = {row.plan_id: row for row in report.plan_breakdown}
        assert rows["p1"].data_quality.score == 100
        assert rows["p1"].data_quality.grade == "High"

    def test_partial_results_with_missing_plan(self):
        plans = self._plans() + [PlanRef(id="p3", name="Not Loaded")]
        report = LandAnalysisService().analyze_holding("Home Farm", plans, self._features())

        assert report.executive.total_plans == 3
        assert len(report.warnings) == 1
        assert "p3" in report.warnings[0]
        rows = {row.plan_id: row for row in report.plan_breakdown}
        assert rows["p3"].area == 0
        assert rows["p3"].data_quality.grade == "Low"

    def test_epc_matches_enrich_portfolio(self):
        matches = [BuildingEPCMatch.model_validate({
            "building_id": "house",
            "epc_data": {"current-energy-rating": "D", "current-energy-efficiency": "58",
                         "potential-energy-efficiency": "79", "co2-emissions-current": "4.1"},
        })]
        report = LandAnalysisService().analyze_holding("Home Farm", self._plans(), self._features(), matches)

        energy = report.building_portfolio.energy_performance
        assert energy.rating_distribution["D"] == 1
        assert energy.potential_efficiency_improvement == pytest.approx(21.0)
        assert energy.epc_coverage_percentage == 100

    def test_injected_rates(self):
        rates = DEFAULT_VALUATION_RATES.with_overrides({"natural_land": 10000})
        service = LandAnalysisService(rates=rates)
        report = service.analyze_holding("Home Farm", self._plans(), self._features())
        assert report.valuation.by_land_use["natural_land"].total_value == pytest.approx(20000)
        assert report.valuation_details.base_rates.natural_land == 10000

    def test_no_plans_raises(self):
        with pytest.raises(LandAnalysisError, match="no plans"):
            LandAnalysisService().analyze_holding("Empty", [], {})

    def test_no_features_raises(self):
        with pytest.raises(LandAnalysisError, match="features"):
            LandAnalysisService().analyze_holding("Empty", self._plans(), {})

    def test_malformed_features_counted_at_zero_area(self):
        plans = [PlanRef(id="p1", name="Home Farm")]
        features = {"p1": PlanFeatures.model_validate({"features": [
            feature(30000, "{Land}", "{Agricultural Land}"),
            {"geometry": "not-a-geometry", "properties": {"fid": "bad-1"}},
            {"geometry": {"type": 7, "coordinates": SQUARE}, "properties": {"fid": "bad-2"}},
            None,
        ]})}
        report = LandAnalysisService().analyze_holding("Home Farm", plans, features)

        assert report.executive.total_features == 4
        assert report.valuation.land_value == pytest.approx(3 * 25000)
        rows = {row.type: row for row in report.land_use_breakdown}
        assert rows["unknown"].features == 3
        assert rows["unknown"].area == 0

    def test_no_measurable_features_raises(self):
        plans = [PlanRef(id="p1", name="Home Farm")]
        features = {"p1": PlanFeatures.model_validate({"features": [
            {"geometry": None, "properties": {"theme": "{Land}"}},
        ]})}
        with pytest.raises(LandAnalysisError, match="usable area"):
            LandAnalysisService().analyze_holding("Home Farm", plans, features)
