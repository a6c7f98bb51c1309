"""Tests for OSMasterMap feature classification."""
import pytest

from land_analysis.analysis.classification import (
    CLASSIFICATION_RULES,
    ClassificationHints,
    classify,
    clean_value,
)
from land_analysis.models.feature import FeatureProperties, FeatureType


def props(**kwargs) -> FeatureProperties:
    return FeatureProperties.model_validate(kwargs)


class TestCleanValue:
    def test_strips_braces_and_lowercases(self):
        assert clean_value("{Buildings}") == "buildings"

    def test_empty(self):
        assert clean_value(None) == ""
        assert clean_value("") == ""


class TestClassify:
    """Tests for the ordered classification rules."""

    @pytest.mark.parametrize("term,expected", [
        ("{Detached House}", "residential_building"),
        ("Residential Block", "residential_building"),
        ("{Office}", "commercial_building"),
        ("Retail Unit", "commercial_building"),
        ("Barn", "agricultural_building"),
        ("{Farm Building}", "agricultural_building"),
        ("Church", "building"),
    ])
    def test_building_terms(self, term, expected):
        assert classify(props(theme="{Buildings}", descriptiveTerm=term)) == expected

    def test_building_detected_from_group(self):
        result = classify(props(theme="{Structures}", descriptiveGroup="{Building}"))
        assert result == "building"

    @pytest.mark.parametrize("group,expected", [
        ("{Agricultural Land}", "agricultural_land"),
        ("{General Surface, Garden}", "garden_recreation"),
        ("Recreation Ground", "garden_recreation"),
        ("{Natural Environment}", "natural_land"),
        ("{General Surface}", "land"),
    ])
    def test_land_groups(self, group, expected):
        assert classify(props(theme="{Land}", descriptiveGroup=group)) == expected

    def test_water(self):
        assert classify(props(theme="{Water}")) == "water"
        assert classify(props(theme="{Terrain}", descriptiveGroup="{Inland Water}")) == "water"

    def test_transport(self):
        assert classify(props(theme="{Roads Tracks And Paths}", descriptiveGroup="{Road Or Track}")) == "transport"
        assert classify(props(theme="transport")) == "transport"

    def test_residential_checked_before_commercial(self):
        """First matching rule wins."""
        result = classify(props(theme="Buildings", descriptiveTerm="House and Shop"))
        assert result == "residential_building"

    def test_building_checked_before_water(self):
        result = classify(props(theme="Buildings", descriptiveGroup="Building, Water"))
        assert result == "building"

    def test_land_theme_checked_before_water_group(self):
        result = classify(props(theme="Land", descriptiveGroup="Water Meadow"))
        assert result == "land"

    def test_unmatched_falls_back_to_raw_theme(self):
        assert classify(props(theme="{Heritage}")) == "{Heritage}"

    def test_no_hints_is_unknown(self):
        assert classify(props()) == "unknown"
        assert classify(None) == "unknown"

    def test_list_hints_are_joined(self):
        result = classify(props(theme=["Land", "Buildings"], descriptiveGroup=["Building"]))
        assert result == "building"

    def test_deterministic(self):
        p = props(theme="{Land}", descriptiveGroup="{Natural Environment}")
        assert {classify(p) for _ in range(20)} == {"natural_land"}


class TestClassificationRules:
    def test_rule_order(self):
        labels = [rule.label for rule in CLASSIFICATION_RULES]
        assert labels.index(FeatureType.BUILDING) < labels.index(FeatureType.AGRICULTURAL_LAND)
        assert labels.index(FeatureType.LAND) < labels.index(FeatureType.WATER)
        assert labels.index(FeatureType.WATER) < labels.index(FeatureType.TRANSPORT)

    def test_rules_are_independently_testable(self):
        hints = ClassificationHints(theme="land", descriptive_group="natural", descriptive_term="")
        matching = [rule.label for rule in CLASSIFICATION_RULES if rule.matches(hints)]
        assert matching == [FeatureType.NATURAL_LAND, FeatureType.LAND]
