"""
OSMasterMap feature classification.

Rules are evaluated in order and the first match wins. Building checks run
before land checks, then water, then transport.
"""
import re
from dataclasses import dataclass
from typing import Callable, Optional

from land_analysis.models.feature import FeatureProperties, FeatureType

_BRACES = re.compile(r"[{}]")

BUILDING_THEMES = ("building", "buildings")

RESIDENTIAL_TERMS = ("house", "residential", "dwelling")
COMMERCIAL_TERMS = ("commercial", "office", "shop", "retail")
AGRICULTURAL_TERMS = ("agricultural", "farm", "barn")


def clean_value(value: Optional[str]) -> str:
    """Strip OSMasterMap delimiter braces and lowercase."""
    if not value:
        return ""
    return _BRACES.sub("", str(value)).lower()


@dataclass(frozen=True)
class ClassificationHints:
    """Normalised hint strings used by the rule predicates."""
    theme: str
    descriptive_group: str
    descriptive_term: str

    @classmethod
    def from_properties(cls, properties: FeatureProperties) -> "ClassificationHints":
        return cls(
            theme=clean_value(properties.theme),
            descriptive_group=clean_value(properties.descriptive_group),
            descriptive_term=clean_value(properties.descriptive_term),
        )

    @property
    def is_building(self) -> bool:
        return self.theme in BUILDING_THEMES or "building" in self.descriptive_group

    @property
    def is_land(self) -> bool:
        return self.theme == "land"


def _term_has(hints: ClassificationHints, words: tuple[str, ...]) -> bool:
    return any(word in hints.descriptive_term for word in words)


def _group_has(hints: ClassificationHints, *words: str) -> bool:
    return any(word in hints.descriptive_group for word in words)


@dataclass(frozen=True)
class ClassificationRule:
    label: FeatureType
    predicate: Callable[[ClassificationHints], bool]
    description: str = ""

    def matches(self, hints: ClassificationHints) -> bool:
        return self.predicate(hints)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    # Buildings
    ClassificationRule(
        FeatureType.RESIDENTIAL_BUILDING,
        lambda h: h.is_building and _term_has(h, RESIDENTIAL_TERMS),
        "building with house/residential/dwelling term",
    ),
    ClassificationRule(
        FeatureType.COMMERCIAL_BUILDING,
        lambda h: h.is_building and _term_has(h, COMMERCIAL_TERMS),
        "building with commercial/office/shop/retail term",
    ),
    ClassificationRule(
        FeatureType.AGRICULTURAL_BUILDING,
        lambda h: h.is_building and _term_has(h, AGRICULTURAL_TERMS),
        "building with agricultural/farm/barn term",
    ),
    ClassificationRule(
        FeatureType.BUILDING,
        lambda h: h.is_building,
        "any other building",
    ),
    # Land
    ClassificationRule(
        FeatureType.AGRICULTURAL_LAND,
        lambda h: h.is_land and _group_has(h, "agricultural"),
        "land theme, agricultural group",
    ),
    ClassificationRule(
        FeatureType.GARDEN_RECREATION,
        lambda h: h.is_land and _group_has(h, "garden", "recreation"),
        "land theme, garden or recreation group",
    ),
    ClassificationRule(
        FeatureType.NATURAL_LAND,
        lambda h: h.is_land and _group_has(h, "natural"),
        "land theme, natural group",
    ),
    ClassificationRule(
        FeatureType.LAND,
        lambda h: h.is_land,
        "any other land",
    ),
    # Water
    ClassificationRule(
        FeatureType.WATER,
        lambda h: h.theme == "water" or _group_has(h, "water"),
        "water theme or group",
    ),
    # Transport / infrastructure
    ClassificationRule(
        FeatureType.TRANSPORT,
        lambda h: h.theme == "transport" or _group_has(h, "road", "path"),
        "transport theme, road or path group",
    ),
)


def classify(
    properties: Optional[FeatureProperties],
    rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> str:
    """
    Classify a feature from its OSMasterMap hints.

    Falls back to the raw theme string when no rule matches, then to
    "unknown".
    """
    if properties is None:
        return FeatureType.UNKNOWN.value

    hints = ClassificationHints.from_properties(properties)
    for rule in rules:
        if rule.matches(hints):
            return rule.label.value

    return properties.theme or FeatureType.UNKNOWN.value
