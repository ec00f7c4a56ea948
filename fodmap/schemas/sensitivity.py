"""Schemas for food sensitivity classification."""

from enum import Enum
from typing import Any

from pydantic import AnyUrl, BaseModel, Field


class SensitivityCategory(str, Enum):
    """The categories of food sensitivities for classification. NONE means no classification was produced."""

    NONE = "None"
    FRUCTANS = "Fructans"
    OLIGOSACCHARIDES = "Oligosaccharides"
    DISACCHARIDES = "Disaccharides"
    MONOSACCHARIDES = "Monosaccharides"
    POLYOLS = "Polyols"
    DAIRY = "Dairy"
    GLUTEN = "Gluten"


class IntoleranceLevel(str, Enum):
    """The level at which a food sensitivity/intolerance is experienced. NONE means no detectable sensitivity."""

    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    NONE = "None"


def classifiable_categories() -> list[SensitivityCategory]:
    """All categories except the NONE sentinel, in declaration order."""
    return [c for c in SensitivityCategory if c is not SensitivityCategory.NONE]


class SensitivityLevel(BaseModel):
    """The level of sensitivity to one category of food."""

    model_config = {"frozen": True, "populate_by_name": True}

    sensitivity: SensitivityCategory = Field(..., description="The category of food sensitivity.")
    intolerance_level: IntoleranceLevel = Field(
        ..., alias="intoleranceLevel", description="The level of intolerance to the food category."
    )
    citations: list[AnyUrl] = Field(default_factory=list, description="The sources of the information.")

    @classmethod
    def none(cls) -> "SensitivityLevel":
        """The sentinel level: no usable classification."""
        return cls(sensitivity=SensitivityCategory.NONE, intolerance_level=IntoleranceLevel.NONE, citations=[])

    @property
    def is_sentinel(self) -> bool:
        return self.sensitivity is SensitivityCategory.NONE or self.intolerance_level is IntoleranceLevel.NONE


class FoodSensitivity(BaseModel):
    """The food name and its associated sensitivity levels. Citations are the flattened level citations."""

    model_config = {"frozen": True, "populate_by_name": True}

    food_name: str = Field(..., alias="foodName", description="The name of the food being researched.")
    sensitivity_levels: list[SensitivityLevel] = Field(
        default_factory=list, alias="sensitivityLevels", description="The sensitivity levels for the food."
    )
    citations: list[AnyUrl] = Field(default_factory=list, description="The sources of the information.")


class ClassificationResult(BaseModel):
    """
    Outcome of classifying one requested category.
    Either a classification, or the sentinel level plus the absorbed error message.
    """

    model_config = {"frozen": True}

    requested: SensitivityCategory
    level: SensitivityLevel
    error: str | None = None

    @classmethod
    def failed(cls, requested: SensitivityCategory, error: str) -> "ClassificationResult":
        return cls(requested=requested, level=SensitivityLevel.none(), error=error)

    @property
    def usable(self) -> bool:
        return self.error is None and not self.level.is_sentinel


def _classification_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "sensitivity": {
                "type": "string",
                "enum": [c.value for c in SensitivityCategory],
            },
            "intoleranceLevel": {
                "type": "string",
                "enum": [lvl.value for lvl in IntoleranceLevel],
            },
            "citations": {
                "type": "array",
                "items": {"type": "string", "format": "uri"},
            },
        },
        "required": ["sensitivity", "intoleranceLevel", "citations"],
        "additionalProperties": False,
    }


# JSON schema for the structured classification completion; built once from the enums.
CLASSIFICATION_SCHEMA: dict[str, Any] = _classification_schema()
CLASSIFICATION_SCHEMA_NAME: str = "sensitivity_level"
