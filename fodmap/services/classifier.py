"""
FODMAP sensitivity classifier.

For every category (except the NONE sentinel), concurrently: search + summarize a question about
the food, then ask the LLM for a schema-constrained classification. A failure in one category is
absorbed as a failed ClassificationResult; the aggregate keeps only usable results, in category order.
"""

import asyncio
import logging
from typing import Any, Protocol

from fodmap.schemas.search import SearchResult
from fodmap.schemas.sensitivity import (
    CLASSIFICATION_SCHEMA,
    CLASSIFICATION_SCHEMA_NAME,
    ClassificationResult,
    FoodSensitivity,
    SensitivityCategory,
    SensitivityLevel,
    classifiable_categories,
)

logger = logging.getLogger(__name__)


class SearchAndSummarize(Protocol):
    async def search_and_summarize(self, query: str) -> SearchResult: ...


class StructuredCompleter(Protocol):
    async def complete_structured(self, prompt: str, schema: dict[str, Any], name: str = ...) -> dict[str, Any]: ...


def intolerance_query(category: SensitivityCategory, food_name: str) -> str:
    return f"What is the intolerance level for {category.value} in {food_name}?"


def classifier_prompt(summary: str, category: SensitivityCategory, food_name: str) -> str:
    return (
        f"Based on the following: {summary},\n"
        f"What are the details for {food_name}'s classification: {category.value}?"
    )


class SensitivityClassifier:
    def __init__(self, llm: StructuredCompleter, search_agent: SearchAndSummarize) -> None:
        self._llm = llm
        self._search_agent = search_agent

    async def classify_category(self, food_name: str, category: SensitivityCategory) -> ClassificationResult:
        """Classify one category. Never raises: failures come back as ClassificationResult.failed."""
        try:
            logger.debug("[classifier:classify] IN  food=%r category=%s", food_name, category.value)
            search_result = await self._search_agent.search_and_summarize(intolerance_query(category, food_name))
            data = await self._llm.complete_structured(
                classifier_prompt(search_result.summary, category, food_name),
                CLASSIFICATION_SCHEMA,
                name=CLASSIFICATION_SCHEMA_NAME,
            )
            level = SensitivityLevel.model_validate(data)
            logger.debug(
                "[classifier:classify] OUT food=%r category=%s level=%s/%s",
                food_name,
                category.value,
                level.sensitivity.value,
                level.intolerance_level.value,
            )
            return ClassificationResult(requested=category, level=level)
        except Exception as e:
            logger.exception("[classifier:classify] failed food=%r category=%s", food_name, category.value)
            return ClassificationResult.failed(category, f"{type(e).__name__}: {e}")

    async def research_food_sensitivity(self, food_name: str) -> FoodSensitivity:
        logger.info("[classifier:research] IN  food=%r", food_name)
        try:
            categories = classifiable_categories()
            results = await asyncio.gather(*(self.classify_category(food_name, c) for c in categories))
            levels = [r.level for r in results if r.usable]
            citations = [c for level in levels for c in level.citations]
            sensitivity = FoodSensitivity(food_name=food_name, sensitivity_levels=levels, citations=citations)
        except Exception:
            logger.exception("[classifier:research] failed food=%r", food_name)
            raise
        logger.info(
            "[classifier:research] OUT food=%r attempted=%d retained=%s",
            food_name,
            len(results),
            [f"{lvl.sensitivity.value}:{lvl.intolerance_level.value}" for lvl in levels],
        )
        return sensitivity
