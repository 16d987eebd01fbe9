"""Curation priority scoring.

Scores a curation item from three factors:
- Severity of the violation that put it up for curation
- Lack of a confident AI license suggestion
- How broadly the dependency ships (runtime vs. test scope)

Each factor value is in [0, 1]; the score is the weighted sum divided by
the total weight, so it also stays in [0, 1].
"""

from __future__ import annotations

import logging
from typing import Optional

from license_curator.models.curation import (
    CurationItem,
    PriorityFactor,
    PriorityInfo,
    PriorityLevel,
)
from license_curator.models.dependency import AiConfidence
from license_curator.models.policy import PriorityWeights, Severity, Violation

logger = logging.getLogger(__name__)

SEVERITY_VALUES: dict[Severity, float] = {
    Severity.ERROR: 1.0,
    Severity.WARNING: 0.6,
    Severity.INFO: 0.2,
}

CONFIDENCE_VALUES: dict[AiConfidence, float] = {
    AiConfidence.LOW: 1.0,
    AiConfidence.MEDIUM: 0.5,
    AiConfidence.HIGH: 0.0,
}

RUNTIME_SCOPES: frozenset[str] = frozenset(
    {"", "runtime", "compile", "implementation", "api", "main", "install", "required"}
)

TEST_SCOPES: frozenset[str] = frozenset(
    {"test", "tests", "testimplementation", "testcompile", "dev", "development", "docs"}
)


class PriorityScorer:
    """Calculates curation priority for items.

    Level thresholds: >= 0.75 CRITICAL, >= 0.5 HIGH, >= 0.25 MEDIUM,
    otherwise LOW.
    """

    def __init__(self, weights: Optional[PriorityWeights] = None) -> None:
        self._weights = weights if weights is not None else PriorityWeights()

    def score(
        self, item: CurationItem, violation: Optional[Violation] = None
    ) -> PriorityInfo:
        """Score an item.

        Args:
            item: The curation item.
            violation: The violation that blocks the item, if any.

        Returns:
            PriorityInfo listing only the factors that contributed.
        """
        total = self._weights.total
        candidates = [
            self._severity_factor(violation),
            self._confidence_factor(item),
            self._scope_factor(item),
        ]

        score = 0.0
        factors: list[PriorityFactor] = []
        for name, weight, value, description in candidates:
            contribution = weight * value / total
            score += contribution
            if contribution > 0:
                factors.append(
                    PriorityFactor(
                        name=name,
                        weight=round(contribution, 4),
                        description=description,
                    )
                )

        score = round(min(max(score, 0.0), 1.0), 4)
        level = PriorityLevel.from_score(score)
        logger.debug(
            "Priority of %s: %s (%.4f)", item.dependency_id, level.value, score
        )
        return PriorityInfo(level=level, score=score, factors=factors)

    def _severity_factor(
        self, violation: Optional[Violation]
    ) -> tuple[str, float, float, str]:
        if violation is None:
            return ("severity", self._weights.severity, 0.0, "No policy violation")
        return (
            "severity",
            self._weights.severity,
            SEVERITY_VALUES[violation.severity],
            f"{violation.severity.value} violation of rule '{violation.rule_id}'",
        )

    def _confidence_factor(self, item: CurationItem) -> tuple[str, float, float, str]:
        suggestion = item.ai_suggestion
        if suggestion is None:
            return (
                "ai_confidence",
                self._weights.confidence,
                1.0,
                "No AI license suggestion available",
            )
        return (
            "ai_confidence",
            self._weights.confidence,
            CONFIDENCE_VALUES[suggestion.confidence],
            f"AI suggestion has {suggestion.confidence.value} confidence",
        )

    def _scope_factor(self, item: CurationItem) -> tuple[str, float, float, str]:
        scope = (item.scope or "").strip().lower()
        if scope in RUNTIME_SCOPES:
            value = 1.0
            description = f"Ships with the product (scope '{item.scope or 'default'}')"
        elif scope in TEST_SCOPES:
            value = 0.0
            description = f"Not distributed (scope '{item.scope}')"
        else:
            value = 0.5
            description = f"Unclassified scope '{item.scope}'"
        return ("scope", self._weights.scope, value, description)


def override_priority(level: PriorityLevel, reason: str) -> PriorityInfo:
    """Build a manually set priority whose score matches its level."""
    return PriorityInfo(
        level=level,
        score=level.threshold,
        factors=[PriorityFactor(name="template_override", weight=1.0, description=reason)],
    )
