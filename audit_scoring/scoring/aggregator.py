"""
Aggregator
audit_scoring/scoring/aggregator.py

Full recomputation of every derived count, progress value and total:

  per category   answered_count = questions answered with all sub-items answered
                 progress_value = round(answered / total x PROGRESS_BAR_WIDTH)
                 score_sum      = sum of question scores
  global         SKU metrics (sku_metrics.py)
                 total_score            = sum of every question score
                 all_questions_answered = every category complete, >= 1 category
"""

from typing import List, Optional

import structlog

from audit_scoring.config import settings
from audit_scoring.models.records import AuditTemplate
from audit_scoring.models.results import GlobalMetrics
from audit_scoring.models.tree import Category
from audit_scoring.scoring.sku_metrics import SkuMetricsCalculator
from audit_scoring.scoring.utils import round_to_int

logger = structlog.get_logger(__name__)


class Aggregator:
    """Recompute category and audit aggregates from the current tree."""

    def __init__(self, progress_width: Optional[int] = None):
        self.progress_width = progress_width or settings.PROGRESS_BAR_WIDTH
        self.sku_metrics = SkuMetricsCalculator()

    # ------------------------------------------------------------------
    # Per category
    # ------------------------------------------------------------------

    def update_category(self, category: Category) -> Category:
        answered = sum(1 for q in category.questions if q.fully_answered)
        total = category.total_questions

        category.answered_count = answered
        category.progress_value = (
            round_to_int((answered / total) * self.progress_width) if total else 0
        )
        category.score_sum = sum((q.score or 0.0) for q in category.questions)
        return category

    def update_categories(self, categories: List[Category]) -> None:
        for category in categories:
            self.update_category(category)

    # ------------------------------------------------------------------
    # Global
    # ------------------------------------------------------------------

    @staticmethod
    def total_score(categories: List[Category]) -> float:
        return sum((q.score or 0.0) for cat in categories for q in cat.questions)

    @staticmethod
    def all_questions_answered(categories: List[Category]) -> bool:
        return len(categories) > 0 and all(
            cat.answered_count == cat.total_questions for cat in categories
        )

    def recompute(
        self,
        categories: List[Category],
        template: Optional[AuditTemplate] = None,
    ) -> GlobalMetrics:
        """Recompute everything; returns a fresh GlobalMetrics."""
        self.update_categories(categories)

        metrics = self.sku_metrics.calculate(categories, template)
        metrics.total_score = self.total_score(categories)
        metrics.all_questions_answered = self.all_questions_answered(categories)

        logger.info(
            "audit_aggregated",
            categories=len(categories),
            total_score=metrics.total_score,
            all_questions_answered=metrics.all_questions_answered,
        )
        return metrics


def completion_percentage(categories: List[Category]) -> int:
    """Answered questions over all questions, as a whole percent."""
    total = sum(cat.total_questions for cat in categories)
    answered = sum(cat.answered_count for cat in categories)
    return round_to_int((answered / total) * 100) if total else 0
