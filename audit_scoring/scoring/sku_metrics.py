"""
SKU-derived audit metrics
audit_scoring/scoring/sku_metrics.py

Every metric is an independent pass over all SKU lines of all SKU groups in
the tree. Nothing is carried over between calls.

Coverage metrics (percent of matching lines answered "Yes"):

  metric             range tier    species      numerator filter
  ─────────────────  ────────────  ───────────  ─────────────────────────
  must_have_dog      must-have     Dog          same as denominator
  must_have_cat      must-have     Cat          same as denominator
  total_must_have    must-have     Cat or Dog   must-have, any species
  total_dog          any           Dog          same as denominator
  total_cat          any           Cat          same as denominator
  next_best_dog      next-best     Dog          same as denominator
  next_best_cat      next-best     Cat          same as denominator
  total_next_best    next-best     Cat or Dog   next-best, any species
  other_cat          other         Cat          same as denominator
  other_dog          other         Dog          same as denominator

Count metrics (number of lines answered "Yes"): dry/wet per species, and
per species the lines carrying a reporting range or a territory.
The reporting range and territory of the template are passed through.
"""

from typing import Callable, Iterable, Iterator, List, Optional

import structlog

from audit_scoring.models.enumerations import FoodType, QuestionKind, RangeTier, Species
from audit_scoring.models.records import AuditTemplate
from audit_scoring.models.results import GlobalMetrics
from audit_scoring.models.tree import Category, Question
from audit_scoring.scoring.answer_tracker import YES
from audit_scoring.scoring.utils import percentage

logger = structlog.get_logger(__name__)

LinePredicate = Callable[[Question], bool]


def iter_sku_lines(categories: Iterable[Category]) -> Iterator[Question]:
    for category in categories:
        for question in category.questions:
            if question.question_kind == QuestionKind.SKU_GROUP:
                yield from question.sku_items


def _is_yes(line: Question) -> bool:
    return line.answer == YES


def _species(*species: Species) -> LinePredicate:
    names = {s.value for s in species}
    return lambda line: line.species in names


def _tier(tier: RangeTier) -> LinePredicate:
    return lambda line: line.range_tier == tier.value


def _food(food: FoodType) -> LinePredicate:
    return lambda line: line.food_type == food.value


def _has_reporting_range(line: Question) -> bool:
    return line.reporting_range is not None


def _has_territory(line: Question) -> bool:
    return line.territory is not None


def _all(*predicates: LinePredicate) -> LinePredicate:
    return lambda line: all(p(line) for p in predicates)


class SkuMetricsCalculator:
    """Recompute the SKU-derived metrics from scratch over the whole tree."""

    def coverage(
        self,
        categories: List[Category],
        population: LinePredicate,
        answered: Optional[LinePredicate] = None,
    ) -> float:
        """
        Percent of lines matching ``answered`` among lines matching
        ``population``. ``answered`` defaults to the population filter; a "Yes"
        answer is always required in the numerator.
        """
        answered = answered or population
        total = 0
        yes = 0
        for line in iter_sku_lines(categories):
            if population(line):
                total += 1
            if answered(line) and _is_yes(line):
                yes += 1
        return percentage(yes, total)

    def count_yes(self, categories: List[Category], predicate: LinePredicate) -> int:
        return sum(1 for line in iter_sku_lines(categories) if predicate(line) and _is_yes(line))

    def calculate(
        self,
        categories: List[Category],
        template: Optional[AuditTemplate] = None,
        metrics: Optional[GlobalMetrics] = None,
    ) -> GlobalMetrics:
        """Fill the SKU fields of ``metrics`` (a new instance if omitted)."""
        metrics = metrics or GlobalMetrics()
        template = template or AuditTemplate()

        must_have = _tier(RangeTier.MUST_HAVE)
        next_best = _tier(RangeTier.NEXT_BEST)
        other = _tier(RangeTier.OTHER)
        dog = _species(Species.DOG)
        cat = _species(Species.CAT)
        both = _species(Species.CAT, Species.DOG)

        metrics.must_have_dog = self.coverage(categories, _all(must_have, dog))
        metrics.must_have_cat = self.coverage(categories, _all(must_have, cat))
        metrics.total_must_have = self.coverage(categories, _all(must_have, both), must_have)
        metrics.total_dog = self.coverage(categories, dog)
        metrics.total_cat = self.coverage(categories, cat)
        metrics.next_best_dog = self.coverage(categories, _all(next_best, dog))
        metrics.next_best_cat = self.coverage(categories, _all(next_best, cat))
        metrics.total_next_best = self.coverage(categories, _all(next_best, both), next_best)
        metrics.other_cat = self.coverage(categories, _all(other, cat))
        metrics.other_dog = self.coverage(categories, _all(other, dog))

        metrics.dog_dry = self.count_yes(categories, _all(_food(FoodType.DRY), dog))
        metrics.dog_wet = self.count_yes(categories, _all(_food(FoodType.WET), dog))
        metrics.cat_dry = self.count_yes(categories, _all(_food(FoodType.DRY), cat))
        metrics.cat_wet = self.count_yes(categories, _all(_food(FoodType.WET), cat))
        metrics.cat_reporting_range = self.count_yes(categories, _all(_has_reporting_range, cat))
        metrics.dog_reporting_range = self.count_yes(categories, _all(_has_reporting_range, dog))
        metrics.cat_territory = self.count_yes(categories, _all(_has_territory, cat))
        metrics.dog_territory = self.count_yes(categories, _all(_has_territory, dog))

        metrics.reporting_range = template.reporting_range or 0
        metrics.territory = template.territory or 0

        logger.debug(
            "sku_metrics_calculated",
            total_must_have=metrics.total_must_have,
            total_next_best=metrics.total_next_best,
            total_dog=metrics.total_dog,
            total_cat=metrics.total_cat,
        )
        return metrics
