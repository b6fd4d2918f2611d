"""
Question Scorer
audit_scoring/scoring/question_scorer.py

Maps a question and its scoring rules to a numeric score. Dispatch is on the
tags set by the normalizer:

  (PLAIN, TEXT)         binary            rules[0].target if answer == "Yes"
  (PLAIN, NUMERIC)      threshold buckets on the tracked value
  (PLAIN, LIST_OPTION)  option lookup     option value == rule threshold
  (RATIO_PARENT, *)     threshold buckets on the derived Q2/Q1 ratio
  (SKU_GROUP, *)        perfect score     coverage of "Yes" lines vs. goal
  (SUB_QUESTION_PARENT) no algorithm      stored score kept

A question without scoring rules always scores 0. Every algorithm sorts the
rules by threshold ascending before use.

Threshold buckets, rules (t0, s0) < (t1, s1) < ... < (tn, sn):
    v <= t0             -> s0
    t(i) < v <= t(i+1)  -> s(i+1)
    v > tn              -> 0
"""

import math
from decimal import Decimal
from typing import List, Optional, Sequence

import structlog

from audit_scoring.config import settings
from audit_scoring.models.enumerations import AnswerKind, QuestionKind
from audit_scoring.models.records import ScoringRule
from audit_scoring.models.tree import Question
from audit_scoring.scoring.answer_tracker import YES
from audit_scoring.scoring.utils import as_decimal, parse_number, round_half_up

logger = structlog.get_logger(__name__)


def sorted_rules(rules: Sequence[ScoringRule]) -> List[ScoringRule]:
    return sorted(rules, key=lambda r: r.threshold)


def binary_score(answer: Optional[str], rules: Sequence[ScoringRule]) -> float:
    if not rules:
        return 0.0
    return rules[0].target if answer == YES else 0.0


def threshold_score(value: float, rules: Sequence[ScoringRule]) -> float:
    """
    Bucketed lookup of ``value`` against the ascending thresholds.

    Duplicate thresholds are undefined input; the first bucket in ascending
    order that matches wins.
    """
    ordered = sorted_rules(rules)
    if not ordered:
        return 0.0
    if value <= ordered[0].threshold:
        return ordered[0].target
    for lower, upper in zip(ordered, ordered[1:]):
        if lower.threshold < value <= upper.threshold:
            return upper.target
    return 0.0


def list_option_score(question: Question) -> float:
    option = next(
        (opt for opt in question.list_options if opt.name == question.stored_answer),
        None,
    )
    if option is None or option.value is None:
        return 0.0
    rule = next(
        (r for r in question.scoring_rules if r.threshold == option.value),
        None,
    )
    return rule.target if rule is not None else 0.0


def perfect_score(yes_count: int, total: int, rules: Sequence[ScoringRule]) -> float:
    """
    Weighted-ratio score of a SKU group.

    coverage = yes / total x 100 selects the highest-threshold rule whose
    threshold <= coverage (the lowest rule if none qualifies). The group earns
    the rule target once yes >= ceil(threshold% x total); a weighted rule
    scales the target by yes / total.

    Coverage and goal are compared in exact decimal arithmetic: 7 of 50 is
    exactly 14%, and 29 of 100 exactly 29%.
    """
    if not rules or total == 0:
        return 0.0

    ordered = sorted_rules(rules)
    yes_pct = Decimal(yes_count) * 100

    selected = ordered[0]
    for rule in ordered:
        if as_decimal(rule.threshold) * total <= yes_pct:
            selected = rule

    goal = math.ceil(as_decimal(selected.threshold) * total / 100)
    if yes_count < goal:
        return 0.0

    target = as_decimal(selected.target)
    score = target * yes_count / total if selected.weighted else target
    return round_half_up(score, settings.SCORE_DECIMAL_PLACES)


def compute_ratio(question: Question) -> Optional[float]:
    """
    Derive Q2/Q1 x 100 for a ratio parent and store it on ``derived_ratio``.

    Sub-questions are ordered by question flow; the first is the denominator.
    A zero denominator yields 0. Returns None (nothing stored) when the
    question has fewer than two sub-questions.
    """
    subs = question.sub_questions
    if len(subs) < 2:
        return None

    ordered = sorted(subs, key=lambda s: s.question_flow or 0)
    q1 = _sub_number(ordered[0])
    q2 = _sub_number(ordered[1])

    if q1 == 0:
        ratio = 0.0
    else:
        ratio = round_half_up((q2 / q1) * 100, settings.SCORE_DECIMAL_PLACES)
    question.derived_ratio = ratio
    return ratio


def _sub_number(sub) -> float:
    if sub.numerical_answer is not None:
        return sub.numerical_answer
    return sub.value or 0.0


class QuestionScorer:
    """Score one question in place."""

    def score_question(self, question: Question) -> float:
        score = self._calculate(question)
        question.score = score
        logger.debug(
            "question_scored",
            question_id=question.id,
            question_kind=question.question_kind.value,
            answer_kind=question.answer_kind.value,
            score=score,
        )
        return score

    def _calculate(self, question: Question) -> float:
        if not question.scoring_rules:
            return 0.0

        kind = question.question_kind

        if kind == QuestionKind.SKU_GROUP:
            yes = sum(1 for item in question.sku_items if item.answer == YES)
            return perfect_score(yes, len(question.sku_items), question.scoring_rules)

        if kind == QuestionKind.RATIO_PARENT:
            ratio = compute_ratio(question)
            if ratio is None:
                ratio = question.derived_ratio
            return threshold_score(ratio or 0.0, question.scoring_rules)

        if kind == QuestionKind.SUB_QUESTION_PARENT:
            return question.score

        if question.answer_kind == AnswerKind.TEXT:
            return binary_score(question.answer, question.scoring_rules)
        if question.answer_kind == AnswerKind.NUMERIC:
            if not question.answered:
                return 0.0
            return threshold_score(self._numeric_value(question), question.scoring_rules)
        if question.answer_kind == AnswerKind.LIST_OPTION:
            return list_option_score(question)
        return 0.0

    @staticmethod
    def _numeric_value(question: Question) -> float:
        value = parse_number(question.value)
        return value if value is not None else 0.0
