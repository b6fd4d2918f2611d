"""
Compliance Evaluator
audit_scoring/scoring/compliance.py

Two flags from one walk of the tree, each with its own inclusion flag:

  compliant         include_in_us_compliance
  online_compliant  include_in_ca_online_compliance, and compliant must hold

A question is eligible for a flag when it, or any of its sub-items, carries
that flag. An eligible question is invalid when:

  ratio parent, numeric answer   a sub-item's raw text is missing, "0" or blank
  ratio parent, other answers    a sub-item's answer is not "yes"
  no sub-items                   its own answer is not "yes"
  other parents                  a flagged sub-item's answer is not "yes"

"yes" is compared trimmed and case-insensitively. A flag holds only when at
least one eligible question exists and none is invalid.
"""

from typing import Callable, List, Optional, Union

import structlog

from audit_scoring.core.exceptions import ComplianceEvaluationException
from audit_scoring.models.enumerations import AnswerKind, QuestionKind
from audit_scoring.models.results import ComplianceResult
from audit_scoring.models.tree import Category, Question, SubQuestion

logger = structlog.get_logger(__name__)

Item = Union[Question, SubQuestion]
Inclusion = Callable[[Item], bool]


def _us(item: Item) -> bool:
    return item.include_in_us_compliance is True


def _ca_online(item: Item) -> bool:
    return item.include_in_ca_online_compliance is True


def _is_yes(item: Item) -> bool:
    return str(item.answer or "").strip().lower() == "yes"


def _blank_or_zero(item: Item) -> bool:
    raw = item.answer_text if isinstance(item, SubQuestion) else item.stored_answer
    if raw is None:
        return True
    text = str(raw)
    return text == "0" or text.strip() == ""


class _Tally:
    """Running state of one flag during the walk."""

    def __init__(self, included: Inclusion):
        self.included = included
        self.eligible = False
        self.valid = True

    def visit(self, question: Question) -> None:
        children = question.children
        if not (self.included(question) or any(self.included(c) for c in children)):
            return
        self.eligible = True
        if not self._question_valid(question, children):
            self.valid = False

    def _question_valid(self, question: Question, children: List[Item]) -> bool:
        if question.question_kind == QuestionKind.RATIO_PARENT and children:
            if question.answer_kind == AnswerKind.NUMERIC:
                return not any(_blank_or_zero(c) for c in children)
            return all(_is_yes(c) for c in children)
        if not children:
            return _is_yes(question)
        return all(_is_yes(c) for c in children if self.included(c))

    @property
    def holds(self) -> bool:
        return self.eligible and self.valid


class ComplianceEvaluator:
    """
    Evaluate both compliance flags.

    Faults during the walk never propagate: they are logged and the last
    valid result (initially both flags false) is returned.
    """

    def __init__(self):
        self.last_result = ComplianceResult()

    def evaluate(self, categories: List[Category]) -> ComplianceResult:
        try:
            result = self._walk(categories)
        except ComplianceEvaluationException as e:
            logger.error("compliance_evaluation_failed", question_id=e.question_id,
                         reason=e.reason)
            return self.last_result.model_copy()

        self.last_result = result
        logger.debug(
            "compliance_evaluated",
            compliant=result.compliant,
            online_compliant=result.online_compliant,
        )
        return result.model_copy()

    @staticmethod
    def _walk(categories: List[Category]) -> ComplianceResult:
        us = _Tally(_us)
        online = _Tally(_ca_online)
        current: Optional[str] = None
        try:
            for category in categories:
                for question in category.questions:
                    current = question.id
                    us.visit(question)
                    online.visit(question)
        except Exception as e:
            raise ComplianceEvaluationException(current or "unknown", str(e)) from e

        compliant = us.holds
        return ComplianceResult(
            compliant=compliant,
            online_compliant=compliant and online.holds,
        )
