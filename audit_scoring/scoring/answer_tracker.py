"""
Answer Tracker
audit_scoring/scoring/answer_tracker.py

Derives ``answer`` / ``value`` / ``answered`` of every tree node from its raw
stored answer fields. Every call resets the tracked fields first, so running
it twice over the same raw input yields the same state.

  text         answered iff stored text non-empty; answer = stored text
  numeric      answered iff stored text parses to a finite number;
               answer = "Yes"; value = int(parsed)
  list option  answered iff stored text non-empty; answer = "Yes";
               value = option name (or "none")
  sub text     answer = answer text; answered iff non-empty
  sub numeric  value = numerical answer; answered iff present (0 counts)
  parents      answered iff they have children and all children are answered;
               a sub-question parent without sub-questions is tracked as a leaf
"""

from typing import Any, Iterable, Optional

from audit_scoring.models.enumerations import AnswerKind, QuestionKind, SubAnswerKind
from audit_scoring.models.tree import Category, Question, SubQuestion
from audit_scoring.scoring.utils import parse_number

YES = "Yes"
NO_OPTION = "none"


def _raw_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return YES if raw else "No"
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


class AnswerTracker:
    """Set answered state from stored answers, independent of any UI."""

    def track(self, categories: Iterable[Category]) -> None:
        for category in categories:
            for question in category.questions:
                self.track_question(question)

    # ------------------------------------------------------------------ #
    # Questions                                                            #
    # ------------------------------------------------------------------ #

    def track_question(self, question: Question) -> None:
        if question.question_kind == QuestionKind.SKU_GROUP:
            for item in question.sku_items:
                self.track_leaf(item)
            self.track_parent(question)
        elif question.question_kind == QuestionKind.SUB_QUESTION_PARENT and not question.sub_questions:
            self.track_leaf(question)
        elif question.question_kind in (QuestionKind.SUB_QUESTION_PARENT, QuestionKind.RATIO_PARENT):
            for sub in question.sub_questions:
                self.track_sub_question(sub)
            self.track_parent(question)
        else:
            self.track_leaf(question)

    @staticmethod
    def track_leaf(question: Question) -> None:
        stored = question.stored_answer or ""
        question.answered = False
        question.answer = None
        question.value = None

        if question.answer_kind == AnswerKind.TEXT:
            if stored:
                question.answer = stored
                question.answered = True

        elif question.answer_kind == AnswerKind.NUMERIC:
            if stored:
                question.answer = YES
                parsed = parse_number(stored)
                if parsed is not None:
                    question.value = int(parsed)
                    question.answered = True
                else:
                    question.value = 0

        elif question.answer_kind == AnswerKind.LIST_OPTION:
            if stored:
                question.answer = YES
                question.value = stored
                question.answered = True
            else:
                question.value = NO_OPTION

    @staticmethod
    def track_parent(question: Question) -> None:
        children = question.children
        question.answered = bool(children) and all(child.answered for child in children)

    @staticmethod
    def track_sub_question(sub: SubQuestion) -> None:
        sub.answered = False
        if sub.answer_kind == SubAnswerKind.TEXT:
            sub.value = None
            sub.answer = sub.answer_text
            sub.answered = bool(sub.answer_text)
        elif sub.answer_kind == SubAnswerKind.NUMERIC:
            sub.answer = sub.answer_text
            sub.value = sub.numerical_answer
            sub.answered = sub.numerical_answer is not None

    # ------------------------------------------------------------------ #
    # Raw edits from the mutation API                                      #
    # ------------------------------------------------------------------ #

    def apply_raw_answer(self, question: Question, raw_value: Any) -> None:
        """Store a raw answer on a leaf question and re-derive its state."""
        question.stored_answer = _raw_text(raw_value) or None
        self.track_leaf(question)

    def apply_raw_sub_answer(self, sub: SubQuestion, raw_value: Any) -> None:
        """
        Store a raw answer on a sub-question and re-derive its state.

        Numeric text that does not parse leaves the sub-question at value 0,
        not answered.
        """
        text = _raw_text(raw_value)
        sub.answer_text = text or None
        if sub.answer_kind == SubAnswerKind.NUMERIC:
            parsed: Optional[float] = parse_number(raw_value)
            sub.numerical_answer = parsed
            self.track_sub_question(sub)
            if parsed is None:
                sub.value = 0
        else:
            self.track_sub_question(sub)
