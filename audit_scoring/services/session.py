"""
Audit session - Audit Scoring Engine
audit_scoring/services/session.py

Owns the audit tree and coordinates every mutation:

  apply_answer / apply_sub_answer / apply_sku_answer
      1. look the target up in the id index (unknown id -> no-op)
      2. store the raw answer, re-derive answered state (AnswerTracker)
      3. record the touched item as changed (last write wins)
      4. QuestionScorer -> Aggregator -> ComplianceEvaluator
      5. hand a snapshot to the store (failures are logged, never raised)

Each call runs the whole cascade before it returns.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from audit_scoring.config import settings
from audit_scoring.core.exceptions import SnapshotStoreException
from audit_scoring.models.enumerations import AnswerKind, QuestionKind
from audit_scoring.models.records import AuditRecord, AuditTemplate
from audit_scoring.models.results import (
    AuditSnapshot,
    ComplianceResult,
    GlobalMetrics,
    audit_scores,
)
from audit_scoring.models.tree import Category, Question, SubQuestion
from audit_scoring.scoring.aggregator import Aggregator, completion_percentage
from audit_scoring.scoring.answer_tracker import AnswerTracker
from audit_scoring.scoring.compliance import ComplianceEvaluator
from audit_scoring.scoring.normalizer import RecordNormalizer
from audit_scoring.scoring.question_scorer import QuestionScorer, compute_ratio
from audit_scoring.services.ingest import RawPayload, load_audit_record
from audit_scoring.services.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class AuditSession:
    """Mutable audit tree plus the derived metrics and compliance flags."""

    def __init__(
        self,
        categories: List[Category],
        record: Optional[AuditRecord] = None,
        template: Optional[AuditTemplate] = None,
        template_type: Optional[AuditTemplate] = None,
        store: Optional[SnapshotStore] = None,
    ):
        self.categories = categories
        self.global_result = record or AuditRecord()
        self.global_template = template or AuditTemplate()
        self.template_type = template_type or self.global_template
        self.store = store
        self.read_only = self.global_result.status_code == settings.READ_ONLY_STATUS_CODE

        self.tracker = AnswerTracker()
        self.scorer = QuestionScorer()
        self.aggregator = Aggregator()
        self.evaluator = ComplianceEvaluator()

        self.global_metrics = GlobalMetrics()
        self.compliance = ComplianceResult()

        self._changed_questions: Dict[str, Question] = {}
        self._changed_sub_questions: Dict[str, SubQuestion] = {}

        self._build_index()
        self.recompute()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_record(
        cls,
        record: AuditRecord,
        template: Optional[AuditTemplate] = None,
        store: Optional[SnapshotStore] = None,
    ) -> "AuditSession":
        """Normalize and track a parsed audit record, then run the initial pass."""
        categories = RecordNormalizer().normalize(record.questions)
        AnswerTracker().track(categories)
        session = cls(categories, record=record, template=template, store=store)
        session.save()
        return session

    @classmethod
    def from_json(
        cls,
        raw: RawPayload,
        template: Optional[AuditTemplate] = None,
        store: Optional[SnapshotStore] = None,
    ) -> "AuditSession":
        """Build a session from a JSON payload; an empty tree if it is unusable."""
        record = load_audit_record(raw)
        if record is None:
            return cls([], template=template, store=store)
        return cls.from_record(record, template=template, store=store)

    @classmethod
    def restore(cls, store: SnapshotStore, audit_id: str) -> Optional["AuditSession"]:
        """Rebuild a session from the last saved snapshot, if any."""
        try:
            snapshot = store.load(audit_id)
        except SnapshotStoreException as e:
            logger.error(f"Could not restore audit {audit_id}: {e}")
            return None
        if snapshot is None:
            return None
        logger.info(f"Restored audit {audit_id} from snapshot taken {snapshot.timestamp.isoformat()}")
        return cls(
            snapshot.tree,
            record=snapshot.global_result,
            template=snapshot.global_template,
            template_type=snapshot.template_type,
            store=store,
        )

    def _build_index(self) -> None:
        self._questions: Dict[Tuple[str, str], Question] = {}
        self._parents: Dict[str, Tuple[Category, Question]] = {}
        for category in self.categories:
            for question in category.questions:
                self._questions[(category.id, question.id)] = question
                self._parents.setdefault(question.id, (category, question))

    # ------------------------------------------------------------------
    # Mutation API
    # ------------------------------------------------------------------

    def apply_answer(
        self,
        question_id: str,
        category_id: str,
        raw_value: Any,
        kind: Union[AnswerKind, str, None] = None,
    ) -> bool:
        """
        Answer a top-level question. Returns False when nothing was applied.

        Plain questions and sub-question parents without sub-questions take a
        direct answer; every other parent is answered through its children.
        """
        if not self._writable("answer", question_id):
            return False

        question = self._questions.get((category_id, question_id))
        if question is None:
            logger.debug(f"Ignoring answer for unknown question {question_id} in category {category_id}")
            return False
        if question.has_children or question.question_kind in (QuestionKind.SKU_GROUP, QuestionKind.RATIO_PARENT):
            logger.debug(f"Ignoring direct answer for parent question {question_id}")
            return False

        self._check_kind(question, kind)
        self.tracker.apply_raw_answer(question, raw_value)
        self._changed_questions[question.id] = question

        self._cascade(question)
        return True

    def apply_sub_answer(self, sub_id: str, parent_question_id: str, raw_value: Any) -> bool:
        """Answer a sub-question of a sub-question parent or ratio parent."""
        if not self._writable("sub-answer", sub_id):
            return False

        found = self._parents.get(parent_question_id)
        sub = None
        if found is not None:
            sub = next((s for s in found[1].sub_questions if s.id == sub_id), None)
        if sub is None:
            logger.debug(f"Ignoring answer for unknown sub-question {sub_id} of {parent_question_id}")
            return False

        question = found[1]
        self.tracker.apply_raw_sub_answer(sub, raw_value)
        self._changed_sub_questions[sub.id] = sub

        if question.question_kind == QuestionKind.RATIO_PARENT and len(question.sub_questions) >= 2:
            compute_ratio(question)
            self._changed_questions[question.id] = question

        self.tracker.track_parent(question)
        self._cascade(question)
        return True

    def apply_sku_answer(self, sku_id: str, parent_question_id: str, raw_value: Any) -> bool:
        """Answer one SKU line of a SKU group."""
        if not self._writable("SKU answer", sku_id):
            return False

        found = self._parents.get(parent_question_id)
        line = None
        if found is not None:
            line = next((s for s in found[1].sku_items if s.id == sku_id), None)
        if line is None:
            logger.debug(f"Ignoring answer for unknown SKU line {sku_id} of {parent_question_id}")
            return False

        group = found[1]
        self.tracker.apply_raw_answer(line, raw_value)
        self._changed_questions[line.id] = line

        self.tracker.track_parent(group)
        self._cascade(group)
        return True

    def _writable(self, what: str, target_id: str) -> bool:
        if self.read_only:
            logger.info(f"Audit {self.global_result.id} is read-only; ignoring {what} for {target_id}")
            return False
        return True

    @staticmethod
    def _check_kind(question: Question, kind: Union[AnswerKind, str, None]) -> None:
        if kind is None:
            return
        try:
            requested = AnswerKind(kind)
        except ValueError:
            logger.warning(f"Unknown answer kind {kind!r} for question {question.id}")
            return
        if requested != question.answer_kind:
            logger.warning(
                f"Answer kind {requested.value} does not match question {question.id} "
                f"({question.answer_kind.value}); using the question's kind"
            )

    # ------------------------------------------------------------------
    # Cascade
    # ------------------------------------------------------------------

    def _cascade(self, question: Question) -> None:
        self.scorer.score_question(question)
        self.recompute()
        self.save()

    def recompute(self) -> None:
        """Full pass: aggregates, SKU metrics, totals, compliance."""
        self.global_metrics = self.aggregator.recompute(self.categories, self.global_template)
        self.compliance = self.evaluator.evaluate(self.categories)

    def rescore_all(self) -> None:
        """Score every question from its current answers, then recompute."""
        for category in self.categories:
            for question in category.questions:
                self.scorer.score_question(question)
        self.recompute()
        self.save()

    # ------------------------------------------------------------------
    # UI-only flags
    # ------------------------------------------------------------------

    def toggle_category(self, category_id: str) -> bool:
        category = next((c for c in self.categories if c.id == category_id), None)
        if category is None:
            return False
        category.collapsed = not category.collapsed
        self.save()
        return True

    def toggle_description(self, question_id: str) -> bool:
        found = self._parents.get(question_id)
        if found is None:
            return False
        found[1].show_description = not found[1].show_description
        self.save()
        return True

    def toggle_sub_items(self, question_id: str) -> bool:
        found = self._parents.get(question_id)
        if found is None:
            return False
        found[1].expanded = not found[1].expanded
        self.save()
        return True

    def collapse_all(self, collapse: bool) -> None:
        for category in self.categories:
            category.collapsed = collapse
        self.save()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def completion_percentage(self) -> int:
        return completion_percentage(self.categories)

    def total_score(self) -> float:
        return sum(cat.score_sum for cat in self.categories)

    def changed_questions(self) -> Dict[str, Question]:
        return dict(self._changed_questions)

    def changed_sub_questions(self) -> Dict[str, SubQuestion]:
        return dict(self._changed_sub_questions)

    def flush_changes(self) -> Tuple[Dict[str, Question], Dict[str, SubQuestion]]:
        """Hand over and forget everything touched since the last flush."""
        changed = (self.changed_questions(), self.changed_sub_questions())
        self._changed_questions.clear()
        self._changed_sub_questions.clear()
        return changed

    def audit_scores(self) -> Dict[str, Any]:
        return audit_scores(self.global_metrics, self.compliance)

    def outputs(self) -> Dict[str, Any]:
        """Flat, JSON-serialisable view for the host."""
        return {
            "completionPercentage": self.completion_percentage(),
            "totalScore": self.total_score(),
            "changedQuestionsJSON": json.dumps(
                [q.model_dump(mode="json") for q in self._changed_questions.values()]
            ),
            "changedSubquestionsJSON": json.dumps(
                [s.model_dump(mode="json") for s in self._changed_sub_questions.values()]
            ),
            "auditScoresJSON": json.dumps(self.audit_scores()),
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> AuditSnapshot:
        return AuditSnapshot(
            tree=self.categories,
            global_result=self.global_result,
            global_template=self.global_template,
            template_type=self.template_type,
        )

    def save(self) -> None:
        """Hand a snapshot to the store; a store failure is logged, never raised."""
        if self.store is None:
            return
        try:
            self.store.save(self.snapshot())
        except SnapshotStoreException as e:
            logger.warning(f"Snapshot not saved: {e}")
