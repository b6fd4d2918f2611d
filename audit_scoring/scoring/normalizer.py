"""
Record Normalizer
audit_scoring/scoring/normalizer.py

Turns the flat list of question records of an audit into the
Category -> Question -> SubQuestion tree.

  records ──► group by category (first-seen order)
          ──► classify by question-type code (tag set once, here)
          ──► SKU lines merged by parent-question key into one SKU group
          ──► List[Category]

Category order and per-category question order are insertion order and are
never re-sorted. Synthetic SKU groups follow the direct questions of their
category, in the order their first line was seen.
"""

from typing import Dict, Iterable, List

import structlog

from audit_scoring.models.enumerations import AnswerKind, QuestionKind, SubAnswerKind
from audit_scoring.models.records import AuditQuestionRecord, SubQuestionRecord
from audit_scoring.models.tree import Category, Question, SubQuestion

logger = structlog.get_logger(__name__)


class RecordNormalizer:
    """Build the category tree from flat audit question records."""

    def normalize(self, records: Iterable[AuditQuestionRecord]) -> List[Category]:
        categories: Dict[str, Category] = {}
        sku_groups: Dict[str, Question] = {}
        sku_group_category: Dict[str, str] = {}
        dropped = 0

        for record in records:
            if record.category is None:
                dropped += 1
                logger.warning("question_record_dropped", question_id=record.id,
                               reason="missing category reference")
                continue

            cat_id = record.category.id
            if cat_id not in categories:
                categories[cat_id] = Category(
                    id=cat_id,
                    name=record.category.name or "",
                    parent_id=record.category.parent_id or None,
                )

            question_kind = self._question_kind(record)
            answer_kind = self._answer_kind(record)

            if question_kind == QuestionKind.SKU_GROUP and record.parent_question_key:
                key = record.parent_question_key
                if key not in sku_groups:
                    sku_groups[key] = self._sku_group(key, record, answer_kind)
                    sku_group_category[key] = cat_id
                sku_groups[key].sku_items.append(self._sku_item(record, answer_kind))
                continue

            if question_kind == QuestionKind.SKU_GROUP:
                # Orphan SKU line: kept as a stand-alone line, not dropped
                categories[cat_id].questions.append(self._sku_item(record, answer_kind))
                continue

            categories[cat_id].questions.append(
                self._question(record, question_kind, answer_kind)
            )

        for key, group in sku_groups.items():
            categories[sku_group_category[key]].questions.append(group)

        logger.info(
            "records_normalized",
            categories=len(categories),
            sku_groups=len(sku_groups),
            dropped=dropped,
        )
        return list(categories.values())

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @staticmethod
    def _question_kind(record: AuditQuestionRecord) -> QuestionKind:
        kind = QuestionKind.from_code(record.question_type)
        if kind is None:
            logger.warning("unknown_question_type", question_id=record.id,
                           code=record.question_type)
            return QuestionKind.PLAIN
        return kind

    @staticmethod
    def _answer_kind(record: AuditQuestionRecord) -> AnswerKind:
        kind = AnswerKind.from_code(record.answer_type)
        if kind is None:
            logger.debug("unknown_answer_type", question_id=record.id,
                         code=record.answer_type)
            return AnswerKind.TEXT
        return kind

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def _question(
        self,
        record: AuditQuestionRecord,
        question_kind: QuestionKind,
        answer_kind: AnswerKind,
    ) -> Question:
        has_subs = question_kind in (QuestionKind.SUB_QUESTION_PARENT, QuestionKind.RATIO_PARENT)
        return Question(
            id=record.id,
            text=record.text or "",
            description=record.description,
            answer_kind=answer_kind,
            question_kind=question_kind,
            question_flow=record.question_flow,
            stored_answer=record.stored_answer,
            score=record.stored_score or 0.0,
            scoring_rules=list(record.scoring_rules),
            list_options=list(record.list_options),
            sub_questions=[self._sub_question(s) for s in record.sub_questions] if has_subs else [],
            include_in_us_compliance=record.include_in_us_compliance,
            include_in_ca_online_compliance=record.include_in_ca_online_compliance,
        )

    def _sku_group(self, key: str, first: AuditQuestionRecord, answer_kind: AnswerKind) -> Question:
        """Synthetic parent; display fields come from the first line seen."""
        return Question(
            id=key,
            text=first.text or "",
            description=first.description,
            answer_kind=answer_kind,
            question_kind=QuestionKind.SKU_GROUP,
            question_flow=first.question_flow,
            stored_answer=first.stored_answer,
            score=first.stored_score or 0.0,
            scoring_rules=list(first.scoring_rules),
            list_options=list(first.list_options),
            include_in_us_compliance=first.include_in_us_compliance,
            include_in_ca_online_compliance=first.include_in_ca_online_compliance,
        )

    @staticmethod
    def _sku_item(record: AuditQuestionRecord, answer_kind: AnswerKind) -> Question:
        return Question(
            id=record.id,
            text=record.text or "",
            description=record.description,
            answer_kind=answer_kind,
            question_kind=QuestionKind.PLAIN,
            question_flow=record.question_flow,
            stored_answer=record.stored_answer,
            score=record.stored_score or 0.0,
            scoring_rules=list(record.scoring_rules),
            list_options=list(record.list_options),
            species=record.species,
            range_tier=record.range_tier,
            food_type=record.food_type,
            reporting_range=record.reporting_range,
            territory=record.territory,
            product_range=record.product_range,
            life_stage=record.life_stage,
            stock_weight=record.stock_weight,
            include_in_us_compliance=record.include_in_us_compliance,
            include_in_ca_online_compliance=record.include_in_ca_online_compliance,
        )

    @staticmethod
    def _sub_question(record: SubQuestionRecord) -> SubQuestion:
        return SubQuestion(
            id=record.id,
            name=record.name or "",
            answer_kind=SubAnswerKind.from_code(record.answer_type) or SubAnswerKind.TEXT,
            question_flow=record.question_flow,
            stored_answer=record.answer,
            answer_text=record.answer_text,
            numerical_answer=record.numerical_answer,
            include_in_us_compliance=record.include_in_us_compliance,
            include_in_ca_online_compliance=record.include_in_ca_online_compliance,
        )
