# tests/test_session.py

"""
Audit Session Tests - mutation cascade, read-only audits, host outputs
"""

import json

import pytest

from audit_scoring.models.enumerations import AnswerKind, QuestionKind, SubAnswerKind
from audit_scoring.models.tree import Category, Question, SubQuestion
from audit_scoring.services.session import AuditSession


def _question(session, category_id, question_id):
    category = next(c for c in session.categories if c.id == category_id)
    return next(q for q in category.questions if q.id == question_id)


class TestInitialState:

    def test_stored_scores_kept(self, session):
        assert session.total_score() == 32
        assert session.global_metrics.total_score == 32

    def test_progress(self, session):
        general, range_ = session.categories
        assert general.answered_count == 3
        assert general.progress_value == 450
        assert range_.answered_count == 1
        assert range_.progress_value == 300
        assert session.completion_percentage() == 67

    def test_not_all_answered(self, session):
        assert session.global_metrics.all_questions_answered is False

    def test_compliance(self, session):
        assert session.compliance.compliant is True
        assert session.compliance.online_compliant is True

    def test_initial_snapshot_saved(self, session, memory_store):
        assert memory_store.load("audit-1") is not None

    def test_nothing_changed_yet(self, session):
        assert session.changed_questions() == {}
        assert session.changed_sub_questions() == {}


class TestApplyAnswer:

    def test_answer_cascades(self, session):
        assert session.apply_answer("q-open", "cat-general", "Done") is True
        general = session.categories[0]
        assert general.answered_count == 4
        assert general.progress_value == 600
        assert "q-open" in session.changed_questions()

    def test_numeric_rescored(self, session):
        session.apply_answer("q-count", "cat-general", "25")
        assert _question(session, "cat-general", "q-count").score == 25
        assert session.total_score() == 42

    def test_numeric_above_every_threshold(self, session):
        session.apply_answer("q-count", "cat-general", 35)
        assert _question(session, "cat-general", "q-count").score == 0

    def test_text_no(self, session):
        session.apply_answer("q-yes", "cat-general", "No")
        assert _question(session, "cat-general", "q-yes").score == 0
        # online flag no longer holds
        assert session.compliance.online_compliant is False

    def test_list_option(self, session):
        session.apply_answer("q-option", "cat-general", "Silver")
        assert _question(session, "cat-general", "q-option").score == 3

    def test_unknown_question(self, session):
        before = session.audit_scores()
        assert session.apply_answer("nope", "cat-general", "Yes") is False
        assert session.apply_answer("q-yes", "cat-range", "Yes") is False
        assert session.audit_scores() == before
        assert session.changed_questions() == {}

    def test_parent_question_rejected(self, session):
        assert session.apply_answer("q-ratio", "cat-range", "5") is False
        assert session.apply_answer("grp-1", "cat-range", "Yes") is False

    def test_childless_sub_question_parent_answered_directly(self):
        parent = Question(id="p", question_kind=QuestionKind.SUB_QUESTION_PARENT)
        session = AuditSession([Category(id="c", questions=[parent])])
        assert session.global_metrics.all_questions_answered is False
        assert session.apply_answer("p", "c", "Yes") is True
        assert parent.answered is True
        assert session.categories[0].answered_count == 1
        assert session.global_metrics.all_questions_answered is True
        assert session.completion_percentage() == 100

    def test_sub_question_parent_with_children_rejected(self):
        parent = Question(
            id="p",
            question_kind=QuestionKind.SUB_QUESTION_PARENT,
            sub_questions=[SubQuestion(id="s1", answer_kind=SubAnswerKind.TEXT)],
        )
        session = AuditSession([Category(id="c", questions=[parent])])
        assert session.apply_answer("p", "c", "Yes") is False
        assert parent.answered is False

    def test_kind_mismatch_uses_question_kind(self, session):
        assert session.apply_answer("q-count", "cat-general", "25", kind=AnswerKind.TEXT) is True
        assert _question(session, "cat-general", "q-count").score == 25

    def test_last_write_wins(self, session):
        session.apply_answer("q-count", "cat-general", "12")
        session.apply_answer("q-count", "cat-general", "28")
        changed = session.changed_questions()
        assert list(changed) == ["q-count"]
        assert changed["q-count"].stored_answer == "28"

    def test_snapshot_updated(self, session, memory_store):
        session.apply_answer("q-open", "cat-general", "Done")
        snapshot = memory_store.load("audit-1")
        assert snapshot.tree[0].questions[3].stored_answer == "Done"


class TestApplySubAnswer:

    def test_ratio_recomputed(self, session):
        assert session.apply_sub_answer("sub-brand", "q-ratio", "40") is True
        ratio = _question(session, "cat-range", "q-ratio")
        assert ratio.derived_ratio == 80.0
        assert ratio.score == 0
        assert "sub-brand" in session.changed_sub_questions()
        assert "q-ratio" in session.changed_questions()

    def test_ratio_in_bucket(self, session):
        session.apply_sub_answer("sub-brand", "q-ratio", "25")
        assert _question(session, "cat-range", "q-ratio").score == 8

    def test_zero_denominator(self, session):
        session.apply_sub_answer("sub-total", "q-ratio", "0")
        ratio = _question(session, "cat-range", "q-ratio")
        assert ratio.derived_ratio == 0
        assert ratio.score == 2
        assert session.compliance.compliant is False

    def test_unknown_sub_question(self, session):
        assert session.apply_sub_answer("sub-x", "q-ratio", "1") is False
        assert session.apply_sub_answer("sub-total", "q-nope", "1") is False

    def test_sub_question_parent(self):
        parent = Question(
            id="p",
            question_kind=QuestionKind.SUB_QUESTION_PARENT,
            sub_questions=[
                SubQuestion(id="s1", answer_kind=SubAnswerKind.TEXT),
                SubQuestion(id="s2", answer_kind=SubAnswerKind.TEXT, answer_text="Yes", answered=True),
            ],
        )
        session = AuditSession([Category(id="c", questions=[parent])])
        assert session.categories[0].answered_count == 0
        session.apply_sub_answer("s1", "p", "Yes")
        assert parent.answered is True
        assert session.categories[0].answered_count == 1
        assert session.completion_percentage() == 100


class TestApplySkuAnswer:

    def test_group_rescored(self, session):
        assert session.apply_sku_answer("sku-4", "grp-1", "Yes") is True
        group = _question(session, "cat-range", "grp-1")
        assert group.score == 30.0
        assert group.answered is True
        assert session.global_metrics.other_cat == 100.0
        assert session.global_metrics.cat_wet == 1
        assert "sku-4" in session.changed_questions()

    def test_group_below_goal(self, session):
        session.apply_sku_answer("sku-1", "grp-1", "No")
        assert _question(session, "cat-range", "grp-1").score == 0

    def test_unknown_line(self, session):
        assert session.apply_sku_answer("sku-9", "grp-1", "Yes") is False


class TestRescoreAll:

    def test_rescore_all(self, session):
        session.rescore_all()
        assert _question(session, "cat-range", "q-ratio").score == 8
        assert _question(session, "cat-range", "grp-1").score == 20.0
        assert session.total_score() == 60
        assert session.global_metrics.total_score == session.total_score()


class TestReadOnly:

    def test_mutations_ignored(self, read_only_payload):
        session = AuditSession.from_json(read_only_payload)
        assert session.read_only is True
        assert session.apply_answer("q-open", "cat-general", "Yes") is False
        assert session.apply_sub_answer("sub-total", "q-ratio", "1") is False
        assert session.apply_sku_answer("sku-4", "grp-1", "Yes") is False
        assert session.changed_questions() == {}

    def test_ui_flags_still_work(self, read_only_payload):
        session = AuditSession.from_json(read_only_payload)
        assert session.toggle_category("cat-general") is True
        assert session.categories[0].collapsed is True


class TestUiFlags:

    def test_toggle_description(self, session):
        assert session.toggle_description("q-yes") is True
        assert _question(session, "cat-general", "q-yes").show_description is True
        assert session.toggle_description("q-nope") is False

    def test_toggle_sub_items(self, session):
        session.toggle_sub_items("grp-1")
        assert _question(session, "cat-range", "grp-1").expanded is True

    def test_collapse_all(self, session):
        session.collapse_all(True)
        assert all(c.collapsed for c in session.categories)
        session.collapse_all(False)
        assert not any(c.collapsed for c in session.categories)

    def test_flags_do_not_touch_scores(self, session):
        before = session.audit_scores()
        session.toggle_category("cat-range")
        assert session.audit_scores() == before


class TestOutputs:

    def test_outputs(self, session):
        session.apply_answer("q-open", "cat-general", "Done")
        out = session.outputs()
        assert out["completionPercentage"] == 83
        assert out["totalScore"] == 32
        changed = json.loads(out["changedQuestionsJSON"])
        assert [q["id"] for q in changed] == ["q-open"]
        assert json.loads(out["changedSubquestionsJSON"]) == []
        scores = json.loads(out["auditScoresJSON"])
        assert scores["nov_perfectxscore"] == 32
        assert scores["cgi_ultraselectivecompliant"] is True
        assert scores["cgi_reportingrange"] == 3

    def test_flush_changes(self, session):
        session.apply_answer("q-open", "cat-general", "Done")
        session.apply_sub_answer("sub-brand", "q-ratio", "30")
        questions, subs = session.flush_changes()
        assert set(questions) == {"q-open", "q-ratio"}
        assert set(subs) == {"sub-brand"}
        assert session.changed_questions() == {}
        assert session.changed_sub_questions() == {}


class TestConstruction:

    @pytest.mark.parametrize("raw", [None, "", "{not json", "[]"])
    def test_unusable_payload_gives_empty_session(self, raw):
        session = AuditSession.from_json(raw)
        assert session.categories == []
        assert session.completion_percentage() == 0
        assert session.global_metrics.all_questions_answered is False
        assert session.compliance.compliant is False

    def test_from_json_string(self, sample_audit_payload):
        session = AuditSession.from_json(json.dumps(sample_audit_payload))
        assert [c.id for c in session.categories] == ["cat-general", "cat-range"]

    def test_restore(self, session, memory_store):
        session.apply_answer("q-open", "cat-general", "Done")
        restored = AuditSession.restore(memory_store, "audit-1")
        assert restored is not None
        assert restored.completion_percentage() == session.completion_percentage()
        assert restored.total_score() == session.total_score()
        assert restored.global_template.reporting_range == 3

    def test_restore_missing(self, memory_store):
        assert AuditSession.restore(memory_store, "nope") is None
