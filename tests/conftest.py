# tests/conftest.py

"""
Pytest Fixtures - shared audit payloads and trees

PAYLOAD REFERENCE (sample_audit_payload):
- cat-general:  q-yes (text, answered "Yes", rule target 10)
                q-count (numeric, "15", buckets 10/20/30 -> 5/15/25)
                q-option (list option, "Gold", option value 2 -> target 7)
                q-open (text, unanswered)
- cat-range:    SKU group "grp-1" built from lines sku-1..sku-4
                q-ratio (ratio parent, Q1=50 / Q2=25, US compliance)
"""

import copy

import pytest

from audit_scoring.models.records import AuditRecord, AuditTemplate
from audit_scoring.services.session import AuditSession
from audit_scoring.services.snapshot_store import InMemorySnapshotStore

TEXT = 181910000
NUMERIC = 181910001
LIST_OPTION = 285050000

SKU = 181910000
PLAIN = 181910001
RATIO = 285050001

MUST_HAVE = 285050000
NEXT_BEST = 285050001
OTHER = 285050002
DRY = 181910000
WET = 181910001


GENERAL = {"nov_questioncategoryid": "cat-general", "nov_questioncategory": "General"}
RANGE = {"nov_questioncategoryid": "cat-range", "nov_questioncategory": "Range"}


def _rule(threshold, target, weighted=False):
    return {"nov_threshold": threshold, "nov_target": target, "nov_weighted": weighted}


def _sku_line(line_id, species, tier, food, answer, **extra):
    line = {
        "nov_auditquestionid": line_id,
        "nov_auditquestion": "Range listed",
        "nov_answertype": TEXT,
        "nov_questiontype": SKU,
        "_nov_question_value": "grp-1",
        "nov_questioncategory": RANGE,
        "nov_target_formatted": species,
        "rc_ranges": tier,
        "nov_type": food,
        "cgi_answer": answer,
        "scoring_rules": [_rule(50, 40, weighted=True)],
    }
    line.update(extra)
    return line


# =============================================================================
# RAW PAYLOADS
# =============================================================================

@pytest.fixture
def sample_audit_payload():
    """A complete audit record as delivered by the host."""
    return {
        "nov_auditid": "audit-1",
        "statuscode": 1,
        "_nov_related_auditemplate_value": "tpl-1",
        "nov_audit_nov_auditquestion_audit": [
            {
                "nov_auditquestionid": "q-yes",
                "nov_auditquestion": "Is the store clean?",
                "nov_answertype": TEXT,
                "nov_questiontype": PLAIN,
                "nov_questioncategory": GENERAL,
                "cgi_answer": "Yes",
                "nov_px_score": 10,
                "scoring_rules": [_rule(0, 10)],
                "cgi_includeincaonlinecompliance": True,
            },
            {
                "nov_auditquestionid": "q-count",
                "nov_auditquestion": "Facings on shelf",
                "nov_answertype": NUMERIC,
                "nov_questiontype": PLAIN,
                "nov_questioncategory": GENERAL,
                "cgi_answer": "15",
                "nov_px_score": 15,
                "scoring_rules": [_rule(30, 25), _rule(10, 5), _rule(20, 15)],
            },
            {
                "nov_auditquestionid": "q-option",
                "nov_auditquestion": "Shelf position",
                "nov_answertype": LIST_OPTION,
                "nov_questiontype": PLAIN,
                "nov_questioncategory": GENERAL,
                "cgi_answer": "Gold",
                "nov_px_score": 7,
                "scoring_rules": [_rule(1, 3), _rule(2, 7)],
                "list_options": [
                    {"cgi_name": "Silver", "cgi_order": 1, "cgi_value": 1},
                    {"cgi_name": "Gold", "cgi_order": 2, "cgi_value": 2},
                ],
            },
            {
                "nov_auditquestionid": "q-open",
                "nov_auditquestion": "Comments",
                "nov_answertype": TEXT,
                "nov_questiontype": PLAIN,
                "nov_questioncategory": GENERAL,
                "cgi_answer": None,
            },
            _sku_line("sku-1", "Dog", MUST_HAVE, DRY, "Yes", nov_reportingrange=1),
            _sku_line("sku-2", "Cat", MUST_HAVE, WET, "No"),
            _sku_line("sku-3", "Dog", NEXT_BEST, DRY, "Yes", nov_territory=2),
            _sku_line("sku-4", "Cat", OTHER, WET, None),
            {
                "nov_auditquestionid": "q-ratio",
                "nov_auditquestion": "Share of shelf",
                "nov_answertype": NUMERIC,
                "nov_questiontype": RATIO,
                "nov_questioncategory": RANGE,
                "scoring_rules": [_rule(40, 2), _rule(60, 8)],
                "cgi_includeinuscompliance": True,
                "subquestions": [
                    {
                        "cgi_auditsubquestionid": "sub-total",
                        "cgi_name": "Total facings",
                        "cgi_answertype": NUMERIC,
                        "cgi_questionflow": 1,
                        "cgi_answertext": "50",
                        "cgi_numericalanswer": 50,
                    },
                    {
                        "cgi_auditsubquestionid": "sub-brand",
                        "cgi_name": "Brand facings",
                        "cgi_answertype": NUMERIC,
                        "cgi_questionflow": 2,
                        "cgi_answertext": "25",
                        "cgi_numericalanswer": 25,
                    },
                ],
            },
        ],
    }


@pytest.fixture
def read_only_payload(sample_audit_payload):
    payload = copy.deepcopy(sample_audit_payload)
    payload["statuscode"] = 181910001
    return payload


@pytest.fixture
def sample_template_payload():
    return {
        "nov_audittemplateid": "tpl-1",
        "cgi_reportingrange": 3,
        "cgi_territory": 5,
        "nov_perfectx": True,
    }


# =============================================================================
# PARSED MODELS
# =============================================================================

@pytest.fixture
def sample_record(sample_audit_payload):
    return AuditRecord.model_validate(sample_audit_payload)


@pytest.fixture
def sample_template(sample_template_payload):
    return AuditTemplate.model_validate(sample_template_payload)


@pytest.fixture
def memory_store():
    return InMemorySnapshotStore()


@pytest.fixture
def session(sample_record, sample_template, memory_store):
    """Fresh session over the sample audit, saving to an in-memory store."""
    return AuditSession.from_record(sample_record, template=sample_template, store=memory_store)
