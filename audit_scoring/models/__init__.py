from audit_scoring.models.enumerations import (
    AnswerKind,
    FoodType,
    QuestionKind,
    RangeTier,
    Species,
    SubAnswerKind,
)
from audit_scoring.models.records import (
    AuditQuestionRecord,
    AuditRecord,
    AuditTemplate,
    ListOption,
    QuestionCategoryRecord,
    ScoringRule,
    SubQuestionRecord,
)
from audit_scoring.models.results import AuditSnapshot, ComplianceResult, GlobalMetrics
from audit_scoring.models.tree import Category, Question, SubQuestion

__all__ = [
    "AnswerKind",
    "AuditQuestionRecord",
    "AuditRecord",
    "AuditSnapshot",
    "AuditTemplate",
    "Category",
    "ComplianceResult",
    "FoodType",
    "GlobalMetrics",
    "ListOption",
    "Question",
    "QuestionCategoryRecord",
    "QuestionKind",
    "RangeTier",
    "ScoringRule",
    "Species",
    "SubAnswerKind",
    "SubQuestion",
    "SubQuestionRecord",
]
