"""
Raw audit records as delivered by the host (Dataverse field names).

Each model keeps the raw key as its alias so payloads validate as-is, while
code works with the snake_case field names.
"""
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _as_text(v: Any) -> Any:
    """Numbers stored in text columns arrive unquoted; keep them as text."""
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, (int, float)):
        return str(v)
    return v


def _none_as_empty_list(v: Any) -> Any:
    return [] if v is None else v


class RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class QuestionCategoryRecord(RecordModel):
    id: str = Field(..., alias="nov_questioncategoryid")
    name: Optional[str] = Field(default=None, alias="nov_questioncategory")
    parent_id: Optional[str] = Field(default=None, alias="_nov_parentquestioncategory_value")


class ScoringRule(RecordModel):
    """Threshold/target pair attached to a question. Unordered in storage."""

    id: Optional[str] = Field(default=None, alias="nov_scoringrulesid")
    name: Optional[str] = Field(default=None, alias="nov_scoringrule")
    threshold: float = Field(default=0.0, alias="nov_threshold")
    target: float = Field(default=0.0, alias="nov_target")
    weighted: bool = Field(default=False, alias="nov_weighted")

    @field_validator("threshold", "target", mode="before")
    @classmethod
    def none_as_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("weighted", mode="before")
    @classmethod
    def none_as_false(cls, v: Any) -> Any:
        return False if v is None else v


class ListOption(RecordModel):
    id: Optional[str] = Field(default=None, alias="cgi_auditlistoptionid")
    name: str = Field(default="", alias="cgi_name")
    order: Optional[int] = Field(default=None, alias="cgi_order")
    value: Optional[float] = Field(default=None, alias="cgi_value")
    group_id: Optional[str] = Field(default=None, alias="_cgi_auditlistoptiongroup_value")

    @field_validator("name", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return "" if v is None else _as_text(v)


class SubQuestionRecord(RecordModel):
    id: str = Field(..., alias="cgi_auditsubquestionid")
    name: Optional[str] = Field(default=None, alias="cgi_name")
    answer_type: Optional[int] = Field(default=None, alias="cgi_answertype")
    question_flow: Optional[float] = Field(default=None, alias="cgi_questionflow")
    answer: Optional[str] = Field(default=None, alias="cgi_answer")
    answer_text: Optional[str] = Field(default=None, alias="cgi_answertext")
    numerical_answer: Optional[float] = Field(default=None, alias="cgi_numericalanswer")
    include_in_us_compliance: bool = Field(default=False, alias="cgi_includeinuscompliance")
    include_in_ca_online_compliance: bool = Field(default=False, alias="cgi_includeincaonlinecompliance")

    @field_validator("answer", "answer_text", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("include_in_us_compliance", "include_in_ca_online_compliance", mode="before")
    @classmethod
    def none_as_false(cls, v: Any) -> Any:
        return False if v is None else v


class AuditQuestionRecord(RecordModel):
    id: str = Field(..., alias="nov_auditquestionid")
    text: Optional[str] = Field(default=None, alias="nov_auditquestion")
    answer_type: Optional[int] = Field(default=None, alias="nov_answertype")
    question_type: Optional[int] = Field(default=None, alias="nov_questiontype")
    question_flow: Optional[float] = Field(default=None, alias="nov_questionflow")
    description: Optional[str] = Field(default=None, alias="nov_tdq_description")
    stored_score: Optional[float] = Field(default=None, alias="nov_px_score")
    stored_answer: Optional[str] = Field(default=None, alias="cgi_answer")

    # SKU lines share the key of the question they belong to
    parent_question_key: Optional[str] = Field(default=None, alias="_nov_question_value")
    list_option_group: Optional[str] = Field(default=None, alias="_cgi_auditlistoptiongroup_value")
    category: Optional[QuestionCategoryRecord] = Field(default=None, alias="nov_questioncategory")

    scoring_rules: List[ScoringRule] = Field(default_factory=list)
    list_options: List[ListOption] = Field(default_factory=list)
    sub_questions: List[SubQuestionRecord] = Field(default_factory=list, alias="subquestions")

    # SKU line attributes
    sku_id: Optional[str] = Field(default=None, alias="_nov_sku_value")
    species: Optional[str] = Field(default=None, alias="nov_target_formatted")
    range_tier: Optional[int] = Field(default=None, alias="rc_ranges")
    food_type: Optional[int] = Field(default=None, alias="nov_type")
    reporting_range: Optional[int] = Field(default=None, alias="nov_reportingrange")
    territory: Optional[int] = Field(default=None, alias="nov_territory")
    product_range: Optional[str] = Field(default=None, alias="_nov_productrange_value_formatted")
    life_stage: Optional[str] = Field(default=None, alias="nov_lifestage_formatted")
    stock_weight: Optional[float] = Field(default=None, alias="stockweight")

    include_in_us_compliance: bool = Field(default=False, alias="cgi_includeinuscompliance")
    include_in_ca_online_compliance: bool = Field(default=False, alias="cgi_includeincaonlinecompliance")

    @field_validator("stored_answer", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("scoring_rules", "list_options", "sub_questions", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return _none_as_empty_list(v)

    @field_validator("include_in_us_compliance", "include_in_ca_online_compliance", mode="before")
    @classmethod
    def none_as_false(cls, v: Any) -> Any:
        return False if v is None else v


class AuditTemplate(RecordModel):
    id: Optional[str] = Field(default=None, alias="nov_audittemplateid")
    reporting_range: Optional[float] = Field(default=None, alias="cgi_reportingrange")
    reporting_range_label: Optional[str] = Field(default=None, alias="cgi_reportingrange_formatted")
    territory: Optional[float] = Field(default=None, alias="cgi_territory")
    territory_label: Optional[str] = Field(default=None, alias="cgi_territory_formatted")
    perfect_x: Optional[bool] = Field(default=None, alias="nov_perfectx")
    trade_term: Optional[str] = Field(default=None, alias="nov_tradeterm")
    ultra_selective: Optional[bool] = Field(default=None, alias="cgi_ultraselective")
    other: Optional[str] = Field(default=None, alias="cgi_other")


class AuditRecord(RecordModel):
    """Audit header plus its flat collection of question records."""

    id: Optional[str] = Field(default=None, alias="nov_auditid")
    status_code: Optional[int] = Field(default=None, alias="statuscode")
    template_id: Optional[str] = Field(default=None, alias="_nov_related_auditemplate_value")
    all_questions_answered: Optional[bool] = Field(default=None, alias="rc_all_questions_answered")
    questions: List[AuditQuestionRecord] = Field(
        default_factory=list, alias="nov_audit_nov_auditquestion_audit"
    )

    @field_validator("questions", mode="before")
    @classmethod
    def drop_invalid_questions(cls, v: Any) -> Any:
        """Validate records one by one so a bad record cannot sink the audit."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("question records must be a list")
        valid = []
        for index, item in enumerate(v):
            if isinstance(item, AuditQuestionRecord):
                valid.append(item)
                continue
            try:
                valid.append(AuditQuestionRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "Dropping invalid question record",
                    extra={"index": index, "errors": e.error_count()},
                )
        return valid
