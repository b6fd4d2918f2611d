"""
Normalized audit tree: Categories -> Questions -> SubQuestions / SKU items.

The tree is the single mutable source of truth of a session. Scores,
progress values and answered flags on it are derived and rewritten by the
scoring package on every recompute pass.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from audit_scoring.models.enumerations import AnswerKind, QuestionKind, SubAnswerKind
from audit_scoring.models.records import ListOption, ScoringRule


class SubQuestion(BaseModel):
    """Child of a sub-question parent or of a ratio (q1q2) parent."""

    id: str
    name: str = ""
    answer_kind: SubAnswerKind = SubAnswerKind.TEXT
    question_flow: Optional[float] = None

    # Raw stored answer fields
    stored_answer: Optional[str] = None
    answer_text: Optional[str] = None
    numerical_answer: Optional[float] = None

    # Tracked state
    answer: Optional[str] = None
    value: Optional[float] = None
    answered: bool = False

    include_in_us_compliance: bool = False
    include_in_ca_online_compliance: bool = False


class Question(BaseModel):
    """
    A top-level question, a synthetic SKU group, or one SKU line of a group.

    Exactly one of ``sku_items`` / ``sub_questions`` is populated for parent
    kinds; a plain question has neither.
    """

    id: str
    text: str = ""
    description: Optional[str] = None
    answer_kind: AnswerKind = AnswerKind.TEXT
    question_kind: QuestionKind = QuestionKind.PLAIN
    question_flow: Optional[float] = None

    # Raw stored answer (cgi_answer)
    stored_answer: Optional[str] = None

    # Tracked state
    answer: Optional[str] = None
    value: Union[int, float, str, None] = None
    answered: bool = False
    score: float = 0.0
    derived_ratio: Optional[float] = None

    scoring_rules: List[ScoringRule] = Field(default_factory=list)
    list_options: List[ListOption] = Field(default_factory=list)
    sku_items: List["Question"] = Field(default_factory=list)
    sub_questions: List[SubQuestion] = Field(default_factory=list)

    # SKU line attributes
    species: Optional[str] = None
    range_tier: Optional[int] = None
    food_type: Optional[int] = None
    reporting_range: Optional[int] = None
    territory: Optional[int] = None
    product_range: Optional[str] = None
    life_stage: Optional[str] = None
    stock_weight: Optional[float] = None

    include_in_us_compliance: bool = False
    include_in_ca_online_compliance: bool = False

    # UI-only
    expanded: bool = False
    show_description: bool = False

    @property
    def children(self) -> List[Union["Question", SubQuestion]]:
        if self.question_kind == QuestionKind.SKU_GROUP:
            return self.sku_items
        if self.question_kind in (QuestionKind.SUB_QUESTION_PARENT, QuestionKind.RATIO_PARENT):
            return self.sub_questions
        return []

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def fully_answered(self) -> bool:
        """Answered itself and, when it has sub-items, every one of them too."""
        return self.answered and all(child.answered for child in self.children)


class Category(BaseModel):
    id: str
    name: str = ""
    parent_id: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)

    progress_value: int = 0
    answered_count: int = 0
    score_sum: float = 0.0
    collapsed: bool = False

    @property
    def total_questions(self) -> int:
        return len(self.questions)
