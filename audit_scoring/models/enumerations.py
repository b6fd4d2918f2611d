from enum import Enum
from typing import Optional


class AnswerKind(str, Enum):
    TEXT = "text"                # Yes/No or free text
    NUMERIC = "numeric"          # Number typed into the answer field
    LIST_OPTION = "list_option"  # Name of a selected list option

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional["AnswerKind"]:
        return _ANSWER_CODES.get(code)


class QuestionKind(str, Enum):
    PLAIN = "plain"                              # Stand-alone question
    SKU_GROUP = "sku_group"                      # One line per inventory item
    SUB_QUESTION_PARENT = "sub_question_parent"  # Owns free sub-questions
    RATIO_PARENT = "ratio_parent"                # Score from Q2/Q1 of two sub-questions

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional["QuestionKind"]:
        return _QUESTION_CODES.get(code)


class SubAnswerKind(str, Enum):
    TEXT = "text"
    NUMERIC = "numeric"

    @classmethod
    def from_code(cls, code: Optional[int]) -> Optional["SubAnswerKind"]:
        return _SUB_ANSWER_CODES.get(code)


class Species(str, Enum):
    CAT = "Cat"
    DOG = "Dog"


class RangeTier(int, Enum):
    MUST_HAVE = 285050000
    NEXT_BEST = 285050001
    OTHER = 285050002


class FoodType(int, Enum):
    DRY = 181910000
    WET = 181910001


# Dataverse option-set codes
_ANSWER_CODES = {
    181910000: AnswerKind.TEXT,
    181910001: AnswerKind.NUMERIC,
    285050000: AnswerKind.LIST_OPTION,
}

_QUESTION_CODES = {
    181910000: QuestionKind.SKU_GROUP,
    181910001: QuestionKind.PLAIN,
    285050000: QuestionKind.SUB_QUESTION_PARENT,
    285050001: QuestionKind.RATIO_PARENT,
}

_SUB_ANSWER_CODES = {
    181910000: SubAnswerKind.TEXT,
    181910001: SubAnswerKind.NUMERIC,
}
