"""
Schema definitions for the incorporation chat.
"""

from .questions import (
    Option,
    Question,
    Completion,
    QuestionCatalog,
    DEFAULT_CATALOG,
    ALL_OPTION_ID,
    COMPANY_STATUS_ID,
    INCORPORATION_COUNTRY_ID,
    BRANCH_QUESTION_IDS,
)
from .answers import AnswerStore
from .transcript import Turn, TurnKind, Transcript

__all__ = [
    "Option",
    "Question",
    "Completion",
    "QuestionCatalog",
    "DEFAULT_CATALOG",
    "ALL_OPTION_ID",
    "COMPANY_STATUS_ID",
    "INCORPORATION_COUNTRY_ID",
    "BRANCH_QUESTION_IDS",
    "AnswerStore",
    "Turn",
    "TurnKind",
    "Transcript",
]
