"""
"Question N of M" progress for the chat.

M is the active sequence length plus the branch questions the session
went through (1 via company_status=new, 2 via incorporation_country).
Branch questions are always 1 and 2; a sequence question at index i is
i + 1 + offset. Before a flow is chosen there is no indicator: (0, 0).
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..exceptions import UnknownQuestionError
from ..schemas.questions import COMPANY_STATUS_ID, INCORPORATION_COUNTRY_ID, Question


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0

    @property
    def visible(self) -> bool:
        return self.total > 0

    @property
    def label(self) -> str:
        if not self.visible:
            return ""
        return f"{self.current} of {self.total} questions"

    def to_dict(self) -> dict:
        return {"current": self.current, "total": self.total, "label": self.label}


NO_PROGRESS = Progress(0, 0)


def calculate_progress(
    question_id: str,
    active_sequence: Optional[Sequence[Question]],
    branch_questions_answered: int,
) -> Progress:
    """
    Progress for question_id in the active flow.

    Args:
        question_id: Question to place
        active_sequence: Questions of the chosen flow, None if no flow yet
        branch_questions_answered: Branch questions consumed before the flow

    Raises:
        UnknownQuestionError: question_id is neither a branch question nor
            part of the active sequence.
    """
    if active_sequence is None:
        return NO_PROGRESS

    offset = branch_questions_answered
    total = len(active_sequence) + offset

    if question_id == COMPANY_STATUS_ID:
        return Progress(1, total)
    if question_id == INCORPORATION_COUNTRY_ID:
        return Progress(2, total)

    for index, question in enumerate(active_sequence):
        if question.id == question_id:
            return Progress(index + 1 + offset, total)

    raise UnknownQuestionError(question_id)
