"""
Flow selection at the two branch points of the chat.

company_status=new             -> new-company sequence
company_status=existing        -> ask incorporation_country next
incorporation_country=uae      -> existing-UAE sequence
incorporation_country=other    -> existing-other-country sequence

Anything else is a catalog/configuration error and raises
CatalogIntegrityError: guessing a flow would corrupt the lead data.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..exceptions import CatalogIntegrityError
from ..schemas.questions import (
    BRANCH_QUESTION_IDS,
    COMPANY_STATUS_ID,
    INCORPORATION_COUNTRY_ID,
    Question,
    QuestionCatalog,
)


class FlowType(str, Enum):
    """Terminal question sequence of a session."""
    UNSET = "unset"
    NEW = "new"
    EXISTING_UAE = "existing_uae"
    EXISTING_OTHER = "existing_other"


class OutcomeKind(str, Enum):
    FOLLOWUP = "followup"    # Ask another branch question
    SEQUENCE = "sequence"    # Start a terminal flow


@dataclass(frozen=True)
class FlowOutcome:
    """Result of a branch decision."""
    kind: OutcomeKind
    next_question: Optional[Question] = None
    flow: FlowType = FlowType.UNSET
    questions: Tuple[Question, ...] = ()


# (trigger question, option) -> follow-up question id or terminal flow
FLOW_TABLE = {
    (COMPANY_STATUS_ID, "new"): FlowType.NEW,
    (COMPANY_STATUS_ID, "existing"): INCORPORATION_COUNTRY_ID,
    (INCORPORATION_COUNTRY_ID, "uae"): FlowType.EXISTING_UAE,
    (INCORPORATION_COUNTRY_ID, "other"): FlowType.EXISTING_OTHER,
}


def is_branch_question(question_id: str) -> bool:
    return question_id in BRANCH_QUESTION_IDS


def select_flow(trigger_question_id: str, chosen_option_id: str,
                catalog: QuestionCatalog) -> FlowOutcome:
    """
    Decide what follows a branch answer.

    Pure: reads the catalog, never mutates anything.

    Raises:
        CatalogIntegrityError: the pair is not in the flow table.
    """
    target = FLOW_TABLE.get((trigger_question_id, chosen_option_id))
    if target is None:
        raise CatalogIntegrityError(
            f"No flow defined for {trigger_question_id}={chosen_option_id}"
        )

    if isinstance(target, FlowType):
        return FlowOutcome(
            kind=OutcomeKind.SEQUENCE,
            flow=target,
            questions=catalog.get_sequence(target.value),
        )

    return FlowOutcome(
        kind=OutcomeKind.FOLLOWUP,
        next_question=catalog.get_question(target),
    )
