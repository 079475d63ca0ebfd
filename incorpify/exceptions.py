"""
Error taxonomy for the incorporation chat.

Three families:
- RejectedEvent: a user event the engine refuses (stale question, empty
  multi-select, finished session). Raised before any state is touched.
- CatalogIntegrityError: the question catalog or flow table is wrong.
  These are programming errors and should surface loudly.
- Lead hand-off errors: contact validation and sink failures.
"""

from typing import Dict


class IncorpifyError(Exception):
    """Base class for all incorporation chat errors."""


# =============================================================================
# REJECTED EVENTS
# =============================================================================

class RejectedEvent(IncorpifyError):
    """An event was refused; session state is unchanged."""


class StaleQuestionError(RejectedEvent):
    """The event references a question that is not the current one."""

    def __init__(self, question_id: str, current_id: str = ""):
        self.question_id = question_id
        self.current_id = current_id
        super().__init__(
            f"Question '{question_id}' is not the current question"
            + (f" (current: '{current_id}')" if current_id else "")
        )


class InvalidOptionError(RejectedEvent):
    """The option id is not one of the current question's options."""

    def __init__(self, question_id: str, option_id: str):
        self.question_id = question_id
        self.option_id = option_id
        super().__init__(f"Option '{option_id}' is not valid for question '{question_id}'")


class WrongQuestionTypeError(RejectedEvent):
    """Single-select event on a multi-select question, or the reverse."""


class EmptySelectionError(RejectedEvent):
    """A multi-select question was submitted with nothing selected."""


class SessionCompletedError(RejectedEvent):
    """The session already reached completion."""


# =============================================================================
# CATALOG INTEGRITY
# =============================================================================

class CatalogIntegrityError(IncorpifyError):
    """The question catalog or flow table is inconsistent."""


class UnknownQuestionError(CatalogIntegrityError, KeyError):
    """No question with this id exists in the catalog."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Unknown question id: '{question_id}'")

    def __str__(self) -> str:
        return self.args[0]


# =============================================================================
# LEAD HAND-OFF
# =============================================================================

class SessionNotCompleteError(IncorpifyError):
    """A lead was requested before the questionnaire finished."""


class InvalidContactError(IncorpifyError):
    """Contact details failed validation."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("Invalid contact details: " + ", ".join(sorted(errors)))


class LeadSinkError(IncorpifyError):
    """The lead sink could not store a lead."""
