"""
Incorporation Chat Agent - the branching questionnaire behind the chat.

Chat Flow:
1. BRANCH PHASE: company_status, and incorporation_country if the user
   already has a company
   - Each answer goes to the flow selector instead of advancing a sequence

2. SEQUENCE PHASE: the questions of the chosen flow, one after another
   - Single-select questions advance as soon as an option is picked
   - Multi-select questions collect toggles and advance on explicit submit

3. COMPLETED: a completion turn with the flow's recommended services;
   the answers can then be handed to a lead sink with contact details

The agent processes one event at a time and owns its session state. Any
pacing between an answer and the next question is up to the presentation
layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..branching.flow_selector import FlowType, OutcomeKind, is_branch_question, select_flow
from ..branching.progress import NO_PROGRESS, Progress, calculate_progress
from ..exceptions import (
    EmptySelectionError,
    InvalidOptionError,
    RejectedEvent,
    SessionCompletedError,
    SessionNotCompleteError,
    StaleQuestionError,
    WrongQuestionTypeError,
)
from ..leads.sink import ContactDetails, LeadRecord, LeadSink
from ..schemas.answers import AnswerStore
from ..schemas.questions import (
    DEFAULT_CATALOG,
    GREETING_SUBTEXT,
    GREETING_TEXT,
    Question,
    QuestionCatalog,
)
from ..schemas.transcript import Transcript, Turn

logger = logging.getLogger(__name__)


class ChatPhase(Enum):
    """Chat phases."""
    AWAITING_BRANCH_ANSWER = "awaiting_branch_answer"
    AWAITING_SEQUENCE_ANSWER = "awaiting_sequence_answer"
    COMPLETED = "completed"


@dataclass
class SessionState:
    """Tracks one chat session."""
    phase: ChatPhase = ChatPhase.AWAITING_BRANCH_ANSWER
    flow: FlowType = FlowType.UNSET

    # Question currently awaiting an answer (None once completed)
    current_question: Optional[Question] = None

    # Sequence phase
    active_sequence: Optional[tuple[Question, ...]] = None
    position: int = 0

    # Branch questions answered before the flow started (drives the progress offset)
    branch_questions_answered: int = 0

    answers: AnswerStore = field(default_factory=AnswerStore)
    transcript: Transcript = field(default_factory=Transcript)
    completed: bool = False

    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    completed_at: Optional[str] = None


class IncorporationChatAgent:
    """
    Branching questionnaire for the incorporation chat.

    Usage:
        agent = IncorporationChatAgent()
        agent.submit_single("company_status", "new")
        agent.submit_single("business_activity", "consulting")
        ...
        agent.toggle_multi("additional_services", "bank_account")
        agent.submit_multi("additional_services")

    Rejected events raise a RejectedEvent subclass and leave the session
    exactly as it was.
    """

    def __init__(self, catalog: Optional[QuestionCatalog] = None):
        self.catalog = catalog or DEFAULT_CATALOG
        self.state = SessionState()

        self.state.transcript.append(Turn.greeting(GREETING_TEXT, GREETING_SUBTEXT))
        self._ask(self.catalog.entry_question)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def current_question(self) -> Optional[Question]:
        return self.state.current_question

    @property
    def transcript(self) -> Transcript:
        return self.state.transcript

    @property
    def answers(self) -> AnswerStore:
        return self.state.answers

    def is_complete(self) -> bool:
        return self.state.completed

    def selection(self, question_id: str) -> list[str]:
        """In-progress multi-select selection for a question."""
        return self.state.answers.selection(question_id)

    def progress(self, question_id: Optional[str] = None) -> Progress:
        """Progress for question_id, or for the current question."""
        if question_id is None:
            if self.state.current_question is None:
                return NO_PROGRESS
            question_id = self.state.current_question.id
        return calculate_progress(
            question_id,
            self.state.active_sequence,
            self.state.branch_questions_answered,
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def submit_single(self, question_id: str, option_id: str) -> list[Turn]:
        """
        Answer a single-select question.

        Returns the turns appended by this event.
        """
        question = self._require_current(question_id)
        if question.multi_select:
            self._reject(WrongQuestionTypeError(
                f"Question '{question_id}' is multi-select; toggle options and submit"
            ))
        option = question.get_option(option_id)
        if option is None:
            self._reject(InvalidOptionError(question_id, option_id))

        # Decide the branch before touching state so a bad catalog can't half-apply
        outcome = None
        if is_branch_question(question_id):
            outcome = select_flow(question_id, option_id, self.catalog)

        turns_before = len(self.state.transcript)
        self.state.answers.set_single(question_id, option_id)
        self.state.transcript.append(Turn.answer(option.text))

        if outcome is None:
            self._advance()
        else:
            self.state.branch_questions_answered += 1
            if outcome.kind == OutcomeKind.FOLLOWUP:
                self._ask(outcome.next_question)
            else:
                self._start_flow(outcome.flow, outcome.questions)

        return list(self.state.transcript.turns[turns_before:])

    def toggle_multi(self, question_id: str, option_id: str) -> list[str]:
        """
        Toggle an option of the current multi-select question.

        Appends nothing and does not advance. Returns the new selection.
        """
        question = self._require_current(question_id)
        if not question.multi_select:
            self._reject(WrongQuestionTypeError(
                f"Question '{question_id}' is single-select; use submit_single"
            ))
        if not question.has_option(option_id):
            self._reject(InvalidOptionError(question_id, option_id))

        return self.state.answers.toggle(
            question_id, option_id, sentinel=question.has_all_option
        )

    def submit_multi(self, question_id: str) -> list[Turn]:
        """
        Submit the current multi-select question.

        Returns the turns appended by this event.
        """
        question = self._require_current(question_id)
        if not question.multi_select:
            self._reject(WrongQuestionTypeError(
                f"Question '{question_id}' is single-select; use submit_single"
            ))
        selected = self.state.answers.selection(question_id)
        if not selected:
            self._reject(EmptySelectionError(
                f"Select at least one option for '{question_id}' before continuing"
            ))

        turns_before = len(self.state.transcript)
        self.state.transcript.append(
            Turn.answer(self.catalog.answer_text(question_id, selected))
        )
        self._advance()
        return list(self.state.transcript.turns[turns_before:])

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _reject(self, error: RejectedEvent):
        logger.warning("Rejected chat event: %s", error)
        raise error

    def _require_current(self, question_id: str) -> Question:
        if self.state.completed:
            self._reject(SessionCompletedError("The questionnaire is already complete"))
        current = self.state.current_question
        if current is None or current.id != question_id:
            self._reject(StaleQuestionError(question_id, current.id if current else ""))
        return current

    def _ask(self, question: Question):
        self.state.current_question = question
        self.state.transcript.append(Turn.for_question(question))

    def _start_flow(self, flow: FlowType, questions: tuple[Question, ...]):
        self.state.flow = flow
        self.state.active_sequence = tuple(questions)
        self.state.position = 0
        self.state.phase = ChatPhase.AWAITING_SEQUENCE_ANSWER
        logger.info(
            "Flow selected: %s (%d questions, offset %d)",
            flow.value, len(questions), self.state.branch_questions_answered,
        )
        self._ask(self.state.active_sequence[0])

    def _advance(self):
        """Move to the next sequence question, or complete."""
        self.state.position += 1
        if self.state.position < len(self.state.active_sequence):
            self._ask(self.state.active_sequence[self.state.position])
        else:
            self._complete()

    def _complete(self):
        completion = self.catalog.get_completion(self.state.flow.value)
        self.state.completed = True
        self.state.phase = ChatPhase.COMPLETED
        self.state.current_question = None
        self.state.completed_at = datetime.now().isoformat()
        self.state.transcript.append(Turn.completion(
            flow=self.state.flow.value,
            message=completion.message,
            services_key=completion.key,
            services=completion.services,
        ))
        logger.info(
            "Chat completed: flow=%s answers=%d", self.state.flow.value, len(self.state.answers)
        )

    # -------------------------------------------------------------------------
    # Lead hand-off
    # -------------------------------------------------------------------------

    def build_lead(self, contact: ContactDetails) -> LeadRecord:
        """Combine validated contact details with the finished answers."""
        if not self.state.completed:
            raise SessionNotCompleteError("Finish the questionnaire before submitting contact details")
        contact.validate()
        return LeadRecord(contact=contact, answers=self.state.answers.to_dict())

    def submit_lead(self, contact: ContactDetails, sink: LeadSink) -> dict:
        """
        Hand the finished answers to a lead sink.

        The session stays completed whatever the sink does; sink errors
        propagate to the caller.
        """
        record = self.build_lead(contact)
        return sink.save_lead(record)

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict:
        """JSON-ready snapshot of the session."""
        current = self.state.current_question
        summary = {
            "phase": self.state.phase.value,
            "flow": self.state.flow.value,
            "position": self.state.position,
            "completed": self.state.completed,
            "current_question": current.to_dict() if current else None,
            "selection": self.selection(current.id) if current and current.multi_select else [],
            "progress": self.progress().to_dict(),
            "answers": self.state.answers.to_dict(),
            "answer_rows": self.catalog.describe_answers(self.state.answers.to_dict()),
            "transcript": self.state.transcript.to_list(),
            "started_at": self.state.started_at,
            "completed_at": self.state.completed_at,
        }
        return summary

    to_dict = get_summary
