"""
Answer store for a chat session.

Maps question id -> selected option id (single-select) or an ordered,
duplicate-free list of option ids (multi-select).

Multi-select "all" rule: a selection that contains "all" contains only
"all". Picking "all" replaces the selection; picking anything else drops
"all" first.
"""

from __future__ import annotations

from typing import Iterator, Optional, Union

from .questions import ALL_OPTION_ID

AnswerValue = Union[str, list[str]]


class AnswerStore:
    """Cumulative answers for one session."""

    def __init__(self):
        self._answers: dict[str, AnswerValue] = {}

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._answers

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def get(self, question_id: str, default=None) -> Optional[AnswerValue]:
        value = self._answers.get(question_id, default)
        if isinstance(value, list):
            return list(value)
        return value

    def set_single(self, question_id: str, option_id: str) -> None:
        """Record a single-select answer, replacing any earlier one."""
        self._answers[question_id] = option_id

    def selection(self, question_id: str) -> list[str]:
        """Current multi-select selection (empty if nothing chosen)."""
        value = self._answers.get(question_id)
        if isinstance(value, list):
            return list(value)
        return []

    def toggle(self, question_id: str, option_id: str, sentinel: bool = True) -> list[str]:
        """
        Toggle option_id in a multi-select answer and return the new selection.

        With sentinel=True the question defines the "all" option and the
        "all" rule applies. An answer whose selection becomes empty is removed.
        """
        current = self.selection(question_id)

        if sentinel and option_id == ALL_OPTION_ID:
            updated = [ALL_OPTION_ID]
        else:
            updated = [o for o in current if o != ALL_OPTION_ID] if sentinel else current
            if option_id in updated:
                updated = [o for o in updated if o != option_id]
            else:
                updated = updated + [option_id]

        if updated:
            self._answers[question_id] = updated
        else:
            self._answers.pop(question_id, None)
        return list(updated)

    def to_dict(self) -> dict[str, AnswerValue]:
        """Plain-dict copy, multi-select values as fresh lists."""
        return {
            qid: list(value) if isinstance(value, list) else value
            for qid, value in self._answers.items()
        }
