"""
Chat transcript: the append-only log of rendered turns.

The presentation layer renders turns verbatim. Turns are never edited,
removed or reordered once appended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from .questions import Question


class TurnKind(str, Enum):
    """Kind of transcript entry."""
    GREETING = "greeting"        # Opening message, no options
    QUESTION = "question"        # A question shown to the user
    ANSWER = "answer"            # The user's answer, as display text
    COMPLETION = "completion"    # Closing message with recommended services


@dataclass(frozen=True)
class Turn:
    """One entry of the transcript."""
    kind: TurnKind
    text: str
    subtext: Optional[str] = None
    question: Optional[Question] = None
    flow: Optional[str] = None
    services_key: Optional[str] = None
    services: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def greeting(cls, text: str, subtext: Optional[str] = None) -> "Turn":
        return cls(kind=TurnKind.GREETING, text=text, subtext=subtext)

    @classmethod
    def for_question(cls, question: Question) -> "Turn":
        return cls(kind=TurnKind.QUESTION, text=question.text,
                   subtext=question.subtext, question=question)

    @classmethod
    def answer(cls, display_text: str) -> "Turn":
        return cls(kind=TurnKind.ANSWER, text=display_text)

    @classmethod
    def completion(cls, flow: str, message: str, services_key: str,
                   services: tuple[str, ...]) -> "Turn":
        return cls(kind=TurnKind.COMPLETION, text=message, flow=flow,
                   services_key=services_key, services=tuple(services))

    def to_dict(self) -> dict:
        data: dict = {"type": self.kind.value, "text": self.text}
        if self.subtext:
            data["subtext"] = self.subtext
        if self.question is not None:
            data["question"] = self.question.to_dict()
        if self.kind == TurnKind.COMPLETION:
            data["flow"] = self.flow
            data["services_key"] = self.services_key
            data["services"] = list(self.services)
        return data


class Transcript:
    """Append-only sequence of turns."""

    def __init__(self):
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> Turn:
        self._turns.append(turn)
        return turn

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(list(self._turns))

    def __getitem__(self, index):
        return self._turns[index]

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def last(self) -> Optional[Turn]:
        return self._turns[-1] if self._turns else None

    def to_list(self) -> list[dict]:
        return [t.to_dict() for t in self._turns]
