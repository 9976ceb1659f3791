"""Data models for quizzes and questions."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Union


class QuestionKind(str, Enum):
    """Closed set of question kinds."""

    SINGLE_CHOICE = "single-choice"
    MULTIPLE_CHOICE = "multiple-choice"
    MATCHING = "matching"


# str for single-choice, frozenset for multiple-choice, option label -> term for matching
Answer = Union[str, frozenset, Mapping[str, str]]


@dataclass(frozen=True)
class Question:
    """One evaluable item of a quiz."""
    prompt: str
    options: tuple[str, ...]
    kind: QuestionKind
    correct_answer: Answer
    explanation: str = ""


@dataclass(frozen=True)
class Quiz:
    """Immutable ordered sequence of questions plus metadata."""
    id: str
    title: str
    description: str = ""
    questions: tuple[Question, ...] = field(default_factory=tuple)
    is_important: bool = False

    @property
    def question_count(self) -> int:
        return len(self.questions)
