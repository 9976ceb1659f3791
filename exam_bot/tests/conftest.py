"""Shared fixtures for quiz engine tests."""
import pytest

from exam_bot.database.kv_store import MemoryKeyValueStore
from exam_bot.quiz.models import Question, QuestionKind, Quiz
from exam_bot.quiz.session import SessionStore


@pytest.fixture
def kv_store():
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def session_store(kv_store):
    """Session store on top of the in-memory key-value store."""
    return SessionStore(kv_store)


@pytest.fixture
def single_question():
    return Question(
        prompt="Which document authorizes a project?",
        options=("Project charter", "Scope statement", "WBS"),
        kind=QuestionKind.SINGLE_CHOICE,
        correct_answer="Project charter",
        explanation="The sponsor issues the charter.",
    )


@pytest.fixture
def multiple_question():
    return Question(
        prompt="Pick the outputs of Identify Risks.",
        options=("A", "B", "C"),
        kind=QuestionKind.MULTIPLE_CHOICE,
        correct_answer=frozenset({"A", "B"}),
        explanation="A and B are outputs.",
    )


@pytest.fixture
def matching_question():
    """Matching question with options X, Y and terms 1, 2."""
    return Question(
        prompt="Match the letters with numbers.",
        options=("X", "Y"),
        kind=QuestionKind.MATCHING,
        correct_answer={"X": "1", "Y": "2"},
        explanation="X is 1, Y is 2.",
    )


@pytest.fixture
def single_choice_quiz():
    """Three single-choice questions, correct answers A, B, C."""
    questions = tuple(
        Question(
            prompt=f"Question {i + 1}",
            options=("A", "B", "C"),
            kind=QuestionKind.SINGLE_CHOICE,
            correct_answer=correct,
            explanation="",
        )
        for i, correct in enumerate(["A", "B", "C"])
    )
    return Quiz(id="three-single", title="Three questions", questions=questions)


@pytest.fixture
def mixed_quiz(single_question, multiple_question, matching_question):
    """One question of every kind: single, multiple, matching."""
    return Quiz(
        id="mixed",
        title="Mixed quiz",
        description="One of each kind",
        questions=(single_question, multiple_question, matching_question),
    )
