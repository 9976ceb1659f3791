"""Answer shapes and per-kind completeness/correctness rules."""
from collections.abc import Iterable, Mapping
from typing import Any

from exam_bot.quiz.exceptions import InvalidAnswerShapeError
from exam_bot.quiz.models import Answer, Question, QuestionKind


def is_complete(kind: QuestionKind, options_count: int, answer: Any) -> bool:
    """Check whether an answer is ready to be revealed."""
    if answer is None:
        return False

    if kind == QuestionKind.SINGLE_CHOICE:
        return isinstance(answer, str) and bool(answer)

    if kind == QuestionKind.MULTIPLE_CHOICE:
        return isinstance(answer, (set, frozenset, list, tuple)) and len(answer) > 0

    if kind == QuestionKind.MATCHING:
        if not isinstance(answer, Mapping):
            return False
        populated = [key for key, value in answer.items() if value]
        return len(populated) == options_count

    return False


def is_correct(kind: QuestionKind, correct_answer: Any, submitted: Any) -> bool:
    """Check a submitted answer against the correct one.

    A missing or wrongly shaped answer is simply incorrect.
    """
    if submitted is None:
        return False

    if kind == QuestionKind.SINGLE_CHOICE:
        return isinstance(submitted, str) and submitted == correct_answer

    if kind == QuestionKind.MULTIPLE_CHOICE:
        if isinstance(submitted, (str, Mapping)) or not isinstance(submitted, Iterable):
            return False
        submitted_list = list(submitted)
        if len(set(submitted_list)) != len(submitted_list):
            return False
        return set(submitted_list) == set(correct_answer)

    if kind == QuestionKind.MATCHING:
        if not isinstance(submitted, Mapping) or not correct_answer:
            return False
        return all(submitted.get(key) == value for key, value in correct_answer.items())

    return False


def normalize_answer(question: Question, answer: Any) -> Answer:
    """
    Validate an answer's shape for the question and return its canonical form.

    Args:
        question: Question being answered
        answer: Raw answer: a string, an iterable of strings, or a mapping

    Returns:
        str for single-choice, frozenset for multiple-choice, dict for matching

    Raises:
        InvalidAnswerShapeError: If the answer cannot belong to this question
    """
    options = set(question.options)

    if question.kind == QuestionKind.SINGLE_CHOICE:
        if not isinstance(answer, str):
            raise InvalidAnswerShapeError(
                f"Single-choice answer must be a string, got {type(answer).__name__}"
            )
        if answer not in options:
            raise InvalidAnswerShapeError(f"Unknown option: {answer!r}")
        return answer

    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        if isinstance(answer, (str, bytes, Mapping)) or not isinstance(answer, Iterable):
            raise InvalidAnswerShapeError(
                f"Multiple-choice answer must be a collection of strings, got {type(answer).__name__}"
            )
        values = list(answer)
        if not all(isinstance(value, str) for value in values):
            raise InvalidAnswerShapeError("Multiple-choice answer must contain only strings")
        unknown = set(values) - options
        if unknown:
            raise InvalidAnswerShapeError(f"Unknown options: {sorted(unknown)}")
        return frozenset(values)

    if question.kind == QuestionKind.MATCHING:
        if not isinstance(answer, Mapping):
            raise InvalidAnswerShapeError(
                f"Matching answer must be a mapping, got {type(answer).__name__}"
            )
        terms = set(question.correct_answer.values())
        normalized = {}
        for key, value in answer.items():
            if key not in options:
                raise InvalidAnswerShapeError(f"Unknown option label: {key!r}")
            if not isinstance(value, str) or value not in terms:
                raise InvalidAnswerShapeError(f"Unknown term for {key!r}: {value!r}")
            normalized[key] = value
        return normalized

    raise InvalidAnswerShapeError(f"Unsupported question kind: {question.kind}")
