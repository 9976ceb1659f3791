"""Question set validation, term pools and plain-data conversion."""
import random
from collections.abc import Mapping
from typing import Any

from exam_bot.quiz.exceptions import MalformedQuizError
from exam_bot.quiz.models import Question, QuestionKind, Quiz


# ============================================================================
# VALIDATION
# ============================================================================

def validate_quiz(quiz: Quiz) -> Quiz:
    """
    Check the structural invariants of a quiz.

    Returns:
        The same quiz, for chaining

    Raises:
        MalformedQuizError: If the quiz has no questions, no id, or any
            question is malformed
    """
    if not quiz.id or not quiz.id.strip():
        raise MalformedQuizError("Quiz id must not be empty")
    if not quiz.questions:
        raise MalformedQuizError(f"Quiz {quiz.id!r} has no questions")

    for number, question in enumerate(quiz.questions, start=1):
        problem = _question_problem(question)
        if problem:
            raise MalformedQuizError(f"Quiz {quiz.id!r}, question {number}: {problem}")

    return quiz


def validate_question(question: Question) -> Question:
    """Check a single question. Raises MalformedQuizError when malformed."""
    problem = _question_problem(question)
    if problem:
        raise MalformedQuizError(problem)
    return question


def _question_problem(question: Question) -> str | None:
    """Return a description of what is wrong with the question, or None."""
    if not isinstance(question.kind, QuestionKind):
        return f"unknown kind {question.kind!r}"
    if not isinstance(question.prompt, str) or not question.prompt.strip():
        return "prompt is empty"
    if not question.options:
        return "options are empty"
    if not all(isinstance(opt, str) and opt.strip() for opt in question.options):
        return "options must be non-empty strings"
    if len(set(question.options)) != len(question.options):
        return "options must be unique"

    correct = question.correct_answer
    options = set(question.options)

    if question.kind == QuestionKind.SINGLE_CHOICE:
        if not isinstance(correct, str):
            return "correct answer must be a string"
        if correct not in options:
            return f"correct answer {correct!r} is not among the options"

    elif question.kind == QuestionKind.MULTIPLE_CHOICE:
        if not isinstance(correct, frozenset) or not correct:
            return "correct answer must be a non-empty set"
        unknown = correct - options
        if unknown:
            return f"correct answers {sorted(unknown)} are not among the options"

    elif question.kind == QuestionKind.MATCHING:
        if not isinstance(correct, Mapping):
            return "correct answer must be a mapping"
        if set(correct.keys()) != options or len(correct) != len(question.options):
            return "correct answer must have exactly one entry per option"
        if not all(isinstance(term, str) and term.strip() for term in correct.values()):
            return "matching terms must be non-empty strings"

    return None


# ============================================================================
# TERM POOL
# ============================================================================

def term_pool(question: Question, seed: str | int | None = None) -> tuple[str, ...]:
    """
    Candidate terms for a matching question in randomized order.

    The same seed always gives the same order. Non-matching questions have
    an empty pool.
    """
    if question.kind != QuestionKind.MATCHING:
        return ()

    # dict.fromkeys keeps first-seen order while dropping duplicates
    terms = list(dict.fromkeys(question.correct_answer.values()))
    random.Random(seed).shuffle(terms)
    return tuple(terms)


# ============================================================================
# PLAIN DATA CONVERSION
# ============================================================================

def question_from_dict(data: Mapping[str, Any]) -> Question:
    """Build a question from plain data (LLM output, mock exams, storage)."""
    if not isinstance(data, Mapping):
        raise MalformedQuizError(f"Question must be an object, got {type(data).__name__}")

    kind = _kind_from_dict(data)
    prompt = data.get("question", data.get("prompt"))
    options = data.get("options")
    raw_answer = data.get("answer", data.get("correct_answer"))
    explanation = data.get("explanation") or ""

    if not isinstance(options, (list, tuple)):
        raise MalformedQuizError("Question options must be a list")
    if not isinstance(explanation, str):
        raise MalformedQuizError("Question explanation must be a string")

    if kind == QuestionKind.MULTIPLE_CHOICE:
        if not isinstance(raw_answer, (list, tuple)):
            raise MalformedQuizError("Multiple-choice answer must be a list")
        if not all(isinstance(value, str) for value in raw_answer):
            raise MalformedQuizError("Multiple-choice answer must contain only strings")
        if len(set(raw_answer)) != len(raw_answer):
            raise MalformedQuizError("Multiple-choice answer must not repeat options")
        correct = frozenset(raw_answer)
    elif kind == QuestionKind.MATCHING:
        if not isinstance(raw_answer, Mapping):
            raise MalformedQuizError("Matching answer must be an object")
        correct = dict(raw_answer)
    else:
        correct = raw_answer

    return Question(
        prompt=prompt if isinstance(prompt, str) else "",
        options=tuple(options),
        kind=kind,
        correct_answer=correct,
        explanation=explanation,
    )


def _kind_from_dict(data: Mapping[str, Any]) -> QuestionKind:
    if "kind" in data:
        try:
            return QuestionKind(data["kind"])
        except ValueError:
            raise MalformedQuizError(f"Unknown question kind: {data['kind']!r}")

    is_multiple = bool(data.get("isMultipleChoice"))
    is_matching = bool(data.get("isMatching"))
    if is_multiple and is_matching:
        raise MalformedQuizError("Question cannot be both multiple-choice and matching")
    if is_multiple:
        return QuestionKind.MULTIPLE_CHOICE
    if is_matching:
        return QuestionKind.MATCHING
    return QuestionKind.SINGLE_CHOICE


def quiz_from_dict(data: Mapping[str, Any]) -> Quiz:
    """
    Build and validate a quiz from plain data.

    Raises:
        MalformedQuizError: If the data does not describe a valid quiz
    """
    if not isinstance(data, Mapping):
        raise MalformedQuizError(f"Quiz must be an object, got {type(data).__name__}")

    raw_questions = data.get("questions")
    if not isinstance(raw_questions, (list, tuple)):
        raise MalformedQuizError("Quiz questions must be a list")

    quiz = Quiz(
        id=str(data.get("id") or ""),
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        questions=tuple(question_from_dict(q) for q in raw_questions),
        is_important=bool(data.get("isImportant", data.get("is_important", False))),
    )
    return validate_quiz(quiz)


def question_to_dict(question: Question) -> dict:
    correct = question.correct_answer
    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        # Keep option order so stored quizzes read back identically
        correct = [opt for opt in question.options if opt in correct]
    elif question.kind == QuestionKind.MATCHING:
        correct = dict(correct)

    return {
        "kind": question.kind.value,
        "question": question.prompt,
        "options": list(question.options),
        "answer": correct,
        "explanation": question.explanation,
    }


def quiz_to_dict(quiz: Quiz) -> dict:
    """Serialize a quiz to JSON-compatible data accepted by quiz_from_dict."""
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "isImportant": quiz.is_important,
        "questions": [question_to_dict(q) for q in quiz.questions],
    }
