"""Final score computation."""
from exam_bot.quiz.answers import is_correct
from exam_bot.quiz.models import Quiz
from exam_bot.quiz.session import SessionState


def count_correct(quiz: Quiz, state: SessionState) -> int:
    """Number of questions whose stored answer is correct."""
    return sum(
        1
        for index, question in enumerate(quiz.questions)
        if is_correct(question.kind, question.correct_answer, state.answers.get(index))
    )


def score(quiz: Quiz, state: SessionState) -> float:
    """
    Percentage of correctly answered questions, unrounded.

    Unanswered questions count as incorrect. Only meaningful once the
    session is finished, but safe to call at any time.
    """
    if not quiz.questions:
        return 0.0
    return count_correct(quiz, state) / len(quiz.questions) * 100


def format_percent(value: float) -> str:
    """Round a percentage for display: 33.33 -> '33%'."""
    return f"{round(value)}%"
