"""Exceptions raised by the quiz session engine."""


class QuizError(Exception):
    """Base exception for quiz engine errors."""
    pass


class MalformedQuizError(QuizError):
    """Question set failed structural validation."""
    pass


class InvalidAnswerShapeError(QuizError):
    """Submitted answer does not match the question's expected shape."""
    pass


class AnswerIncompleteError(QuizError):
    """Reveal requested before the answer is complete."""
    pass


class AnswerLockedError(QuizError):
    """Answer change requested for an already revealed question."""
    pass


class GenerationFailure(QuizError):
    """Quiz generation failed or produced an unusable result."""
    pass
