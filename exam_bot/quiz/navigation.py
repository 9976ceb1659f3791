"""Navigation controller: the quiz session state machine."""
import logging
from typing import Any, Optional

from exam_bot.quiz.answers import is_complete, normalize_answer
from exam_bot.quiz.exceptions import (
    AnswerIncompleteError,
    AnswerLockedError,
    InvalidAnswerShapeError,
)
from exam_bot.quiz.models import Answer, Question, Quiz
from exam_bot.quiz.question_set import term_pool, validate_quiz
from exam_bot.quiz.scoring import score
from exam_bot.quiz.session import SessionState, SessionStore, copy_state

logger = logging.getLogger(__name__)


def _fitting_answers(quiz: Quiz, answers: dict[int, Answer]) -> dict[int, Answer]:
    """Stored answers that still belong to the quiz's questions."""
    kept = {}
    for index, answer in answers.items():
        if not 0 <= index < quiz.question_count:
            logger.warning("Dropping stored answer for missing question %d of quiz %s", index, quiz.id)
            continue
        try:
            kept[index] = normalize_answer(quiz.questions[index], answer)
        except InvalidAnswerShapeError as e:
            logger.warning("Dropping stale answer %d of quiz %s: %s", index, quiz.id, e)
    return kept


def _fitting_revealed(quiz: Quiz, answers: dict[int, Answer], revealed: dict[int, bool]) -> dict[int, bool]:
    """Reveal flags for in-range questions whose stored answer is complete."""
    kept = {}
    for index, flag in revealed.items():
        if not flag or not 0 <= index < quiz.question_count:
            continue
        question = quiz.questions[index]
        if is_complete(question.kind, len(question.options), answers.get(index)):
            kept[index] = True
        else:
            logger.warning("Dropping reveal of unanswered question %d of quiz %s", index, quiz.id)
    return kept


class QuizSession:
    """
    One user's pass through one quiz.

    Every mutation is written to the session store before the method returns,
    so a session reopened with open() continues exactly where it stopped.
    """

    def __init__(self, quiz: Quiz, store: SessionStore, state: SessionState):
        self.quiz = quiz
        self.store = store
        self._state = state
        self._term_pools: dict[int, tuple[str, ...]] = {}

    @classmethod
    async def open(cls, quiz: Quiz, store: SessionStore) -> "QuizSession":
        """
        Validate the quiz and load (or create) its session.

        Raises:
            MalformedQuizError: If the quiz is not well-formed
        """
        validate_quiz(quiz)
        state = await store.load(quiz.id)

        if not 0 <= state.current_index < quiz.question_count:
            logger.warning(
                "Stored index %d out of range for quiz %s, starting over at 0",
                state.current_index, quiz.id,
            )
            state.current_index = 0
            await store.save_index(quiz.id, 0)

        answers = _fitting_answers(quiz, state.answers)
        if answers != state.answers:
            state.answers = answers
            await store.save_answers(quiz.id, answers)

        revealed = _fitting_revealed(quiz, answers, state.revealed)
        if revealed != state.revealed:
            state.revealed = revealed
            await store.save_revealed(quiz.id, revealed)

        logger.info("Opened session for quiz %s at question %d", quiz.id, state.current_index + 1)
        return cls(quiz, store, state)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return copy_state(self._state)

    @property
    def question_count(self) -> int:
        return self.quiz.question_count

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self._state.current_index]

    @property
    def finished(self) -> bool:
        return self._state.finished

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.question_count:
            raise IndexError(f"Question index {index} out of range 0..{self.question_count - 1}")

    def answer_for(self, index: int) -> Optional[Answer]:
        self._check_index(index)
        return self._state.answers.get(index)

    def is_revealed(self, index: int) -> bool:
        self._check_index(index)
        return self._state.revealed.get(index, False)

    def can_reveal(self, index: int) -> bool:
        """Whether the reveal action is available for the question."""
        self._check_index(index)
        question = self.quiz.questions[index]
        return not self.is_revealed(index) and is_complete(
            question.kind, len(question.options), self._state.answers.get(index)
        )

    def term_pool(self, index: int) -> tuple[str, ...]:
        """Term order for a matching question, fixed for this session."""
        self._check_index(index)
        if index not in self._term_pools:
            self._term_pools[index] = term_pool(
                self.quiz.questions[index], seed=f"{self.quiz.id}:{index}"
            )
        return self._term_pools[index]

    def progress(self) -> float:
        """Share of revealed questions, as a percentage."""
        return self._state.revealed_count / self.question_count * 100

    def score(self) -> float:
        return score(self.quiz, self._state)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def go_to(self, direction: int) -> int:
        """
        Move one question forward (+1) or back (-1).

        Moves past either end are ignored. Returns the resulting index.
        """
        if direction not in (1, -1):
            raise ValueError(f"direction must be +1 or -1, got {direction!r}")

        new_index = self._state.current_index + direction
        if 0 <= new_index < self.question_count:
            self._state.current_index = new_index
            await self.store.save_index(self.quiz.id, new_index)
        return self._state.current_index

    async def submit_answer(self, index: int, answer: Any) -> Answer:
        """
        Store the answer for a question.

        Raises:
            InvalidAnswerShapeError: If the answer does not fit the question
            AnswerLockedError: If the question was already revealed
        """
        self._check_index(index)
        if self.is_revealed(index):
            raise AnswerLockedError(f"Question {index + 1} is already revealed")

        normalized = normalize_answer(self.quiz.questions[index], answer)

        answers = dict(self._state.answers)
        answers[index] = normalized
        await self.store.save_answers(self.quiz.id, answers)
        self._state.answers = answers
        return normalized

    async def reveal(self, index: int) -> None:
        """
        Disclose correctness and explanation for a question.

        Raises:
            AnswerIncompleteError: If the current answer is not complete
        """
        self._check_index(index)
        if self.is_revealed(index):
            return

        question = self.quiz.questions[index]
        if not is_complete(question.kind, len(question.options), self._state.answers.get(index)):
            raise AnswerIncompleteError(f"Question {index + 1} is not fully answered")

        revealed = dict(self._state.revealed)
        revealed[index] = True
        await self.store.save_revealed(self.quiz.id, revealed)
        self._state.revealed = revealed

    async def finish(self) -> float:
        """Mark the session finished and return the score. No answers are required."""
        self._state.finished = True
        await self.store.save_finished(self.quiz.id, True)

        result = self.score()
        logger.info("Quiz %s finished with score %.1f%%", self.quiz.id, result)
        return result

    async def restart(self) -> None:
        """Reset the session to its initial state."""
        await self.store.reset(self.quiz.id)
        self._state = SessionState.initial()
        logger.info("Quiz %s restarted", self.quiz.id)
