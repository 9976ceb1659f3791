"""Lookup of mock exams and stored generated quizzes."""
import logging
from typing import Optional

from exam_bot.database.kv_store import KeyValueStore
from exam_bot.quiz.exceptions import MalformedQuizError
from exam_bot.quiz.mock_exams import MOCK_EXAMS
from exam_bot.quiz.models import Quiz
from exam_bot.quiz.question_set import quiz_from_dict, quiz_to_dict

logger = logging.getLogger(__name__)

LAST_GENERATED_KEY = "quiz:last-generated"

_mock_exams: Optional[list[Quiz]] = None


def load_mock_exams() -> list[Quiz]:
    """Build and validate the curated mock exams once per process."""
    global _mock_exams
    if _mock_exams is None:
        _mock_exams = [quiz_from_dict(data) for data in MOCK_EXAMS]
    return _mock_exams


class QuizRepository:
    """Mock exams plus generated quizzes kept in a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def mock_exams(self) -> list[Quiz]:
        return load_mock_exams()

    async def get(self, quiz_id: str) -> Optional[Quiz]:
        """Find a quiz by id. Unknown or unreadable quizzes are None."""
        for quiz in self.mock_exams():
            if quiz.id == quiz_id:
                return quiz

        data = await self.store.get(f"quiz:{quiz_id}")
        if data is None:
            return None
        try:
            return quiz_from_dict(data)
        except MalformedQuizError as e:
            logger.warning("Stored quiz %s is malformed, ignoring: %s", quiz_id, e)
            return None

    async def save_generated(self, quiz: Quiz) -> None:
        await self.store.set(f"quiz:{quiz.id}", quiz_to_dict(quiz))
        await self.store.set(LAST_GENERATED_KEY, quiz.id)

    async def last_generated(self) -> Optional[Quiz]:
        quiz_id = await self.store.get(LAST_GENERATED_KEY)
        if not isinstance(quiz_id, str):
            return None
        return await self.get(quiz_id)
