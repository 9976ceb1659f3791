"""Tests for the quiz session state machine."""
import pytest

from exam_bot.keyboards.quiz_kb import question_keyboard
from exam_bot.quiz.exceptions import (
    AnswerIncompleteError,
    AnswerLockedError,
    InvalidAnswerShapeError,
    MalformedQuizError,
)
from exam_bot.quiz.models import Quiz
from exam_bot.quiz.navigation import QuizSession
from exam_bot.quiz.session import SessionState


class TestOpen:
    """Opening sessions."""

    async def test_new_session_is_initial(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.current_index == 0
        assert session.state == SessionState.initial()
        assert session.finished is False

    async def test_malformed_quiz_rejected(self, session_store):
        with pytest.raises(MalformedQuizError):
            await QuizSession.open(Quiz(id="empty", title="Empty"), session_store)

    async def test_resumes_saved_state(self, mixed_quiz, session_store):
        await session_store.save("mixed", SessionState(current_index=2, answers={0: "WBS"}))

        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.current_index == 2
        assert session.answer_for(0) == "WBS"

    async def test_out_of_range_index_clamped(self, mixed_quiz, session_store):
        """A stored index past the end (e.g. quiz shrank) starts over at 0."""
        await session_store.save_index("mixed", 10)

        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.current_index == 0
        assert (await session_store.load("mixed")).current_index == 0

    async def test_stale_answer_shape_dropped(self, mixed_quiz, session_store, kv_store):
        """A string stored for the matching question is discarded, the rest kept."""
        await kv_store.set("mixed-answers", {"0": "WBS", "2": "1"})
        await kv_store.set("mixed-index", 2)

        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.answer_for(2) is None
        assert session.answer_for(0) == "WBS"
        assert (await session_store.load("mixed")).answers == {0: "WBS"}
        assert "🔍 Check answer" in [
            button.text for row in question_keyboard(session).inline_keyboard for button in row
        ]

    async def test_out_of_range_records_dropped(self, mixed_quiz, session_store, kv_store):
        """Keys past the last question never count towards progress."""
        await kv_store.set("mixed-answers", {"0": "WBS", "1": ["A"], "2": {"X": "1", "Y": "2"}, "7": "A"})
        await kv_store.set("mixed-revealed", {"0": True, "1": True, "2": True, "7": True})

        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.progress() == 100
        stored = await session_store.load("mixed")
        assert 7 not in stored.answers
        assert stored.revealed == {0: True, 1: True, 2: True}

    async def test_reveal_without_answer_dropped(self, mixed_quiz, session_store, kv_store):
        await kv_store.set("mixed-revealed", {"1": True})

        session = await QuizSession.open(mixed_quiz, session_store)

        assert session.is_revealed(1) is False
        assert session.progress() == 0


class TestGoTo:
    """Index transitions."""

    async def test_previous_at_start_stays(self, mixed_quiz, session_store):
        """goTo(-1) at 0 is ignored, no error."""
        session = await QuizSession.open(mixed_quiz, session_store)

        assert await session.go_to(-1) == 0
        assert session.current_index == 0

    async def test_next_at_end_stays(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.go_to(1)
        await session.go_to(1)

        assert await session.go_to(1) == 2

    async def test_moves_are_persisted(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.go_to(1)

        assert (await session_store.load("mixed")).current_index == 1

    async def test_invalid_direction(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        with pytest.raises(ValueError):
            await session.go_to(2)


class TestSubmitAnswer:
    """Answer submission."""

    async def test_answer_stored(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)

        await session.submit_answer(1, ["B", "A"])

        assert session.answer_for(1) == frozenset({"A", "B"})
        assert (await session_store.load("mixed")).answers[1] == frozenset({"A", "B"})

    async def test_wrong_shape_does_not_mutate(self, mixed_quiz, session_store):
        """A string where a mapping is expected."""
        session = await QuizSession.open(mixed_quiz, session_store)

        with pytest.raises(InvalidAnswerShapeError):
            await session.submit_answer(2, "1")

        assert session.answer_for(2) is None
        assert (await session_store.load("mixed")).answers == {}

    async def test_locked_after_reveal(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(0, "WBS")
        await session.reveal(0)

        with pytest.raises(AnswerLockedError):
            await session.submit_answer(0, "Project charter")

        assert session.answer_for(0) == "WBS"

    async def test_index_out_of_range(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        with pytest.raises(IndexError):
            await session.submit_answer(3, "A")


class TestReveal:
    """Readiness gate and idempotency."""

    async def test_reveal_before_complete(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)

        with pytest.raises(AnswerIncompleteError):
            await session.reveal(0)

        assert session.is_revealed(0) is False
        assert 0 not in (await session_store.load("mixed")).revealed

    async def test_reveal_after_answer_is_idempotent(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(0, "Project charter")

        await session.reveal(0)
        await session.reveal(0)

        assert session.is_revealed(0) is True
        assert (await session_store.load("mixed")).revealed == {0: True}

    async def test_matching_partial_blocks_reveal(self, mixed_quiz, session_store):
        """{X: "1"} out of two options is incomplete."""
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(2, {"X": "1"})

        assert session.can_reveal(2) is False
        with pytest.raises(AnswerIncompleteError):
            await session.reveal(2)

    async def test_empty_multiple_choice_blocks_reveal(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(1, ["A"])
        await session.submit_answer(1, [])

        assert session.can_reveal(1) is False

    async def test_progress_counts_revealed(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        assert session.progress() == 0

        await session.submit_answer(0, "WBS")
        await session.reveal(0)

        assert session.progress() == pytest.approx(100 / 3)


class TestFinishRestart:
    """Completion and restart."""

    async def test_finish_without_answers(self, mixed_quiz, session_store):
        """Early finish is allowed; everything counts as incorrect."""
        session = await QuizSession.open(mixed_quiz, session_store)

        result = await session.finish()

        assert result == 0
        assert session.finished is True
        assert (await session_store.load("mixed")).finished is True

    async def test_restart_then_load_is_initial(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(0, "WBS")
        await session.reveal(0)
        await session.go_to(1)
        await session.finish()

        await session.restart()

        assert await session_store.load("mixed") == SessionState.initial()
        assert session.state == SessionState.initial()

    async def test_term_pool_pinned_per_question(self, mixed_quiz, session_store):
        """Same order on every read and after reopening the session."""
        session = await QuizSession.open(mixed_quiz, session_store)
        first = session.term_pool(2)

        assert session.term_pool(2) is first
        reopened = await QuizSession.open(mixed_quiz, session_store)
        assert reopened.term_pool(2) == first


class TestMatchingEndToEnd:
    """Options ["X","Y"], correct {X:"1", Y:"2"}."""

    async def test_correct_mapping(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(2, {"X": "1", "Y": "2"})
        await session.reveal(2)
        await session.finish()

        assert session.score() == pytest.approx(100 / 3)

    async def test_swapped_mapping(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(2, {"X": "2", "Y": "1"})
        await session.finish()

        assert session.score() == 0
