"""Tests for quiz screens, keyboards and bot handlers."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from exam_bot.handlers.generate import GENERATION_FAILED_TEXT, _run_generation
from exam_bot.handlers.quiz import (
    _format_question,
    _format_results,
    _plain,
    _progress_bar,
    exam_selected,
    finish_quiz,
    matching_row_selected,
    matching_term_selected,
    navigate,
    option_selected,
    reveal_answer,
)
from exam_bot.keyboards.quiz_kb import matching_terms_keyboard, question_keyboard
from exam_bot.quiz.exceptions import GenerationFailure
from exam_bot.quiz.navigation import QuizSession
from exam_bot.quiz.session import SessionStore
from exam_bot.services.quiz_repository import QuizRepository
from exam_bot.states.quiz_states import QuizFlow


# ============================================================================
# HELPERS
# ============================================================================


def _make_mock_callback(data: str, user_id: int = 12345) -> AsyncMock:
    """Create a CallbackQuery mock."""
    callback = AsyncMock()
    callback.from_user = MagicMock()
    callback.from_user.id = user_id
    callback.data = data
    callback.message = AsyncMock()
    callback.message.edit_text = AsyncMock()
    callback.answer = AsyncMock()
    return callback


def _make_mock_state(data: dict | None = None) -> AsyncMock:
    """Create an FSMContext mock that remembers update_data calls."""
    stored = dict(data or {})
    state = AsyncMock()

    async def get_data():
        return dict(stored)

    async def update_data(**kwargs):
        stored.update(kwargs)

    state.get_data.side_effect = get_data
    state.update_data.side_effect = update_data
    return state


def _edited_text(callback) -> str:
    return callback.message.edit_text.call_args[0][0]


def _button_texts(markup) -> list[str]:
    return [button.text for row in markup.inline_keyboard for button in row]


@pytest.fixture
async def stored_quiz(kv_store, mixed_quiz):
    """The mixed quiz saved as a generated quiz in the memory store."""
    await QuizRepository(kv_store).save_generated(mixed_quiz)
    return mixed_quiz


@pytest.fixture
def patched_store(kv_store):
    with patch("exam_bot.handlers.quiz.store_for_chat", return_value=kv_store):
        yield kv_store


# ============================================================================
# FORMATTING (pure functions)
# ============================================================================


class TestFormatting:
    def test_plain_strips_markup(self):
        assert _plain("Pick the <b>outputs</b> &amp; inputs") == "Pick the outputs &amp; inputs"

    def test_progress_bar(self):
        assert _progress_bar(0) == "▱" * 10
        assert _progress_bar(100) == "▰" * 10
        assert _progress_bar(50) == "▰" * 5 + "▱" * 5

    async def test_question_header(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)

        text = _format_question(session)

        assert "Question 1 of 3" in text
        assert "Which document authorizes a project?" in text
        assert "Explanation" not in text

    async def test_explanation_after_reveal(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(0, "WBS")
        await session.reveal(0)

        assert "The sponsor issues the charter." in _format_question(session)

    async def test_results_text(self, single_choice_quiz, session_store):
        session = await QuizSession.open(single_choice_quiz, session_store)
        await session.submit_answer(0, "A")
        await session.finish()

        text = _format_results(session)

        assert "33%" in text
        assert "1 of 3" in text


class TestKeyboards:
    async def test_first_question_navigation(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)

        texts = _button_texts(question_keyboard(session))

        assert "◀ Previous" not in texts
        assert "Next ▶" in texts
        assert "🔍 Check answer" in texts

    async def test_last_question_has_finish(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.go_to(1)
        await session.go_to(1)

        texts = _button_texts(question_keyboard(session))

        assert "🏁 Finish" in texts
        assert "◀ Previous" in texts

    async def test_revealed_hides_check(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.submit_answer(0, "WBS")
        await session.reveal(0)

        texts = _button_texts(question_keyboard(session))

        assert "🔍 Check answer" not in texts
        assert "✅ Project charter" in texts
        assert "❌ WBS" in texts

    async def test_terms_in_pinned_order(self, mixed_quiz, session_store):
        session = await QuizSession.open(mixed_quiz, session_store)
        await session.go_to(1)
        await session.go_to(1)

        texts = _button_texts(matching_terms_keyboard(session, 0))

        assert texts[:-1] == list(session.term_pool(2))


# ============================================================================
# HANDLERS (memory store instead of SQLite)
# ============================================================================


class TestQuizHandlers:
    async def test_exam_selected_opens_quiz(self, patched_store, stored_quiz):
        callback = _make_mock_callback("exam:mixed")
        state = _make_mock_state()

        await exam_selected(callback, state)

        state.set_state.assert_awaited_once_with(QuizFlow.taking_quiz)
        assert (await state.get_data())["quiz_id"] == "mixed"
        assert "Question 1 of 3" in _edited_text(callback)

    async def test_exam_not_found(self, patched_store):
        callback = _make_mock_callback("exam:missing")

        await exam_selected(callback, _make_mock_state())

        callback.message.edit_text.assert_not_awaited()
        assert callback.answer.call_args.kwargs.get("show_alert") is True

    async def test_option_selected_stores_answer(self, patched_store, stored_quiz):
        callback = _make_mock_callback("opt:2")

        await option_selected(callback, _make_mock_state({"quiz_id": "mixed"}))

        state = await SessionStore(patched_store).load("mixed")
        assert state.answers == {0: "WBS"}

    async def test_reveal_incomplete_alerts(self, patched_store, stored_quiz):
        callback = _make_mock_callback("reveal")

        await reveal_answer(callback, _make_mock_state({"quiz_id": "mixed"}))

        callback.answer.assert_awaited_once()
        assert callback.answer.call_args.kwargs.get("show_alert") is True
        assert (await SessionStore(patched_store).load("mixed")).revealed == {}

    async def test_matching_term_selected(self, patched_store, stored_quiz):
        store = SessionStore(patched_store)
        await store.save_index("mixed", 2)
        session = await QuizSession.open(stored_quiz, store)
        term_index = session.term_pool(2).index("1")
        callback = _make_mock_callback(f"term:0:{term_index}")

        await matching_term_selected(callback, _make_mock_state({"quiz_id": "mixed"}))

        assert (await store.load("mixed")).answers == {2: {"X": "1"}}

    async def test_finish_shows_results(self, patched_store, stored_quiz):
        callback = _make_mock_callback("finish")

        await finish_quiz(callback, _make_mock_state({"quiz_id": "mixed"}))

        assert "Quiz complete" in _edited_text(callback)
        assert (await SessionStore(patched_store).load("mixed")).finished is True

    @pytest.mark.parametrize("handler,data", [
        (option_selected, "opt:0"),
        (matching_row_selected, "match:0"),
        (matching_term_selected, "term:0:0"),
        (reveal_answer, "reveal"),
        (navigate, "nav:1"),
    ])
    async def test_stale_button_after_finish(self, patched_store, stored_quiz, handler, data):
        """Buttons on an old question message are acknowledged without changes."""
        await SessionStore(patched_store).save_finished("mixed", True)
        callback = _make_mock_callback(data)

        await handler(callback, _make_mock_state({"quiz_id": "mixed"}))

        callback.answer.assert_awaited_once()
        callback.message.edit_text.assert_not_awaited()
        assert (await SessionStore(patched_store).load("mixed")).answers == {}

    async def test_missing_quiz_id(self, patched_store):
        callback = _make_mock_callback("reveal")

        await reveal_answer(callback, _make_mock_state())

        assert callback.answer.call_args.kwargs.get("show_alert") is True


class TestGenerationHandler:
    @patch("exam_bot.handlers.generate.generate_quiz", new_callable=AsyncMock)
    async def test_failure_keeps_state(self, mock_generate, kv_store):
        mock_generate.side_effect = GenerationFailure("LLM down")
        callback = _make_mock_callback("count:5")
        state = _make_mock_state({"topic": "Scrum", "question_count": 5})

        with patch("exam_bot.handlers.generate.store_for_chat", return_value=kv_store):
            await _run_generation(callback, state)

        state.set_state.assert_awaited_with(QuizFlow.choosing_question_count)
        assert _edited_text(callback) == GENERATION_FAILED_TEXT
        assert await QuizRepository(kv_store).last_generated() is None

    @patch("exam_bot.handlers.generate.generate_quiz", new_callable=AsyncMock)
    async def test_storage_error_restores_count_choice(self, mock_generate, mixed_quiz):
        """A failure after generation still unblocks the buttons."""
        mock_generate.return_value = mixed_quiz
        broken = AsyncMock()
        broken.set.side_effect = RuntimeError("database is locked")
        callback = _make_mock_callback("count:3")
        state = _make_mock_state({"topic": "Scrum", "question_count": 3})

        with patch("exam_bot.handlers.generate.store_for_chat", return_value=broken):
            with pytest.raises(RuntimeError):
                await _run_generation(callback, state)

        state.set_state.assert_awaited_with(QuizFlow.choosing_question_count)
        assert _edited_text(callback) == GENERATION_FAILED_TEXT

    @patch("exam_bot.handlers.generate.generate_quiz", new_callable=AsyncMock)
    async def test_success_opens_fresh_session(self, mock_generate, kv_store, mixed_quiz):
        mock_generate.return_value = mixed_quiz
        await SessionStore(kv_store).save_index("mixed", 2)
        callback = _make_mock_callback("count:3")
        state = _make_mock_state({"topic": "Scrum", "question_count": 3})

        with patch("exam_bot.handlers.generate.store_for_chat", return_value=kv_store), \
                patch("exam_bot.handlers.quiz.store_for_chat", return_value=kv_store):
            await _run_generation(callback, state)

        mock_generate.assert_awaited_once_with("Scrum", 3)
        state.set_state.assert_awaited_with(QuizFlow.taking_quiz)
        assert await QuizRepository(kv_store).last_generated() == mixed_quiz
        assert (await SessionStore(kv_store).load("mixed")).current_index == 0
        assert "Question 1 of 3" in _edited_text(callback)
