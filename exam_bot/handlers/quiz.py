"""Quiz screens: questions, answers, reveal, navigation and results."""
import html
import logging
import re
from typing import Optional

from aiogram import Router, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from exam_bot.config import settings
from exam_bot.database.kv_store import store_for_chat
from exam_bot.keyboards.quiz_kb import (
    matching_terms_keyboard,
    question_keyboard,
    question_result_markers,
    results_keyboard,
)
from exam_bot.quiz.exceptions import (
    AnswerIncompleteError,
    AnswerLockedError,
    InvalidAnswerShapeError,
    MalformedQuizError,
)
from exam_bot.quiz.models import QuestionKind, Quiz
from exam_bot.quiz.navigation import QuizSession
from exam_bot.quiz.scoring import count_correct, format_percent
from exam_bot.quiz.session import SessionStore
from exam_bot.services.quiz_repository import QuizRepository
from exam_bot.states.quiz_states import QuizFlow

logger = logging.getLogger(__name__)

router = Router()

_TAG_RE = re.compile(r"<[^>]+>")


# ============================================================================
# FORMATTING
# ============================================================================

def _plain(text: str) -> str:
    """Drop markup from rich text and escape it for Telegram HTML."""
    return html.escape(html.unescape(_TAG_RE.sub("", text)).strip())


def _progress_bar(percent: float, width: int = 10) -> str:
    filled = round(percent / 100 * width)
    return "▰" * filled + "▱" * (width - filled)


def _format_question(session: QuizSession) -> str:
    index = session.current_index
    question = session.current_question

    lines = [
        f"<b>{_plain(session.quiz.title)}</b>",
        f"❓ Question {index + 1} of {session.question_count}",
        f"{_progress_bar(session.progress())} {format_percent(session.progress())}",
        "",
        _plain(question.prompt),
        "",
    ]

    if question.kind == QuestionKind.MATCHING:
        lines.append("<i>Match each item with a term:</i>")
        for i, label in enumerate(question.options, start=1):
            lines.append(f"{i}. {_plain(label)}")
    else:
        if question.kind == QuestionKind.MULTIPLE_CHOICE:
            lines.append("<i>Select all that apply.</i>")
        for i, option in enumerate(question.options, start=1):
            lines.append(f"{i}. {_plain(option)}")

    if session.is_revealed(index):
        lines.append("")
        if question.kind == QuestionKind.MATCHING:
            lines.append("<b>Correct matches:</b>")
            for label in question.options:
                lines.append(f"• {_plain(label)} → {_plain(question.correct_answer[label])}")
        lines.append(f"💡 <b>Explanation:</b> {_plain(question.explanation)}")

    return "\n".join(lines)


def _format_results(session: QuizSession) -> str:
    result = session.score()
    passed = result >= settings.PASS_THRESHOLD
    correct = count_correct(session.quiz, session.state)
    markers = " ".join(question_result_markers(session))

    return (
        f"🏁 <b>Quiz complete!</b>\n"
        f"{_plain(session.quiz.title)}\n\n"
        f"{'🟢' if passed else '🔴'} <b>Your score: {format_percent(result)}</b>\n"
        f"Correct answers: {correct} of {session.question_count}\n\n"
        f"{markers}"
    )


# ============================================================================
# HELPERS
# ============================================================================

async def _safe_edit(message: Message, text: str, reply_markup: InlineKeyboardMarkup):
    try:
        await message.edit_text(text, reply_markup=reply_markup, parse_mode="HTML")
    except TelegramBadRequest as e:
        if "message is not modified" not in str(e):
            raise


async def render_session(message: Message, session: QuizSession, edit: bool = True):
    """Show the results screen for a finished session, the current question otherwise."""
    if session.finished:
        text, markup = _format_results(session), results_keyboard()
    else:
        text, markup = _format_question(session), question_keyboard(session)

    if edit:
        await _safe_edit(message, text, markup)
    else:
        await message.answer(text, reply_markup=markup, parse_mode="HTML")


async def open_quiz(message: Message, state: FSMContext, chat_id: int, quiz: Quiz, edit: bool = True):
    """Make the quiz the active one and show where the user left off."""
    session = await QuizSession.open(quiz, SessionStore(store_for_chat(chat_id)))
    await state.set_state(QuizFlow.taking_quiz)
    await state.update_data(quiz_id=quiz.id)
    await render_session(message, session, edit=edit)


async def _active_session(callback: CallbackQuery, state: FSMContext) -> Optional[QuizSession]:
    """Reopen the active quiz session, or tell the user it is gone."""
    data = await state.get_data()
    quiz_id = data.get("quiz_id")
    chat_id = callback.from_user.id
    kv = store_for_chat(chat_id)

    quiz = await QuizRepository(kv).get(quiz_id) if quiz_id else None
    if quiz is None:
        await callback.answer("This quiz is no longer available. Open it again from Home.", show_alert=True)
        return None

    return await QuizSession.open(quiz, SessionStore(kv))


# ============================================================================
# HANDLERS
# ============================================================================

@router.callback_query(F.data.startswith("exam:"))
async def exam_selected(callback: CallbackQuery, state: FSMContext):
    """Open a quiz from the home screen."""
    quiz_id = callback.data.split(":", 1)[1]
    chat_id = callback.from_user.id
    quiz = await QuizRepository(store_for_chat(chat_id)).get(quiz_id)

    if quiz is None:
        await callback.answer("Quiz not found.", show_alert=True)
        return

    try:
        await open_quiz(callback.message, state, chat_id, quiz)
    except MalformedQuizError as e:
        logger.error("Cannot open quiz %s: %s", quiz_id, e)
        await callback.answer("This quiz is broken and cannot be opened.", show_alert=True)
        return
    await callback.answer()


@router.callback_query(F.data.startswith("opt:"))
async def option_selected(callback: CallbackQuery, state: FSMContext):
    """Select a single-choice option or toggle a multiple-choice one."""
    session = await _active_session(callback, state)
    if session is None:
        return
    if session.finished:
        await callback.answer()
        return

    index = session.current_index
    question = session.current_question
    try:
        option = question.options[int(callback.data.split(":", 1)[1])]
    except (ValueError, IndexError):
        await callback.answer()
        return

    if question.kind == QuestionKind.MULTIPLE_CHOICE:
        answer = set(session.answer_for(index) or ())
        if option in answer:
            answer.remove(option)
        else:
            answer.add(option)
    else:
        answer = option

    try:
        await session.submit_answer(index, answer)
    except AnswerLockedError:
        await callback.answer("The answer is already checked.")
        return
    except InvalidAnswerShapeError as e:
        logger.warning("Rejected answer for quiz %s: %s", session.quiz.id, e)
        await callback.answer()
        return

    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data.startswith("match:"))
async def matching_row_selected(callback: CallbackQuery, state: FSMContext):
    """Show term choices for one row of a matching question."""
    session = await _active_session(callback, state)
    if session is None:
        return
    if session.finished:
        await callback.answer()
        return

    if session.is_revealed(session.current_index):
        await callback.answer("The answer is already checked.")
        return

    try:
        option_index = int(callback.data.split(":", 1)[1])
        label = session.current_question.options[option_index]
    except (ValueError, IndexError):
        await callback.answer()
        return

    await _safe_edit(
        callback.message,
        f"{_format_question(session)}\n\n👉 <b>{_plain(label)}</b>\nChoose the matching term:",
        matching_terms_keyboard(session, option_index),
    )
    await callback.answer()


@router.callback_query(F.data.startswith("term:"))
async def matching_term_selected(callback: CallbackQuery, state: FSMContext):
    """Assign a term to a row of a matching question."""
    session = await _active_session(callback, state)
    if session is None:
        return
    if session.finished:
        await callback.answer()
        return

    index = session.current_index
    question = session.current_question
    try:
        _, option_part, term_part = callback.data.split(":")
        label = question.options[int(option_part)]
        term = session.term_pool(index)[int(term_part)]
    except (ValueError, IndexError):
        await callback.answer()
        return

    answer = dict(session.answer_for(index) or {})
    answer[label] = term

    try:
        await session.submit_answer(index, answer)
    except AnswerLockedError:
        await callback.answer("The answer is already checked.")
        return
    except InvalidAnswerShapeError as e:
        logger.warning("Rejected answer for quiz %s: %s", session.quiz.id, e)
        await callback.answer()
        return

    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data == "back_to_question")
async def back_to_question(callback: CallbackQuery, state: FSMContext):
    session = await _active_session(callback, state)
    if session is None:
        return
    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data == "reveal")
async def reveal_answer(callback: CallbackQuery, state: FSMContext):
    """Check the current answer and show the explanation."""
    session = await _active_session(callback, state)
    if session is None:
        return
    if session.finished:
        await callback.answer()
        return

    try:
        await session.reveal(session.current_index)
    except AnswerIncompleteError:
        await callback.answer("Answer the question completely first.", show_alert=True)
        return

    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data.startswith("nav:"))
async def navigate(callback: CallbackQuery, state: FSMContext):
    session = await _active_session(callback, state)
    if session is None:
        return
    if session.finished:
        await callback.answer()
        return

    try:
        direction = int(callback.data.split(":", 1)[1])
        await session.go_to(direction)
    except ValueError:
        await callback.answer()
        return

    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data == "finish")
async def finish_quiz(callback: CallbackQuery, state: FSMContext):
    """Finish the quiz; unanswered questions count as incorrect."""
    session = await _active_session(callback, state)
    if session is None:
        return

    await session.finish()
    await render_session(callback.message, session)
    await callback.answer()


@router.callback_query(F.data == "restart")
async def restart_quiz(callback: CallbackQuery, state: FSMContext):
    session = await _active_session(callback, state)
    if session is None:
        return

    await session.restart()
    await render_session(callback.message, session)
    await callback.answer()
