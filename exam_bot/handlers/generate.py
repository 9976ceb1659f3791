import html
import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from exam_bot.config import settings
from exam_bot.database.kv_store import store_for_chat
from exam_bot.handlers.quiz import open_quiz
from exam_bot.keyboards.settings_kb import (
    cancel_keyboard,
    generation_failed_keyboard,
    question_count_keyboard,
)
from exam_bot.quiz.exceptions import GenerationFailure
from exam_bot.quiz.session import SessionStore
from exam_bot.services.quiz_generator import generate_quiz
from exam_bot.services.quiz_repository import QuizRepository
from exam_bot.states.quiz_states import QuizFlow

logger = logging.getLogger(__name__)

router = Router()

TOPIC_PROMPT = (
    "✏️ Enter a quiz topic, for example <i>Agile Methodologies in PMP</i> "
    "or <i>JavaScript Promises</i>:"
)
GENERATION_FAILED_TEXT = (
    "😞 Failed to generate the quiz. The AI might be busy or the topic is too complex.\n\n"
    "Please try again."
)


@router.callback_query(QuizFlow.generating)
async def generation_in_progress(callback: CallbackQuery):
    """Ignore every button while a quiz is being generated."""
    await callback.answer("⏳ Still generating your quiz, please wait...")


@router.callback_query(F.data == "generate")
async def ask_topic(callback: CallbackQuery, state: FSMContext):
    await state.set_state(QuizFlow.entering_topic)
    await callback.message.edit_text(TOPIC_PROMPT, reply_markup=cancel_keyboard(), parse_mode="HTML")
    await callback.answer()


@router.message(QuizFlow.entering_topic)
async def topic_entered(message: Message, state: FSMContext):
    topic = message.text.strip() if message.text else ""
    if not topic:
        await message.answer("The topic cannot be empty. Enter a topic:")
        return

    await state.update_data(topic=topic)
    await state.set_state(QuizFlow.choosing_question_count)
    await message.answer(
        f"📝 Topic: {html.escape(topic)}\n\nHow many questions?",
        reply_markup=question_count_keyboard(),
        parse_mode="HTML",
    )


@router.callback_query(QuizFlow.choosing_question_count, F.data.startswith("count:"))
async def count_selected(callback: CallbackQuery, state: FSMContext):
    try:
        count = int(callback.data.split(":", 1)[1])
    except ValueError:
        await callback.answer()
        return

    await state.update_data(question_count=count)
    await _run_generation(callback, state)


@router.callback_query(QuizFlow.choosing_question_count, F.data == "retry_generate")
async def retry_generation(callback: CallbackQuery, state: FSMContext):
    await _run_generation(callback, state)


async def _run_generation(callback: CallbackQuery, state: FSMContext):
    """Generate a quiz and open it; on failure leave everything as it was."""
    data = await state.get_data()
    topic = data.get("topic", "")
    count = data.get("question_count", settings.MIN_QUESTIONS)
    chat_id = callback.from_user.id

    await state.set_state(QuizFlow.generating)
    await callback.message.edit_text(
        f"⏳ Generating your quiz...\n\n"
        f"📚 Topic: {html.escape(topic)}\n"
        f"❓ Questions: {count}\n\n"
        f"This can take 10-30 seconds...",
        parse_mode="HTML",
    )
    await callback.answer()

    try:
        quiz = await generate_quiz(topic, count)
        kv = store_for_chat(chat_id)
        await QuizRepository(kv).save_generated(quiz)
        await SessionStore(kv).reset(quiz.id)
        await open_quiz(callback.message, state, chat_id, quiz)
    except (GenerationFailure, ValueError) as e:
        logger.error("Quiz generation failed for chat %d: %s", chat_id, e)
        await state.set_state(QuizFlow.choosing_question_count)
        await callback.message.edit_text(GENERATION_FAILED_TEXT, reply_markup=generation_failed_keyboard())
    except Exception:
        logger.exception("Unexpected error while generating a quiz for chat %d", chat_id)
        await state.set_state(QuizFlow.choosing_question_count)
        await callback.message.edit_text(GENERATION_FAILED_TEXT, reply_markup=generation_failed_keyboard())
        raise
