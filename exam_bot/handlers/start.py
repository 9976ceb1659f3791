from aiogram import Router, F
from aiogram.filters import CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from exam_bot.database.kv_store import store_for_chat
from exam_bot.keyboards.main_menu import main_menu_keyboard
from exam_bot.services.quiz_repository import QuizRepository

router = Router()

WELCOME_TEXT = (
    "👋 Hi! I'm Exam Coach, your practice partner for certification exams.\n\n"
    "Take a curated mock exam or generate a quiz on any topic. "
    "Your progress is saved, so you can come back any time.\n\n"
    "Choose what to do:"
)


async def _home_keyboard(chat_id: int):
    repo = QuizRepository(store_for_chat(chat_id))
    return main_menu_keyboard(repo.mock_exams(), await repo.last_generated())


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    await state.clear()
    await message.answer(WELCOME_TEXT, reply_markup=await _home_keyboard(message.from_user.id))


@router.callback_query(F.data == "go_home")
async def go_home(callback: CallbackQuery, state: FSMContext):
    await state.clear()
    await callback.message.edit_text(
        WELCOME_TEXT, reply_markup=await _home_keyboard(callback.from_user.id)
    )
    await callback.answer()
